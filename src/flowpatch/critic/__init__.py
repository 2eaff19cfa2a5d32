from flowpatch.critic.critic import Critic, CriticReport, closest_match

__all__ = ["Critic", "CriticReport", "closest_match"]
