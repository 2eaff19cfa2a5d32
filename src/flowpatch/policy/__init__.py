from flowpatch.policy.enforcer import PolicyEnforcer

__all__ = ["PolicyEnforcer"]
