from flowpatch.engine.applier import Applier, ApplyResult

__all__ = ["Applier", "ApplyResult"]
