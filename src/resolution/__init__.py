"""Resolution engine and result reporting."""

from .engine import ModuleResolver, ResolutionState

__all__ = ["ModuleResolver", "ResolutionState"]
