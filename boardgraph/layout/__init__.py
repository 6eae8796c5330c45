"""Force-directed layout: snapshots, forces and the step function."""

from ..config import ForceConfig
from .engine import step
from .state import LayoutState, NodeState, initial_layout, radii_from_rank

__all__ = [
    "ForceConfig",
    "LayoutState",
    "NodeState",
    "initial_layout",
    "radii_from_rank",
    "step",
]
