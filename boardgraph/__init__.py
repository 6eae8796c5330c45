"""boardgraph - PageRank scoring and force-directed layout for board game graphs."""

__version__ = "0.1.0"

from .diagnostics import Diagnostic, NonConvergenceWarning, UnresolvedEdgeWarning
from .errors import BoardGraphError, MalformedInputError
from .graph import Graph, build_graph
from .layout import ForceConfig, LayoutState, NodeState, initial_layout, radii_from_rank, step
from .models import Edge, Node
from .ranking import RankResult, rank
from .simulation import Simulation, SimulationConfig, SimulationResult

__all__ = [
    "__version__",
    "BoardGraphError",
    "Diagnostic",
    "Edge",
    "ForceConfig",
    "Graph",
    "LayoutState",
    "MalformedInputError",
    "Node",
    "NodeState",
    "NonConvergenceWarning",
    "RankResult",
    "Simulation",
    "SimulationConfig",
    "SimulationResult",
    "UnresolvedEdgeWarning",
    "build_graph",
    "initial_layout",
    "radii_from_rank",
    "rank",
    "step",
]
