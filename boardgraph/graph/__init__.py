"""Graph construction and input loading."""

from .model import Graph, build_graph
from .loader import load_graph, load_records

__all__ = [
    "Graph",
    "build_graph",
    "load_graph",
    "load_records",
]
