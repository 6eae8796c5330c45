"""Layout snapshots: per-node position, velocity and optional pin."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from ..graph.model import Graph
from ..models import NodeId, string_keyed

# Phyllotaxis seed used by d3-force: nodes spiral out from the center.
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


@dataclass(frozen=True)
class NodeState:
    """Position (x, y), velocity (vx, vy) and pin (fx, fy) of one node."""

    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def pinned(self) -> bool:
        return self.fx is not None or self.fy is not None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"x": self.x, "y": self.y, "vx": self.vx, "vy": self.vy}
        if self.pinned:
            d["fx"] = self.fx
            d["fy"] = self.fy
        return d


@dataclass(frozen=True)
class LayoutState:
    """Read-only snapshot of every node's NodeState, in graph order."""

    nodes: Mapping[NodeId, NodeState] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not isinstance(self.nodes, MappingProxyType):
            object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))

    def __getitem__(self, node_id: NodeId) -> NodeState:
        return self.nodes[node_id]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[NodeId]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, node_id: NodeId) -> NodeState | None:
        return self.nodes.get(node_id)

    def position(self, node_id: NodeId) -> tuple[float, float]:
        return self.nodes[node_id].position

    def positions(self) -> dict[NodeId, tuple[float, float]]:
        return {node_id: s.position for node_id, s in self.nodes.items()}

    def with_pin(self, node_id: NodeId, position: tuple[float, float]) -> "LayoutState":
        """Copy with `node_id` pinned at `position`; the node is moved there at once."""
        current = self.nodes[node_id]
        fx, fy = float(position[0]), float(position[1])
        updated = dict(self.nodes)
        updated[node_id] = replace(current, x=fx, y=fy, vx=0.0, vy=0.0, fx=fx, fy=fy)
        return LayoutState(updated)

    def without_pin(self, node_id: NodeId) -> "LayoutState":
        current = self.nodes[node_id]
        updated = dict(self.nodes)
        updated[node_id] = replace(current, fx=None, fy=None)
        return LayoutState(updated)

    def max_speed(self) -> float:
        return max((math.hypot(s.vx, s.vy) for s in self.nodes.values()), default=0.0)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return string_keyed((node_id, s.to_dict()) for node_id, s in self.nodes.items())


def phyllotaxis_position(index: int, center: tuple[float, float] = (0.0, 0.0), radius: float = INITIAL_RADIUS) -> tuple[float, float]:
    r = radius * math.sqrt(0.5 + index)
    angle = index * INITIAL_ANGLE
    return (center[0] + r * math.cos(angle), center[1] + r * math.sin(angle))


def initial_layout(
    graph: Graph,
    center: tuple[float, float] = (0.0, 0.0),
    radius: float = INITIAL_RADIUS,
    previous: LayoutState | None = None,
) -> LayoutState:
    """Seed positions on a phyllotaxis spiral around `center`.

    Nodes already present in `previous` keep their state, so a simulation can be
    restarted from an earlier snapshot after the graph changed.
    """
    nodes: dict[NodeId, NodeState] = {}
    for i, node in enumerate(graph.nodes):
        if previous is not None and node.id in previous:
            nodes[node.id] = previous[node.id]
            continue
        x, y = phyllotaxis_position(i, center, radius)
        nodes[node.id] = NodeState(x=x, y=y)
    return LayoutState(nodes)


def radii_from_rank(
    ranks: Mapping[NodeId, float],
    base: float = 10.0,
    scale: float = 100.0,
) -> dict[NodeId, float]:
    """Sizing hint `base + rank * scale` per node."""
    return {node_id: base + float(score) * scale for node_id, score in ranks.items()}
