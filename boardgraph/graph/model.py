"""Directed graph construction with precomputed adjacency."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Union

from ..diagnostics import UnresolvedEdgeWarning
from ..errors import MalformedInputError
from ..models import Edge, Node, NodeId

logger = logging.getLogger(__name__)

NodeRecord = Union[Node, Mapping[str, Any]]
EdgeRecord = Union[Edge, Mapping[str, Any], tuple]


@dataclass(frozen=True)
class Graph:
    """Immutable directed graph.

    Nodes keep insertion order. Edges keep input order, parallel edges and self-loops
    included. Adjacency is computed once at build time.
    """

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    diagnostics: tuple[UnresolvedEdgeWarning, ...] = ()
    _index: dict[NodeId, Node] = field(default_factory=dict, repr=False, compare=False)
    _outgoing: dict[NodeId, tuple[Edge, ...]] = field(default_factory=dict, repr=False, compare=False)
    _incoming: dict[NodeId, tuple[Edge, ...]] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def build(
        cls,
        nodes: Iterable[NodeRecord],
        edges: Iterable[EdgeRecord] = (),
        *,
        id_field: str = "id",
        source_field: str = "source",
        target_field: str = "target",
    ) -> "Graph":
        """Build a graph from node and edge records.

        Raises MalformedInputError if node identifiers are missing or not unique.
        Edges with an unknown endpoint, and edge records without a (source, target)
        shape, are dropped and reported in `diagnostics`.
        """
        node_list = [_coerce_node(rec, id_field) for rec in nodes]

        counts = Counter(n.id for n in node_list)
        duplicates = [node_id for node_id, c in counts.items() if c > 1]
        if duplicates:
            shown = ", ".join(repr(d) for d in duplicates[:5])
            raise MalformedInputError(f"Duplicate node identifiers: {shown}", node_ids=duplicates)

        index = {n.id: n for n in node_list}
        outgoing: dict[NodeId, list[Edge]] = {n.id: [] for n in node_list}
        incoming: dict[NodeId, list[Edge]] = {n.id: [] for n in node_list}

        kept: list[Edge] = []
        dropped: list[UnresolvedEdgeWarning] = []
        for rec in edges:
            edge = _coerce_edge(rec, source_field, target_field)
            if edge is None:
                dropped.append(UnresolvedEdgeWarning.for_record(rec))
                continue
            missing = tuple(x for x in (edge.source, edge.target) if not _resolves(x, index))
            if missing:
                if len(missing) == 2 and missing[0] == missing[1]:
                    missing = missing[:1]
                dropped.append(UnresolvedEdgeWarning.for_edge(edge.source, edge.target, missing))
                continue
            kept.append(edge)
            outgoing[edge.source].append(edge)
            incoming[edge.target].append(edge)

        if dropped:
            logger.warning("Dropped %d edge(s) with unresolved endpoints or malformed records", len(dropped))

        return cls(
            nodes=tuple(node_list),
            edges=tuple(kept),
            diagnostics=tuple(dropped),
            _index=index,
            _outgoing={k: tuple(v) for k, v in outgoing.items()},
            _incoming={k: tuple(v) for k, v in incoming.items()},
        )

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    @property
    def node_ids(self) -> list[NodeId]:
        return [n.id for n in self.nodes]

    @property
    def dropped_edge_count(self) -> int:
        return len(self.diagnostics)

    def get(self, node_id: NodeId) -> Node | None:
        return self._index.get(node_id)

    def outgoing(self, node_id: NodeId) -> tuple[Edge, ...]:
        """Edges leaving `node_id` (empty for unknown ids)."""
        return self._outgoing.get(node_id, ())

    def incoming(self, node_id: NodeId) -> tuple[Edge, ...]:
        """Edges arriving at `node_id` (empty for unknown ids)."""
        return self._incoming.get(node_id, ())

    def out_degree(self, node_id: NodeId) -> int:
        return len(self.outgoing(node_id))

    def in_degree(self, node_id: NodeId) -> int:
        return len(self.incoming(node_id))

    def degree(self, node_id: NodeId) -> int:
        """Total edge endpoints at the node; a self-loop counts twice."""
        return self.out_degree(node_id) + self.in_degree(node_id)


def build_graph(
    nodes: Iterable[NodeRecord],
    edges: Iterable[EdgeRecord] = (),
    *,
    id_field: str = "id",
    source_field: str = "source",
    target_field: str = "target",
) -> Graph:
    """Build a Graph from node and edge records. See `Graph.build`."""
    return Graph.build(nodes, edges, id_field=id_field, source_field=source_field, target_field=target_field)


def _coerce_node(rec: NodeRecord, id_field: str) -> Node:
    if isinstance(rec, Node):
        _check_id(rec.id)
        return rec
    if isinstance(rec, Mapping):
        if id_field not in rec or rec[id_field] is None:
            raise MalformedInputError(f"Node record is missing identifier field '{id_field}': {dict(rec)!r}")
        node_id = rec[id_field]
        _check_id(node_id)
        attrs = {k: v for k, v in rec.items() if k != id_field}
        return Node(id=node_id, attributes=attrs)
    if isinstance(rec, (str, int)) and not isinstance(rec, bool):
        return Node(id=rec)
    raise MalformedInputError(f"Unsupported node record: {rec!r}")


def _check_id(node_id: Any) -> None:
    # bool is an int subclass; True would collide with 1.
    if isinstance(node_id, bool) or not isinstance(node_id, (str, int)):
        raise MalformedInputError(f"Node identifier must be a string or integer, got {type(node_id).__name__}")


def _coerce_edge(rec: Any, source_field: str, target_field: str) -> Edge | None:
    """Edge for a record, or None when the record has no (source, target) shape."""
    if isinstance(rec, Edge):
        return rec
    if isinstance(rec, Mapping):
        return Edge(source=rec.get(source_field), target=rec.get(target_field))
    if isinstance(rec, (tuple, list)) and len(rec) == 2:
        return Edge(source=rec[0], target=rec[1])
    return None


def _resolves(node_id: Any, index: dict[NodeId, Node]) -> bool:
    if isinstance(node_id, bool):
        return False
    try:
        return node_id in index
    except TypeError:  # unhashable reference
        return False
