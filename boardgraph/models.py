"""Data models for graph nodes and edges."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Hashable, Iterable, Mapping

# Identifiers are opaque: strings or integers taken from the input records.
NodeId = Hashable


@dataclass(frozen=True)
class Node:
    """A graph node. `attributes` is payload for the caller and never read by the engines."""

    id: NodeId
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.attributes, MappingProxyType):
            object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def name(self) -> str:
        """Display name if the payload carries one, else the identifier."""
        for key in ("name", "Name"):
            value = self.attributes.get(key)
            if value:
                return str(value)
        return str(self.id)


@dataclass(frozen=True)
class Edge:
    """A directed edge. Parallel edges and self-loops are allowed."""

    source: NodeId
    target: NodeId

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


def string_keyed(items: Iterable[tuple[NodeId, Any]]) -> dict[str, Any]:
    """Dict keyed by `str(node_id)`, as JSON needs.

    Raises ValueError when two ids share a string form (e.g. `1` and `"1"`), since
    one entry would otherwise overwrite the other.
    """
    out: dict[str, Any] = {}
    for node_id, value in items:
        key = str(node_id)
        if key in out:
            raise ValueError(f"Node ids collide when converted to strings: {key!r}")
        out[key] = value
    return out
