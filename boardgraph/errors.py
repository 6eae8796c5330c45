"""Exceptions raised by the graph engines."""


class BoardGraphError(Exception):
    """Base class for boardgraph errors."""


class MalformedInputError(BoardGraphError, ValueError):
    """Node records cannot form a graph (duplicate or missing identifiers)."""

    def __init__(self, message: str, *, node_ids: list | None = None):
        super().__init__(message)
        self.node_ids = list(node_ids or [])
