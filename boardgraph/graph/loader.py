"""Load node/link records from JSON or YAML documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .model import Graph


def load_records(path: Path) -> tuple[list[Any], list[Any]]:
    """Read `{"nodes": [...], "links": [...]}` from a JSON or YAML file.

    `edges` is accepted in place of `links`. Returns (node_records, edge_records).

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Graph data not found: {path}")

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yml", ".yaml"):
        import yaml

        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML graph data: {e}") from e
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse JSON graph data: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Graph data must be a mapping with a 'nodes' list")

    nodes = data.get("nodes", [])
    links = data.get("links", data.get("edges", []))
    if not isinstance(nodes, list) or not isinstance(links, list):
        raise ValueError("'nodes' and 'links' must be lists")
    return nodes, links


def load_graph(path: Path, *, id_field: str = "id") -> Graph:
    """Load a file and build a Graph. Unresolved links end up in `graph.diagnostics`."""
    nodes, links = load_records(path)
    return Graph.build(nodes, links, id_field=id_field)
