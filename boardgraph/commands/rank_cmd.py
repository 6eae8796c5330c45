"""Rank command - PageRank scores for a node/link data file."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import RankConfig
from ..graph.loader import load_graph
from ..graph.model import Graph
from ..ranking import RankResult, rank_with_config


def run_rank(
    data_path: Path,
    *,
    config: RankConfig | None = None,
    id_field: str = "id",
    fmt: str = "md",
    out: Path | None = None,
    top: int = 25,
) -> int:
    """Rank the nodes of a data file and print or write a report.

    Args:
        data_path: JSON/YAML file with `nodes` and `links`
        config: PageRank parameters (defaults if None)
        id_field: Node record key holding the identifier
        fmt: md|json|rich
        out: Optional output path; prints to stdout if None
        top: How many nodes to list (all for json)

    Returns:
        0 when PageRank converged, 1 when it hit the iteration cap
    """
    console = Console(stderr=True)
    data_path = Path(data_path)

    graph = load_graph(data_path, id_field=id_field)
    result = rank_with_config(graph, config)
    payload = _summarize_rank(graph, result, title=f"PageRank: {data_path.name}", top=top)

    if fmt == "rich":
        if out:
            rich_console = Console(record=True)
            _print_rich(payload, console=rich_console)
            out.write_text(rich_console.export_text(), encoding="utf-8")
            console.print(f"Wrote rank report to {out}", style="green")
        else:
            _print_rich(payload, console=Console())
        return 0 if result.converged else 1

    text: str
    if fmt == "json":
        payload["ranking"] = _rows(graph, result, top=len(graph))
        text = json.dumps(payload, indent=2, sort_keys=True) + "\n"
    else:
        text = _to_markdown(payload)

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote rank report to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")

    return 0 if result.converged else 1


def _rows(graph: Graph, result: RankResult, *, top: int) -> list[dict]:
    rows = []
    for position, (node_id, score) in enumerate(result.ranked()[: max(0, top)], start=1):
        node = graph.get(node_id)
        rows.append(
            {
                "position": position,
                "id": node_id,
                "name": node.name if node else str(node_id),
                "score": round(score, 6),
                "in_degree": graph.in_degree(node_id),
                "out_degree": graph.out_degree(node_id),
            }
        )
    return rows


def _summarize_rank(graph: Graph, result: RankResult, *, title: str, top: int) -> dict:
    diagnostics = [d.to_dict() for d in graph.diagnostics] + [d.to_dict() for d in result.diagnostics]
    return {
        "title": title,
        "node_count": len(graph),
        "edge_count": len(graph.edges),
        "dropped_edges": graph.dropped_edge_count,
        "iterations": result.iterations,
        "converged": result.converged,
        "delta": result.delta,
        "ranking": _rows(graph, result, top=top),
        "diagnostics": diagnostics,
    }


def _to_markdown(payload: dict) -> str:
    lines: list[str] = []
    lines.append(f"## {payload['title']}")
    lines.append("")
    lines.append(f"- Nodes: {payload['node_count']}")
    lines.append(f"- Edges: {payload['edge_count']}")
    if payload["dropped_edges"]:
        lines.append(f"- Dropped edges (unresolved): {payload['dropped_edges']}")
    status = "converged" if payload["converged"] else "NOT converged"
    lines.append(f"- Iterations: {payload['iterations']} ({status}, delta {payload['delta']:.2e})")
    lines.append("")

    lines.append("### Ranking")
    lines.append("")
    lines.append("| # | Node | Score | In | Out |")
    lines.append("|---:|---|---:|---:|---:|")
    for r in payload["ranking"]:
        lines.append(f"| {r['position']} | `{r['name']}` | {r['score']:.4f} | {r['in_degree']} | {r['out_degree']} |")
    lines.append("")

    if payload["diagnostics"]:
        lines.append("### Diagnostics")
        lines.append("")
        for d in payload["diagnostics"]:
            lines.append(f"- {d['level'].upper()} [{d['rule']}] {d['message']}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def _print_rich(payload: dict, *, console: Console) -> None:
    console.print(f"[bold]{escape(payload['title'])}[/bold]")
    console.print(f"Nodes: {payload['node_count']}  Edges: {payload['edge_count']}  Iterations: {payload['iterations']}")
    if not payload["converged"]:
        console.print("[yellow]PageRank hit the iteration cap before converging[/yellow]")
    console.print()

    t = Table(title="Ranking", show_header=True, header_style="bold")
    t.add_column("#", justify="right")
    t.add_column("Node", style="cyan", no_wrap=True)
    t.add_column("Score", justify="right")
    t.add_column("In", justify="right")
    t.add_column("Out", justify="right")
    for r in payload["ranking"]:
        t.add_row(str(r["position"]), escape(str(r["name"])), f"{r['score']:.4f}", str(r["in_degree"]), str(r["out_degree"]))
    console.print(t)

    for d in payload["diagnostics"]:
        console.print(f"[yellow]{d['level'].upper()}[/yellow] " + escape(f"[{d['rule']}] {d['message']}"))
