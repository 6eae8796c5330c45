"""Layout command - rank a data file, then settle a force-directed layout."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import EngineConfig
from ..graph.loader import load_graph
from ..graph.model import Graph
from ..layout.state import radii_from_rank
from ..ranking import RankResult, rank_with_config
from ..simulation import Simulation, SimulationResult


def run_layout(
    data_path: Path,
    *,
    config: EngineConfig | None = None,
    id_field: str = "id",
    width: float | None = None,
    height: float | None = None,
    radius_base: float = 10.0,
    radius_scale: float = 100.0,
    fmt: str = "json",
    out: Path | None = None,
) -> int:
    """Compute PageRank, size nodes by it and run the layout to convergence.

    When `width`/`height` are given the layout is centered on the canvas middle,
    as a drawing surface would expect.

    Args:
        data_path: JSON/YAML file with `nodes` and `links`
        config: Engine configuration (defaults if None)
        id_field: Node record key holding the identifier
        width: Canvas width used to place the center
        height: Canvas height used to place the center
        radius_base: Node radius at rank 0
        radius_scale: Extra radius per unit of rank
        fmt: json|md|rich
        out: Optional output path; prints to stdout if None

    Returns:
        0 when both engines converged, 1 otherwise
    """
    console = Console(stderr=True)
    data_path = Path(data_path)
    config = config or EngineConfig()

    sim_config = config.simulation
    if width is not None or height is not None:
        cx = (width or 0.0) / 2
        cy = (height or 0.0) / 2
        sim_config = replace(sim_config, forces=replace(sim_config.forces, center=(cx, cy)))

    graph = load_graph(data_path, id_field=id_field)
    ranks = rank_with_config(graph, config.rank)
    radii = radii_from_rank(ranks, base=radius_base, scale=radius_scale)

    with console.status("Settling layout...", spinner="dots"):
        result = Simulation(graph, config=sim_config, sizing=radii).run()

    payload = _summarize_layout(graph, ranks, radii, result, title=f"Layout: {data_path.name}")
    ok = ranks.converged and result.converged

    if fmt == "rich":
        if out:
            rich_console = Console(record=True)
            _print_rich(payload, console=rich_console)
            out.write_text(rich_console.export_text(), encoding="utf-8")
            console.print(f"Wrote layout to {out}", style="green")
        else:
            _print_rich(payload, console=Console())
        return 0 if ok else 1

    text: str
    if fmt == "md":
        text = _to_markdown(payload)
    else:
        text = json.dumps(payload, indent=2, sort_keys=True) + "\n"

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote layout to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")

    return 0 if ok else 1


def _summarize_layout(
    graph: Graph,
    ranks: RankResult,
    radii: dict,
    result: SimulationResult,
    *,
    title: str,
) -> dict:
    nodes = []
    for node in graph.nodes:
        s = result.state[node.id]
        nodes.append(
            {
                "id": node.id,
                "name": node.name,
                "x": round(s.x, 3),
                "y": round(s.y, 3),
                "radius": round(radii.get(node.id, 0.0), 3),
                "score": round(ranks[node.id], 6),
            }
        )

    links = [{"source": e.source, "target": e.target} for e in graph.edges]
    diagnostics = (
        [d.to_dict() for d in graph.diagnostics]
        + [d.to_dict() for d in ranks.diagnostics]
        + [d.to_dict() for d in result.diagnostics]
    )
    return {
        "title": title,
        "node_count": len(graph),
        "edge_count": len(graph.edges),
        "rank_iterations": ranks.iterations,
        "steps": result.steps,
        "converged": ranks.converged and result.converged,
        "alpha": round(result.alpha, 6),
        "nodes": nodes,
        "links": links,
        "diagnostics": diagnostics,
    }


def _to_markdown(payload: dict) -> str:
    lines: list[str] = []
    lines.append(f"## {payload['title']}")
    lines.append("")
    lines.append(f"- Nodes: {payload['node_count']}")
    lines.append(f"- Edges: {payload['edge_count']}")
    lines.append(f"- Simulation steps: {payload['steps']} (alpha {payload['alpha']})")
    lines.append(f"- Converged: {'yes' if payload['converged'] else 'no'}")
    lines.append("")
    lines.append("| Node | x | y | Radius | Score |")
    lines.append("|---|---:|---:|---:|---:|")
    for n in payload["nodes"]:
        lines.append(f"| `{n['name']}` | {n['x']:.1f} | {n['y']:.1f} | {n['radius']:.1f} | {n['score']:.4f} |")
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
    console.print(f"Nodes: {payload['node_count']}  Edges: {payload['edge_count']}  Steps: {payload['steps']}")
    console.print()

    t = Table(title="Positions", show_header=True, header_style="bold")
    t.add_column("Node", style="cyan", no_wrap=True)
    t.add_column("x", justify="right")
    t.add_column("y", justify="right")
    t.add_column("Radius", justify="right")
    t.add_column("Score", justify="right")
    for n in payload["nodes"]:
        t.add_row(escape(str(n["name"])), f"{n['x']:.1f}", f"{n['y']:.1f}", f"{n['radius']:.1f}", f"{n['score']:.4f}")
    console.print(t)

    for d in payload["diagnostics"]:
        console.print(f"[yellow]{d['level'].upper()}[/yellow] " + escape(f"[{d['rule']}] {d['message']}"))
