"""CLI entrypoint for boardgraph."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import EngineConfig, load_config, with_overrides
from .errors import BoardGraphError


@click.group()
@click.version_option(__version__, prog_name="boardgraph")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="TOML file with [rank], [forces] and [simulation] tables",
)
@click.option("--verbose", "-v", count=True, help="Log progress (-v info, -vv debug)")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: int) -> None:
    """boardgraph - PageRank and force-directed layout for board game graphs.

    Reads node/link records from JSON or YAML and reports scores or positions.
    """
    from .logging_config import setup_logging

    setup_logging(logging.DEBUG if verbose > 1 else logging.INFO if verbose else logging.WARNING)

    ctx.ensure_object(dict)
    if config_path is None:
        ctx.obj["config"] = EngineConfig()
        return
    try:
        ctx.obj["config"] = load_config(config_path)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e


def _data_argument(f):
    return click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))(f)


def _id_field_option(f):
    return click.option(
        "--id-field",
        default="id",
        show_default=True,
        help="Node record key holding the identifier (e.g. ID)",
    )(f)


@cli.command()
@_data_argument
@_id_field_option
@click.option("--damping", type=float, default=None, help="Damping factor in (0, 1) [default: 0.85]")
@click.option("--tolerance", type=float, default=None, help="L1 convergence tolerance [default: 1e-4]")
@click.option("--max-iter", type=int, default=None, help="Iteration cap [default: 100]")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json", "rich"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option("--top", type=int, default=25, show_default=True, help="How many nodes to list")
@click.pass_context
def rank(
    ctx: click.Context,
    data: Path,
    id_field: str,
    damping: float | None,
    tolerance: float | None,
    max_iter: int | None,
    fmt: str,
    out: Path | None,
    top: int,
) -> None:
    """Score nodes with PageRank."""
    from .commands.rank_cmd import run_rank

    try:
        config = with_overrides(
            ctx.obj["config"], damping_factor=damping, tolerance=tolerance, max_iterations=max_iter
        )
        exit_code = run_rank(data, config=config.rank, id_field=id_field, fmt=fmt, out=out, top=top)
    except (BoardGraphError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@cli.command()
@_data_argument
@_id_field_option
@click.option("--width", type=float, default=None, help="Canvas width; centers the layout at width/2")
@click.option("--height", type=float, default=None, help="Canvas height; centers the layout at height/2")
@click.option(
    "--max-steps",
    type=click.IntRange(min=0),
    default=None,
    help="Simulation step cap, 0 for no cap [default: 1000]",
)
@click.option("--link-distance", type=float, default=None, help="Spring rest length [default: 100]")
@click.option("--charge", type=float, default=None, help="Many-body strength, negative repels [default: -1000]")
@click.option("--radius-base", type=float, default=10.0, show_default=True, help="Node radius at rank 0")
@click.option("--radius-scale", type=float, default=100.0, show_default=True, help="Extra radius per unit of rank")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "md", "rich"]),
    default="json",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.pass_context
def layout(
    ctx: click.Context,
    data: Path,
    id_field: str,
    width: float | None,
    height: float | None,
    max_steps: int | None,
    link_distance: float | None,
    charge: float | None,
    radius_base: float,
    radius_scale: float,
    fmt: str,
    out: Path | None,
) -> None:
    """Rank nodes, then settle a force-directed layout sized by rank."""
    from .commands.layout_cmd import run_layout

    try:
        config = with_overrides(
            ctx.obj["config"], max_steps=max_steps, link_distance=link_distance, charge_strength=charge
        )
        exit_code = run_layout(
            data,
            config=config,
            id_field=id_field,
            width=width,
            height=height,
            radius_base=radius_base,
            radius_scale=radius_scale,
            fmt=fmt,
            out=out,
        )
    except (BoardGraphError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
