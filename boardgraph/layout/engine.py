"""Single integration step of the force-directed layout."""

from __future__ import annotations

import logging
from typing import Mapping

from ..config import ForceConfig
from ..graph.model import Graph
from ..models import NodeId
from .forces import (
    Bodies,
    apply_center_force,
    apply_centroid_shift,
    apply_charge_force,
    apply_collision_force,
    apply_link_force,
)
from .state import LayoutState, NodeState, phyllotaxis_position

logger = logging.getLogger(__name__)


def step(
    graph: Graph,
    state: LayoutState,
    sizing: Mapping[NodeId, float] | None = None,
    forces: ForceConfig | None = None,
    dt: float = 1.0,
    alpha: float = 1.0,
) -> LayoutState:
    """Advance the layout by one step and return the new snapshot.

    Pure: `state` is left untouched and identical inputs give identical output.
    Forces add alpha-scaled velocity impulses; then free nodes lose
    `velocity_decay` of their velocity and move by `velocity * dt`. Pinned nodes
    are set to their pin with zero velocity but still push and pull the others.

    Nodes missing from `state` are seeded on the phyllotaxis spiral; entries for
    ids not in `graph` are dropped. `sizing` maps ids to collision radii.
    """
    forces = forces or ForceConfig()
    if dt <= 0:
        raise ValueError("dt must be positive")
    if len(graph) == 0:
        return LayoutState()

    bodies, pins = _load_bodies(graph, state, sizing, forces)
    index = {node_id: i for i, node_id in enumerate(graph.node_ids)}
    links = [(index[e.source], index[e.target]) for e in graph.edges if not e.is_self_loop]

    apply_link_force(bodies, links, forces, alpha)
    apply_charge_force(bodies, forces, alpha)
    apply_center_force(bodies, forces, alpha)
    apply_centroid_shift(bodies, forces)
    apply_collision_force(bodies, forces)

    keep = 1.0 - forces.velocity_decay
    nodes: dict[NodeId, NodeState] = {}
    for i, node_id in enumerate(graph.node_ids):
        fx, fy = pins[i]
        if fx is None:
            vx = bodies.vxs[i] * keep
            x = bodies.xs[i] + vx * dt
        else:
            vx, x = 0.0, fx
        if fy is None:
            vy = bodies.vys[i] * keep
            y = bodies.ys[i] + vy * dt
        else:
            vy, y = 0.0, fy
        nodes[node_id] = NodeState(x=x, y=y, vx=vx, vy=vy, fx=fx, fy=fy)

    return LayoutState(nodes)


def _load_bodies(
    graph: Graph,
    state: LayoutState,
    sizing: Mapping[NodeId, float] | None,
    forces: ForceConfig,
) -> tuple[Bodies, list[tuple[float | None, float | None]]]:
    keys: list[str] = []
    xs: list[float] = []
    ys: list[float] = []
    vxs: list[float] = []
    vys: list[float] = []
    radii: list[float] = []
    pins: list[tuple[float | None, float | None]] = []

    seeded = 0
    for i, node in enumerate(graph.nodes):
        current = state.get(node.id)
        if current is None:
            x, y = phyllotaxis_position(i, forces.center)
            current = NodeState(x=x, y=y)
            seeded += 1
        # A pinned node sits at its pin while the forces are computed.
        x = current.fx if current.fx is not None else current.x
        y = current.fy if current.fy is not None else current.y
        keys.append(repr(node.id))
        xs.append(float(x))
        ys.append(float(y))
        vxs.append(float(current.vx))
        vys.append(float(current.vy))
        radius = forces.default_radius
        if sizing is not None:
            radius = float(sizing.get(node.id, forces.default_radius))
        radii.append(radius)
        pins.append((current.fx, current.fy))

    if seeded:
        logger.debug("Seeded %d node(s) missing from the layout state", seeded)

    return Bodies(keys=keys, xs=xs, ys=ys, vxs=vxs, vys=vys, radii=radii), pins
