"""Force terms for one layout step.

Every function mutates a `Bodies` working copy in place: velocities, or positions
for the centroid shift.
Forces run in a fixed order (link, charge, center, centroid, collision); later ones see
the velocities written by earlier ones, so the order is part of the result.
"""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass

from ..config import ForceConfig
from .spatial import QuadTree, SpatialGrid

JIGGLE_SCALE = 1e-6


@dataclass
class Bodies:
    """Mutable per-step working arrays, indexed by graph node order."""

    keys: list[str]
    xs: list[float]
    ys: list[float]
    vxs: list[float]
    vys: list[float]
    radii: list[float]

    def __len__(self) -> int:
        return len(self.xs)


def jiggle(a: str, b: str) -> tuple[float, float]:
    """Tiny deterministic offset separating coincident points.

    Derived from the pair's keys, so repeated steps on identical input agree.
    """
    h = hashlib.md5(f"{a}|{b}".encode("utf-8")).hexdigest()
    x_val = int(h[:8], 16) / 0xFFFFFFFF
    y_val = int(h[8:16], 16) / 0xFFFFFFFF
    dx = (x_val - 0.5) * JIGGLE_SCALE or JIGGLE_SCALE / 2
    dy = (y_val - 0.5) * JIGGLE_SCALE or JIGGLE_SCALE / 2
    return (dx, dy)


def apply_link_force(
    bodies: Bodies,
    links: list[tuple[int, int]],
    config: ForceConfig,
    alpha: float,
) -> None:
    """Spring toward `config.link_distance` along each link (source, target index pairs).

    Default strength is 1 / min(degree) so hubs are not yanked around by every
    neighbor; the correction is split between the endpoints by degree bias.
    """
    if not links:
        return

    count = [0] * len(bodies)
    for s, t in links:
        count[s] += 1
        count[t] += 1

    for s, t in links:
        x = bodies.xs[t] + bodies.vxs[t] - bodies.xs[s] - bodies.vxs[s]
        y = bodies.ys[t] + bodies.vys[t] - bodies.ys[s] - bodies.vys[s]
        if x == 0 and y == 0:
            x, y = jiggle(bodies.keys[s], bodies.keys[t])
        elif x == 0:
            x = jiggle(bodies.keys[s], bodies.keys[t])[0]
        elif y == 0:
            y = jiggle(bodies.keys[s], bodies.keys[t])[1]

        strength = config.link_strength
        if strength is None:
            strength = 1.0 / min(count[s], count[t])
        if strength == 0:
            continue

        l = math.sqrt(x * x + y * y)
        l = (l - config.link_distance) / l * alpha * strength
        x *= l
        y *= l

        bias = count[s] / (count[s] + count[t])
        bodies.vxs[t] -= x * bias
        bodies.vys[t] -= y * bias
        bodies.vxs[s] += x * (1 - bias)
        bodies.vys[s] += y * (1 - bias)


def apply_charge_force(bodies: Bodies, config: ForceConfig, alpha: float) -> None:
    """Many-body repulsion (negative strength) or attraction (positive).

    Exact all-pairs up to `barnes_hut_threshold` nodes, Barnes-Hut beyond it.
    """
    n = len(bodies)
    if n < 2 or config.charge_strength == 0:
        return

    w = config.charge_strength * alpha
    if n > config.barnes_hut_threshold:
        tree = QuadTree(list(bodies.xs), list(bodies.ys))

        def _jiggle(i: int, j: int) -> tuple[float, float]:
            return jiggle(bodies.keys[i], bodies.keys[j])

        impulses = [
            tree.charge_on(
                i,
                theta=config.charge_theta,
                distance_min=config.charge_distance_min,
                distance_max=config.charge_distance_max,
                jiggle=_jiggle,
            )
            for i in range(n)
        ]
        for i, (fx, fy) in enumerate(impulses):
            bodies.vxs[i] += fx * w
            bodies.vys[i] += fy * w
        return

    dmin2 = config.charge_distance_min ** 2
    dmax2 = config.charge_distance_max ** 2 if math.isfinite(config.charge_distance_max) else math.inf
    # Positions are read before any velocity is written, so pairs can be summed symmetrically.
    dvx = [0.0] * n
    dvy = [0.0] * n
    for i in range(n):
        xi, yi = bodies.xs[i], bodies.ys[i]
        for j in range(i + 1, n):
            dx = bodies.xs[j] - xi
            dy = bodies.ys[j] - yi
            if dx == 0 and dy == 0:
                dx, dy = jiggle(bodies.keys[i], bodies.keys[j])
            l = dx * dx + dy * dy
            if l >= dmax2:
                continue
            l = max(l, dmin2)
            fx = dx * w / l
            fy = dy * w / l
            dvx[i] += fx
            dvy[i] += fy
            dvx[j] -= fx
            dvy[j] -= fy
    for i in range(n):
        bodies.vxs[i] += dvx[i]
        bodies.vys[i] += dvy[i]


def apply_center_force(bodies: Bodies, config: ForceConfig, alpha: float) -> None:
    """Pull each node toward `config.center`, per axis, scaled by alpha."""
    if config.center_strength == 0:
        return
    cx, cy = config.center
    k = config.center_strength * alpha
    for i in range(len(bodies)):
        bodies.vxs[i] += (cx - bodies.xs[i]) * k
        bodies.vys[i] += (cy - bodies.ys[i]) * k


def apply_centroid_shift(bodies: Bodies, config: ForceConfig) -> None:
    """Translate all positions so the centroid moves toward `config.center`."""
    n = len(bodies)
    if n == 0 or config.centroid_strength == 0:
        return
    cx, cy = config.center
    sx = (sum(bodies.xs) / n - cx) * config.centroid_strength
    sy = (sum(bodies.ys) / n - cy) * config.centroid_strength
    for i in range(n):
        bodies.xs[i] -= sx
        bodies.ys[i] -= sy


def apply_collision_force(bodies: Bodies, config: ForceConfig) -> None:
    """Push apart nodes whose circles overlap, on predicted positions.

    Each pair resolves `collision_strength` of its overlap per step, shared in
    proportion to the other node's radius squared. Not scaled by alpha.
    """
    n = len(bodies)
    if n < 2 or config.collision_strength == 0:
        return

    pad = config.collision_padding
    radii = [r + pad for r in bodies.radii]
    max_r = max(radii)
    if max_r <= 0:
        return

    grid = SpatialGrid(cell_size=2 * max_r)
    for i in range(n):
        grid.insert(i, bodies.xs[i] + bodies.vxs[i], bodies.ys[i] + bodies.vys[i])

    strength = config.collision_strength
    for i in range(n):
        ri = radii[i]
        xi = bodies.xs[i] + bodies.vxs[i]
        yi = bodies.ys[i] + bodies.vys[i]
        for j in grid.neighbors_after(i):
            rj = radii[j]
            r = ri + rj
            x = xi - bodies.xs[j] - bodies.vxs[j]
            y = yi - bodies.ys[j] - bodies.vys[j]
            l = x * x + y * y
            if l >= r * r:
                continue
            if x == 0 and y == 0:
                x, y = jiggle(bodies.keys[i], bodies.keys[j])
                l = x * x + y * y
            l = math.sqrt(l)
            l = (r - l) / l * strength
            x *= l
            y *= l
            share = rj * rj / (ri * ri + rj * rj) if (ri or rj) else 0.5
            bodies.vxs[i] += x * share
            bodies.vys[i] += y * share
            bodies.vxs[j] -= x * (1 - share)
            bodies.vys[j] -= y * (1 - share)
