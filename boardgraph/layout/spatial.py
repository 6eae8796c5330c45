"""Spatial indexes used by the repulsion and collision forces.

QuadTree aggregates point charges for the Barnes-Hut approximation of the
many-body force. SpatialGrid bins points into square cells so collision checks
only look at neighboring cells instead of every pair.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable

# Past this depth points are kept together in one leaf (near-coincident clusters).
MAX_DEPTH = 32


@dataclass
class _Quad:
    x0: float
    y0: float
    size: float
    count: int = 0
    cx: float = 0.0  # centroid of contained points
    cy: float = 0.0
    children: list["_Quad"] = field(default_factory=list)
    points: list[int] = field(default_factory=list)  # leaf only

    @property
    def is_leaf(self) -> bool:
        return not self.children


class QuadTree:
    """Quadtree over unit-weight points with per-quad centroid and count."""

    def __init__(self, xs: list[float], ys: list[float]):
        self.xs = xs
        self.ys = ys
        self.root: _Quad | None = None
        if xs:
            x0, x1 = min(xs), max(xs)
            y0, y1 = min(ys), max(ys)
            size = max(x1 - x0, y1 - y0, 1e-9)
            self.root = self._build(list(range(len(xs))), x0, y0, size, 0)

    def _build(self, indices: list[int], x0: float, y0: float, size: float, depth: int) -> _Quad:
        quad = _Quad(x0=x0, y0=y0, size=size)
        quad.count = len(indices)
        quad.cx = sum(self.xs[i] for i in indices) / quad.count
        quad.cy = sum(self.ys[i] for i in indices) / quad.count

        if len(indices) == 1 or depth >= MAX_DEPTH:
            quad.points = indices
            return quad

        half = size / 2
        mx, my = x0 + half, y0 + half
        buckets: list[list[int]] = [[], [], [], []]
        for i in indices:
            right = self.xs[i] >= mx
            below = self.ys[i] >= my
            buckets[(2 if below else 0) + (1 if right else 0)].append(i)

        # All points landed in one quadrant and are coincident: stop splitting.
        if max(len(b) for b in buckets) == len(indices) and _coincident(self.xs, self.ys, indices):
            quad.points = indices
            return quad

        origins = [(x0, y0), (mx, y0), (x0, my), (mx, my)]
        for bucket, (bx, by) in zip(buckets, origins):
            if bucket:
                quad.children.append(self._build(bucket, bx, by, half, depth + 1))
        return quad

    def charge_on(
        self,
        index: int,
        *,
        theta: float,
        distance_min: float,
        distance_max: float,
        jiggle: Callable[[int, int], tuple[float, float]],
    ) -> tuple[float, float]:
        """Sum of `dx / d²` over other points, approximating far quads by their centroid.

        The caller multiplies the result by charge strength and alpha.
        """
        if self.root is None:
            return (0.0, 0.0)

        x, y = self.xs[index], self.ys[index]
        theta2 = theta * theta
        dmin2 = distance_min * distance_min
        dmax2 = distance_max * distance_max if math.isfinite(distance_max) else math.inf

        fx = fy = 0.0
        stack = [self.root]
        while stack:
            quad = stack.pop()
            dx = quad.cx - x
            dy = quad.cy - y
            l = dx * dx + dy * dy

            # Far enough away to treat the whole quad as one charge.
            if not quad.is_leaf and theta2 > 0 and quad.size * quad.size / theta2 < l:
                if l < dmax2:
                    l = max(l, dmin2)
                    fx += dx * quad.count / l
                    fy += dy * quad.count / l
                continue

            if not quad.is_leaf:
                stack.extend(quad.children)
                continue

            for j in quad.points:
                if j == index:
                    continue
                px = self.xs[j] - x
                py = self.ys[j] - y
                if px == 0 and py == 0:
                    px, py = jiggle(index, j)
                pl = px * px + py * py
                if pl >= dmax2:
                    continue
                pl = max(pl, dmin2)
                fx += px / pl
                fy += py / pl
        return (fx, fy)


def _coincident(xs: list[float], ys: list[float], indices: list[int]) -> bool:
    x, y = xs[indices[0]], ys[indices[0]]
    return all(xs[i] == x and ys[i] == y for i in indices)


class SpatialGrid:
    """Uniform grid for neighbor lookups.

    With cell_size at least the largest interaction distance, any interacting pair
    sits in the same or an adjacent cell.
    """

    def __init__(self, cell_size: float):
        self.cell_size = max(cell_size, 1e-9)
        self._cells: dict[tuple[int, int], list[int]] = {}
        self._keys: dict[int, tuple[int, int]] = {}

    def _cell_key(self, x: float, y: float) -> tuple[int, int]:
        return (int(math.floor(x / self.cell_size)), int(math.floor(y / self.cell_size)))

    def insert(self, index: int, x: float, y: float) -> None:
        key = self._cell_key(x, y)
        self._cells.setdefault(key, []).append(index)
        self._keys[index] = key

    def neighbors_after(self, index: int) -> list[int]:
        """Indices greater than `index` in the 3x3 neighborhood, each pair reported once."""
        key = self._keys.get(index)
        if key is None:
            return []
        cx, cy = key
        found: list[int] = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for other in self._cells.get((cx + dx, cy + dy), ()):
                    if other > index:
                        found.append(other)
        found.sort()
        return found
