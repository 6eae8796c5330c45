"""PageRank over the directed graph.

Scores are computed by power iteration with uniform teleportation. Mass held by
dangling nodes (out-degree 0) is spread uniformly on every iteration so the vector
keeps summing to 1. Each edge occurrence carries weight 1: parallel edges add
weight and a self-loop feeds its own node.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .config import RankConfig
from .diagnostics import NonConvergenceWarning
from .graph.model import Graph
from .models import NodeId, string_keyed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankResult:
    """PageRank scores plus how the iteration ended."""

    scores: Mapping[NodeId, float] = field(default_factory=lambda: MappingProxyType({}))
    iterations: int = 0
    converged: bool = True
    delta: float = 0.0
    diagnostics: tuple[NonConvergenceWarning, ...] = ()

    def __getitem__(self, node_id: NodeId) -> float:
        return self.scores[node_id]

    def __len__(self) -> int:
        return len(self.scores)

    def __iter__(self):
        return iter(self.scores)

    def keys(self):
        return self.scores.keys()

    def items(self):
        return self.scores.items()

    def get(self, node_id: NodeId, default: float | None = None) -> float | None:
        return self.scores.get(node_id, default)

    def ranked(self) -> list[tuple[NodeId, float]]:
        """(id, score) pairs, highest first; ties keep graph order."""
        order = {node_id: i for i, node_id in enumerate(self.scores)}
        return sorted(self.scores.items(), key=lambda kv: (-kv[1], order[kv[0]]))

    def to_dict(self) -> dict:
        return {
            "iterations": self.iterations,
            "converged": self.converged,
            "delta": self.delta,
            "scores": string_keyed(self.scores.items()),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


def rank(
    graph: Graph,
    damping_factor: float = 0.85,
    tolerance: float = 1e-4,
    max_iterations: int = 100,
) -> RankResult:
    """Compute PageRank for every node in `graph`.

    Stops when the L1 change between successive vectors drops below `tolerance`
    or after `max_iterations`. Hitting the cap is not an error: the last vector is
    returned with `converged=False` and a NonConvergenceWarning attached.

    Raises:
        ValueError: If a parameter is out of range
    """
    # Validation lives on the config dataclass.
    RankConfig(damping_factor=damping_factor, tolerance=tolerance, max_iterations=max_iterations)

    ids = graph.node_ids
    n = len(ids)
    if n == 0:
        return RankResult()

    out_degree = {node_id: graph.out_degree(node_id) for node_id in ids}
    dangling = [node_id for node_id in ids if out_degree[node_id] == 0]

    scores = {node_id: 1.0 / n for node_id in ids}
    teleport = (1.0 - damping_factor) / n

    delta = 0.0
    converged = False
    iterations = 0
    while iterations < max_iterations:
        iterations += 1

        dangling_mass = sum(scores[node_id] for node_id in dangling)
        base = teleport + damping_factor * dangling_mass / n
        nxt = {node_id: base for node_id in ids}

        for node_id in ids:
            deg = out_degree[node_id]
            if deg == 0:
                continue
            share = damping_factor * scores[node_id] / deg
            for edge in graph.outgoing(node_id):
                nxt[edge.target] += share

        delta = sum(abs(nxt[node_id] - scores[node_id]) for node_id in ids)
        scores = nxt
        if delta < tolerance:
            converged = True
            break

    total = sum(scores.values())
    if total > 0:
        scores = {node_id: s / total for node_id, s in scores.items()}

    diagnostics: tuple[NonConvergenceWarning, ...] = ()
    if converged:
        logger.debug("PageRank converged after %d iterations (delta=%.3g)", iterations, delta)
    else:
        warning = NonConvergenceWarning.for_component(
            "rank", iterations=iterations, residual=delta, threshold=tolerance
        )
        logger.warning("%s", warning.message)
        diagnostics = (warning,)

    return RankResult(
        scores=MappingProxyType(scores),
        iterations=iterations,
        converged=converged,
        delta=delta,
        diagnostics=diagnostics,
    )


def rank_with_config(graph: Graph, config: RankConfig | None = None) -> RankResult:
    """`rank` with parameters taken from a RankConfig."""
    config = config or RankConfig()
    return rank(
        graph,
        damping_factor=config.damping_factor,
        tolerance=config.tolerance,
        max_iterations=config.max_iterations,
    )
