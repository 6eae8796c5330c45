"""Simulation driver: cools `alpha` while stepping the layout.

The driver owns no timer. Callers pull snapshots from `steps()` (once per
animation frame, say) or block on `run()`. Drag interaction goes through
`pin`/`unpin`/`reheat` between steps; the driver is not thread-safe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Mapping

from .config import SimulationConfig
from .diagnostics import NonConvergenceWarning
from .graph.model import Graph
from .layout.engine import step
from .layout.state import LayoutState, initial_layout as seed_layout
from .models import NodeId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    """Final snapshot of a blocking run."""

    state: LayoutState
    steps: int
    converged: bool
    alpha: float
    diagnostics: tuple[NonConvergenceWarning, ...] = ()

    def to_dict(self) -> dict:
        return {
            "steps": self.steps,
            "converged": self.converged,
            "alpha": self.alpha,
            "positions": self.state.to_dict(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


class Simulation:
    """Stateful driver around the pure layout `step`."""

    def __init__(
        self,
        graph: Graph,
        initial_layout: LayoutState | None = None,
        config: SimulationConfig | None = None,
        sizing: Mapping[NodeId, float] | None = None,
    ):
        self.graph = graph
        self.config = config or SimulationConfig()
        self.sizing = dict(sizing) if sizing is not None else None
        self._state = seed_layout(graph, center=self.config.forces.center, previous=initial_layout)
        self.alpha = self.config.alpha
        self.alpha_target = self.config.alpha_target
        self.step_count = 0

    @property
    def state(self) -> LayoutState:
        """Current snapshot (immutable)."""
        return self._state

    @property
    def settled(self) -> bool:
        return len(self.graph) == 0 or self.alpha < self.config.alpha_min

    def tick(self) -> LayoutState:
        """Cool alpha one notch and take one layout step."""
        self.alpha += (self.alpha_target - self.alpha) * self.config.alpha_decay
        self._state = step(
            self.graph,
            self._state,
            sizing=self.sizing,
            forces=self.config.forces,
            dt=self.config.dt,
            alpha=self.alpha,
        )
        self.step_count += 1
        return self._state

    def steps(self) -> Iterator[LayoutState]:
        """Lazily yield one snapshot per tick.

        Ends once alpha drops below `alpha_min` or after `max_steps` ticks from this
        call (unbounded when `max_steps` is None). A reheated simulation keeps
        yielding while alpha_target stays above alpha_min.
        """
        taken = 0
        while not self.settled:
            if self.config.max_steps is not None and taken >= self.config.max_steps:
                return
            yield self.tick()
            taken += 1

    def run(self) -> SimulationResult:
        """Step until settled or out of budget.

        A blocking run always cools toward zero: any target left by `reheat` or the
        config is released first, so `max_steps=None` still terminates.
        """
        self.alpha_target = 0.0
        taken = 0
        for _ in self.steps():
            taken += 1

        converged = self.settled
        diagnostics: tuple[NonConvergenceWarning, ...] = ()
        if converged:
            logger.info("Layout settled after %d steps (alpha=%.4f)", taken, self.alpha)
        else:
            warning = NonConvergenceWarning.for_component(
                "layout", iterations=taken, residual=self.alpha, threshold=self.config.alpha_min
            )
            logger.warning("%s", warning.message)
            diagnostics = (warning,)

        return SimulationResult(
            state=self._state,
            steps=taken,
            converged=converged,
            alpha=self.alpha,
            diagnostics=diagnostics,
        )

    def pin(self, node_id: NodeId, position: tuple[float, float]) -> None:
        """Fix a node at `position` (e.g. while it is dragged). Raises KeyError for unknown ids."""
        if node_id not in self.graph:
            raise KeyError(node_id)
        self._state = self._state.with_pin(node_id, position)

    def unpin(self, node_id: NodeId) -> None:
        """Release a pinned node; it integrates freely from the next step."""
        if node_id not in self.graph:
            raise KeyError(node_id)
        self._state = self._state.without_pin(node_id)

    def reheat(self, alpha_target: float | None = None) -> None:
        """Set the cooling target and raise alpha to at least it.

        Defaults to `restart_alpha_target` (0.3). `reheat(0.0)` lets the layout cool
        down again once the interaction ends.
        """
        target = self.config.restart_alpha_target if alpha_target is None else alpha_target
        if not 0.0 <= target <= 1.0:
            raise ValueError("alpha_target must be in [0, 1]")
        self.alpha_target = target
        self.alpha = max(self.alpha, target)


def run(
    graph: Graph,
    initial_layout: LayoutState | None = None,
    config: SimulationConfig | None = None,
    sizing: Mapping[NodeId, float] | None = None,
) -> SimulationResult:
    """Run a fresh simulation to convergence (or its step cap)."""
    return Simulation(graph, initial_layout, config, sizing).run()


def steps(
    graph: Graph,
    initial_layout: LayoutState | None = None,
    config: SimulationConfig | None = None,
    sizing: Mapping[NodeId, float] | None = None,
) -> Iterator[LayoutState]:
    """Lazy snapshot stream from a fresh simulation seeded with `initial_layout`."""
    return Simulation(graph, initial_layout, config, sizing).steps()
