"""Non-fatal findings returned alongside engine results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .models import NodeId


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal finding."""

    level: Literal["error", "warning", "info"]
    rule: str
    message: str

    def __str__(self) -> str:
        return f"{self.level.upper()}: [{self.rule}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level, "rule": self.rule, "message": self.message}


@dataclass(frozen=True)
class UnresolvedEdgeWarning(Diagnostic):
    """An edge referenced an unknown node and was dropped."""

    source: NodeId = None
    target: NodeId = None
    missing: tuple[NodeId, ...] = field(default_factory=tuple)

    @classmethod
    def for_edge(cls, source: NodeId, target: NodeId, missing: tuple[NodeId, ...]) -> "UnresolvedEdgeWarning":
        names = ", ".join(repr(m) for m in missing)
        return cls(
            level="warning",
            rule="unresolved-edge",
            message=f"Edge {source!r} -> {target!r} dropped: unknown node {names}",
            source=source,
            target=target,
            missing=missing,
        )

    @classmethod
    def for_record(cls, record: Any) -> "UnresolvedEdgeWarning":
        """An edge record that names no usable (source, target) pair."""
        return cls(
            level="warning",
            rule="malformed-edge",
            message=f"Edge record {record!r} dropped: expected a source and a target",
            missing=(record,),
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d.update({"source": self.source, "target": self.target, "missing": [_plain(m) for m in self.missing]})
        return d


def _plain(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)


@dataclass(frozen=True)
class NonConvergenceWarning(Diagnostic):
    """An iterative engine hit its cap before settling; the last result is still valid."""

    component: Literal["rank", "layout"] = "rank"
    iterations: int = 0
    residual: float = 0.0

    @classmethod
    def for_component(
        cls, component: Literal["rank", "layout"], *, iterations: int, residual: float, threshold: float
    ) -> "NonConvergenceWarning":
        what = "delta" if component == "rank" else "alpha"
        return cls(
            level="warning",
            rule="non-convergence",
            message=(
                f"{component} stopped after {iterations} iterations with {what} "
                f"{residual:.3g} (threshold {threshold:.3g})"
            ),
            component=component,
            iterations=iterations,
            residual=residual,
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d.update({"component": self.component, "iterations": self.iterations, "residual": self.residual})
        return d
