"""Engine configuration: validated defaults, optionally loaded from TOML."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

# d3-style cooling: alpha falls from 1 to alpha_min in about 300 ticks.
DEFAULT_ALPHA_MIN = 0.001
DEFAULT_ALPHA_DECAY = 1 - DEFAULT_ALPHA_MIN ** (1 / 300)


@dataclass(frozen=True)
class RankConfig:
    """PageRank parameters."""

    damping_factor: float = 0.85
    tolerance: float = 1e-4
    max_iterations: int = 100

    def __post_init__(self) -> None:
        if not 0.0 < self.damping_factor < 1.0:
            raise ValueError(f"damping_factor must be in (0, 1), got {self.damping_factor}")
        if not self.tolerance > 0.0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")


@dataclass(frozen=True)
class ForceConfig:
    """Force parameters for one layout step.

    Strength 0 disables a force. `link_strength=None` derives each edge's strength
    from endpoint degrees.
    """

    link_distance: float = 100.0
    link_strength: float | None = None

    charge_strength: float = -1000.0
    charge_theta: float = 0.9
    charge_distance_min: float = 1.0
    charge_distance_max: float = math.inf
    barnes_hut_threshold: int = 200

    center: tuple[float, float] = (0.0, 0.0)
    center_strength: float = 0.1
    centroid_strength: float = 0.0

    collision_strength: float = 0.7
    collision_padding: float = 0.0
    default_radius: float = 10.0

    velocity_decay: float = 0.4

    def __post_init__(self) -> None:
        if self.link_distance < 0:
            raise ValueError("link_distance must be non-negative")
        if self.link_strength is not None and self.link_strength < 0:
            raise ValueError("link_strength must be non-negative")
        if self.charge_theta < 0:
            raise ValueError("charge_theta must be non-negative")
        if self.charge_distance_min <= 0:
            raise ValueError("charge_distance_min must be positive")
        if self.charge_distance_max <= self.charge_distance_min:
            raise ValueError("charge_distance_max must exceed charge_distance_min")
        if not 0.0 <= self.collision_strength <= 1.0:
            raise ValueError("collision_strength must be in [0, 1]")
        if not 0.0 <= self.velocity_decay <= 1.0:
            raise ValueError("velocity_decay must be in [0, 1]")
        if self.default_radius < 0:
            raise ValueError("default_radius must be non-negative")
        if len(self.center) != 2:
            raise ValueError("center must be an (x, y) pair")
        object.__setattr__(self, "center", (float(self.center[0]), float(self.center[1])))


@dataclass(frozen=True)
class SimulationConfig:
    """Cooling schedule and step budget for the simulation driver."""

    alpha: float = 1.0
    alpha_min: float = DEFAULT_ALPHA_MIN
    alpha_decay: float = DEFAULT_ALPHA_DECAY
    alpha_target: float = 0.0
    restart_alpha_target: float = 0.3
    max_steps: int | None = 1000
    dt: float = 1.0
    forces: ForceConfig = field(default_factory=ForceConfig)

    def __post_init__(self) -> None:
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError("alpha must be in [0, 1]")
        if not 0.0 < self.alpha_min < 1.0:
            raise ValueError("alpha_min must be in (0, 1)")
        if not 0.0 < self.alpha_decay <= 1.0:
            raise ValueError("alpha_decay must be in (0, 1]")
        if not 0.0 <= self.alpha_target <= 1.0:
            raise ValueError("alpha_target must be in [0, 1]")
        if not 0.0 <= self.restart_alpha_target <= 1.0:
            raise ValueError("restart_alpha_target must be in [0, 1]")
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError("max_steps must be non-negative or None")
        if self.dt <= 0:
            raise ValueError("dt must be positive")


@dataclass(frozen=True)
class EngineConfig:
    rank: RankConfig = field(default_factory=RankConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)

    @property
    def forces(self) -> ForceConfig:
        return self.simulation.forces


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _known(cls: type, raw: dict[str, Any], table: str) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    unknown = sorted(k for k in raw if k not in names)
    if unknown:
        raise ValueError(f"Unknown key(s) in [{table}]: {', '.join(unknown)}")
    return dict(raw)


def config_from_dict(data: dict[str, Any]) -> EngineConfig:
    """Build an EngineConfig from `[rank]`, `[forces]` and `[simulation]` tables."""
    rank_raw = _known(RankConfig, _coerce_dict(data.get("rank")), "rank")
    forces_raw = _known(ForceConfig, _coerce_dict(data.get("forces")), "forces")
    sim_raw = _known(SimulationConfig, _coerce_dict(data.get("simulation")), "simulation")
    sim_raw.pop("forces", None)

    if "center" in forces_raw:
        forces_raw["center"] = tuple(forces_raw["center"])
    if "charge_distance_max" in forces_raw and forces_raw["charge_distance_max"] in ("inf", None):
        forces_raw["charge_distance_max"] = math.inf
    if sim_raw.get("max_steps") == 0:
        # TOML has no null; 0 means "no step cap".
        sim_raw["max_steps"] = None

    try:
        forces = ForceConfig(**forces_raw)
        return EngineConfig(
            rank=RankConfig(**rank_raw),
            simulation=SimulationConfig(forces=forces, **sim_raw),
        )
    except TypeError as e:
        raise ValueError(f"Invalid configuration value: {e}") from e


def load_config(path: str | Path) -> EngineConfig:
    """
    Load engine configuration from a TOML file.

    Missing tables and keys keep their defaults.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the TOML is malformed or a value is out of range
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Failed to parse config TOML: {e}") from e

    return config_from_dict(data)


def with_overrides(config: EngineConfig, **overrides: Any) -> EngineConfig:
    """Return a copy with non-None `rank`/`simulation`/`forces` keyword overrides applied.

    Keys are routed by name, e.g. `damping_factor` to RankConfig, `link_distance` to
    ForceConfig, `max_steps` to SimulationConfig. `max_steps=0` removes the step cap.
    """
    rank_names = {f.name for f in fields(RankConfig)}
    force_names = {f.name for f in fields(ForceConfig)}
    sim_names = {f.name for f in fields(SimulationConfig)} - {"forces"}

    rank_kw, force_kw, sim_kw = {}, {}, {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key in rank_names:
            rank_kw[key] = value
        elif key in force_names:
            force_kw[key] = value
        elif key in sim_names:
            sim_kw[key] = value
        else:
            raise ValueError(f"Unknown configuration key: {key}")

    if sim_kw.get("max_steps") == 0:
        # Same meaning as in the config file: no step cap.
        sim_kw["max_steps"] = None

    forces = replace(config.forces, **force_kw)
    return EngineConfig(
        rank=replace(config.rank, **rank_kw),
        simulation=replace(config.simulation, forces=forces, **sim_kw),
    )
