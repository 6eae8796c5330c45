"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from boardgraph.config import ForceConfig
from boardgraph.graph import Graph, build_graph


@pytest.fixture
def fixture_data_path() -> Path:
    """Path to the small board game data file."""
    return Path(__file__).parent / "fixtures" / "games.json"


@pytest.fixture
def cycle_graph() -> Graph:
    """A -> B -> C -> A."""
    return build_graph(["A", "B", "C"], [("A", "B"), ("B", "C"), ("C", "A")])


@pytest.fixture
def isolated_pair() -> Graph:
    return build_graph(["A", "B"], [])


@pytest.fixture
def quiet_forces() -> ForceConfig:
    """Every force switched off; tests enable the one they exercise."""
    return ForceConfig(charge_strength=0.0, center_strength=0.0, collision_strength=0.0, link_strength=0.0)
