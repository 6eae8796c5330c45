import dataclasses
import math

import pytest

from boardgraph.config import ForceConfig
from boardgraph.graph import Graph, build_graph
from boardgraph.layout import LayoutState, NodeState, initial_layout, radii_from_rank, step
from boardgraph.layout.forces import jiggle


def _distance(state: LayoutState, a, b) -> float:
    (ax, ay), (bx, by) = state.position(a), state.position(b)
    return math.hypot(bx - ax, by - ay)


def _state(**positions: tuple[float, float]) -> LayoutState:
    return LayoutState({k: NodeState(x=x, y=y) for k, (x, y) in positions.items()})


def test_step_is_deterministic_and_pure(cycle_graph: Graph) -> None:
    state = initial_layout(cycle_graph)
    before = state.to_dict()

    first = step(cycle_graph, state)
    second = step(cycle_graph, state)

    assert first.to_dict() == second.to_dict()
    assert state.to_dict() == before
    assert first.to_dict() != before


def test_empty_graph_step() -> None:
    assert len(step(build_graph([], []), LayoutState())) == 0


def test_non_positive_dt_raises(cycle_graph: Graph) -> None:
    with pytest.raises(ValueError):
        step(cycle_graph, initial_layout(cycle_graph), dt=0.0)


def test_pinned_node_ignores_forces() -> None:
    g = build_graph(["A", "B"], [("A", "B")])
    state = _state(A=(0.0, 0.0), B=(1.0, 0.0)).with_pin("A", (0.0, 0.0))

    nxt = step(g, state, forces=ForceConfig(charge_strength=-1e6))

    a = nxt["A"]
    assert (a.x, a.y) == (0.0, 0.0)
    assert (a.vx, a.vy) == (0.0, 0.0)
    assert a.pinned
    # The pinned node still repels its neighbor.
    assert nxt["B"].x > 1.0


def test_unpinned_node_moves_again() -> None:
    g = build_graph(["A", "B"], [])
    state = _state(A=(0.0, 0.0), B=(1.0, 0.0)).with_pin("A", (0.0, 0.0)).without_pin("A")

    nxt = step(g, state, forces=ForceConfig(charge_strength=-1000.0))

    assert not nxt["A"].pinned
    assert nxt["A"].x < 0.0


def test_self_loop_exerts_no_force(quiet_forces: ForceConfig) -> None:
    forces = dataclasses.replace(quiet_forces, link_strength=None)
    plain = build_graph(["A", "B"], [("A", "B")])
    looped = build_graph(["A", "B"], [("A", "B"), ("A", "A")])
    state = _state(A=(0.0, 0.0), B=(30.0, 40.0))

    assert step(plain, state, forces=forces).to_dict() == step(looped, state, forces=forces).to_dict()


def test_link_pulls_distant_nodes_closer(quiet_forces: ForceConfig) -> None:
    g = build_graph(["A", "B"], [("A", "B")])
    forces = dataclasses.replace(quiet_forces, link_strength=None)

    nxt = step(g, _state(A=(0.0, 0.0), B=(300.0, 0.0)), forces=forces)

    assert 100.0 <= _distance(nxt, "A", "B") < 300.0


def test_link_pushes_close_nodes_apart(quiet_forces: ForceConfig) -> None:
    g = build_graph(["A", "B"], [("A", "B")])
    forces = dataclasses.replace(quiet_forces, link_strength=None)

    nxt = step(g, _state(A=(0.0, 0.0), B=(20.0, 0.0)), forces=forces)

    assert 20.0 < _distance(nxt, "A", "B") <= 100.0


def test_centering_pulls_isolated_nodes_to_center(isolated_pair: Graph, quiet_forces: ForceConfig) -> None:
    forces = dataclasses.replace(quiet_forces, center=(400.0, 300.0), center_strength=0.1)
    state = _state(A=(0.0, 0.0), B=(800.0, 100.0))

    for _ in range(100):
        state = step(isolated_pair, state, forces=forces)

    for node_id in ("A", "B"):
        x, y = state.position(node_id)
        assert x == pytest.approx(400.0, abs=1e-3)
        assert y == pytest.approx(300.0, abs=1e-3)


def test_centroid_shift_moves_the_layout_as_a_whole(isolated_pair: Graph, quiet_forces: ForceConfig) -> None:
    forces = dataclasses.replace(quiet_forces, centroid_strength=1.0)

    nxt = step(isolated_pair, _state(A=(10.0, 10.0), B=(30.0, 10.0)), forces=forces)

    assert nxt.position("A") == pytest.approx((-10.0, 0.0))
    assert nxt.position("B") == pytest.approx((10.0, 0.0))


def test_collision_separates_overlapping_nodes(isolated_pair: Graph, quiet_forces: ForceConfig) -> None:
    forces = dataclasses.replace(quiet_forces, collision_strength=0.7)

    nxt = step(isolated_pair, _state(A=(0.0, 0.0), B=(5.0, 0.0)), sizing={"A": 10.0, "B": 10.0}, forces=forces)

    assert _distance(nxt, "A", "B") == pytest.approx(11.3, abs=1e-9)


def test_collision_resolves_coincident_nodes(isolated_pair: Graph, quiet_forces: ForceConfig) -> None:
    forces = dataclasses.replace(quiet_forces, collision_strength=0.7)

    nxt = step(isolated_pair, _state(A=(5.0, 5.0), B=(5.0, 5.0)), forces=forces)

    assert _distance(nxt, "A", "B") > 0.0


def test_jiggle_is_deterministic_and_tiny() -> None:
    dx, dy = jiggle("'a'", "'b'")

    assert (dx, dy) == jiggle("'a'", "'b'")
    assert 0 < abs(dx) <= 1e-6
    assert 0 < abs(dy) <= 1e-6


def _scatter(n: int) -> tuple[Graph, LayoutState]:
    g = build_graph([f"n{i}" for i in range(n)], [])
    return g, initial_layout(g)


def _displacements(before: LayoutState, after: LayoutState) -> list[tuple[float, float]]:
    return [(after[k].x - before[k].x, after[k].y - before[k].y) for k in before]


def test_barnes_hut_with_zero_theta_matches_exact(quiet_forces: ForceConfig) -> None:
    g, state = _scatter(250)
    exact = dataclasses.replace(quiet_forces, charge_strength=-30.0, barnes_hut_threshold=10_000)
    tree = dataclasses.replace(exact, barnes_hut_threshold=10, charge_theta=0.0)

    a = _displacements(state, step(g, state, forces=exact))
    b = _displacements(state, step(g, state, forces=tree))

    for (ax, ay), (bx, by) in zip(a, b):
        assert bx == pytest.approx(ax, rel=1e-9, abs=1e-9)
        assert by == pytest.approx(ay, rel=1e-9, abs=1e-9)


def test_barnes_hut_approximation_error_is_small(quiet_forces: ForceConfig) -> None:
    g, state = _scatter(250)
    exact = dataclasses.replace(quiet_forces, charge_strength=-30.0, barnes_hut_threshold=10_000)
    tree = dataclasses.replace(exact, barnes_hut_threshold=10, charge_theta=0.5)

    a = _displacements(state, step(g, state, forces=exact))
    b = _displacements(state, step(g, state, forces=tree))

    error = sum(math.hypot(bx - ax, by - ay) for (ax, ay), (bx, by) in zip(a, b))
    total = sum(math.hypot(ax, ay) for ax, ay in a)
    assert error / total < 0.05


def test_missing_nodes_are_seeded_and_extra_ids_dropped(cycle_graph: Graph) -> None:
    state = _state(A=(1.0, 2.0), ghost=(9.0, 9.0))

    nxt = step(cycle_graph, state)

    assert list(nxt) == ["A", "B", "C"]
    assert "ghost" not in nxt


def test_initial_layout_spirals_around_center(cycle_graph: Graph) -> None:
    state = initial_layout(cycle_graph, center=(100.0, 50.0))

    x, y = state.position("A")
    assert x == pytest.approx(100.0 + 10.0 * math.sqrt(0.5))
    assert y == pytest.approx(50.0)
    assert len({state.position(k) for k in state}) == 3


def test_initial_layout_keeps_previous_positions(cycle_graph: Graph) -> None:
    previous = _state(B=(42.0, -7.0))

    state = initial_layout(cycle_graph, previous=previous)

    assert state["B"] == previous["B"]
    assert state.position("A") != (42.0, -7.0)


def test_radii_from_rank() -> None:
    assert radii_from_rank({"a": 0.5, "b": 0.0}) == {"a": 60.0, "b": 10.0}
    assert radii_from_rank({"a": 0.5}, base=15.0, scale=50.0) == {"a": 40.0}


def test_snapshot_is_read_only(cycle_graph: Graph) -> None:
    state = initial_layout(cycle_graph)

    with pytest.raises(TypeError):
        state.nodes["A"] = NodeState(x=0.0, y=0.0)  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        state["A"].x = 1.0  # type: ignore[misc]


def test_to_dict_refuses_colliding_string_ids() -> None:
    g = build_graph([1, "1"], [])

    with pytest.raises(ValueError, match="collide"):
        initial_layout(g).to_dict()
