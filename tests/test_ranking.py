from pathlib import Path

import pytest

from boardgraph.diagnostics import NonConvergenceWarning
from boardgraph.graph import Graph, build_graph, load_graph
from boardgraph.ranking import rank


def test_scores_sum_to_one(fixture_data_path: Path) -> None:
    g = load_graph(fixture_data_path, id_field="ID")

    result = rank(g)

    assert result.converged
    assert set(result.keys()) == set(g.node_ids)
    assert sum(result.scores.values()) == pytest.approx(1.0, abs=1e-6)
    assert all(score > 0 for score in result.scores.values())


def test_single_node_gets_everything() -> None:
    result = rank(build_graph(["solo"], []))

    assert result["solo"] == pytest.approx(1.0, abs=1e-12)


def test_directed_cycle_is_uniform() -> None:
    ids = list("ABCDE")
    g = build_graph(ids, [(ids[i], ids[(i + 1) % 5]) for i in range(5)])

    result = rank(g)

    for node_id in ids:
        assert result[node_id] == pytest.approx(0.2, abs=1e-4)


def test_three_cycle_converges_quickly(cycle_graph: Graph) -> None:
    result = rank(cycle_graph)

    assert result.converged
    assert result.iterations < 20
    assert result["A"] == pytest.approx(1 / 3, abs=1e-4)


def test_isolated_pair_splits_evenly(isolated_pair: Graph) -> None:
    result = rank(isolated_pair)

    assert result["A"] == pytest.approx(0.5, abs=1e-9)
    assert result["B"] == pytest.approx(0.5, abs=1e-9)


def test_dangling_node_mass_is_redistributed() -> None:
    # B has no out-links; its score is spread over both nodes each iteration.
    result = rank(build_graph(["A", "B"], [("A", "B")]), tolerance=1e-10, max_iterations=500)

    assert result["A"] == pytest.approx(0.350877, abs=1e-5)
    assert result["B"] == pytest.approx(0.649123, abs=1e-5)


def test_hub_ranks_highest() -> None:
    leaves = [f"leaf{i}" for i in range(6)]
    g = build_graph(["hub", *leaves], [(leaf, "hub") for leaf in leaves])

    ranked = rank(g).ranked()

    assert ranked[0][0] == "hub"
    # Leaves tie; graph order breaks the tie.
    assert [node_id for node_id, _ in ranked[1:]] == leaves


def test_parallel_edges_add_weight() -> None:
    g = build_graph(["A", "B", "C"], [("A", "B"), ("A", "B"), ("A", "C")])

    result = rank(g)

    assert result["B"] > result["C"]
    assert sum(result.scores.values()) == pytest.approx(1.0, abs=1e-6)


def test_self_loop_feeds_its_own_node() -> None:
    with_loop = rank(build_graph(["A", "B"], [("A", "A"), ("A", "B")]))
    without_loop = rank(build_graph(["A", "B"], [("A", "B")]))

    assert with_loop["A"] > without_loop["A"]
    assert sum(with_loop.scores.values()) == pytest.approx(1.0, abs=1e-6)


def test_repeated_runs_are_identical(fixture_data_path: Path) -> None:
    g = load_graph(fixture_data_path, id_field="ID")

    assert rank(g).scores == rank(g).scores


def test_empty_graph_yields_empty_result() -> None:
    result = rank(build_graph([], []))

    assert len(result) == 0
    assert result.converged
    assert result.diagnostics == ()


def test_iteration_cap_reports_non_convergence() -> None:
    g = build_graph(["A", "B"], [("A", "B")])

    result = rank(g, max_iterations=1)

    assert not result.converged
    assert result.iterations == 1
    assert sum(result.scores.values()) == pytest.approx(1.0, abs=1e-9)
    (warning,) = result.diagnostics
    assert isinstance(warning, NonConvergenceWarning)
    assert warning.component == "rank"
    assert warning.iterations == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"damping_factor": 0.0},
        {"damping_factor": 1.0},
        {"tolerance": 0.0},
        {"max_iterations": 0},
    ],
)
def test_invalid_parameters_raise(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        rank(build_graph(["A"], []), **kwargs)


def test_to_dict_stringifies_ids(cycle_graph: Graph) -> None:
    d = rank(cycle_graph).to_dict()

    assert set(d["scores"]) == {"A", "B", "C"}
    assert d["converged"] is True


def test_to_dict_refuses_colliding_string_ids() -> None:
    result = rank(build_graph([1, "1"], []))

    assert len(result) == 2
    with pytest.raises(ValueError, match="collide"):
        result.to_dict()
