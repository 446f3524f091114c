import pytest

from betlang.conformance import weather_chain
from betlang.context import seeded, with_seed
from betlang.errors import InvalidArgument, InvalidMarkovChain
from betlang.markov import (
    make_markov_chain,
    markov_simulate,
    state_frequencies,
    stationary_distribution,
    transition_matrix,
)


def _coin_chain(order):
    row = [(s, 0.5) for s in order]
    return make_markov_chain(["H", "T"], {"H": row, "T": row}, "H")


def test_trajectory_shape_and_membership():
    chain = weather_chain()
    with seeded(42):
        traj = markov_simulate(chain, 500)
    assert len(traj) == 501
    assert traj[0] == "sunny"
    assert set(traj) <= set(chain.states)
    assert markov_simulate(chain, 0) == ["sunny"]


def test_simulation_is_reproducible():
    chain = weather_chain()
    assert with_seed(3, lambda: markov_simulate(chain, 100)) == with_seed(3, lambda: markov_simulate(chain, 100))


def test_row_order_controls_bucketing():
    a = with_seed(11, lambda: markov_simulate(_coin_chain(["H", "T"]), 60))
    b = with_seed(11, lambda: markov_simulate(_coin_chain(["T", "H"]), 60))
    flip = {"H": "T", "T": "H"}
    assert a[1:] == [flip[s] for s in b[1:]]


def test_absorbing_state_is_never_left():
    chain = make_markov_chain(
        ["run", "stop"],
        {"run": [("run", 0.5), ("stop", 0.5)], "stop": [("stop", 1.0)]},
        "run",
    )
    with seeded(1):
        traj = markov_simulate(chain, 200)
    first = traj.index("stop")
    assert all(s == "stop" for s in traj[first:])


def test_long_run_frequencies_track_stationary_distribution():
    chain = weather_chain()
    with seeded(42):
        freqs = state_frequencies(markov_simulate(chain, 20000))
    pi = stationary_distribution(chain)
    assert abs(sum(pi.values()) - 1.0) < 1e-9
    for s in chain.states:
        assert abs(freqs[s] - pi[s]) < 0.03


def test_transition_matrix_is_row_stochastic():
    m = transition_matrix(weather_chain())
    assert list(m.index) == ["sunny", "cloudy", "rainy"]
    assert list(m.columns) == ["sunny", "cloudy", "rainy"]
    assert m.loc["sunny", "rainy"] == pytest.approx(0.1)
    assert m.sum(axis=1).tolist() == pytest.approx([1.0, 1.0, 1.0])


@pytest.mark.parametrize(
    "states, table, initial",
    [
        ([], {}, "a"),
        (["a", "a"], {"a": [("a", 1.0)]}, "a"),
        (["a"], {"a": [("a", 1.0)]}, "b"),
        (["a"], {"a": [("b", 1.0)]}, "a"),
        (["a", "b"], {"a": [("a", 1.0)]}, "a"),
        (["a"], {"a": [("a", 1.0)], "z": [("a", 1.0)]}, "a"),
        (["a", "b"], {"a": [("a", 0.6), ("b", 0.6)], "b": [("b", 1.0)]}, "a"),
        (["a", "b"], {"a": [("a", 1.5), ("b", -0.5)], "b": [("b", 1.0)]}, "a"),
    ],
)
def test_invalid_chains_are_rejected(states, table, initial):
    with pytest.raises(InvalidMarkovChain):
        make_markov_chain(states, table, initial)


def test_row_sum_tolerance():
    third = 1.0 / 3.0
    chain = make_markov_chain(["x"], {"x": [("x", third), ("x", third), ("x", third)]}, "x")
    assert with_seed(0, lambda: markov_simulate(chain, 5)) == ["x"] * 6


def test_negative_steps_are_rejected():
    with pytest.raises(InvalidArgument):
        markov_simulate(weather_chain(), -1)


def test_unknown_state_lookup():
    with pytest.raises(KeyError):
        weather_chain().next_states("foggy")


def test_chain_transitions_are_read_only():
    chain = weather_chain()
    with pytest.raises(TypeError):
        chain.transitions["sunny"] = (("rainy", 1.0),)
    assert chain.next_states("sunny")[0] == ("sunny", 0.7)
