import pytest

from betlang.composition import (
    bet_chain,
    bet_compose,
    bet_filter,
    bet_map,
    bet_mixture,
    bet_parallel,
    bet_repeat,
    bet_until,
    estimate_probability,
    expected_value,
    sample_n,
)
from betlang.context import seeded, with_seed
from betlang.errors import InvalidArgument
from betlang.selection import bet, make_generator


def test_chain_zero_steps_returns_init_without_calling_f():
    calls = []
    init = {"state": 1}
    assert bet_chain(0, lambda x: calls.append(x) or x, init) is init
    assert calls == []


def test_chain_applies_f_n_times():
    assert bet_chain(10, lambda x: x + 1, 0) == 10
    assert bet_chain(3, lambda s: s + "!", "go") == "go!!!"


def test_chain_with_random_step_is_reproducible():
    def step(x):
        return x + bet(-1, 0, 1)

    assert with_seed(4, lambda: bet_chain(50, step, 0)) == with_seed(4, lambda: bet_chain(50, step, 0))


def test_repeat_and_sample_n_agree():
    coin = make_generator("h", "t", "e")
    a = with_seed(12, lambda: bet_repeat(30, coin))
    b = with_seed(12, lambda: sample_n(coin, 30))
    assert len(a) == 30
    assert a == b
    assert bet_repeat(0, coin) == []


def test_negative_counts_are_rejected():
    with pytest.raises(InvalidArgument):
        bet_repeat(-1, lambda: 0)
    with pytest.raises(InvalidArgument):
        bet_chain(-2, lambda x: x, 0)
    with pytest.raises(ValueError):
        bet_parallel(-1, 1, 2, 3)


def test_parallel_matches_sequential_bets():
    got = with_seed(31, lambda: bet_parallel(25, "a", "b", "c"))
    expected = with_seed(31, lambda: [bet("a", "b", "c") for _ in range(25)])
    assert got == expected


def test_compose_draws_once_per_call():
    composed = bet_compose(lambda x: x + 1, lambda x: x * 10, lambda x: -x)
    got = with_seed(6, lambda: [composed(3) for _ in range(40)])
    expected = with_seed(6, lambda: [bet(4, 30, -3) for _ in range(40)])
    assert got == expected
    assert set(got) == {4, 30, -3}


def test_map_preserves_length_and_transforms_some_elements():
    xs = list(range(200))
    with seeded(8):
        out = bet_map(lambda x: x + 1000, xs)
    assert len(out) == len(xs)
    for x, y in zip(xs, out):
        assert y in (x, x + 1000)
    changed = sum(1 for x, y in zip(xs, out) if y != x)
    assert 90 < changed < 180


def test_map_only_calls_f_on_transformed_elements():
    calls = []

    def f(x):
        calls.append(x)
        return -x

    with seeded(2):
        out = bet_map(f, list(range(1, 51)))
    assert sorted(calls) == sorted(-y for y in out if y < 0)


def test_filter_is_ordered_subsequence_satisfying_pred():
    xs = list(range(100))
    with seeded(13):
        out = bet_filter(lambda x: x % 2 == 0, xs)
    assert out == sorted(out)
    assert all(x % 2 == 0 for x in out)
    assert set(out) <= set(xs)
    assert 15 < len(out) < 50


def test_filter_with_false_predicate_is_empty():
    with seeded(13):
        assert bet_filter(lambda x: False, [1, 2, 3]) == []


def test_filter_draw_count_does_not_depend_on_predicate():
    def after(pred):
        with seeded(3):
            bet_filter(pred, list(range(10)))
            return [bet(1, 2, 3) for _ in range(10)]

    assert after(lambda x: True) == after(lambda x: False)


def test_until_returns_first_satisfying_value():
    with seeded(21):
        got = bet_until(lambda v: v == "c", make_generator("a", "b", "c"))
    assert got == "c"


def test_until_reports_exhausted_tries():
    calls = []
    with pytest.raises(InvalidArgument):
        bet_until(lambda v: False, lambda: calls.append(1) or 0, max_tries=5)
    assert len(calls) == 5


def test_mixture_respects_weights():
    with seeded(5):
        draws = [bet_mixture(lambda: "a", 1.0, lambda: "b", 0.0) for _ in range(50)]
    assert draws == ["a"] * 50
    with seeded(5):
        draws = [bet_mixture(lambda: "a", 1.0, lambda: "b", 3.0) for _ in range(2000)]
    share = draws.count("b") / len(draws)
    assert 0.70 < share < 0.80


def test_mixture_rejects_bad_weights():
    with pytest.raises(InvalidArgument):
        bet_mixture(lambda: 0, 0.0, lambda: 1, 0.0)
    with pytest.raises(InvalidArgument):
        bet_mixture(lambda: 0, -1.0, lambda: 1, 2.0)


def test_estimate_probability_of_one_outcome():
    coin = make_generator("A", "B", "C")
    with seeded(42):
        p = estimate_probability(lambda v: v == "A", coin, 3000)
    assert abs(p - 1.0 / 3.0) < 0.05


def test_expected_value_of_ternary_outcome():
    with seeded(42):
        ev = expected_value(make_generator(0.0, 1.0, 2.0), 3000)
    assert abs(ev - 1.0) < 0.1


def test_zero_trials_are_rejected():
    with pytest.raises(InvalidArgument):
        estimate_probability(lambda v: True, lambda: 1, 0)
    with pytest.raises(InvalidArgument):
        expected_value(lambda: 1.0, 0)
