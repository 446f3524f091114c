import asyncio
import threading

import numpy as np
import pytest

from betlang.context import current, depth, seeded, spawn_seeds, with_seed
from betlang.errors import InvalidSeed
from betlang.selection import bet


def _draws(n: int = 20):
    return [bet(1, 2, 3) for _ in range(n)]


def test_with_seed_is_reproducible():
    assert with_seed(7, _draws) == with_seed(7, _draws)


def test_nested_seeds_reproduce_identical_pairs():
    def program():
        return with_seed(100, lambda: [with_seed(200, lambda: bet(1, 2, 3)), bet(10, 20, 30)])

    first = program()
    second = program()
    assert first == second
    assert first[0] in {1, 2, 3}
    assert first[1] in {10, 20, 30}


def test_inner_scope_ignores_preceding_draws():
    def after(k: int):
        with seeded(5):
            _draws(k)
            return with_seed(99, _draws)

    assert after(0) == after(3) == after(50)


def test_nested_scope_leaves_parent_stream_untouched():
    with seeded(11):
        head = _draws(5)
        with_seed(12, lambda: _draws(100))
        tail = _draws(5)
    assert head + tail == with_seed(11, lambda: _draws(10))


def test_scope_is_popped_on_exception():
    before = depth()
    with pytest.raises(RuntimeError):
        with seeded(3):
            assert depth() == before + 1
            raise RuntimeError("boom")
    assert depth() == before


def test_with_seed_returns_body_result():
    assert with_seed(1, lambda: "done") == "done"


@pytest.mark.parametrize("seed", [1.5, "42", None, True, -1])
def test_invalid_seeds_are_rejected(seed):
    with pytest.raises(InvalidSeed):
        with_seed(seed, _draws)


def test_invalid_seed_is_a_type_error():
    with pytest.raises(TypeError):
        with_seed(2.0, _draws)


def test_numpy_integer_seed_is_accepted():
    assert with_seed(np.int64(8), _draws) == with_seed(8, _draws)


def test_unseeded_context_is_lazily_created_and_stable():
    rng = current()
    assert isinstance(rng, np.random.Generator)
    assert current() is rng
    with seeded(4) as inner:
        assert current() is inner
    assert current() is rng


def test_threads_own_independent_stacks():
    seen = {}

    def worker():
        seen["depth"] = depth()
        seen["draws"] = with_seed(21, _draws)

    with seeded(1):
        t = threading.Thread(target=worker)
        t.start()
        t.join()
        outer_depth = depth()

    assert seen["depth"] == 0
    assert outer_depth >= 1
    assert seen["draws"] == with_seed(21, _draws)


def test_spawn_seeds_are_reproducible_and_in_range():
    seeds = with_seed(42, lambda: spawn_seeds(10))
    assert len(seeds) == 10
    assert all(1 <= s < 2**31 - 1 for s in seeds)
    assert seeds == with_seed(42, lambda: spawn_seeds(10))


def test_async_tasks_own_independent_stacks():
    seen = {}

    async def task(name, seed):
        with seeded(seed) as rng:
            await asyncio.sleep(0)
            seen[name] = current() is rng
            first = _draws(5)
            await asyncio.sleep(0)
            return first + _draws(5)

    async def main():
        return await asyncio.gather(task("t1", 5), task("t2", 6))

    d1, d2 = asyncio.run(main())
    assert seen == {"t1": True, "t2": True}
    assert d1 == with_seed(5, lambda: _draws(10))
    assert d2 == with_seed(6, lambda: _draws(10))
    assert depth() == 0
