from __future__ import annotations

from typing import Callable, List, Optional, Sequence, TypeVar

import numpy as np

from .context import draw_unit
from .errors import InvalidArgument
from .selection import bet, bet_lazy

T = TypeVar("T")
U = TypeVar("U")


def _require_count(n: int, name: str = "n") -> int:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 0:
        raise InvalidArgument(f"{name} must be a non-negative integer, got {n!r}")
    return int(n)


def bet_chain(n: int, f: Callable[[T], T], init: T) -> T:
    """Apply `f` exactly `n` times starting from `init`.

    The chaining itself never draws; any randomness comes from `f`.
    """
    x = init
    for _ in range(_require_count(n)):
        x = f(x)
    return x


def bet_repeat(n: int, thunk: Callable[[], T]) -> List[T]:
    return [thunk() for _ in range(_require_count(n))]


def sample_n(thunk: Callable[[], T], n: int) -> List[T]:
    return bet_repeat(n, thunk)


def bet_compose(f: Callable[[T], U], g: Callable[[T], U], h: Callable[[T], U]) -> Callable[[T], U]:
    """Return `x -> bet(f(x), g(x), h(x))`, one fresh draw per call."""

    def composed(x: T) -> U:
        return bet(f(x), g(x), h(x))

    return composed


def _maybe_apply(f: Callable[[T], T], x: T) -> T:
    return bet_lazy(lambda: f(x), lambda: x, lambda: f(x))


def bet_map(f: Callable[[T], T], xs: Sequence[T]) -> List[T]:
    """Map `f` stochastically: each element is transformed with probability 2/3
    and kept unchanged otherwise. One draw per element, `f` is only called on
    elements chosen for transformation."""
    return [_maybe_apply(f, x) for x in xs]


def bet_filter(pred: Callable[[T], bool], xs: Sequence[T]) -> List[T]:
    """Stochastic filter. Every element costs one draw; an element survives when
    the draw keeps it (probability 2/3) and it satisfies `pred`. The result is
    always an order-preserving subsequence of `xs`."""
    out: List[T] = []
    for x in xs:
        keep = bet(True, True, False)
        if keep and pred(x):
            out.append(x)
    return out


def bet_until(pred: Callable[[T], bool], thunk: Callable[[], T], max_tries: Optional[int] = None) -> T:
    """Invoke `thunk` until `pred` holds on its result.

    Without `max_tries` this never returns if `pred` cannot be satisfied under
    the thunk's distribution.
    """
    if max_tries is not None:
        _require_count(max_tries, "max_tries")
    tries = 0
    while True:
        if max_tries is not None and tries >= max_tries:
            raise InvalidArgument(f"predicate not satisfied after {max_tries} tries")
        result = thunk()
        tries += 1
        if pred(result):
            return result


def bet_parallel(n: int, a: T, b: T, c: T) -> List[T]:
    """`n` independent `bet(a, b, c)` draws, consumed in index order."""
    return [bet(a, b, c) for _ in range(_require_count(n))]


def bet_mixture(thunk_a: Callable[[], T], weight_a: float, thunk_b: Callable[[], T], weight_b: float) -> T:
    """Two-way weighted mixture; one draw picks the component, which is then sampled."""
    wa = float(weight_a)
    wb = float(weight_b)
    if wa < 0.0 or wb < 0.0 or not np.isfinite(wa + wb) or wa + wb <= 0.0:
        raise InvalidArgument("mixture weights must be non-negative with a positive sum")
    if draw_unit() < wa / (wa + wb):
        return thunk_a()
    return thunk_b()


def estimate_probability(pred: Callable[[T], bool], thunk: Callable[[], T], trials: int) -> float:
    """Monte Carlo estimate of P(pred(thunk()))."""
    n = _require_count(trials, "trials")
    if n == 0:
        raise InvalidArgument("trials must be positive")
    hits = sum(1 for _ in range(n) if pred(thunk()))
    return hits / n


def expected_value(thunk: Callable[[], float], trials: int) -> float:
    n = _require_count(trials, "trials")
    if n == 0:
        raise InvalidArgument("trials must be positive")
    return float(np.mean([float(thunk()) for _ in range(n)]))
