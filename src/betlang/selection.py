from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Sequence, Tuple, TypeVar

from .context import draw_index, draw_unit
from .errors import InvalidArgument, ZeroWeightSum

T = TypeVar("T")


class Ternary(Enum):
    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"


def _check_weights(weights: Sequence[float]) -> float:
    total = 0.0
    for w in weights:
        w = float(w)
        if not math.isfinite(w) or w < 0.0:
            raise InvalidArgument(f"weights must be finite and non-negative, got {w}")
        total += w
    if total <= 0.0:
        raise ZeroWeightSum("sum of weights must be positive")
    return total


def _bucket(values: Sequence[T], weights: Sequence[float]) -> T:
    """One draw in [0, total), then the first cumulative bucket that contains it."""
    total = _check_weights(weights)
    r = draw_unit() * total
    cum = 0.0
    last = 0
    for i, w in enumerate(weights):
        w = float(w)
        if w <= 0.0:
            continue
        cum += w
        last = i
        if r < cum:
            return values[i]
    # r landed on the rounding edge of the final bucket
    return values[last]


def bet(a: T, b: T, c: T) -> T:
    """Uniform ternary choice, one draw from the ambient generator."""
    return (a, b, c)[draw_index(3)]


def bet_weighted(first: Tuple[T, float], second: Tuple[T, float], third: Tuple[T, float]) -> T:
    """Weighted ternary choice: P(v_i) = w_i / sum(w)."""
    pairs = (first, second, third)
    return _bucket([v for v, _ in pairs], [w for _, w in pairs])


def bet_categorical(choices: Sequence[Tuple[T, float]]) -> T:
    """N-way weighted choice with the same bucketing as `bet_weighted`."""
    if not choices:
        raise InvalidArgument("categorical selection requires at least one choice")
    return _bucket([v for v, _ in choices], [w for _, w in choices])


def bet_conditional(pred: bool, a: T, b: T, c: T) -> T:
    """`a` without drawing when `pred` holds, otherwise `bet(b, c, a)`."""
    if pred:
        return a
    return bet(b, c, a)


def bet_lazy(thunk_a: Callable[[], T], thunk_b: Callable[[], T], thunk_c: Callable[[], T]) -> T:
    """Select one of three thunks and invoke only that one."""
    return (thunk_a, thunk_b, thunk_c)[draw_index(3)]()


def bet_ternary() -> Ternary:
    return bet(Ternary.TRUE, Ternary.FALSE, Ternary.UNKNOWN)


def make_generator(a: T, b: T, c: T) -> Callable[[], T]:
    """Reusable selector over fixed outcomes.

    The draw happens at call time, so the selector follows whatever seeded
    scope is ambient when it is invoked.
    """

    def generate() -> T:
        return bet(a, b, c)

    return generate
