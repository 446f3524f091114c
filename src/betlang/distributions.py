"""Parametric samplers over the ambient random context.

Every scalar sampler consumes exactly one ambient draw: an open-interval
uniform `u` in (0, 1) is pushed through the inverse CDF of the target
distribution. Given a seed, outputs are therefore bit-identical across runs
and the draw count of a program is the number of samples it takes.
"""

from __future__ import annotations

import math
from typing import List, Sequence, TypeVar

import numpy as np
from scipy import stats

from .context import draw_index, draw_open_unit
from .errors import EmptyInput, InvalidArgument
from .selection import bet

T = TypeVar("T")


def _real(value: float, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise InvalidArgument(f"{name} must be a real number, got {value!r}")
    return float(value)


def _positive(value: float, name: str) -> float:
    v = _real(value, name)
    if not math.isfinite(v) or v <= 0.0:
        raise InvalidArgument(f"{name} must be positive, got {value}")
    return v


def _probability(p: float) -> float:
    v = _real(p, "p")
    if not (0.0 <= v <= 1.0):
        raise InvalidArgument(f"p must be in [0, 1], got {p}")
    return v


def _count(n: int, name: str) -> int:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 0:
        raise InvalidArgument(f"{name} must be a non-negative integer, got {n!r}")
    return int(n)


def uniform(low: float, high: float) -> float:
    if not float(low) < float(high):
        raise InvalidArgument("uniform requires low < high")
    u = draw_open_unit()
    return float(low) + u * (float(high) - float(low))


def uniform_int(low: int, high: int) -> int:
    """Uniform integer in [low, high] (both ends inclusive)."""
    if int(low) > int(high):
        raise InvalidArgument("uniform_int requires low <= high")
    span = int(high) - int(low) + 1
    u = draw_open_unit()
    return min(int(low) + int(u * span), int(high))


def bernoulli(p: float) -> bool:
    p = _probability(p)
    return draw_open_unit() < p


def normal(mu: float, sigma: float) -> float:
    sigma = _positive(sigma, "sigma")
    return float(stats.norm.ppf(draw_open_unit(), loc=float(mu), scale=sigma))


def log_normal(mu: float, sigma: float) -> float:
    """exp(N(mu, sigma)); mu and sigma describe the underlying normal."""
    return math.exp(normal(mu, sigma))


def binomial(n: int, p: float) -> int:
    n = _count(n, "n")
    p = _probability(p)
    u = draw_open_unit()
    if n == 0 or p == 0.0:
        return 0
    if p == 1.0:
        return n
    return int(stats.binom.ppf(u, n, p))


def poisson(lam: float) -> int:
    lam = _positive(lam, "lambda")
    return int(stats.poisson.ppf(draw_open_unit(), lam))


def exponential(lam: float) -> float:
    lam = _positive(lam, "lambda")
    return -math.log(draw_open_unit()) / lam


def gamma(shape: float, scale: float) -> float:
    shape = _positive(shape, "shape")
    scale = _positive(scale, "scale")
    return float(stats.gamma.ppf(draw_open_unit(), shape, scale=scale))


def beta(alpha: float, beta_param: float) -> float:
    alpha = _positive(alpha, "alpha")
    beta_param = _positive(beta_param, "beta")
    return float(stats.beta.ppf(draw_open_unit(), alpha, beta_param))


def chi_squared(df: float) -> float:
    df = _positive(df, "df")
    return float(stats.chi2.ppf(draw_open_unit(), df))


def student_t(df: float) -> float:
    df = _positive(df, "df")
    return float(stats.t.ppf(draw_open_unit(), df))


def cauchy(location: float, scale: float) -> float:
    scale = _positive(scale, "scale")
    return float(stats.cauchy.ppf(draw_open_unit(), loc=float(location), scale=scale))


def weibull(scale: float, shape: float) -> float:
    """CDF 1 - exp(-(x / scale) ** shape), x >= 0."""
    scale = _positive(scale, "scale")
    shape = _positive(shape, "shape")
    return float(stats.weibull_min.ppf(draw_open_unit(), shape, scale=scale))


def pareto(scale: float, shape: float) -> float:
    """Pareto type I with support x >= scale."""
    scale = _positive(scale, "scale")
    shape = _positive(shape, "shape")
    return float(stats.pareto.ppf(draw_open_unit(), shape, scale=scale))


def triangular(low: float, high: float, mode: float) -> float:
    lo = _real(low, "low")
    hi = _real(high, "high")
    m = _real(mode, "mode")
    if not (lo < hi and lo <= m <= hi):
        raise InvalidArgument("triangular requires low < high and low <= mode <= high")
    return float(stats.triang.ppf(draw_open_unit(), (m - lo) / (hi - lo), loc=lo, scale=hi - lo))


def random_walk(steps: int, start: int = 0) -> List[int]:
    """Walk of length `steps + 1` whose increments are `bet(-1, 0, 1)`."""
    steps = _count(steps, "steps")
    path = [int(start)]
    for _ in range(steps):
        path.append(path[-1] + bet(-1, 0, 1))
    return path


def sample_with_replacement(xs: Sequence[T], n: int) -> List[T]:
    n = _count(n, "n")
    if n == 0:
        return []
    if len(xs) == 0:
        raise EmptyInput("cannot sample from an empty sequence")
    return [xs[draw_index(len(xs))] for _ in range(n)]


def sample_without_replacement(xs: Sequence[T], n: int) -> List[T]:
    """Up to `n` distinct positions of `xs`, in draw order."""
    n = _count(n, "n")
    available = list(xs)
    out: List[T] = []
    for _ in range(min(n, len(available))):
        out.append(available.pop(draw_index(len(available))))
    return out


def shuffle(xs: Sequence[T]) -> List[T]:
    return sample_without_replacement(xs, len(xs))
