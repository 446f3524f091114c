from __future__ import annotations

import math
from typing import Any, Callable, Dict, Hashable, List, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd
from scipy import stats

from .context import draw_indices
from .errors import EmptyInput, InvalidArgument, LengthMismatch, ZeroExpectedFrequency

T = TypeVar("T")


def _numeric(data: Sequence[float], name: str = "data") -> np.ndarray:
    if len(data) == 0:
        raise EmptyInput(f"{name} must be non-empty")
    return np.asarray(data, dtype=float)


def _paired(x: Sequence[float], y: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    if len(x) != len(y):
        raise LengthMismatch(f"sequences differ in length: {len(x)} != {len(y)}")
    if len(x) == 0:
        raise LengthMismatch("sequences must be non-empty")
    return np.asarray(x, dtype=float), np.asarray(y, dtype=float)


def _freeze(value: Any) -> Hashable:
    """Hashable stand-in for an outcome: lists and tuples become tuples, dicts and
    sets frozensets, anything else unhashable its repr."""
    try:
        hash(value)
        return value
    except TypeError:
        pass
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, dict):
        return frozenset((_freeze(k), _freeze(v)) for k, v in value.items())
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(v) for v in value)
    return repr(value)


def _tally(samples: Sequence[Any]) -> List[List[Any]]:
    """[value, count] entries in order of first appearance.

    Values are bucketed by `_freeze` and compared by equality inside a bucket,
    so `[1, 2]` and `(1, 2)` stay distinct.
    """
    entries: List[List[Any]] = []
    buckets: Dict[Hashable, List[List[Any]]] = {}
    for v in samples:
        bucket = buckets.setdefault(_freeze(v), [])
        for entry in bucket:
            if entry[0] is v or entry[0] == v:
                entry[1] += 1
                break
        else:
            entry = [v, 1]
            bucket.append(entry)
            entries.append(entry)
    return entries


def mean(data: Sequence[float]) -> float:
    return float(np.mean(_numeric(data)))


def median(data: Sequence[float]) -> float:
    return float(np.median(_numeric(data)))


def variance(data: Sequence[float]) -> float:
    """Population variance (divides by n)."""
    return float(np.var(_numeric(data)))


def stddev(data: Sequence[float]) -> float:
    return math.sqrt(variance(data))


def mode(data: Sequence[Any]) -> List[Any]:
    """All values with the maximal count, in order of first appearance."""
    if len(data) == 0:
        raise EmptyInput("data must be non-empty")
    entries = _tally(data)
    top = max(c for _, c in entries)
    return [v for v, c in entries if c == top]


def percentile(data: Sequence[float], p: float) -> Any:
    """Nearest-rank percentile: the element of rank ceil(p * n) in ascending order."""
    if len(data) == 0:
        raise EmptyInput("data must be non-empty")
    p = float(p)
    if not (0.0 <= p <= 1.0):
        raise InvalidArgument(f"p must be in [0, 1], got {p}")
    ordered = sorted(data)
    n = len(ordered)
    # 0.7 * 10 is 7.000000000000001 in binary floating point
    rank = math.ceil(round(p * n, 9))
    rank = min(max(rank, 1), n)
    return ordered[rank - 1]


def frequency_table(samples: Sequence[Any]) -> Dict[Hashable, int]:
    """Count per distinct value. Unhashable outcomes are keyed by their frozen
    form, so a list `[1, 2]` is counted under `(1, 2)`."""
    table: Dict[Hashable, int] = {}
    for v, c in _tally(samples):
        key = _freeze(v)
        table[key] = table.get(key, 0) + c
    return table


def frequency_frame(samples: Sequence[Any]) -> pd.DataFrame:
    """Frequency table as a DataFrame with `value`, `count` and `proportion` columns."""
    if len(samples) == 0:
        raise EmptyInput("samples must be non-empty")
    table = frequency_table(samples)
    n = float(len(samples))
    return pd.DataFrame(
        {
            "value": list(table.keys()),
            "count": list(table.values()),
            "proportion": [c / n for c in table.values()],
        }
    )


def entropy(samples: Sequence[Any]) -> float:
    """Shannon entropy in bits of the empirical distribution of `samples`."""
    if len(samples) == 0:
        raise EmptyInput("samples must be non-empty")
    counts = np.asarray([c for _, c in _tally(samples)], dtype=float)
    p = counts / counts.sum()
    h = -float(np.sum(p * np.log2(p)))
    return h if h > 0.0 else 0.0


def covariance(x: Sequence[float], y: Sequence[float]) -> float:
    """Population covariance."""
    xa, ya = _paired(x, y)
    return float(np.mean((xa - xa.mean()) * (ya - ya.mean())))


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient."""
    xa, ya = _paired(x, y)
    dx = xa - xa.mean()
    dy = ya - ya.mean()
    denom = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denom == 0.0:
        raise InvalidArgument("correlation is undefined for a constant sequence")
    return float(np.sum(dx * dy) / denom)


def chi_square_test(observed: Sequence[float], expected: Sequence[float]) -> float:
    """Pearson statistic sum((O - E)^2 / E)."""
    o, e = _paired(observed, expected)
    if np.any(e == 0.0):
        raise ZeroExpectedFrequency("expected frequencies must be non-zero")
    return float(np.sum((o - e) ** 2 / e))


def chi_square_pvalue(observed: Sequence[float], expected: Sequence[float]) -> float:
    """Upper-tail p-value of `chi_square_test` with k - 1 degrees of freedom."""
    statistic = chi_square_test(observed, expected)
    dof = len(observed) - 1
    if dof < 1:
        raise InvalidArgument("chi-square p-value needs at least two categories")
    return float(stats.chi2.sf(statistic, dof))


def moving_average(data: Sequence[float], window: int) -> List[float]:
    arr = _numeric(data)
    if isinstance(window, bool) or int(window) != window or not (1 <= window <= len(arr)):
        raise InvalidArgument(f"window must be an integer in [1, {len(arr)}], got {window!r}")
    w = int(window)
    rolled = pd.Series(arr).rolling(w).mean().iloc[w - 1:]
    return [float(v) for v in rolled.to_numpy()]


def bootstrap(data: Sequence[T], n_samples: int, statistic: Callable[[List[T]], Any]) -> List[Any]:
    """`statistic` over `n_samples` resamples of `data` drawn with replacement.

    Each resample costs len(data) ambient draws.
    """
    if len(data) == 0:
        raise EmptyInput("data must be non-empty")
    if isinstance(n_samples, bool) or int(n_samples) != n_samples or n_samples < 0:
        raise InvalidArgument(f"n_samples must be a non-negative integer, got {n_samples!r}")
    items = list(data)
    n = len(items)
    results: List[Any] = []
    for _ in range(int(n_samples)):
        resample = [items[i] for i in draw_indices(n, n)]
        results.append(statistic(resample))
    return results


def bootstrap_ci(
    data: Sequence[float],
    n_samples: int,
    statistic: Callable[[List[float]], float] = mean,
    *,
    level: float = 0.95,
) -> Tuple[float, float]:
    """Percentile bootstrap confidence interval."""
    if not (0.0 < level < 1.0):
        raise InvalidArgument("level must be in (0, 1)")
    if n_samples < 1:
        raise InvalidArgument("n_samples must be positive")
    values = np.asarray(bootstrap(data, n_samples, statistic), dtype=float)
    alpha = (1.0 - level) / 2.0
    return float(np.quantile(values, alpha)), float(np.quantile(values, 1.0 - alpha))


def summarize(data: Sequence[float]) -> Dict[str, float]:
    arr = _numeric(data)
    return {
        "n": float(arr.size),
        "mean": float(np.mean(arr)),
        "median": float(np.median(arr)),
        "std": float(np.std(arr)),
        "min": float(np.min(arr)),
        "max": float(np.max(arr)),
        "p05": float(np.percentile(arr, 5)),
        "p95": float(np.percentile(arr, 95)),
    }
