"""Seeded conformance suite.

Each check runs in its own scope seeded with the run seed, so results depend
only on the RuntimeSpec and two runs with the same spec report identical
checks. Two implementations agreeing on these checks for identical seeds are
considered interoperable.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import numpy as np

from .composition import bet_chain, bet_parallel, estimate_probability
from .config import RuntimeSpec
from .context import seeded, with_seed
from .distributions import normal, random_walk
from .errors import BetlangError
from .logger import RunLogger
from .markov import make_markov_chain, markov_simulate
from .selection import bet, bet_conditional, bet_lazy, bet_weighted, make_generator
from .statistics import (
    bootstrap,
    bootstrap_ci,
    chi_square_pvalue,
    entropy,
    frequency_table,
    mean,
    mode,
    percentile,
)

SUITE_VERSION = "0.3.0"


@dataclass(frozen=True)
class CheckResult:
    passed: bool
    details: Dict[str, Any]


@dataclass(frozen=True)
class ConformanceReport:
    version: str
    created_utc: str
    seed: int
    spec: Dict[str, Any]
    checks: Dict[str, Dict[str, Any]]
    summary: Dict[str, Any]


def _str_keys(d: Mapping[Any, Any]) -> Dict[str, Any]:
    return {str(k): v for k, v in d.items()}


def check_bet_identity(spec: RuntimeSpec) -> CheckResult:
    values: List[Any] = [0, "A", 2.5, (1, 2), [1, 2, 3], {"k": [1]}]
    failures = [repr(v) for v in values if bet(v, v, v) != v]
    # structurally equal but distinct objects
    structural = bet([1, 2], [1, 2], [1, 2]) == [1, 2]
    return CheckResult(passed=not failures and structural, details={"failures": failures, "structural": structural})


def check_conditional(spec: RuntimeSpec) -> CheckResult:
    with seeded(spec.seed):
        taken = [bet_conditional(True, "a", "b", "c") for _ in range(50)]
        after = [bet(1, 2, 3) for _ in range(10)]
    with seeded(spec.seed):
        reference = [bet(1, 2, 3) for _ in range(10)]
    with seeded(spec.seed):
        false_branch = {bet_conditional(False, "a", "b", "c") for _ in range(200)}
    deterministic = all(t == "a" for t in taken)
    no_draw = after == reference
    return CheckResult(
        passed=deterministic and no_draw and false_branch == {"a", "b", "c"},
        details={"deterministic": deterministic, "consumed_no_draw": no_draw, "false_branch": sorted(false_branch)},
    )


def _nested_program() -> List[int]:
    return with_seed(100, lambda: [with_seed(200, lambda: bet(1, 2, 3)), bet(10, 20, 30)])


def check_seed_determinism(spec: RuntimeSpec) -> CheckResult:
    first = _nested_program()
    second = _nested_program()

    def after_draws(k: int) -> int:
        with seeded(spec.seed):
            for _ in range(k):
                bet(0, 1, 2)
            return with_seed(200, lambda: bet(1, 2, 3))

    inner = [after_draws(k) for k in (0, 1, 7, 31)]
    return CheckResult(
        passed=first == second and len(set(inner)) == 1,
        details={"first": first, "second": second, "inner_after_k_draws": inner},
    )


def check_parent_isolation(spec: RuntimeSpec) -> CheckResult:
    with seeded(spec.seed):
        before = bet_parallel(5, 1, 2, 3)
        with_seed(spec.seed + 1, lambda: bet_parallel(97, 1, 2, 3))
        after = bet_parallel(5, 1, 2, 3)
    with seeded(spec.seed):
        reference = bet_parallel(10, 1, 2, 3)
    return CheckResult(passed=before + after == reference, details={"observed": before + after, "reference": reference})


def check_lazy_single_invocation(spec: RuntimeSpec) -> CheckResult:
    counters = [0, 0, 0]

    def branch(i: int) -> Callable[[], int]:
        def run() -> int:
            counters[i] += 1
            return i

        return run

    bad_calls = 0
    with seeded(spec.seed):
        for _ in range(300):
            before = list(counters)
            chosen = bet_lazy(branch(0), branch(1), branch(2))
            delta = [a - b for a, b in zip(counters, before)]
            if delta[chosen] != 1 or sum(delta) != 1:
                bad_calls += 1
    return CheckResult(passed=bad_calls == 0 and sum(counters) == 300, details={"counters": counters, "bad_calls": bad_calls})


def check_uniformity(spec: RuntimeSpec) -> CheckResult:
    n = spec.uniformity_draws
    with seeded(spec.seed):
        table = frequency_table(bet_parallel(n, "A", "B", "C"))
    expected = n / 3.0
    counts = [table.get(k, 0) for k in ("A", "B", "C")]
    within = all(abs(c - expected) <= spec.uniformity_tolerance for c in counts)
    pvalue = chi_square_pvalue(counts, [expected] * 3)
    return CheckResult(passed=within, details={"counts": _str_keys(table), "expected": expected, "chi2_pvalue": pvalue})


def check_weighted_ordering(spec: RuntimeSpec) -> CheckResult:
    n = spec.weighted_draws
    w_rare, w_uncommon, w_common = spec.weighted_weights
    with seeded(spec.seed):
        draws = [
            bet_weighted(("rare", w_rare), ("uncommon", w_uncommon), ("common", w_common))
            for _ in range(n)
        ]
    table = frequency_table(draws)
    rare, uncommon, common = (table.get(k, 0) for k in ("rare", "uncommon", "common"))
    expected_common = n * w_common / float(sum(spec.weighted_weights))
    ordered = rare < uncommon < common
    within = abs(common - expected_common) <= spec.weighted_tolerance
    return CheckResult(
        passed=ordered and within,
        details={"counts": _str_keys(table), "expected_common": expected_common, "ordered": ordered},
    )


def check_entropy_bounds(spec: RuntimeSpec) -> CheckResult:
    h_three = entropy(list("AAABBBCCC"))
    h_one = entropy(["X"] * 5)
    return CheckResult(passed=1.5 < h_three < 1.6 and h_one == 0.0, details={"three_way": h_three, "constant": h_one})


def check_order_statistics(spec: RuntimeSpec) -> CheckResult:
    data = list(range(1, 11))
    p50 = percentile(data, 0.5)
    p90 = percentile(data, 0.9)
    m = mode([1, 2, 2, 3, 3, 3, 4])
    return CheckResult(passed=p50 == 5 and p90 == 9 and m == [3], details={"p50": p50, "p90": p90, "mode": m})


def check_chain(spec: RuntimeSpec) -> CheckResult:
    sentinel = ("init", 1)
    zero = bet_chain(0, lambda x: ("changed", x), sentinel)
    counted = bet_chain(25, lambda x: x + 1, 0)
    return CheckResult(passed=zero == sentinel and counted == 25, details={"zero_steps": list(zero), "twenty_five": counted})


def check_bootstrap(spec: RuntimeSpec) -> CheckResult:
    with seeded(spec.seed):
        data = [normal(0.0, 1.0) for _ in range(50)]
        values = bootstrap(data, spec.bootstrap_samples, mean)
        lo, hi = bootstrap_ci(data, spec.bootstrap_samples, mean, level=spec.ci_level)
    return CheckResult(
        passed=len(values) == spec.bootstrap_samples and lo <= hi,
        details={"n_values": len(values), "ci": [lo, hi]},
    )


def check_random_walk(spec: RuntimeSpec) -> CheckResult:
    with seeded(spec.seed):
        walk = random_walk(spec.walk_steps)
    steps_ok = all(abs(b - a) <= 1 for a, b in zip(walk, walk[1:]))
    return CheckResult(
        passed=len(walk) == spec.walk_steps + 1 and walk[0] == 0 and steps_ok,
        details={"length": len(walk), "final": walk[-1], "min": min(walk), "max": max(walk)},
    )


def weather_chain():
    return make_markov_chain(
        ["sunny", "cloudy", "rainy"],
        {
            "sunny": [("sunny", 0.7), ("cloudy", 0.2), ("rainy", 0.1)],
            "cloudy": [("sunny", 0.3), ("cloudy", 0.4), ("rainy", 0.3)],
            "rainy": [("sunny", 0.2), ("cloudy", 0.3), ("rainy", 0.5)],
        },
        "sunny",
    )


def check_markov(spec: RuntimeSpec) -> CheckResult:
    chain = weather_chain()
    with seeded(spec.seed):
        traj = markov_simulate(chain, spec.markov_steps)
    members = all(s in chain.states for s in traj)
    return CheckResult(
        passed=len(traj) == spec.markov_steps + 1 and traj[0] == chain.initial and members,
        details={"length": len(traj), "visits": _str_keys(frequency_table(traj))},
    )


def _pipeline(spec: RuntimeSpec) -> Dict[str, Any]:
    def body() -> Dict[str, Any]:
        coin = make_generator("A", "B", "C")
        return {
            "bet": bet("x", "y", "z"),
            "weighted": bet_weighted(("lo", 1), ("mid", 2), ("hi", 3)),
            "parallel": bet_parallel(20, 0, 1, 2),
            "p_a": estimate_probability(lambda v: v == "A", coin, spec.probability_trials),
        }

    return with_seed(spec.seed, body)


def check_pipeline_reproducibility(spec: RuntimeSpec) -> CheckResult:
    first = _pipeline(spec)
    second = _pipeline(spec)
    return CheckResult(passed=first == second, details={"first": first})


CHECKS: Dict[str, Callable[[RuntimeSpec], CheckResult]] = {
    "bet_identity": check_bet_identity,
    "conditional": check_conditional,
    "seed_determinism": check_seed_determinism,
    "parent_isolation": check_parent_isolation,
    "lazy_single_invocation": check_lazy_single_invocation,
    "uniformity": check_uniformity,
    "weighted_ordering": check_weighted_ordering,
    "entropy_bounds": check_entropy_bounds,
    "order_statistics": check_order_statistics,
    "chain": check_chain,
    "bootstrap": check_bootstrap,
    "random_walk": check_random_walk,
    "markov": check_markov,
    "pipeline_reproducibility": check_pipeline_reproducibility,
}


def run_conformance(spec: Optional[RuntimeSpec] = None, *, logger: Optional[RunLogger] = None) -> ConformanceReport:
    spec = spec or RuntimeSpec()
    spec.validate()
    created = datetime.now(timezone.utc).isoformat()
    if logger is not None:
        logger.log("suite_start", {"version": SUITE_VERSION, "spec": spec.to_dict()})

    checks: Dict[str, Dict[str, Any]] = {}
    for name, fn in CHECKS.items():
        try:
            res = fn(spec)
            entry = {"passed": bool(res.passed), "details": res.details}
        except BetlangError as e:
            entry = {"passed": False, "details": {"error": f"{e.__class__.__name__}: {e}"}}
        checks[name] = entry
        if logger is not None:
            logger.log("check", {"name": name, "passed": entry["passed"]})

    n_passed = sum(1 for c in checks.values() if c["passed"])
    summary = {
        "n_checks": len(checks),
        "n_passed": n_passed,
        "failed": [k for k, c in checks.items() if not c["passed"]],
        "all_passed": n_passed == len(checks),
    }
    if logger is not None:
        logger.log("suite_end", summary)

    return ConformanceReport(
        version=SUITE_VERSION,
        created_utc=created,
        seed=spec.seed,
        spec=spec.to_dict(),
        checks=checks,
        summary=summary,
    )


def _json_default(obj: Any) -> Any:
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Object of type {obj.__class__.__name__} is not JSON serialisable")


def write_conformance_report(report: ConformanceReport, out_path: str | Path) -> None:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "version": report.version,
        "created_utc": report.created_utc,
        "seed": report.seed,
        "spec": report.spec,
        "checks": report.checks,
        "summary": report.summary,
    }
    out_path.write_text(
        json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False, default=_json_default),
        encoding="utf-8",
    )
