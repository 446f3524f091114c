from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict

import yaml


@dataclass(frozen=True)
class RuntimeSpec:
    """Declared parameters of a conformance run.

    Serialized next to every report so that a run can be replayed exactly.
    """

    seed: int = 42

    # Uniformity and weighted-ordering checks
    uniformity_draws: int = 3000
    uniformity_tolerance: int = 150
    weighted_draws: int = 1000
    weighted_weights: tuple[float, float, float] = (1.0, 3.0, 6.0)
    weighted_tolerance: int = 100

    # Resampling
    bootstrap_samples: int = 200
    ci_level: float = 0.95

    # Stochastic processes
    walk_steps: int = 100
    markov_steps: int = 500

    # Probability estimation
    probability_trials: int = 1000

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> None:
        if isinstance(self.seed, bool) or not isinstance(self.seed, int) or self.seed < 0:
            raise ValueError("seed must be a non-negative integer")
        if self.uniformity_draws <= 0 or self.weighted_draws <= 0:
            raise ValueError("draw counts must be positive")
        if self.uniformity_tolerance < 0 or self.weighted_tolerance < 0:
            raise ValueError("tolerances must be non-negative")
        if len(self.weighted_weights) != 3 or min(self.weighted_weights) < 0 or sum(self.weighted_weights) <= 0:
            raise ValueError("weighted_weights must be three non-negative weights with a positive sum")
        if self.bootstrap_samples <= 0:
            raise ValueError("bootstrap_samples must be positive")
        if not (0 < self.ci_level < 1):
            raise ValueError("ci_level must be in (0, 1)")
        if self.walk_steps < 0 or self.markov_steps < 0:
            raise ValueError("steps must be non-negative")
        if self.probability_trials <= 0:
            raise ValueError("probability_trials must be positive")


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def default_config_path() -> Path:
    return _repo_root() / "docs" / "runtime.yaml"


def load_runtime_spec(yaml_path: str | Path | None = None) -> RuntimeSpec:
    """Load a RuntimeSpec from YAML; a missing file yields the defaults."""
    p = Path(yaml_path) if yaml_path is not None else default_config_path()
    if not p.exists():
        return RuntimeSpec()

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    section = raw.get("runtime", raw)
    known = {f.name for f in fields(RuntimeSpec)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown runtime keys: {unknown}")

    kwargs: Dict[str, Any] = dict(section)
    if "weighted_weights" in kwargs:
        kwargs["weighted_weights"] = tuple(float(w) for w in kwargs["weighted_weights"])
    spec = RuntimeSpec(**kwargs)
    spec.validate()
    return spec
