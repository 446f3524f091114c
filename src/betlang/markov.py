from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Hashable, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from .context import draw_unit
from .errors import InvalidArgument, InvalidMarkovChain

PROBABILITY_TOL = 1e-9


@dataclass(frozen=True)
class MarkovChain:
    """Discrete-time chain over a finite state set.

    `transitions[s]` is the ordered list of (next_state, probability) pairs for
    state `s`. The order is part of the chain: simulation buckets a uniform
    draw cumulatively in that order.
    """
    states: Tuple[Hashable, ...]
    transitions: Mapping[Hashable, Tuple[Tuple[Hashable, float], ...]]
    initial: Hashable

    def next_states(self, state: Hashable) -> Tuple[Tuple[Hashable, float], ...]:
        if state not in self.transitions:
            raise KeyError(f"Unknown state: {state!r}")
        return self.transitions[state]


def make_markov_chain(
    states: Sequence[Hashable],
    transition_table: Mapping[Hashable, Sequence[Tuple[Hashable, float]]],
    initial_state: Hashable,
) -> MarkovChain:
    states_t = tuple(states)
    if not states_t:
        raise InvalidMarkovChain("states must be non-empty")
    if len(set(states_t)) != len(states_t):
        raise InvalidMarkovChain("states must be distinct")
    known = set(states_t)
    if initial_state not in known:
        raise InvalidMarkovChain(f"initial state {initial_state!r} is not a member of states")
    extra = [s for s in transition_table if s not in known]
    if extra:
        raise InvalidMarkovChain(f"transition table references unknown source states: {extra}")

    transitions: Dict[Hashable, Tuple[Tuple[Hashable, float], ...]] = {}
    for s in states_t:
        if s not in transition_table:
            raise InvalidMarkovChain(f"missing transitions for state {s!r}")
        row: List[Tuple[Hashable, float]] = []
        for nxt, p in transition_table[s]:
            if nxt not in known:
                raise InvalidMarkovChain(f"state {s!r} transitions to unknown state {nxt!r}")
            p = float(p)
            if not math.isfinite(p) or p < 0.0:
                raise InvalidMarkovChain(f"invalid probability {p} in transitions of {s!r}")
            row.append((nxt, p))
        total = sum(p for _, p in row)
        if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=PROBABILITY_TOL):
            raise InvalidMarkovChain(f"transitions of {s!r} sum to {total}, expected 1")
        transitions[s] = tuple(row)
    return MarkovChain(states=states_t, transitions=MappingProxyType(transitions), initial=initial_state)


def _step(row: Tuple[Tuple[Hashable, float], ...]) -> Hashable:
    r = draw_unit()
    cum = 0.0
    last = None
    for nxt, p in row:
        if p <= 0.0:
            continue
        cum += p
        last = nxt
        if r < cum:
            return nxt
    # probabilities summing to slightly below 1
    return last


def markov_simulate(chain: MarkovChain, steps: int) -> List[Hashable]:
    """Trajectory of `steps + 1` states from the initial state, one draw per transition."""
    if isinstance(steps, bool) or int(steps) != steps or steps < 0:
        raise InvalidArgument(f"steps must be a non-negative integer, got {steps!r}")
    path = [chain.initial]
    for _ in range(int(steps)):
        path.append(_step(chain.next_states(path[-1])))
    return path


def transition_matrix(chain: MarkovChain) -> pd.DataFrame:
    """Row-stochastic matrix, rows and columns in `chain.states` order."""
    idx = {s: i for i, s in enumerate(chain.states)}
    mat = np.zeros((len(chain.states), len(chain.states)), dtype=float)
    for s, row in chain.transitions.items():
        for nxt, p in row:
            mat[idx[s], idx[nxt]] += p
    return pd.DataFrame(mat, index=list(chain.states), columns=list(chain.states))


def stationary_distribution(chain: MarkovChain) -> Dict[Hashable, float]:
    """Left eigenvector of the transition matrix for the eigenvalue closest to 1.

    For reducible chains this is one of several stationary distributions.
    """
    p = transition_matrix(chain).to_numpy(dtype=float)
    vals, vecs = np.linalg.eig(p.T)
    k = int(np.argmin(np.abs(vals - 1.0)))
    v = np.real(vecs[:, k])
    v = v / float(np.sum(v))
    v = np.clip(v, 0.0, None)
    v = v / float(np.sum(v))
    return {s: float(v[i]) for i, s in enumerate(chain.states)}


def state_frequencies(trajectory: Sequence[Hashable]) -> Dict[Hashable, float]:
    if len(trajectory) == 0:
        raise InvalidArgument("trajectory must be non-empty")
    counts = Counter(trajectory)
    n = float(len(trajectory))
    return {s: c / n for s, c in counts.items()}
