from __future__ import annotations

import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, List, Tuple, TypeVar

import numpy as np

from .errors import InvalidArgument, InvalidSeed

T = TypeVar("T")

_OPEN_UNIT_BITS = 53
_OPEN_UNIT_SPAN = 2**_OPEN_UNIT_BITS

# (owning thread id, seeded generators innermost last). Each thread and each
# asyncio task runs in its own context, so scopes never leak between them; the
# owner guards against contexts copied into a new thread.
_scopes: ContextVar[Tuple[int, Tuple[np.random.Generator, ...]]] = ContextVar("betlang_scopes", default=(0, ()))

_local = threading.local()


def _stack() -> Tuple[np.random.Generator, ...]:
    owner, stack = _scopes.get()
    if owner != threading.get_ident():
        return ()
    return stack

def _validate_seed(seed: object) -> int:
    if isinstance(seed, (bool, np.bool_)) or not isinstance(seed, (int, np.integer)):
        raise InvalidSeed(f"seed must be an integer, got {type(seed).__name__}")
    if int(seed) < 0:
        raise InvalidSeed(f"seed must be non-negative, got {int(seed)}")
    return int(seed)


def current() -> np.random.Generator:
    """Return the ambient generator of the calling thread or task.

    Inside a seeded scope this is the innermost seeded generator. Outside of
    any scope a generator seeded from system entropy is created on first use
    and kept for the lifetime of the thread.
    """
    stack = _stack()
    if stack:
        return stack[-1]
    root = getattr(_local, "root", None)
    if root is None:
        root = np.random.default_rng()
        _local.root = root
    return root


def depth() -> int:
    """Number of seeded scopes currently open in this thread or task."""
    return len(_stack())


@contextmanager
def seeded(seed: int) -> Iterator[np.random.Generator]:
    """Make a fresh PCG64 generator seeded with `seed` ambient for the block.

    The enclosing generator is neither consumed nor advanced while the block
    runs, and becomes ambient again on exit (also on exceptions).
    """
    rng = np.random.default_rng(_validate_seed(seed))
    token = _scopes.set((threading.get_ident(), _stack() + (rng,)))
    try:
        yield rng
    finally:
        _scopes.reset(token)


def with_seed(seed: int, body: Callable[[], T]) -> T:
    """Run `body` against a generator seeded with `seed` and return its result."""
    with seeded(seed):
        return body()


def spawn_seeds(n: int) -> List[int]:
    """Draw `n` child seeds from the ambient generator."""
    if n < 0:
        raise InvalidArgument("n must be non-negative")
    return [int(s) for s in current().integers(1, 2**31 - 1, size=int(n))]


# Draw primitives. Every sampling operation in the package goes through one of
# these, each consuming exactly one value from the ambient generator per item.


def draw_index(n: int) -> int:
    """Uniform integer in [0, n)."""
    return int(current().integers(0, n))


def draw_indices(n: int, size: int) -> List[int]:
    """`size` independent uniform integers in [0, n)."""
    return [int(i) for i in current().integers(0, n, size=int(size))]


def draw_unit() -> float:
    """Uniform real in [0, 1)."""
    return float(current().random())


def draw_open_unit() -> float:
    """Uniform real strictly inside (0, 1), on a 2**-53 grid."""
    k = int(current().integers(0, _OPEN_UNIT_SPAN))
    return (k + 0.5) / _OPEN_UNIT_SPAN
