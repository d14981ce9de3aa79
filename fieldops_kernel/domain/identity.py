"""
Identity and randomness ports.

Responsibility:
    Isolate every source of non-determinism other than time (opaque id
    generation, palette colour choice) behind small injectable interfaces,
    mirroring ``clock.py``.

Architecture position:
    Kernel > Domain -- pure, except for the two system implementations
    (``UuidIdAllocator`` and ``SystemRandomSource``).

Invariants enforced:
    - ``allocate_unique`` never returns an id present in ``taken``.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Container, Sequence
from itertools import count
from typing import TypeVar
from uuid import uuid4

T = TypeVar("T")


class IdAllocator(ABC):
    """Issues opaque string identifiers."""

    @abstractmethod
    def new_id(self) -> str:
        """Return a fresh identifier."""
        ...


class UuidIdAllocator(IdAllocator):
    """Production allocator: random UUID4 hex strings."""

    def new_id(self) -> str:
        return uuid4().hex


class SequentialIdAllocator(IdAllocator):
    """
    Deterministic allocator for tests and replay.

    Produces ``{prefix}{n}`` with ``n`` counting up from ``start``.
    """

    def __init__(self, prefix: str = "id-", start: int = 1):
        self._prefix = prefix
        self._counter = count(start)

    def new_id(self) -> str:
        return f"{self._prefix}{next(self._counter)}"


def allocate_unique(
    allocator: IdAllocator,
    taken: Container[str],
    max_attempts: int = 1000,
) -> str:
    """
    Draw ids from ``allocator`` until one is not in ``taken``.

    Raises:
        RuntimeError: if ``max_attempts`` draws all collide, which means the
            allocator is not producing fresh values.
    """
    for _ in range(max_attempts):
        candidate = allocator.new_id()
        if candidate not in taken:
            return candidate
    raise RuntimeError(
        f"Id allocator produced {max_attempts} colliding ids in a row"
    )


class RandomSource(ABC):
    """Chooses among options; the only randomness the kernel consumes."""

    @abstractmethod
    def choice(self, options: Sequence[T]) -> T:
        """Return one element of a non-empty sequence."""
        ...


class SystemRandomSource(RandomSource):
    """Production source backed by the module-level PRNG."""

    def choice(self, options: Sequence[T]) -> T:
        return random.choice(options)


class SeededRandomSource(RandomSource):
    """Reproducible source with its own PRNG state."""

    def __init__(self, seed: int = 0):
        self._rng = random.Random(seed)

    def choice(self, options: Sequence[T]) -> T:
        return self._rng.choice(options)


class FixedRandomSource(RandomSource):
    """Always picks the element at ``index`` (modulo length)."""

    def __init__(self, index: int = 0):
        self._index = index

    def choice(self, options: Sequence[T]) -> T:
        if not options:
            raise IndexError("Cannot choose from an empty sequence")
        return options[self._index % len(options)]
