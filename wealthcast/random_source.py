"""
Random variate sources for wealthcast simulations.

Mathematical Model
------------------
Standard-normal draws are produced with the Box–Muller transform from two
uniform draws u1, u2 ∈ (0, 1):

    z = sqrt(-2·ln(u1)) · cos(2π·u2)
    X = mean + z · std_dev

u1 is redrawn while it equals 0 so that ln(u1) is always defined.

Design principles
-----------------
- Injectable: every simulator call takes a source; tests substitute a seeded
  or fixed-sequence generator.
- Independent streams: ``spawn(n)`` yields n children whose draws do not
  overlap (numpy SeedSequence), so parallel paths share no mutable state.
- Picklable: sources can cross process boundaries in a ProcessPoolExecutor.

Implementations
---------------
- SystemRandomSource   : OS entropy, non-reproducible (production default)
- SeededRandomSource   : reproducible stream from an integer seed
- SequenceRandomSource : cycles over a fixed list of uniforms (tests)
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import numpy as np

__all__ = [
    "RandomVariateSource",
    "NumpyRandomSource",
    "SystemRandomSource",
    "SeededRandomSource",
    "SequenceRandomSource",
]


class RandomVariateSource(ABC):
    """
    Abstract supplier of uniform and standard-normal variates.

    Subclasses implement ``next()`` and ``spawn()``; ``normal()`` is derived
    from ``next()`` through Box–Muller so every source produces normals the
    same way.
    """

    @abstractmethod
    def next(self) -> float:
        """Return a uniform draw in [0, 1)."""

    @abstractmethod
    def spawn(self, n: int) -> List["RandomVariateSource"]:
        """Return *n* independent child sources."""

    def normal(self, mean: float = 0.0, std_dev: float = 1.0) -> float:
        """Return a normal draw with the given mean and standard deviation."""
        u1 = self.next()
        while u1 == 0.0:
            u1 = self.next()
        u2 = self.next()
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return mean + z * std_dev

    def normals(self, n: int) -> np.ndarray:
        """Return *n* standard-normal draws as a float array."""
        return np.fromiter((self.normal() for _ in range(n)), dtype=float, count=n)


class NumpyRandomSource(RandomVariateSource):
    """
    Source backed by a numpy ``Generator`` seeded from a ``SeedSequence``.

    Parameters
    ----------
    seed_sequence : np.random.SeedSequence
        Entropy for this stream. Children are derived with
        ``seed_sequence.spawn``, which guarantees independent streams.
    """

    def __init__(self, seed_sequence: np.random.SeedSequence):
        self._seed_sequence = seed_sequence
        self._rng = np.random.default_rng(seed_sequence)

    def next(self) -> float:
        return float(self._rng.random())

    def spawn(self, n: int) -> List[RandomVariateSource]:
        if n < 0:
            raise ValueError(f"n must be non-negative, got {n}")
        return [NumpyRandomSource(child) for child in self._seed_sequence.spawn(n)]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(entropy={self._seed_sequence.entropy})"


class SystemRandomSource(NumpyRandomSource):
    """Non-reproducible source seeded from operating-system entropy."""

    def __init__(self):
        super().__init__(np.random.SeedSequence())


class SeededRandomSource(NumpyRandomSource):
    """
    Reproducible source.

    Examples
    --------
    >>> a, b = SeededRandomSource(42), SeededRandomSource(42)
    >>> a.next() == b.next()
    True
    """

    def __init__(self, seed: Optional[int]):
        super().__init__(np.random.SeedSequence(seed))


class SequenceRandomSource(RandomVariateSource):
    """
    Deterministic source cycling over a fixed list of uniform values.

    Children produced by ``spawn`` replay the same sequence from the start,
    which makes every simulated path identical.

    Parameters
    ----------
    values : Sequence[float]
        Uniform draws in [0, 1). Must be non-empty.

    Examples
    --------
    >>> src = SequenceRandomSource([0.25, 0.5])
    >>> [src.next() for _ in range(3)]
    [0.25, 0.5, 0.25]
    """

    def __init__(self, values: Sequence[float]):
        values = tuple(float(v) for v in values)
        if not values:
            raise ValueError("values must contain at least one draw")
        if any(not 0.0 <= v < 1.0 for v in values):
            raise ValueError("values must lie in [0, 1)")
        if all(v == 0.0 for v in values):
            raise ValueError("values must contain at least one non-zero draw")
        self._values = values
        self._position = 0

    def next(self) -> float:
        value = self._values[self._position]
        self._position = (self._position + 1) % len(self._values)
        return value

    def spawn(self, n: int) -> List[RandomVariateSource]:
        if n < 0:
            raise ValueError(f"n must be non-negative, got {n}")
        return [SequenceRandomSource(self._values) for _ in range(n)]

    def __repr__(self) -> str:
        return f"SequenceRandomSource(n_values={len(self._values)})"
