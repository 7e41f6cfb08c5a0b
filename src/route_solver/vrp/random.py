"""Seeded random source threaded through the solver and its operators."""

from __future__ import annotations

import time
from typing import Any, MutableSequence, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")

U32_LIMIT = 2**32


class Random:
    """Reproducible wrapper around a numpy ``Generator``.

    Two instances created with the same seed return the same values for the
    same sequence of calls. Without a seed, one is derived from the clock and
    exposed through :attr:`seed` so a run can be replayed.
    """

    __slots__ = ("seed", "_generator")

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = int(time.time()) if seed is None else int(seed)
        self._generator = np.random.default_rng(self.seed)

    def u32(self) -> int:
        return int(self._generator.integers(0, U32_LIMIT))

    def f64(self) -> float:
        """Uniform float in ``[0, 1)``."""
        return float(self._generator.random())

    def range_u32(self, low: int, high: int) -> int:
        """Uniform integer in ``[low, high)``."""
        if low >= high:
            raise ValueError(f"Empty integer range [{low}, {high}).")
        return int(self._generator.integers(low, high))

    def range_f64(self, low: float, high: float) -> float:
        if low > high:
            raise ValueError(f"Invalid float range [{low}, {high}).")
        return float(self._generator.uniform(low, high))

    def chance(self, numerator: float, denominator: float = 1.0) -> bool:
        """True with probability ``numerator / denominator``.

        Equal arguments always return True without drawing.
        """
        if numerator == denominator:
            return True
        if denominator <= 0:
            raise ValueError(f"Chance denominator must be positive, got {denominator}.")
        return self.f64() < numerator / denominator

    def shuffle(self, items: MutableSequence[Any]) -> None:
        order = self._generator.permutation(len(items))
        items[:] = [items[int(index)] for index in order]

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("Cannot choose from an empty sequence.")
        return items[self.range_u32(0, len(items))]

    def sample(self, items: Sequence[T], count: int) -> list[T]:
        """``count`` distinct items in random order."""
        if count <= 0 or not items:
            return []
        count = min(count, len(items))
        picked = self._generator.choice(len(items), size=count, replace=False)
        return [items[int(index)] for index in picked]
