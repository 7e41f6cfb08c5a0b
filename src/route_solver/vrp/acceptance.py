"""Acceptance criteria for the working solution of the search loop."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .random import Random
    from .solution import Solution


class Acceptance(ABC):
    """Decides whether a candidate replaces the working solution.

    The best solution is tracked separately and never regresses.
    """

    @abstractmethod
    def accept(self, current: "Solution", candidate: "Solution", random: "Random") -> bool:
        raise NotImplementedError

    def step(self) -> None:
        """Called once after every completed iteration."""


class GreedyAcceptance(Acceptance):
    """Only strictly better candidates are accepted."""

    def accept(self, current: "Solution", candidate: "Solution", random: "Random") -> bool:
        return candidate.value < current.value


class AnnealingAcceptance(Acceptance):
    """Simulated annealing: a worse candidate is accepted with probability ``exp(-delta / T)``."""

    def __init__(
        self,
        initial_temperature: float = 100.0,
        cooling_rate: float = 0.95,
        min_temperature: float = 1e-6,
    ) -> None:
        if initial_temperature <= 0:
            raise ValueError("initial_temperature must be positive.")
        if not 0 < cooling_rate <= 1:
            raise ValueError("cooling_rate must be within (0, 1].")
        self.temperature = initial_temperature
        self.cooling_rate = cooling_rate
        self.min_temperature = min_temperature

    def accept(self, current: "Solution", candidate: "Solution", random: "Random") -> bool:
        if candidate.value < current.value:
            return True
        delta = candidate.value - current.value
        if not math.isfinite(delta):
            return False
        return random.f64() < math.exp(-delta / self.temperature)

    def step(self) -> None:
        self.temperature = max(self.min_temperature, self.temperature * self.cooling_rate)
