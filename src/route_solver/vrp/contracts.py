"""Contracts for pluggable objectives, constraints and expressions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .model import Model
    from .solution import Plan, Solution


class Objective(ABC):
    """Scored criterion. A model's value is the weighted sum of its objectives."""

    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def compute(self, model: "Model", solution: "Solution", plan: "Plan") -> float:
        raise NotImplementedError


class Constraint(ABC):
    """Feasibility rule evaluated against the routes a plan changes."""

    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def is_feasible(self, model: "Model", solution: "Solution", plan: "Plan") -> bool:
        raise NotImplementedError

    def is_temporal(self) -> bool:
        return False


class Expression(ABC):
    """Named quantity computed over a solution, reused by objectives."""

    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def compute(self, model: "Model", solution: "Solution", plan: "Plan") -> float:
        raise NotImplementedError
