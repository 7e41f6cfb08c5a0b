"""Built-in objectives."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .contracts import Objective
from .expressions import DistanceExpression

if TYPE_CHECKING:
    from .model import Model
    from .solution import Plan, Solution


class UnplannedObjective(Objective):
    """Number of stops left off every route."""

    def name(self) -> str:
        return "unplanned"

    def compute(self, model: "Model", solution: "Solution", plan: "Plan") -> float:
        if not plan.routes:
            return float(len(solution.unplanned))
        planned = sum(len(route) for route in plan.effective_routes(solution))
        return float(len(model.stops) - planned)


class TravelDistanceObjective(Objective):
    """Total route distance, read from the model's ``distance`` expression when one is registered."""

    def __init__(self) -> None:
        self._fallback = DistanceExpression()

    def name(self) -> str:
        return "travel_distance"

    def compute(self, model: "Model", solution: "Solution", plan: "Plan") -> float:
        expression = model.expression("distance") or self._fallback
        return expression.compute(model, solution, plan)


class VehiclesUsedObjective(Objective):
    def name(self) -> str:
        return "vehicles_used"

    def compute(self, model: "Model", solution: "Solution", plan: "Plan") -> float:
        return float(sum(1 for route in plan.effective_routes(solution) if route))
