"""Built-in expressions over route distance and duration."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .contracts import Expression

if TYPE_CHECKING:
    from .model import Model
    from .solution import Plan, Solution


class DistanceExpression(Expression):
    """Total travel distance of all routes with the plan overlaid."""

    def name(self) -> str:
        return "distance"

    def route_value(self, model: "Model", solution: "Solution", plan: "Plan", vehicle_index: int) -> float:
        if vehicle_index not in plan.routes:
            return solution.vehicles[vehicle_index].cost
        distance = model.route_distance(vehicle_index, plan.routes[vehicle_index])
        return math.inf if distance is None else distance

    def compute(self, model: "Model", solution: "Solution", plan: "Plan") -> float:
        return sum(self.route_value(model, solution, plan, vehicle.index) for vehicle in solution.vehicles)


class DurationExpression(DistanceExpression):
    """Travel time of all routes. Vehicles without a speed travel one distance unit per time unit."""

    def name(self) -> str:
        return "duration"

    def route_value(self, model: "Model", solution: "Solution", plan: "Plan", vehicle_index: int) -> float:
        distance = super().route_value(model, solution, plan, vehicle_index)
        speed = model.vehicle(vehicle_index).speed or 1.0
        return distance / speed
