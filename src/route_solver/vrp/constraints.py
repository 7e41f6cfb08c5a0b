"""Built-in feasibility constraints.

Each constraint only inspects the routes a plan replaces; routes the plan
leaves untouched were feasible when they were accepted.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Sequence

import numpy as np

from .contracts import Constraint

if TYPE_CHECKING:
    from .model import Model
    from .solution import Plan, Solution


class VehicleCapacityConstraint(Constraint):
    """Running load per quantity key never exceeds the vehicle capacity for that key."""

    def name(self) -> str:
        return "vehicle_capacity"

    def is_feasible(self, model: "Model", solution: "Solution", plan: "Plan") -> bool:
        for vehicle_index, route in plan.routes.items():
            capacity = model.vehicle(vehicle_index).capacity
            if not capacity:
                continue
            load: dict[str, float] = defaultdict(float)
            for stop_index in route:
                for key, amount in model.stop(stop_index).quantities.items():
                    load[key] += amount
                    if key in capacity and load[key] > capacity[key]:
                        return False
        return True


class PrecedenceConstraint(Constraint):
    """A stop is visited before the stop it precedes, on the same vehicle, when both are planned."""

    def name(self) -> str:
        return "precedence"

    def is_feasible(self, model: "Model", solution: "Solution", plan: "Plan") -> bool:
        if not plan.routes:
            return True
        position: dict[int, tuple[int, int]] = {}
        for vehicle_index, route in enumerate(plan.effective_routes(solution)):
            for order, stop_index in enumerate(route):
                position[stop_index] = (vehicle_index, order)
        for stop in model.stops:
            for target in stop.precedes:
                if target in position and not self._ordered(position, stop.index, target):
                    return False
        return True

    @staticmethod
    def _ordered(position: dict[int, tuple[int, int]], before: int, after: int) -> bool:
        if before not in position or after not in position:
            return True
        (vehicle_a, order_a), (vehicle_b, order_b) = position[before], position[after]
        return vehicle_a == vehicle_b and order_a < order_b


class StopCompatibilities:
    """Boolean stop x vehicle matrix. Pairs outside the matrix are compatible."""

    __slots__ = ("_matrix",)

    def __init__(self, matrix: Sequence[Sequence[bool]] | np.ndarray) -> None:
        values = np.asarray(matrix, dtype=bool)
        if values.size and values.ndim != 2:
            raise ValueError(f"Compatibility matrix must be two-dimensional, got shape {values.shape}.")
        self._matrix = values.reshape(values.shape if values.size else (0, 0))

    @classmethod
    def from_lists(cls, allowed: Sequence[Sequence[int] | None], vehicle_count: int) -> "StopCompatibilities":
        """Matrix from per-stop lists of allowed vehicle indices; ``None`` allows every vehicle."""
        values = np.ones((len(allowed), vehicle_count), dtype=bool)
        for stop_index, vehicles in enumerate(allowed):
            if vehicles is None:
                continue
            values[stop_index, :] = False
            for vehicle_index in vehicles:
                values[stop_index, vehicle_index] = True
        return cls(values)

    def is_compatible(self, stop_index: int, vehicle_index: int) -> bool:
        rows, columns = self._matrix.shape
        if stop_index >= rows or vehicle_index >= columns:
            return True
        return bool(self._matrix[stop_index, vehicle_index])


class VehicleCompatibilityConstraint(Constraint):
    def __init__(self, compatibilities: StopCompatibilities) -> None:
        self.compatibilities = compatibilities

    def name(self) -> str:
        return "vehicle_compatibility"

    def is_feasible(self, model: "Model", solution: "Solution", plan: "Plan") -> bool:
        return all(
            self.compatibilities.is_compatible(stop_index, vehicle_index)
            for vehicle_index, route in plan.routes.items()
            for stop_index in route
        )


class ConnectivityConstraint(Constraint):
    """Every leg of a route, including start and end legs, is reachable."""

    def name(self) -> str:
        return "connectivity"

    def is_feasible(self, model: "Model", solution: "Solution", plan: "Plan") -> bool:
        return all(model.route_distance(vehicle_index, route) is not None for vehicle_index, route in plan.routes.items())


class TimeWindowConstraint(Constraint):
    """Arrival at each stop is no later than the end of its time window.

    Travel time is leg distance divided by vehicle speed (1 when unset).
    A vehicle arriving early waits for the window to open.
    """

    def name(self) -> str:
        return "time_window"

    def is_temporal(self) -> bool:
        return True

    def is_feasible(self, model: "Model", solution: "Solution", plan: "Plan") -> bool:
        for vehicle_index, route in plan.routes.items():
            if not route:
                continue
            vehicle = model.vehicle(vehicle_index)
            speed = vehicle.speed or 1.0
            legs = model.route_legs(vehicle_index, route)
            if vehicle.start_location is None:
                legs = [0.0, *legs]
            clock = 0.0
            for stop_index, leg in zip(route, legs):
                if leg is None:
                    return False
                clock += leg / speed
                window = model.stop(stop_index).time_window
                if window is None:
                    continue
                opens, closes = window
                if clock > closes:
                    return False
                clock = max(clock, opens)
        return True
