"""Candidate solutions and the plans operators propose against them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Mapping, Optional, Sequence

from .errors import OperatorError

if TYPE_CHECKING:
    from .model import Model


class UnplannedReason(str, Enum):
    UNASSIGNED = "unassigned"
    INCOMPLETE_INITIAL_ASSIGNMENT = "incomplete_initial_assignment"
    INFEASIBLE_INITIAL_ROUTE = "infeasible_initial_route"
    REMOVED = "removed"
    RESET = "reset"
    NO_FEASIBLE_INSERTION = "no_feasible_insertion"


@dataclass(frozen=True, slots=True)
class SolutionVehicle:
    index: int
    id: str
    route: tuple[int, ...] = ()
    cost: float = 0.0


@dataclass(frozen=True, slots=True)
class UnplannedStop:
    index: int
    id: str
    reason: UnplannedReason


@dataclass(slots=True)
class OperatorStatistics:
    executed: int = 0
    skipped: int = 0
    improved: int = 0
    failed: int = 0


@dataclass(frozen=True, slots=True)
class SolutionStatistics:
    iterations: int = 0
    duration_seconds: float = 0.0
    cancelled: bool = False
    operators: dict[str, OperatorStatistics] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Plan:
    """Route replacements keyed by vehicle index plus reasons for units left unplanned."""

    routes: dict[int, tuple[int, ...]] = field(default_factory=dict)
    reasons: dict[int, UnplannedReason] = field(default_factory=dict)
    operator: str = "neutral"

    @classmethod
    def neutral(cls, operator: str = "neutral") -> "Plan":
        return cls(operator=operator)

    @property
    def is_neutral(self) -> bool:
        return not self.routes and not self.reasons

    def route(self, solution: "Solution", vehicle_index: int) -> tuple[int, ...]:
        if vehicle_index in self.routes:
            return self.routes[vehicle_index]
        return solution.vehicles[vehicle_index].route

    def effective_routes(self, solution: "Solution") -> list[tuple[int, ...]]:
        return [self.route(solution, vehicle.index) for vehicle in solution.vehicles]


@dataclass(frozen=True, slots=True)
class Solution:
    """Routes per vehicle, the unplanned stops with reasons and the scalar value.

    Every stop is either on exactly one route or in ``unplanned``. Plan units
    are never split between routes or between a route and ``unplanned``.
    """

    vehicles: tuple[SolutionVehicle, ...]
    unplanned: tuple[UnplannedStop, ...]
    value: float
    statistics: Optional[SolutionStatistics] = None

    @classmethod
    def initial(cls, model: "Model") -> "Solution":
        """Seed solution built from each vehicle's declared initial stops.

        A unit is planned on a vehicle when all of its stops are listed there;
        partly listed units are unplanned, and a route that fails the model
        constraints is dropped as a whole.
        """
        empty = cls.from_routes(model, [() for _ in model.vehicles])
        routes: list[tuple[int, ...]] = []
        reasons: dict[int, UnplannedReason] = {}
        for vehicle in model.vehicles:
            listed = set(vehicle.initial_stops)
            keep: list[int] = []
            for stop_index in vehicle.initial_stops:
                unit = model.plan_unit_of(stop_index)
                if listed.issuperset(unit.stops):
                    keep.append(stop_index)
                else:
                    reasons[unit.index] = UnplannedReason.INCOMPLETE_INITIAL_ASSIGNMENT
            route = tuple(keep)
            if route and not model.is_feasible(empty, Plan(routes={vehicle.index: route}, operator="initial")):
                for stop_index in route:
                    reasons[model.plan_unit_of(stop_index).index] = UnplannedReason.INFEASIBLE_INITIAL_ROUTE
                route = ()
            routes.append(route)
        return cls.from_routes(model, routes, reasons)

    @classmethod
    def from_routes(
        cls,
        model: "Model",
        routes: Sequence[Sequence[int]],
        reasons: Mapping[int, UnplannedReason] | None = None,
        default_reason: UnplannedReason = UnplannedReason.UNASSIGNED,
    ) -> "Solution":
        """Build and evaluate a solution, raising :class:`OperatorError` on broken invariants."""
        if len(routes) != len(model.vehicles):
            raise OperatorError(f"Expected {len(model.vehicles)} routes, got {len(routes)}.")
        reasons = reasons or {}
        stop_count = len(model.stops)
        owner: dict[int, int] = {}
        for vehicle_index, route in enumerate(routes):
            for stop_index in route:
                if not 0 <= stop_index < stop_count:
                    raise OperatorError(f"Route of vehicle {vehicle_index} references unknown stop {stop_index}.")
                if stop_index in owner:
                    raise OperatorError(f"Stop {stop_index} is planned more than once.")
                owner[stop_index] = vehicle_index

        unplanned: list[UnplannedStop] = []
        for unit in model.plan_units:
            vehicles = {owner.get(stop_index) for stop_index in unit.stops}
            if len(vehicles) > 1:
                raise OperatorError(f"Plan unit {unit.index} is split across routes.")
            if None in vehicles:
                reason = reasons.get(unit.index, default_reason)
                unplanned.extend(
                    UnplannedStop(index=stop_index, id=model.stop(stop_index).id, reason=reason)
                    for stop_index in unit.stops
                )

        solution_vehicles = []
        for vehicle, route in zip(model.vehicles, routes):
            distance = model.route_distance(vehicle.index, route)
            solution_vehicles.append(
                SolutionVehicle(
                    index=vehicle.index,
                    id=vehicle.id,
                    route=tuple(route),
                    cost=math.inf if distance is None else distance,
                )
            )
        solution = cls(vehicles=tuple(solution_vehicles), unplanned=tuple(unplanned), value=0.0)
        return replace(solution, value=model.evaluate(solution))

    def plan(self, model: "Model", plan: Plan) -> "Solution":
        """Apply ``plan`` and return the resulting solution. A neutral plan returns ``self``."""
        if plan.is_neutral:
            return self
        for vehicle_index in plan.routes:
            if not 0 <= vehicle_index < len(self.vehicles):
                raise OperatorError(f"{plan.operator} planned unknown vehicle {vehicle_index}.")
        reasons = {model.plan_unit_of(item.index).index: item.reason for item in self.unplanned}
        reasons.update(plan.reasons)
        return Solution.from_routes(
            model,
            plan.effective_routes(self),
            reasons,
            default_reason=UnplannedReason.REMOVED,
        )

    def best(self, other: "Solution") -> "Solution":
        """The solution with the strictly lower value; ties keep ``self``."""
        if other.value < self.value:
            return other
        return self

    def with_statistics(self, statistics: SolutionStatistics) -> "Solution":
        return replace(self, statistics=statistics)

    @property
    def routes(self) -> list[tuple[int, ...]]:
        return [vehicle.route for vehicle in self.vehicles]

    def assignments(self) -> dict[int, int]:
        """Vehicle index of every planned stop."""
        return {stop: vehicle.index for vehicle in self.vehicles for stop in vehicle.route}

    def is_planned(self, stop_index: int) -> bool:
        return any(stop_index in vehicle.route for vehicle in self.vehicles)

    def planned_units(self, model: "Model") -> list[int]:
        seen: dict[int, None] = {}
        for vehicle in self.vehicles:
            for stop_index in vehicle.route:
                seen.setdefault(model.plan_unit_of(stop_index).index)
        return sorted(seen)

    def unplanned_units(self, model: "Model") -> list[int]:
        seen: dict[int, None] = {}
        for item in self.unplanned:
            seen.setdefault(model.plan_unit_of(item.index).index)
        return sorted(seen)
