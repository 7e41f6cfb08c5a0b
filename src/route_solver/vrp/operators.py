"""Repair, destroy and reset operators for the search loop."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Sequence

from .solution import Plan, Solution, UnplannedReason

if TYPE_CHECKING:
    from .model import Model
    from .random import Random

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OperatorParameters:
    """``value`` sets the magnitude of an operator, ``chance`` the probability it fires."""

    value: float = 0.0
    chance: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.chance <= 1.0:
            raise ValueError(f"Operator chance must be within [0, 1], got {self.chance}.")
        if not math.isfinite(self.value):
            raise ValueError(f"Operator value must be finite, got {self.value}.")


class Operator(ABC):
    """Strategy that proposes a plan against the current solution."""

    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def execute(self, model: "Model", solution: Solution, random: "Random") -> Plan:
        raise NotImplementedError

    def chance(self) -> float:
        return 1.0


class RepairVariant(str, Enum):
    RANDOM = "random"
    NEAREST = "nearest"


class DestroyVariant(str, Enum):
    RANDOM = "random"
    NEAREST = "nearest"
    WORST = "worst"


class ResetVariant(str, Enum):
    FULL = "full"
    PARTIAL = "partial"


class _ParameterizedOperator(Operator):
    family = ""

    def __init__(self, variant: Enum, parameters: OperatorParameters | None = None) -> None:
        self.variant = variant
        self.parameters = parameters or OperatorParameters()

    def name(self) -> str:
        return f"{self.family} Operator ({self.variant.value.title()})"

    def chance(self) -> float:
        return self.parameters.chance

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.variant.value!r}, {self.parameters!r})"


class RepairOperator(_ParameterizedOperator):
    """Reinserts unplanned plan units.

    ``RANDOM`` takes a random feasible insertion, ``NEAREST`` the feasible
    insertion with the smallest added distance. A non-positive ``value``
    attempts every unplanned unit.
    """

    family = "Repair"

    def __init__(self, variant: RepairVariant, parameters: OperatorParameters | None = None) -> None:
        super().__init__(RepairVariant(variant), parameters)

    def execute(self, model: "Model", solution: Solution, random: "Random") -> Plan:
        units = solution.unplanned_units(model)
        if not units or not model.vehicles:
            return Plan.neutral(self.name())
        random.shuffle(units)
        budget = magnitude(self.parameters.value, len(units), all_when_non_positive=True)

        routes: dict[int, tuple[int, ...]] = {}
        reasons: dict[int, UnplannedReason] = {}
        for unit_index in units[:budget]:
            stops = model.plan_unit(unit_index).stops
            placed = self._insert(model, solution, routes, stops, random)
            if placed is None:
                logger.debug("%s found no feasible insertion for plan unit %d", self.name(), unit_index)
                reasons[unit_index] = UnplannedReason.NO_FEASIBLE_INSERTION
                continue
            vehicle_index, route = placed
            routes[vehicle_index] = route
        if not routes and all(
            reasons[unit] == _reason_of(solution, model, unit) for unit in reasons
        ):
            return Plan.neutral(self.name())
        return Plan(routes=routes, reasons=reasons, operator=self.name())

    def _insert(
        self,
        model: "Model",
        solution: Solution,
        routes: dict[int, tuple[int, ...]],
        stops: tuple[int, ...],
        random: "Random",
    ) -> tuple[int, tuple[int, ...]] | None:
        candidates: list[tuple[int, tuple[int, ...]]] = []
        for vehicle in model.vehicles:
            current = routes.get(vehicle.index, solution.vehicles[vehicle.index].route)
            candidates.extend((vehicle.index, route) for route in insertions(current, stops))

        match self.variant:
            case RepairVariant.RANDOM:
                random.shuffle(candidates)
            case RepairVariant.NEAREST:
                scored = []
                for position, (vehicle_index, route) in enumerate(candidates):
                    distance = model.route_distance(vehicle_index, route)
                    if distance is None:
                        continue
                    current = routes.get(vehicle_index, solution.vehicles[vehicle_index].route)
                    base = model.route_distance(vehicle_index, current) or 0.0
                    scored.append((distance - base, position))
                scored.sort()
                candidates = [candidates[position] for _, position in scored]
            case _:
                raise ValueError(f"Unknown repair variant '{self.variant}'.")

        for vehicle_index, route in candidates:
            trial = Plan(routes={**routes, vehicle_index: route}, operator=self.name())
            if model.is_feasible(solution, trial):
                return vehicle_index, route
        return None


class DestroyOperator(_ParameterizedOperator):
    """Removes planned units from their routes.

    ``RANDOM`` picks units uniformly, ``NEAREST`` removes a random seed unit
    and the units closest to it, ``WORST`` removes the units whose removal
    saves the most distance. A non-positive ``value`` removes nothing.
    """

    family = "Destroy"

    def __init__(self, variant: DestroyVariant, parameters: OperatorParameters | None = None) -> None:
        super().__init__(DestroyVariant(variant), parameters)

    def execute(self, model: "Model", solution: Solution, random: "Random") -> Plan:
        planned = solution.planned_units(model)
        count = magnitude(self.parameters.value, len(planned), all_when_non_positive=False)
        if count == 0:
            return Plan.neutral(self.name())

        match self.variant:
            case DestroyVariant.RANDOM:
                selected = random.sample(planned, count)
            case DestroyVariant.NEAREST:
                selected = self._related(model, planned, count, random)
            case DestroyVariant.WORST:
                selected = self._worst(model, solution, planned, count)
            case _:
                raise ValueError(f"Unknown destroy variant '{self.variant}'.")

        removed = {stop for unit in selected for stop in model.plan_unit(unit).stops}
        routes = {
            vehicle.index: tuple(stop for stop in vehicle.route if stop not in removed)
            for vehicle in solution.vehicles
            if removed.intersection(vehicle.route)
        }
        return Plan(
            routes=routes,
            reasons={unit: UnplannedReason.REMOVED for unit in selected},
            operator=self.name(),
        )

    @staticmethod
    def _related(model: "Model", planned: list[int], count: int, random: "Random") -> list[int]:
        seed = random.choice(planned)
        anchor = model.plan_unit(seed).stops[0]

        def closeness(unit_index: int) -> float:
            distance = model.leg_distance(anchor, model.plan_unit(unit_index).stops[0])
            return math.inf if distance is None else distance

        others = sorted((unit for unit in planned if unit != seed), key=closeness)
        return [seed, *others[: count - 1]]

    @staticmethod
    def _worst(model: "Model", solution: Solution, planned: list[int], count: int) -> list[int]:
        assignments = solution.assignments()
        savings: list[tuple[float, int]] = []
        for unit_index in planned:
            stops = model.plan_unit(unit_index).stops
            vehicle = solution.vehicles[assignments[stops[0]]]
            remaining = tuple(stop for stop in vehicle.route if stop not in stops)
            reduced = model.route_distance(vehicle.index, remaining)
            saving = math.inf if reduced is None else vehicle.cost - reduced
            savings.append((-saving, unit_index))
        savings.sort()
        return [unit_index for _, unit_index in savings[:count]]


class ResetOperator(_ParameterizedOperator):
    """Reverts routes toward the initial solution of the model.

    ``FULL`` restores every route. ``PARTIAL`` restores ``value`` randomly
    chosen vehicles and pulls their initial units off other routes.
    """

    family = "Reset"

    def __init__(self, variant: ResetVariant, parameters: OperatorParameters | None = None) -> None:
        super().__init__(ResetVariant(variant), parameters)
        self._baseline: tuple[int, Solution] | None = None

    def baseline(self, model: "Model") -> Solution:
        if self._baseline is None or self._baseline[0] != id(model):
            self._baseline = (id(model), Solution.initial(model))
        return self._baseline[1]

    def execute(self, model: "Model", solution: Solution, random: "Random") -> Plan:
        baseline = self.baseline(model)
        match self.variant:
            case ResetVariant.FULL:
                chosen = [vehicle.index for vehicle in model.vehicles]
            case ResetVariant.PARTIAL:
                vehicles = [vehicle.index for vehicle in model.vehicles]
                count = magnitude(self.parameters.value, len(vehicles), all_when_non_positive=False)
                chosen = random.sample(vehicles, count)
            case _:
                raise ValueError(f"Unknown reset variant '{self.variant}'.")
        if not chosen:
            return Plan.neutral(self.name())

        restored = {stop for index in chosen for stop in baseline.vehicles[index].route}
        routes: dict[int, tuple[int, ...]] = {}
        for vehicle in solution.vehicles:
            if vehicle.index in chosen:
                route = baseline.vehicles[vehicle.index].route
            else:
                route = tuple(stop for stop in vehicle.route if stop not in restored)
            if route != vehicle.route:
                routes[vehicle.index] = route
        if not routes:
            return Plan.neutral(self.name())

        remaining = {stop for vehicle in solution.vehicles for stop in routes.get(vehicle.index, vehicle.route)}
        reasons = {
            model.plan_unit_of(stop).index: UnplannedReason.RESET
            for vehicle in solution.vehicles
            for stop in vehicle.route
            if stop not in remaining
        }
        return Plan(routes=routes, reasons=reasons, operator=self.name())


def get_operator(name: str, parameters: OperatorParameters | None = None) -> Operator:
    """Operator for a ``family_variant`` name such as ``destroy_worst``."""
    family, _, variant = name.partition("_")
    try:
        match family:
            case "repair":
                return RepairOperator(RepairVariant(variant), parameters)
            case "destroy":
                return DestroyOperator(DestroyVariant(variant), parameters)
            case "reset":
                return ResetOperator(ResetVariant(variant), parameters)
    except ValueError as exc:
        raise ValueError(f"Unknown operator '{name}'.") from exc
    raise ValueError(f"Unknown operator '{name}'.")


def magnitude(value: float, available: int, *, all_when_non_positive: bool) -> int:
    """How many of ``available`` candidates an operator acts on.

    ``value`` >= 1 is a count, a value in (0, 1) a fraction rounded up.
    """
    if available <= 0:
        return 0
    if value <= 0:
        return available if all_when_non_positive else 0
    if value < 1:
        return min(available, math.ceil(value * available))
    return min(available, int(value))


def insertions(route: Sequence[int], stops: Sequence[int]) -> Iterator[tuple[int, ...]]:
    """Every route obtained by inserting ``stops`` into ``route`` keeping their relative order."""
    if not stops:
        yield tuple(route)
        return
    head, rest = stops[0], stops[1:]
    for position in range(len(route) + 1):
        prefix = (*route[:position], head)
        for tail in insertions(route[position:], rest):
            yield prefix + tail


def _reason_of(solution: Solution, model: "Model", unit_index: int) -> UnplannedReason | None:
    first = model.plan_unit(unit_index).stops[0]
    for item in solution.unplanned:
        if item.index == first:
            return item.reason
    return None
