"""Immutable problem model and its builder."""

from __future__ import annotations

import logging
import math
from itertools import pairwise
from typing import TYPE_CHECKING, Iterable, Sequence

from ..graph import SmallGraph, shortest_path_length
from ..models.domain import Location, PlanUnit, Stop, Vehicle
from ..services.geospatial import haversine_m
from .contracts import Constraint, Expression, Objective
from .distance import DistanceMatrix
from .errors import ModelError, ModelErrorKind
from .solution import Plan

if TYPE_CHECKING:
    from ..schemas.problem import ProblemInput
    from .solution import Solution

logger = logging.getLogger(__name__)


class Model:
    """Read-only problem instance. Build it with :class:`ModelBuilder` or :meth:`from_input`.

    Stops, vehicles and plan units reference each other by index only.
    Leg distances are memoized; the cache never changes observable results.
    """

    def __init__(
        self,
        *,
        stops: Sequence[Stop],
        vehicles: Sequence[Vehicle],
        plan_units: Sequence[PlanUnit],
        distance_matrix: DistanceMatrix | None = None,
        graph: SmallGraph | None = None,
        objectives: Sequence[tuple[Objective, float]] = (),
        constraints: Sequence[Constraint] = (),
        expressions: Sequence[Expression] = (),
    ) -> None:
        self._stops = tuple(stops)
        self._vehicles = tuple(vehicles)
        self._plan_units = tuple(plan_units)
        self._distance_matrix = distance_matrix
        self._graph = graph
        self._objectives = tuple(objectives)
        # Temporal constraints are the expensive ones; check them last.
        self._constraints = tuple(sorted(constraints, key=lambda item: item.is_temporal()))
        self._expressions = tuple(expressions)
        self._unit_of_stop = {stop: unit.index for unit in self._plan_units for stop in unit.stops}
        self._matrix_graph: SmallGraph | None = None
        self._legs: dict[tuple[int, int], float | None] = {}

    @classmethod
    def from_input(
        cls,
        problem: "ProblemInput",
        *,
        objectives: Iterable[Objective | tuple[Objective, float]] = (),
        constraints: Iterable[Constraint] = (),
        expressions: Iterable[Expression] = (),
    ) -> "Model":
        builder = ModelBuilder()
        stop_lookup: dict[str, int] = {}
        for index, item in enumerate(problem.stops):
            if item.id in stop_lookup:
                raise ModelError(ModelErrorKind.DUPLICATE_ID, f"Duplicate stop id '{item.id}'.", subject=item.id)
            stop_lookup[item.id] = index

        for index, item in enumerate(problem.stops):
            precedes = list(item.precedes or [])
            if len(precedes) > 1:
                raise ModelError(
                    ModelErrorKind.AMBIGUOUS_PRECEDENCE,
                    f"Stop '{item.id}' precedes {len(precedes)} stops; at most one is supported.",
                    subject=item.id,
                )
            targets = []
            for target_id in precedes:
                if target_id not in stop_lookup:
                    raise ModelError(
                        ModelErrorKind.DANGLING_REFERENCE,
                        f"Stop '{item.id}' precedes unknown stop '{target_id}'.",
                        subject=target_id,
                    )
                targets.append(stop_lookup[target_id])
            window = item.start_time_windows
            builder.stop(
                Stop(
                    id=item.id,
                    index=index,
                    location=Location(item.location.lat, item.location.lon),
                    quantities=dict(item.quantity),
                    precedes=tuple(targets),
                    time_window=(float(window[0]), float(window[1])) if window else None,
                )
            )

        vehicle_ids: set[str] = set()
        for index, item in enumerate(problem.vehicles):
            if item.id in vehicle_ids:
                raise ModelError(ModelErrorKind.DUPLICATE_ID, f"Duplicate vehicle id '{item.id}'.", subject=item.id)
            vehicle_ids.add(item.id)
            initial = []
            for initial_stop in item.initial_stops or []:
                if initial_stop.id not in stop_lookup:
                    raise ModelError(
                        ModelErrorKind.DANGLING_REFERENCE,
                        f"Vehicle '{item.id}' references unknown initial stop '{initial_stop.id}'.",
                        subject=initial_stop.id,
                    )
                initial.append(stop_lookup[initial_stop.id])
            builder.vehicle(
                Vehicle(
                    id=item.id,
                    index=index,
                    capacity=dict(item.capacity),
                    speed=item.speed,
                    start_location=_location(item.start_location),
                    end_location=_location(item.end_location),
                    initial_stops=tuple(initial),
                )
            )

        if problem.distance_matrix is not None:
            builder.distance_matrix(problem.distance_matrix)
        for objective in objectives:
            if isinstance(objective, tuple):
                builder.objective(*objective)
            else:
                builder.objective(objective)
        for constraint in constraints:
            builder.constraint(constraint)
        for expression in expressions:
            builder.expression(expression)
        return builder.build()

    @property
    def stops(self) -> tuple[Stop, ...]:
        return self._stops

    @property
    def vehicles(self) -> tuple[Vehicle, ...]:
        return self._vehicles

    @property
    def plan_units(self) -> tuple[PlanUnit, ...]:
        return self._plan_units

    @property
    def distance_matrix(self) -> DistanceMatrix | None:
        return self._distance_matrix

    @property
    def graph(self) -> SmallGraph | None:
        return self._graph

    @property
    def objectives(self) -> tuple[tuple[Objective, float], ...]:
        return self._objectives

    @property
    def constraints(self) -> tuple[Constraint, ...]:
        return self._constraints

    @property
    def expressions(self) -> tuple[Expression, ...]:
        return self._expressions

    def stop(self, index: int) -> Stop:
        return self._stops[index]

    def vehicle(self, index: int) -> Vehicle:
        return self._vehicles[index]

    def plan_unit(self, index: int) -> PlanUnit:
        return self._plan_units[index]

    def plan_unit_of(self, stop_index: int) -> PlanUnit:
        return self._plan_units[self._unit_of_stop[stop_index]]

    def expression(self, name: str) -> Expression | None:
        for expression in self._expressions:
            if expression.name() == name:
                return expression
        return None

    def leg_distance(self, origin: int, destination: int) -> float | None:
        """Travel cost between two stops, ``None`` when the destination is unreachable."""
        if origin == destination:
            return 0.0
        key = (origin, destination)
        if key not in self._legs:
            self._legs[key] = self._compute_leg(origin, destination)
        return self._legs[key]

    def _compute_leg(self, origin: int, destination: int) -> float | None:
        if self._distance_matrix is not None:
            direct = self._distance_matrix.distance(origin, destination)
            if direct is not None:
                return direct
            if self._matrix_graph is None:
                self._matrix_graph = self._distance_matrix.to_graph()
            return shortest_path_length(self._matrix_graph, origin, destination)
        if self._graph is not None:
            return shortest_path_length(self._graph, origin, destination)
        a, b = self._stops[origin].location, self._stops[destination].location
        return haversine_m(a.latitude, a.longitude, b.latitude, b.longitude)

    def route_legs(self, vehicle_index: int, route: Sequence[int]) -> list[float | None]:
        """Leg costs of a route including the optional start and end location legs."""
        if not route:
            return []
        vehicle = self._vehicles[vehicle_index]
        legs: list[float | None] = []
        if vehicle.start_location is not None:
            legs.append(_location_leg(vehicle.start_location, self._stops[route[0]].location))
        legs.extend(self.leg_distance(a, b) for a, b in pairwise(route))
        if vehicle.end_location is not None:
            legs.append(_location_leg(self._stops[route[-1]].location, vehicle.end_location))
        return legs

    def route_distance(self, vehicle_index: int, route: Sequence[int]) -> float | None:
        total = 0.0
        for leg in self.route_legs(vehicle_index, route):
            if leg is None:
                return None
            total += leg
        return total

    def is_feasible(self, solution: "Solution", plan: "Plan") -> bool:
        for constraint in self._constraints:
            if not constraint.is_feasible(self, solution, plan):
                logger.debug("Plan from %s rejected by %s", plan.operator, constraint.name())
                return False
        return True

    def evaluate(self, solution: "Solution", plan: "Plan | None" = None) -> float:
        """Weighted sum of all objectives for ``solution`` with ``plan`` overlaid."""
        plan = plan or Plan.neutral()
        value = 0.0
        for objective, weight in self._objectives:
            if weight == 0:
                continue
            value += weight * objective.compute(self, solution, plan)
        return value


class ModelBuilder:
    """Accumulates model data and registries; :meth:`build` validates and freezes them."""

    def __init__(self) -> None:
        self._stops: list[Stop] = []
        self._vehicles: list[Vehicle] = []
        self._distance_matrix: DistanceMatrix | Sequence[Sequence[float | None]] | None = None
        self._graph: SmallGraph | None = None
        self._objectives: list[tuple[Objective, float]] = []
        self._constraints: list[Constraint] = []
        self._expressions: list[Expression] = []

    def stop(self, stop: Stop) -> "ModelBuilder":
        self._stops.append(stop)
        return self

    def vehicle(self, vehicle: Vehicle) -> "ModelBuilder":
        self._vehicles.append(vehicle)
        return self

    def distance_matrix(self, matrix: DistanceMatrix | Sequence[Sequence[float | None]]) -> "ModelBuilder":
        self._distance_matrix = matrix
        return self

    def graph(self, graph: SmallGraph) -> "ModelBuilder":
        self._graph = graph
        return self

    def objective(self, objective: Objective, weight: float = 1.0) -> "ModelBuilder":
        self._objectives.append((objective, weight))
        return self

    def constraint(self, constraint: Constraint) -> "ModelBuilder":
        self._constraints.append(constraint)
        return self

    def expression(self, expression: Expression) -> "ModelBuilder":
        self._expressions.append(expression)
        return self

    def build(self) -> Model:
        _validate_stops(self._stops)
        _validate_vehicles(self._vehicles, len(self._stops))
        for objective, weight in self._objectives:
            if not math.isfinite(weight):
                raise ModelError(
                    ModelErrorKind.INVALID_VALUE,
                    f"Objective '{objective.name()}' weight must be finite, got {weight}.",
                    subject=objective.name(),
                )
        stop_count = len(self._stops)
        matrix = self._distance_matrix
        if matrix is not None and not isinstance(matrix, DistanceMatrix):
            matrix = DistanceMatrix(matrix)
        if matrix is not None and matrix.size != stop_count:
            raise ModelError(
                ModelErrorKind.MATRIX_DIMENSIONS,
                f"Distance matrix is {matrix.size}x{matrix.size} but the model has {stop_count} stops.",
            )
        if self._graph is not None and len(self._graph) != stop_count:
            raise ModelError(
                ModelErrorKind.MATRIX_DIMENSIONS,
                f"Graph has {len(self._graph)} nodes but the model has {stop_count} stops.",
            )
        model = Model(
            stops=self._stops,
            vehicles=self._vehicles,
            plan_units=build_plan_units(self._stops),
            distance_matrix=matrix,
            graph=self._graph,
            objectives=self._objectives,
            constraints=self._constraints,
            expressions=self._expressions,
        )
        logger.info(
            "Built model with %d stops, %d plan units, %d vehicles",
            len(model.stops),
            len(model.plan_units),
            len(model.vehicles),
        )
        return model


def build_plan_units(stops: Sequence[Stop]) -> list[PlanUnit]:
    """Partition stops into plan units, pairing each stop with the stop it precedes."""
    claimed: set[int] = set()
    units: list[PlanUnit] = []
    for stop in stops:
        if stop.index in claimed:
            continue
        members = [stop.index]
        if len(stop.precedes) > 1:
            raise ModelError(
                ModelErrorKind.AMBIGUOUS_PRECEDENCE,
                f"Stop '{stop.id}' precedes {len(stop.precedes)} stops; at most one is supported.",
                subject=stop.id,
            )
        if stop.precedes and stop.precedes[0] not in claimed:
            members.append(stop.precedes[0])
            claimed.add(stop.precedes[0])
        claimed.add(stop.index)
        units.append(PlanUnit(index=len(units), stops=tuple(members)))
    return units


def _validate_stops(stops: Sequence[Stop]) -> None:
    ids: set[str] = set()
    predecessors: dict[int, int] = {}
    for position, stop in enumerate(stops):
        if stop.index != position:
            raise ModelError(
                ModelErrorKind.INVALID_INDEX,
                f"Stop '{stop.id}' has index {stop.index} but was registered at position {position}.",
                subject=stop.id,
            )
        if stop.id in ids:
            raise ModelError(ModelErrorKind.DUPLICATE_ID, f"Duplicate stop id '{stop.id}'.", subject=stop.id)
        ids.add(stop.id)
        if len(stop.precedes) > 1:
            raise ModelError(
                ModelErrorKind.AMBIGUOUS_PRECEDENCE,
                f"Stop '{stop.id}' precedes {len(stop.precedes)} stops; at most one is supported.",
                subject=stop.id,
            )
        for target in stop.precedes:
            if not 0 <= target < len(stops):
                raise ModelError(
                    ModelErrorKind.DANGLING_REFERENCE,
                    f"Stop '{stop.id}' precedes unknown stop index {target}.",
                    subject=target,
                )
            if target == stop.index:
                raise ModelError(
                    ModelErrorKind.INVALID_PRECEDENCE,
                    f"Stop '{stop.id}' cannot precede itself.",
                    subject=stop.id,
                )
            if target in predecessors:
                raise ModelError(
                    ModelErrorKind.AMBIGUOUS_PRECEDENCE,
                    f"Stop '{stops[target].id}' is preceded by more than one stop.",
                    subject=stops[target].id,
                )
            predecessors[target] = stop.index
        if stop.time_window is not None and stop.time_window[0] > stop.time_window[1]:
            raise ModelError(
                ModelErrorKind.INVALID_VALUE,
                f"Stop '{stop.id}' has a time window that ends before it starts.",
                subject=stop.id,
            )
    _reject_precedence_cycles(stops)


def _reject_precedence_cycles(stops: Sequence[Stop]) -> None:
    """Each stop has at most one target, so a cycle is a walk that returns to a stop on its own path."""
    finished: set[int] = set()
    for stop in stops:
        path: list[int] = []
        current: int | None = stop.index
        while current is not None and current not in finished:
            if current in path:
                raise ModelError(
                    ModelErrorKind.INVALID_PRECEDENCE,
                    f"Stop '{stops[current].id}' is part of a precedence cycle.",
                    subject=stops[current].id,
                )
            path.append(current)
            targets = stops[current].precedes
            current = targets[0] if targets else None
        finished.update(path)


def _validate_vehicles(vehicles: Sequence[Vehicle], stop_count: int) -> None:
    ids: set[str] = set()
    assigned: dict[int, str] = {}
    for position, vehicle in enumerate(vehicles):
        if vehicle.index != position:
            raise ModelError(
                ModelErrorKind.INVALID_INDEX,
                f"Vehicle '{vehicle.id}' has index {vehicle.index} but was registered at position {position}.",
                subject=vehicle.id,
            )
        if vehicle.id in ids:
            raise ModelError(ModelErrorKind.DUPLICATE_ID, f"Duplicate vehicle id '{vehicle.id}'.", subject=vehicle.id)
        ids.add(vehicle.id)
        if vehicle.speed is not None and vehicle.speed <= 0:
            raise ModelError(
                ModelErrorKind.INVALID_VALUE,
                f"Vehicle '{vehicle.id}' speed must be positive.",
                subject=vehicle.id,
            )
        for stop_index in vehicle.initial_stops:
            if not 0 <= stop_index < stop_count:
                raise ModelError(
                    ModelErrorKind.DANGLING_REFERENCE,
                    f"Vehicle '{vehicle.id}' references unknown initial stop index {stop_index}.",
                    subject=stop_index,
                )
            if stop_index in assigned:
                raise ModelError(
                    ModelErrorKind.DUPLICATE_INITIAL_STOP,
                    f"Stop index {stop_index} is an initial stop of both '{assigned[stop_index]}' "
                    f"and '{vehicle.id}'.",
                    subject=stop_index,
                )
            assigned[stop_index] = vehicle.id


def _location(value) -> Location | None:
    if value is None:
        return None
    return Location(value.lat, value.lon)


def _location_leg(a: Location, b: Location) -> float:
    return haversine_m(a.latitude, a.longitude, b.latitude, b.longitude)
