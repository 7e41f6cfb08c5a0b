"""Solve orchestration: problem input to model, solver run, response and persisted outputs."""

from __future__ import annotations

import logging
import math

from ..config import settings
from ..persistence.filesystem import FileStorage
from ..schemas.problem import ProblemInput, SolveRequest
from ..schemas.solution import (
    OperatorStatisticsModel,
    RouteStopModel,
    SolveResponse,
    SolveStatisticsModel,
    UnplannedStopModel,
    VehicleRouteModel,
)
from ..vrp import (
    Acceptance,
    AnnealingAcceptance,
    ConnectivityConstraint,
    DistanceExpression,
    DurationExpression,
    GreedyAcceptance,
    Model,
    ModelError,
    ModelErrorKind,
    Operator,
    OperatorParameters,
    PrecedenceConstraint,
    Solution,
    SolverBuilder,
    SolverOptions,
    StopCompatibilities,
    TimeWindowConstraint,
    TravelDistanceObjective,
    UnplannedObjective,
    VehicleCapacityConstraint,
    VehicleCompatibilityConstraint,
    VehiclesUsedObjective,
    get_operator,
)
from .outputs.formatter import solution_to_csv, solution_to_json

logger = logging.getLogger(__name__)


def build_model(problem: ProblemInput) -> Model:
    """Model with the default objectives weighted from settings and the constraints the input needs."""
    constraints = [VehicleCapacityConstraint(), PrecedenceConstraint(), ConnectivityConstraint()]
    if any(stop.start_time_windows for stop in problem.stops):
        constraints.append(TimeWindowConstraint())
    if any(stop.compatible_vehicles is not None for stop in problem.stops):
        constraints.append(VehicleCompatibilityConstraint(_compatibilities(problem)))

    objectives = [
        (UnplannedObjective(), settings.unplanned_penalty),
        (TravelDistanceObjective(), settings.distance_weight),
        (VehiclesUsedObjective(), settings.vehicle_cost),
    ]
    return Model.from_input(
        problem,
        objectives=objectives,
        constraints=constraints,
        expressions=[DistanceExpression(), DurationExpression()],
    )


def _compatibilities(problem: ProblemInput) -> StopCompatibilities:
    vehicle_lookup = {vehicle.id: index for index, vehicle in enumerate(problem.vehicles)}
    allowed: list[list[int] | None] = []
    for stop in problem.stops:
        if stop.compatible_vehicles is None:
            allowed.append(None)
            continue
        indices = []
        for vehicle_id in stop.compatible_vehicles:
            if vehicle_id not in vehicle_lookup:
                raise ModelError(
                    ModelErrorKind.DANGLING_REFERENCE,
                    f"Stop '{stop.id}' is compatible with unknown vehicle '{vehicle_id}'.",
                    subject=vehicle_id,
                )
            indices.append(vehicle_lookup[vehicle_id])
        allowed.append(indices)
    return StopCompatibilities.from_lists(allowed, len(problem.vehicles))


def default_operators() -> list[Operator]:
    """Operators named by ``settings.operator_sequence`` with their configured chances."""
    operators = []
    for name in settings.operator_sequence:
        family = name.partition("_")[0]
        match family:
            case "repair":
                parameters = OperatorParameters(value=settings.repair_units, chance=settings.repair_chance)
            case "destroy":
                parameters = OperatorParameters(value=settings.destroy_fraction, chance=settings.destroy_chance)
            case "reset":
                parameters = OperatorParameters(value=1, chance=settings.reset_chance)
            case _:
                raise ValueError(f"Unknown operator '{name}'.")
        operators.append(get_operator(name, parameters))
    return operators


def make_acceptance(name: str | None = None) -> Acceptance:
    match name or settings.acceptance:
        case "greedy":
            return GreedyAcceptance()
        case "annealing":
            return AnnealingAcceptance(
                initial_temperature=settings.initial_temperature,
                cooling_rate=settings.cooling_rate,
            )
        case other:
            raise ValueError(f"Unknown acceptance criterion '{other}'.")


def solve_problem(request: SolveRequest) -> SolveResponse:
    model = build_model(request)
    parameters = request.solver
    options = SolverOptions(
        max_iterations=settings.max_iterations if parameters.max_iterations is None else parameters.max_iterations,
        time_limit_seconds=(
            settings.time_limit_seconds if parameters.time_limit_seconds is None else parameters.time_limit_seconds
        ),
        seed=settings.seed if parameters.seed is None else parameters.seed,
    )
    solver = (
        SolverBuilder()
        .model(model)
        .operators(default_operators())
        .options(options)
        .acceptance(make_acceptance(parameters.acceptance))
        .build()
    )
    solution = solver.solve()
    response = solution_to_response(model, solution, seed=solver.random.seed)

    if request.run_label:
        response.metadata["run_label"] = request.run_label
    if request.persist:
        storage = FileStorage()
        run_dir = storage.make_run_directory(prefix="solve")
        storage.write_json(run_dir / "summary.json", solution_to_json(response))
        storage.write_csv(run_dir / "routes.csv", solution_to_csv(response))
        response.metadata["output_path"] = str(run_dir)
        logger.info("Persisted solve outputs to %s", run_dir)
    return response


def solution_to_response(model: Model, solution: Solution, *, seed: int) -> SolveResponse:
    routes = [
        VehicleRouteModel(
            vehicle_id=vehicle.id,
            distance=_finite(vehicle.cost),
            stop_count=len(vehicle.route),
            stops=[
                RouteStopModel(stop_id=model.stop(stop_index).id, sequence=sequence)
                for sequence, stop_index in enumerate(vehicle.route, start=1)
            ],
        )
        for vehicle in solution.vehicles
    ]
    unplanned = [UnplannedStopModel(stop_id=item.id, reason=item.reason.value) for item in solution.unplanned]
    statistics = solution.statistics
    return SolveResponse(
        value=_finite(solution.value),
        routes=routes,
        unplanned=unplanned,
        statistics=SolveStatisticsModel(
            iterations=statistics.iterations if statistics else 0,
            duration_seconds=statistics.duration_seconds if statistics else 0.0,
            cancelled=statistics.cancelled if statistics else False,
            seed=seed,
            operators={
                name: OperatorStatisticsModel(
                    executed=counter.executed,
                    skipped=counter.skipped,
                    improved=counter.improved,
                    failed=counter.failed,
                )
                for name, counter in (statistics.operators.items() if statistics else ())
            },
        ),
        metadata={"stops": len(model.stops), "vehicles": len(model.vehicles), "plan_units": len(model.plan_units)},
    )


def _finite(value: float) -> float | None:
    return value if math.isfinite(value) else None
