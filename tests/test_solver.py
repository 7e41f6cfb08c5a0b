import logging
from types import SimpleNamespace

import pytest

from route_solver.models.domain import Location, Stop, Vehicle
from route_solver.vrp import (
    AnnealingAcceptance,
    CancellationToken,
    DestroyOperator,
    DestroyVariant,
    GreedyAcceptance,
    ModelBuilder,
    Operator,
    OperatorError,
    OperatorParameters,
    Plan,
    Random,
    RepairOperator,
    RepairVariant,
    Solution,
    SolverBuilder,
    SolverConfigError,
    SolverOptions,
    SolverState,
    TravelDistanceObjective,
    UnplannedObjective,
    VehicleCapacityConstraint,
)


def _model():
    builder = ModelBuilder()
    positions = [0, 7, 3, 9, 1, 5]
    for index, position in enumerate(positions):
        builder.stop(Stop(id=f"S{index}", index=index, location=Location(0.0, 0.0), quantities={"boxes": 1}))
    builder.vehicle(Vehicle(id="V0", index=0, capacity={"boxes": 4}, initial_stops=(1, 0, 3)))
    builder.vehicle(Vehicle(id="V1", index=1, capacity={"boxes": 4}))
    matrix = [[abs(a - b) * 10 for b in positions] for a in positions]
    return (
        builder.distance_matrix(matrix)
        .objective(UnplannedObjective(), 1000)
        .objective(TravelDistanceObjective())
        .constraint(VehicleCapacityConstraint())
        .build()
    )


def _operators():
    return [
        DestroyOperator(DestroyVariant.RANDOM, OperatorParameters(value=2, chance=0.7)),
        DestroyOperator(DestroyVariant.WORST, OperatorParameters(value=1, chance=0.3)),
        RepairOperator(RepairVariant.NEAREST),
    ]


def _solver(max_iterations: int, seed: int = 5, **kwargs):
    builder = SolverBuilder().model(kwargs.pop("model", None) or _model()).operators(kwargs.pop("operators", None) or _operators())
    builder.options(SolverOptions(max_iterations=max_iterations, seed=seed, **kwargs))
    return builder.build()


class _BrokenOperator(Operator):
    def __init__(self) -> None:
        self.calls = 0

    def name(self) -> str:
        return "Broken"

    def execute(self, model, solution, random) -> Plan:
        self.calls += 1
        if self.calls % 2:
            raise OperatorError("cannot act")
        return Plan(routes={1: (0,)}, operator=self.name())


@pytest.mark.parametrize("iterations", [0, 1, 5, 25])
def test_iteration_count_matches_max_iterations(iterations: int) -> None:
    solver = _solver(iterations)
    solution = solver.solve()

    assert solver.iteration_count == iterations
    assert solution.statistics is not None
    assert solution.statistics.iterations == iterations
    assert solver.state is SolverState.DONE


def test_zero_iterations_returns_seed_solution() -> None:
    model = _model()
    seed = Solution.initial(model)
    solver = SolverBuilder().model(model).operators(_operators()).solution(seed).options(SolverOptions(max_iterations=0)).build()

    solution = solver.solve()

    assert solution.routes == seed.routes
    assert solution.value == seed.value


def test_best_value_never_regresses() -> None:
    initial = Solution.initial(_model()).value
    values = [_solver(iterations).solve().value for iterations in range(12)]

    assert values[0] == initial
    assert all(later <= earlier for earlier, later in zip(values, values[1:]))


def test_search_plans_every_stop() -> None:
    solution = _solver(30).solve()

    assert solution.unplanned == ()
    assert all(len(route) <= 4 for route in solution.routes)


def test_same_seed_same_result() -> None:
    first = _solver(20, seed=99).solve()
    second = _solver(20, seed=99).solve()

    assert first.routes == second.routes
    assert first.value == second.value


def test_all_skipped_iterations_leave_solution_unchanged() -> None:
    operators = [
        DestroyOperator(DestroyVariant.RANDOM, OperatorParameters(value=2, chance=0.0)),
        RepairOperator(RepairVariant.NEAREST, OperatorParameters(chance=0.0)),
    ]
    model = _model()
    solver = _solver(10, model=model, operators=operators)

    solution = solver.solve()

    assert solution.routes == Solution.initial(model).routes
    assert solver.iteration_count == 10
    counters = solution.statistics.operators
    assert counters["Destroy Operator (Random)"].skipped == 10
    assert counters["Repair Operator (Nearest)"].executed == 0


def test_operator_failures_are_absorbed(caplog) -> None:
    broken = _BrokenOperator()
    solver = _solver(4, operators=[broken])

    with caplog.at_level(logging.WARNING):
        solution = solver.solve()

    assert solver.iteration_count == 4
    counter = solution.statistics.operators["Broken"]
    assert counter.failed == 4
    assert counter.executed == 0
    assert "cannot act" in caplog.text


def test_cancelled_token_stops_before_first_iteration() -> None:
    token = CancellationToken()
    token.cancel()
    solver = SolverBuilder().model(_model()).operators(_operators()).options(SolverOptions(max_iterations=50)).cancellation(token).build()

    solution = solver.solve()

    assert solver.iteration_count == 0
    assert solution.statistics.cancelled
    assert solution.routes == Solution.initial(_model()).routes


def test_zero_time_limit_stops_immediately() -> None:
    solver = _solver(50, time_limit_seconds=0)

    solution = solver.solve()

    assert solver.iteration_count == 0
    assert solution.statistics.cancelled


def test_solve_twice_returns_stored_solution() -> None:
    solver = _solver(3)
    first = solver.solve()

    assert solver.solve() is first
    assert solver.iteration_count == 3


def test_builder_validation() -> None:
    with pytest.raises(SolverConfigError):
        SolverBuilder().operators(_operators()).build()
    with pytest.raises(SolverConfigError):
        SolverOptions(max_iterations=-1)
    with pytest.raises(SolverConfigError):
        SolverOptions(time_limit_seconds=-1)


def test_builder_defaults() -> None:
    solver = SolverBuilder().model(_model()).build()

    assert solver.state is SolverState.IDLE
    assert isinstance(solver.acceptance, GreedyAcceptance)
    assert solver.options.max_iterations == 100
    assert solver.operators == ()


def test_greedy_acceptance_requires_strict_improvement() -> None:
    acceptance = GreedyAcceptance()
    random = Random(1)

    assert acceptance.accept(SimpleNamespace(value=10), SimpleNamespace(value=9), random)
    assert not acceptance.accept(SimpleNamespace(value=10), SimpleNamespace(value=10), random)


def test_annealing_acceptance_cools_down() -> None:
    acceptance = AnnealingAcceptance(initial_temperature=1e9, cooling_rate=0.5, min_temperature=1e-9)
    random = Random(1)
    current, worse = SimpleNamespace(value=10), SimpleNamespace(value=11)

    assert acceptance.accept(current, worse, random)
    for _ in range(200):
        acceptance.step()
    assert acceptance.temperature == 1e-9
    assert not acceptance.accept(current, worse, random)
    assert not acceptance.accept(current, SimpleNamespace(value=float("inf")), random)
    with pytest.raises(ValueError):
        AnnealingAcceptance(cooling_rate=0)


def test_annealing_solver_keeps_best() -> None:
    model = _model()
    solver = (
        SolverBuilder()
        .model(model)
        .operators(_operators())
        .options(SolverOptions(max_iterations=15, seed=3))
        .acceptance(AnnealingAcceptance(initial_temperature=500, cooling_rate=0.9))
        .build()
    )

    solution = solver.solve()

    assert solution.value <= Solution.initial(model).value


class _CrashingOperator(Operator):
    def name(self) -> str:
        return "Crashing"

    def execute(self, model, solution, random) -> Plan:
        raise KeyError("boom")


def test_unexpected_operator_exceptions_are_absorbed(caplog) -> None:
    model = _model()
    operators = [_CrashingOperator(), RepairOperator(RepairVariant.RANDOM)]
    solver = _solver(3, model=model, operators=operators)

    with caplog.at_level(logging.ERROR):
        solution = solver.solve()

    assert solver.iteration_count == 3
    assert solver.state is SolverState.DONE
    counters = solution.statistics.operators
    assert counters["Crashing"].failed == 3
    assert counters["Repair Operator (Random)"].executed == 3
    assert solution.value < Solution.initial(model).value
    assert "Crashing raised" in caplog.text
    assert any(record.exc_info for record in caplog.records)


def test_same_named_operators_keep_separate_statistics() -> None:
    operators = [
        DestroyOperator(DestroyVariant.RANDOM, OperatorParameters(value=1, chance=0.0)),
        DestroyOperator(DestroyVariant.RANDOM, OperatorParameters(value=2, chance=1.0)),
        RepairOperator(RepairVariant.NEAREST),
    ]
    solution = _solver(6, operators=operators).solve()

    counters = solution.statistics.operators
    assert list(counters) == [
        "Destroy Operator (Random)",
        "Destroy Operator (Random) #2",
        "Repair Operator (Nearest)",
    ]
    assert counters["Destroy Operator (Random)"].skipped == 6
    assert counters["Destroy Operator (Random)"].executed == 0
    assert counters["Destroy Operator (Random) #2"].executed == 6
