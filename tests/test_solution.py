import math

import pytest

from route_solver.models.domain import Location, Stop, Vehicle
from route_solver.vrp import (
    ModelBuilder,
    OperatorError,
    Plan,
    PrecedenceConstraint,
    Solution,
    TravelDistanceObjective,
    UnplannedObjective,
    UnplannedReason,
    VehicleCapacityConstraint,
)


def _model(initial: tuple[tuple[int, ...], ...] = ((0, 1), (2,)), heavy_stop: int | None = None):
    builder = ModelBuilder()
    for index in range(4):
        builder.stop(
            Stop(
                id=f"S{index}",
                index=index,
                location=Location(0.0, index * 0.01),
                quantities={"boxes": 10 if index == heavy_stop else 1},
                precedes=(1,) if index == 0 else (),
            )
        )
    for index, stops in enumerate(initial):
        builder.vehicle(Vehicle(id=f"V{index}", index=index, capacity={"boxes": 5}, initial_stops=stops))
    matrix = [[abs(i - j) * 10 for j in range(4)] for i in range(4)]
    return (
        builder.distance_matrix(matrix)
        .objective(UnplannedObjective(), 1000)
        .objective(TravelDistanceObjective())
        .constraint(VehicleCapacityConstraint())
        .constraint(PrecedenceConstraint())
        .build()
    )


def test_initial_solution_follows_declared_initial_stops() -> None:
    model = _model()
    solution = Solution.initial(model)

    assert solution.routes == [(0, 1), (2,)]
    assert [(item.id, item.reason) for item in solution.unplanned] == [("S3", UnplannedReason.UNASSIGNED)]
    assert solution.vehicles[0].cost == 10
    assert solution.value == 1000 + 10


def test_partly_listed_unit_is_unplanned() -> None:
    model = _model(initial=((0,), ()))
    solution = Solution.initial(model)

    assert solution.routes == [(), ()]
    reasons = {item.index: item.reason for item in solution.unplanned}
    assert reasons[0] is UnplannedReason.INCOMPLETE_INITIAL_ASSIGNMENT
    assert reasons[1] is UnplannedReason.INCOMPLETE_INITIAL_ASSIGNMENT
    assert reasons[2] is UnplannedReason.UNASSIGNED


def test_infeasible_initial_route_is_dropped() -> None:
    model = _model(heavy_stop=2)
    solution = Solution.initial(model)

    assert solution.routes == [(0, 1), ()]
    reasons = {item.index: item.reason for item in solution.unplanned}
    assert reasons[2] is UnplannedReason.INFEASIBLE_INITIAL_ROUTE


def test_every_stop_planned_once_or_unplanned() -> None:
    model = _model()
    solution = Solution.initial(model)

    planned = [stop for route in solution.routes for stop in route]
    unplanned = [item.index for item in solution.unplanned]
    assert sorted(planned + unplanned) == [0, 1, 2, 3]
    assert not set(planned) & set(unplanned)


def test_applying_a_plan_reevaluates() -> None:
    model = _model()
    solution = Solution.initial(model)

    updated = solution.plan(model, Plan(routes={1: (2, 3)}, operator="test"))

    assert updated.routes == [(0, 1), (2, 3)]
    assert updated.unplanned == ()
    assert updated.value == 20
    assert solution.routes == [(0, 1), (2,)]


def test_removed_units_default_to_removed_reason() -> None:
    model = _model()
    solution = Solution.initial(model)

    updated = solution.plan(model, Plan(routes={0: ()}, operator="test"))

    reasons = {item.index: item.reason for item in updated.unplanned}
    assert reasons == {
        0: UnplannedReason.REMOVED,
        1: UnplannedReason.REMOVED,
        3: UnplannedReason.UNASSIGNED,
    }


def test_neutral_plan_returns_same_solution() -> None:
    model = _model()
    solution = Solution.initial(model)

    assert solution.plan(model, Plan.neutral()) is solution


@pytest.mark.parametrize(
    "routes",
    [
        {1: (2, 0)},
        {1: (2, 3, 3)},
        {0: (0,)},
        {5: (3,)},
        {1: (2, 9)},
    ],
)
def test_invalid_plans_raise_operator_error(routes) -> None:
    model = _model()
    solution = Solution.initial(model)

    with pytest.raises(OperatorError):
        solution.plan(model, Plan(routes=routes, operator="broken"))


def test_best_keeps_left_operand_on_ties() -> None:
    model = _model()
    first = Solution.initial(model)
    second = Solution.initial(model)

    assert first.best(second) is first
    assert second.best(first) is second


def test_best_prefers_lower_value() -> None:
    model = _model()
    worse = Solution.initial(model)
    better = worse.plan(model, Plan(routes={1: (2, 3)}))

    assert worse.best(better) is better
    assert better.best(worse) is better


def test_unreachable_route_costs_infinity() -> None:
    builder = ModelBuilder()
    for index in range(2):
        builder.stop(Stop(id=f"S{index}", index=index, location=Location(0.0, 0.0)))
    model = (
        builder.vehicle(Vehicle(id="V", index=0, initial_stops=(0, 1)))
        .distance_matrix([[0, None], [None, 0]])
        .objective(TravelDistanceObjective())
        .build()
    )

    solution = Solution.initial(model)
    assert math.isinf(solution.vehicles[0].cost)
    assert math.isinf(solution.value)


def test_unit_helpers() -> None:
    model = _model()
    solution = Solution.initial(model)

    assert solution.planned_units(model) == [0, 1]
    assert solution.unplanned_units(model) == [2]
    assert solution.assignments() == {0: 0, 1: 0, 2: 1}
    assert solution.is_planned(2)
    assert not solution.is_planned(3)
