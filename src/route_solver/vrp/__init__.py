"""Vehicle routing model, solutions, operators and the search loop."""

from .acceptance import Acceptance, AnnealingAcceptance, GreedyAcceptance
from .constraints import (
    ConnectivityConstraint,
    PrecedenceConstraint,
    StopCompatibilities,
    TimeWindowConstraint,
    VehicleCapacityConstraint,
    VehicleCompatibilityConstraint,
)
from .contracts import Constraint, Expression, Objective
from .distance import DistanceMatrix
from .errors import ModelError, ModelErrorKind, OperatorError, SolverConfigError
from .expressions import DistanceExpression, DurationExpression
from .model import Model, ModelBuilder, build_plan_units
from .objectives import TravelDistanceObjective, UnplannedObjective, VehiclesUsedObjective
from .operators import (
    DestroyOperator,
    DestroyVariant,
    Operator,
    OperatorParameters,
    RepairOperator,
    RepairVariant,
    ResetOperator,
    ResetVariant,
    get_operator,
)
from .random import Random
from .solution import (
    OperatorStatistics,
    Plan,
    Solution,
    SolutionStatistics,
    SolutionVehicle,
    UnplannedReason,
    UnplannedStop,
)
from .solver import CancellationToken, Solver, SolverBuilder, SolverOptions, SolverState

__all__ = [
    "Acceptance",
    "AnnealingAcceptance",
    "CancellationToken",
    "ConnectivityConstraint",
    "Constraint",
    "DestroyOperator",
    "DestroyVariant",
    "DistanceExpression",
    "DistanceMatrix",
    "DurationExpression",
    "Expression",
    "GreedyAcceptance",
    "Model",
    "ModelBuilder",
    "ModelError",
    "ModelErrorKind",
    "Objective",
    "Operator",
    "OperatorError",
    "OperatorParameters",
    "OperatorStatistics",
    "Plan",
    "PrecedenceConstraint",
    "Random",
    "RepairOperator",
    "RepairVariant",
    "ResetOperator",
    "ResetVariant",
    "Solution",
    "SolutionStatistics",
    "SolutionVehicle",
    "Solver",
    "SolverBuilder",
    "SolverConfigError",
    "SolverOptions",
    "SolverState",
    "StopCompatibilities",
    "TimeWindowConstraint",
    "TravelDistanceObjective",
    "UnplannedObjective",
    "UnplannedReason",
    "UnplannedStop",
    "VehicleCapacityConstraint",
    "VehicleCompatibilityConstraint",
    "VehiclesUsedObjective",
    "build_plan_units",
    "get_operator",
]
