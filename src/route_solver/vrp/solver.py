"""Iterative destroy/repair search over a :class:`Model`."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..config import settings
from .acceptance import Acceptance, GreedyAcceptance
from .errors import OperatorError, SolverConfigError
from .model import Model
from .operators import Operator
from .random import Random
from .solution import OperatorStatistics, Solution, SolutionStatistics

logger = logging.getLogger(__name__)


class SolverState(str, Enum):
    IDLE = "idle"
    ITERATING = "iterating"
    DONE = "done"


class CancellationToken:
    """Cooperative stop signal checked by the solver before each iteration."""

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True, slots=True)
class SolverOptions:
    max_iterations: int = 100
    time_limit_seconds: Optional[float] = None
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_iterations < 0:
            raise SolverConfigError(f"max_iterations must be >= 0, got {self.max_iterations}.")
        if self.time_limit_seconds is not None and self.time_limit_seconds < 0:
            raise SolverConfigError(f"time_limit_seconds must be >= 0, got {self.time_limit_seconds}.")

    @classmethod
    def from_settings(cls) -> "SolverOptions":
        return cls(
            max_iterations=settings.max_iterations,
            time_limit_seconds=settings.time_limit_seconds,
            seed=settings.seed,
        )


class Solver:
    """Runs the search loop.

    Each iteration offers the working solution to every operator in
    registration order. An operator fires when its chance roll succeeds;
    its plan is applied, the acceptance criterion decides whether the
    result becomes the working solution, and the best solution seen so
    far is kept.
    """

    def __init__(
        self,
        *,
        model: Model,
        operators: Iterable[Operator],
        options: SolverOptions,
        random: Random,
        acceptance: Acceptance,
        solution: Solution | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self.model = model
        self.operators = tuple(operators)
        self.options = options
        self.random = random
        self.acceptance = acceptance
        self.cancellation = cancellation
        self.state = SolverState.IDLE
        self.iteration_count = 0
        self._solution = solution
        self._best: Solution | None = None

    @property
    def solution(self) -> Solution | None:
        return self._best or self._solution

    def _should_stop(self, deadline: float | None) -> bool:
        if self.cancellation is not None and self.cancellation.cancelled:
            return True
        return deadline is not None and time.monotonic() >= deadline

    def solve(self) -> Solution:
        if self.state is SolverState.DONE and self._best is not None:
            return self._best

        started = time.monotonic()
        deadline = None
        if self.options.time_limit_seconds is not None:
            deadline = started + self.options.time_limit_seconds
        keys = statistics_keys(self.operators)
        stats = {key: OperatorStatistics() for key in keys}

        working = self._solution or Solution.initial(self.model)
        best = working
        cancelled = False
        self.state = SolverState.ITERATING
        logger.info(
            "Solving with %d operators for up to %d iterations (seed=%s, initial value=%.3f)",
            len(self.operators),
            self.options.max_iterations,
            self.random.seed,
            working.value,
        )

        while self.iteration_count < self.options.max_iterations:
            if self._should_stop(deadline):
                cancelled = True
                logger.info("Solver stopped early after %d iterations", self.iteration_count)
                break
            for key, operator in zip(keys, self.operators):
                counter = stats[key]
                if not self.random.chance(operator.chance(), 1.0):
                    counter.skipped += 1
                    continue
                try:
                    plan = operator.execute(self.model, working, self.random)
                    if not plan.is_neutral and not self.model.is_feasible(working, plan):
                        counter.executed += 1
                        continue
                    candidate = working.plan(self.model, plan)
                except OperatorError as exc:
                    counter.failed += 1
                    logger.warning("%s failed in iteration %d: %s", key, self.iteration_count, exc)
                    continue
                except Exception:
                    counter.failed += 1
                    logger.exception("%s raised in iteration %d", key, self.iteration_count)
                    continue
                counter.executed += 1
                if candidate.value < best.value:
                    counter.improved += 1
                if self.acceptance.accept(working, candidate, self.random):
                    working = candidate
                best = best.best(candidate)
            self.acceptance.step()
            self.iteration_count += 1
            logger.debug("Iteration %d: working=%.3f best=%.3f", self.iteration_count, working.value, best.value)

        duration = time.monotonic() - started
        self._best = best.with_statistics(
            SolutionStatistics(
                iterations=self.iteration_count,
                duration_seconds=duration,
                cancelled=cancelled,
                operators=stats,
            )
        )
        self.state = SolverState.DONE
        logger.info(
            "Solved in %.3fs: value=%.3f, %d unplanned stops",
            duration,
            self._best.value,
            len(self._best.unplanned),
        )
        return self._best


def statistics_keys(operators: Iterable[Operator]) -> list[str]:
    """Operator names made unique by registration order, e.g. ``Destroy Operator (Random) #2``."""
    seen: dict[str, int] = {}
    keys = []
    for operator in operators:
        name = operator.name()
        seen[name] = seen.get(name, 0) + 1
        keys.append(name if seen[name] == 1 else f"{name} #{seen[name]}")
    return keys


class SolverBuilder:
    """Fluent configuration for :class:`Solver`. A model is required."""

    def __init__(self) -> None:
        self._operators: list[Operator] = []
        self._options: SolverOptions | None = None
        self._model: Model | None = None
        self._solution: Solution | None = None
        self._random: Random | None = None
        self._acceptance: Acceptance | None = None
        self._cancellation: CancellationToken | None = None

    def operator(self, operator: Operator) -> "SolverBuilder":
        self._operators.append(operator)
        return self

    def operators(self, operators: Iterable[Operator]) -> "SolverBuilder":
        self._operators.extend(operators)
        return self

    def options(self, options: SolverOptions) -> "SolverBuilder":
        self._options = options
        return self

    def model(self, model: Model) -> "SolverBuilder":
        self._model = model
        return self

    def solution(self, solution: Solution) -> "SolverBuilder":
        self._solution = solution
        return self

    def random(self, random: Random) -> "SolverBuilder":
        self._random = random
        return self

    def acceptance(self, acceptance: Acceptance) -> "SolverBuilder":
        self._acceptance = acceptance
        return self

    def cancellation(self, token: CancellationToken) -> "SolverBuilder":
        self._cancellation = token
        return self

    def build(self) -> Solver:
        if self._model is None:
            raise SolverConfigError("A model is required to build a solver.")
        options = self._options or SolverOptions.from_settings()
        if self._solution is not None and len(self._solution.vehicles) != len(self._model.vehicles):
            raise SolverConfigError("Initial solution does not match the model's vehicles.")
        return Solver(
            model=self._model,
            operators=self._operators,
            options=options,
            random=self._random or Random(options.seed),
            acceptance=self._acceptance or GreedyAcceptance(),
            solution=self._solution,
            cancellation=self._cancellation,
        )
