"""Termination conditions consulted by the engine once per iteration."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional, Sequence

if TYPE_CHECKING:
    from evolution.engine import EvolutionEngine


class TerminationCondition(ABC):
    """
    Decides when a run has converged.

    The engine binds itself before its first iteration, so conditions can read
    live state such as ``iteration``, ``evaluations``, ``elapsed`` and
    ``population``.
    """

    def __init__(self):
        self.engine: Optional["EvolutionEngine"] = None

    def bind(self, engine: "EvolutionEngine") -> None:
        self.engine = engine

    @abstractmethod
    def is_finished(self) -> bool:
        ...

    def _require_engine(self) -> "EvolutionEngine":
        if self.engine is None:
            raise RuntimeError(f"{type(self).__name__} is not bound to an engine.")
        return self.engine


class MaxIterationTermination(TerminationCondition):
    def __init__(self, max_iterations: int):
        super().__init__()
        self.max_iterations = max_iterations

    def is_finished(self) -> bool:
        return self._require_engine().iteration >= self.max_iterations


class MaxEvaluationTermination(TerminationCondition):
    def __init__(self, max_evaluations: int):
        super().__init__()
        self.max_evaluations = max_evaluations

    def is_finished(self) -> bool:
        return self._require_engine().evaluations >= self.max_evaluations


class WallClockTermination(TerminationCondition):
    def __init__(self, max_seconds: float):
        super().__init__()
        self.max_seconds = max_seconds

    def is_finished(self) -> bool:
        return self._require_engine().elapsed >= self.max_seconds


class TargetFitnessTermination(TerminationCondition):
    """
    Stops once the best fitness in the population is at or below ``target``.
    ``target`` must be comparable with the fitness values, a number for scalar fitness.
    """

    def __init__(self, target: Any):
        super().__init__()
        self.target = target

    def is_finished(self) -> bool:
        population = self._require_engine().population
        return bool(population) and min(population).fitness <= self.target


class StagnationTermination(TerminationCondition):
    """
    Stops when the best fitness has improved by less than ``min_improvement``
    for ``patience`` consecutive iterations. Requires scalar fitness values.
    """

    def __init__(self, patience: int = 5, min_improvement: float = 0.0):
        super().__init__()
        self.patience = patience
        self.min_improvement = min_improvement
        self._best = None
        self._stalled = 0

    def bind(self, engine):
        super().bind(engine)
        self._best = None
        self._stalled = 0

    def is_finished(self) -> bool:
        population = self._require_engine().population
        if not population:
            return False
        current = min(population).fitness
        if self._best is None or self._best - current > self.min_improvement:
            self._best = current
            self._stalled = 0
        else:
            self._stalled += 1
        return self._stalled >= self.patience


class AnyTermination(TerminationCondition):
    """Finished as soon as any of its conditions is."""

    def __init__(self, conditions: Sequence[TerminationCondition]):
        super().__init__()
        self.conditions = list(conditions)

    def bind(self, engine):
        super().bind(engine)
        for condition in self.conditions:
            condition.bind(engine)

    def is_finished(self) -> bool:
        # Every condition is consulted so stateful ones keep counting.
        results = [condition.is_finished() for condition in self.conditions]
        return any(results)
