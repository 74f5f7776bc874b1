"""
Fitness assignment: turning objective scores into a ranking over a population.

Lower fitness is better everywhere. Every objective is first expressed as a
value to minimise (maximised objectives are negated), then combined.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, List, Sequence, Tuple, TypeVar, Union

from evolution.errors import PopulationShapeError
from evolution.hypercube import HyperCube
from evolution.nsga2 import crowding_distance_assignment, fast_non_dominated_sort
from evolution.objectives import ObjectiveScores

F = TypeVar("F")

ScoredCandidate = Tuple[Any, ObjectiveScores]


@dataclass(frozen=True, eq=False)
class FitnessAssignedScores(Generic[F]):
    """A candidate configuration, its objective scores and the fitness derived from them."""

    configuration: Any
    scores: ObjectiveScores
    fitness: F

    def compare_to(self, other: "FitnessAssignedScores[F]") -> int:
        if self.fitness < other.fitness:
            return -1
        if other.fitness < self.fitness:
            return 1
        return 0

    def __lt__(self, other: "FitnessAssignedScores[F]") -> bool:
        return self.fitness < other.fitness

    def __str__(self) -> str:
        return f"{self.fitness}, {self.scores}"


@dataclass(frozen=True, order=True)
class ParetoFitness:
    """Pareto rank first, then density (negated crowding distance) within the rank."""

    rank: int
    density: float

    @property
    def crowding_distance(self) -> float:
        return -self.density

    def __str__(self) -> str:
        return f"rank={self.rank}, crowding={self.crowding_distance:.4g}"


class FitnessAssignment(ABC):
    """Assigns a comparable fitness value to every member of a population."""

    def assign_fitness(self, candidates: Sequence[ScoredCandidate]) -> List[FitnessAssignedScores]:
        """
        Assigns fitness to ``(configuration, scores)`` pairs.

        Returns:
            list[FitnessAssignedScores]: One record per candidate, in input order.

        Raises:
            PopulationShapeError: If the members do not share the same
                objectives or dimensions. Checked before any fitness is computed.
        """
        self.check_population(candidates)
        if not candidates:
            return []
        fitness_values = self._fitness_values([scores for _, scores in candidates])
        return [
            FitnessAssignedScores(configuration, scores, fitness)
            for (configuration, scores), fitness in zip(candidates, fitness_values)
        ]

    @abstractmethod
    def _fitness_values(self, scores: Sequence[ObjectiveScores]) -> List[Any]:
        ...

    def check_population(self, candidates: Sequence[ScoredCandidate]) -> None:
        if not candidates:
            return
        first_config, first_scores = candidates[0]
        orientation = first_scores.orientation()
        for configuration, scores in candidates[1:]:
            if scores.orientation() != orientation:
                raise PopulationShapeError(
                    f"Objective mismatch: expected {orientation}, got {scores.orientation()}"
                )
            if isinstance(first_config, HyperCube) and not first_config.same_dimensions(configuration):
                raise PopulationShapeError(
                    f"Dimension mismatch: expected {first_config.dimension_names()}, got {configuration!r}"
                )

    def leading(self, population: Sequence[FitnessAssignedScores]) -> List[FitnessAssignedScores]:
        """The member(s) sharing the best fitness value."""
        if not population:
            return []
        best = min(population)
        return [member for member in population if member.compare_to(best) == 0]


class ScalarFitnessAssignment(FitnessAssignment):
    """
    Fitness is a single objective's value, negated when that objective is maximised.

    Args:
        objective (int | str): Position or name of the objective to rank by.
    """

    def __init__(self, objective: Union[int, str] = 0):
        self.objective = objective

    def _fitness_values(self, scores):
        return [s.get_objective(self.objective).minimization_value() for s in scores]


class ParetoFitnessAssignment(FitnessAssignment):
    """
    Ranks candidates by non-dominated sorting with a crowding-distance tiebreak.

    Rank 0 is the non-dominated set; rank k is non-dominated once ranks 0..k-1
    are removed. Within a rank, candidates in less crowded regions come first
    and the extremes of each objective come first of all. Equal crowding
    distances keep the input order when the population is sorted.
    """

    def _fitness_values(self, scores):
        vectors = [s.minimization_vector() for s in scores]
        fitness: List[Any] = [None] * len(vectors)
        for rank, front in enumerate(fast_non_dominated_sort(vectors)):
            distances = crowding_distance_assignment(vectors, front)
            for i in front:
                fitness[i] = ParetoFitness(rank, -distances[i])
        return fitness

    def leading(self, population):
        return [member for member in population if member.fitness.rank == 0]


def rank_population(population: Sequence[FitnessAssignedScores]) -> List[FitnessAssignedScores]:
    """Sorts by fitness, best first; ties keep their current order."""
    return sorted(population)


def select_survivors(population: Sequence[FitnessAssignedScores], k: int) -> List[FitnessAssignedScores]:
    """Keeps the ``k`` best members by fitness."""
    return rank_population(population)[:k]
