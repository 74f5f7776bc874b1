"""
Candidate generators: how each iteration proposes new configurations.

A generator reads the current ranked population and uses the hypercube
operators to propose offspring. It never evaluates anything; the engine does.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from evolution.fitness import FitnessAssignedScores, rank_population
from evolution.hypercube import HyperCube
from evolution.operators import HyperCubeOperations


class CandidateGenerator(ABC):
    @abstractmethod
    def generate(
        self,
        population: Sequence[FitnessAssignedScores],
        operations: HyperCubeOperations,
    ) -> List[HyperCube]:
        ...

    @staticmethod
    def _points(population: Sequence[FitnessAssignedScores]) -> List[HyperCube]:
        return [member.configuration for member in rank_population(population)]


class RandomRestartGenerator(CandidateGenerator):
    """Samples new points uniformly within the bounds of the best member."""

    def __init__(self, offspring_count: int = 10):
        self.offspring_count = offspring_count

    def generate(self, population, operations):
        best = self._points(population)[0]
        return [operations.generate_random(best) for _ in range(self.offspring_count)]


class GeneticGenerator(CandidateGenerator):
    """
    Uniform crossover between parents drawn from the better half, followed by
    Gaussian perturbation.

    Args:
        offspring_count (int): Number of children proposed per iteration.
        mutation_rate (float): Probability that a child is perturbed at all.
        mutation_scale (float): Noise standard deviation relative to each
            dimension's width.
    """

    def __init__(self, offspring_count: int = 10, mutation_rate: float = 0.1, mutation_scale: float = 0.1):
        self.offspring_count = offspring_count
        self.mutation_rate = mutation_rate
        self.mutation_scale = mutation_scale

    def generate(self, population, operations):
        ranked = self._points(population)
        parents = ranked[: max(2, len(ranked) // 2)]
        rng = operations.rng
        offspring = []
        while len(offspring) < self.offspring_count:
            if len(parents) > 1:
                i, j = rng.choice(len(parents), size=2, replace=False)
                child = operations.uniform_crossover(parents[i], parents[j])
            else:
                child = parents[0].clone()
            if rng.random() < self.mutation_rate:
                child = operations.perturb(child, self.mutation_scale)
            offspring.append(child)
        return offspring


class ReflectionContractionGenerator(CandidateGenerator):
    """
    Simplex moves inside randomly drawn sub-complexes of the population.

    For each move a sub-complex of ``complex_size`` members is drawn, its worst
    point is reflected through the centroid of the others and the matching
    contraction is proposed as well. A reflection that would leave the feasible
    bounds is replaced by a random point within the sub-complex hull, and a
    population that has collapsed onto a single point is reseeded within its
    declared bounds.
    """

    def __init__(
        self,
        offspring_count: int = 10,
        complex_size: int = 3,
        reflection_factor: float = -1.0,
        contraction_factor: float = 0.5,
    ):
        if complex_size < 2:
            raise ValueError("complex_size must be at least 2.")
        self.offspring_count = offspring_count
        self.complex_size = complex_size
        self.reflection_factor = reflection_factor
        self.contraction_factor = contraction_factor

    def generate(self, population, operations):
        ranked = self._points(population)
        if len(ranked) < 2 or operations.is_degenerate(ranked):
            return [operations.generate_random(ranked[0]) for _ in range(self.offspring_count)]

        rng = operations.rng
        size = min(self.complex_size, len(ranked))
        offspring: List[HyperCube] = []
        while len(offspring) < self.offspring_count:
            # Sorted indices keep the sub-complex in fitness order.
            indices = sorted(rng.choice(len(ranked), size=size, replace=False))
            subcomplex = [ranked[i] for i in indices]
            worst, others = subcomplex[-1], subcomplex[:-1]
            center = operations.centroid(others)
            if operations.exceeds_bounds(center, worst, self.reflection_factor):
                offspring.append(operations.generate_random_within_hypercube(subcomplex))
            else:
                offspring.append(operations.homothetic_transform(center, worst, self.reflection_factor))
            if len(offspring) < self.offspring_count:
                offspring.append(operations.homothetic_transform(center, worst, self.contraction_factor))
        return offspring
