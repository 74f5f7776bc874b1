from abc import ABC, abstractmethod
from typing import List, Sequence

from evolution.hypercube import HyperCube
from evolution.operators import HyperCubeOperations


class CandidateFactory(ABC):
    """Creates candidates for the initial population."""

    @abstractmethod
    def create(self) -> HyperCube:
        ...

    def create_many(self, n: int) -> List[HyperCube]:
        return [self.create() for _ in range(n)]


class UniformRandomSamplingFactory(CandidateFactory):
    """Samples candidates uniformly within the bounds of a template hypercube."""

    def __init__(self, template: HyperCube, operations: HyperCubeOperations):
        self.template = template
        self.operations = operations

    def create(self) -> HyperCube:
        return self.operations.generate_random(self.template)


class SeededCandidateFactory(CandidateFactory):
    """
    Returns copies of known starting points first, then defers to ``fallback``.

    Typically used to make sure a default or previously calibrated
    configuration is part of the initial population.
    """

    def __init__(self, seeds: Sequence[HyperCube], fallback: CandidateFactory):
        self.seeds = list(seeds)
        self.fallback = fallback
        self._next = 0

    def create(self) -> HyperCube:
        if self._next < len(self.seeds):
            seed = self.seeds[self._next]
            self._next += 1
            return seed.clone()
        return self.fallback.create()
