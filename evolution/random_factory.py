from typing import Optional

import numpy as np


class RandomNumberGeneratorFactory:
    """
    Hands out independent numpy generators derived from one seed.

    Each call to ``create`` spawns a child ``SeedSequence``, so components that
    draw random numbers never share a stream, and a given seed reproduces the
    same sequence of generators.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._sequence = np.random.SeedSequence(seed)

    def create(self) -> np.random.Generator:
        child = self._sequence.spawn(1)[0]
        return np.random.default_rng(child)
