# evolution/operators.py
from typing import List, Optional, Sequence

import numpy as np

from evolution.constraints import clamp
from evolution.errors import IncompatibleHypercubes
from evolution.hypercube import HyperCube


class HyperCubeOperations:
    """
    Geometric operators that synthesise new hypercubes from existing ones.

    Every operator returns a new hypercube and leaves its inputs untouched.
    Bounds of the result are inherited from the first (or source) point.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    @staticmethod
    def _check_compatible(points: Sequence[HyperCube]) -> List[str]:
        if not points:
            raise ValueError("At least one hypercube is required.")
        reference = points[0]
        for point in points[1:]:
            if not reference.same_dimensions(point):
                raise IncompatibleHypercubes(
                    f"Dimension sets differ: {reference.dimension_names()} vs {point.dimension_names()}"
                )
        return reference.dimension_names()

    @staticmethod
    def _matrix(points: Sequence[HyperCube], names: List[str]) -> np.ndarray:
        return np.array([[p.get_value(n) for n in names] for p in points], dtype=float)

    @staticmethod
    def _with_values(template: HyperCube, names: List[str], values) -> HyperCube:
        result = template.clone()
        for name, value in zip(names, values):
            low, high = result.get_min(name), result.get_max(name)
            result.set_value(name, clamp(float(value), low, high))
        return result

    def centroid(self, points: Sequence[HyperCube]) -> HyperCube:
        """Arithmetic mean of the points in every dimension."""
        names = self._check_compatible(points)
        means = self._matrix(points, names).mean(axis=0)
        return self._with_values(points[0], names, means)

    def generate_random_within_hypercube(self, points: Sequence[HyperCube]) -> HyperCube:
        """
        Samples uniformly within the hull spanned by the values of ``points``.

        Useful to reseed a complex that has collapsed or produced an infeasible move.
        """
        names = self._check_compatible(points)
        values = self._matrix(points, names)
        low, high = values.min(axis=0), values.max(axis=0)
        return self._with_values(points[0], names, self.rng.uniform(low, high))

    def generate_random(self, point: HyperCube) -> HyperCube:
        """Samples uniformly within ``point``'s own declared bounds."""
        names = point.dimension_names()
        low = np.array([point.get_min(n) for n in names], dtype=float)
        high = np.array([point.get_max(n) for n in names], dtype=float)
        return self._with_values(point, names, self.rng.uniform(low, high))

    def _homothety(self, center: HyperCube, point: HyperCube, factor: float):
        names = self._check_compatible([point, center])
        c = np.array([center.get_value(n) for n in names], dtype=float)
        p = np.array([point.get_value(n) for n in names], dtype=float)
        return names, (1.0 - factor) * c + factor * p

    def homothetic_transform(self, center: HyperCube, point: HyperCube, factor: float) -> HyperCube:
        """
        Computes ``center + factor * (point - center)`` in every dimension.

        ``factor`` 1 leaves ``point`` unchanged, 0 returns the center, negative
        values reflect through the center and ``|factor| < 1`` contracts toward
        it. Results are clamped to the bounds of ``point``.
        """
        names, values = self._homothety(center, point, factor)
        return self._with_values(point, names, values)

    def exceeds_bounds(self, center: HyperCube, point: HyperCube, factor: float) -> bool:
        """True if :meth:`homothetic_transform` would have to clamp the result."""
        names, values = self._homothety(center, point, factor)
        return any(
            not point.get_min(n) <= v <= point.get_max(n) for n, v in zip(names, values)
        )

    def perturb(self, point: HyperCube, scale: float = 0.1, rate: float = 1.0) -> HyperCube:
        """
        Applies Gaussian noise to the values of ``point``.

        Args:
            point (HyperCube): The point to perturb.
            scale (float): Noise standard deviation, relative to each dimension's width.
            rate (float): Probability that a given dimension is perturbed.
        """
        names = point.dimension_names()
        values = []
        for name in names:
            value = point.get_value(name)
            if self.rng.random() < rate:
                width = point.get_max(name) - point.get_min(name)
                value += self.rng.normal(0.0, scale * width)
            values.append(value)
        return self._with_values(point, names, values)

    def uniform_crossover(self, p1: HyperCube, p2: HyperCube) -> HyperCube:
        """Takes each dimension's value from either parent with equal probability."""
        names = self._check_compatible([p1, p2])
        values = [
            p1.get_value(n) if self.rng.random() < 0.5 else p2.get_value(n) for n in names
        ]
        return self._with_values(p1, names, values)

    def is_degenerate(self, points: Sequence[HyperCube]) -> bool:
        """True if all points share the same value in every dimension."""
        names = self._check_compatible(points)
        values = self._matrix(points, names)
        return bool(np.all(values.max(axis=0) == values.min(axis=0)))
