"""Bounded, named, multi-dimensional points: the candidate representation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List

from evolution.configuration import ConfigurableSystem
from evolution.constraints import BoundsPolicy, check_bounds, enforce_bounds
from evolution.errors import IncompatibleSystem, UnknownDimension


@dataclass
class _Dimension:
    min: float
    max: float
    value: float


class HyperCube:
    """
    A point in a named parameter space where each dimension has feasible bounds.

    Values that fall outside ``[min, max]`` are handled according to
    ``bounds_policy``: rejected with ``OutOfBounds`` (the default) or clamped.
    Dimensions are kept in definition order.
    """

    def __init__(self, bounds_policy: BoundsPolicy = BoundsPolicy.REJECT):
        self.bounds_policy = bounds_policy
        self._dims: Dict[str, _Dimension] = {}

    @classmethod
    def from_bounds(
        cls,
        bounds: Dict[str, tuple],
        bounds_policy: BoundsPolicy = BoundsPolicy.REJECT,
    ) -> "HyperCube":
        """
        Creates a hypercube from ``{name: (min, max)}`` or ``{name: (min, max, value)}``.

        When no value is given the dimension starts at the middle of its range.
        """
        cube = cls(bounds_policy)
        for name, spec in bounds.items():
            low, high = float(spec[0]), float(spec[1])
            value = float(spec[2]) if len(spec) > 2 else (low + high) / 2.0
            cube.define(name, low, high, value)
        return cube

    def _dim(self, name: str) -> _Dimension:
        try:
            return self._dims[name]
        except KeyError:
            raise UnknownDimension(name) from None

    def dimension_names(self) -> List[str]:
        return list(self._dims)

    def dimensions(self) -> int:
        return len(self._dims)

    def __len__(self) -> int:
        return len(self._dims)

    def __contains__(self, name: object) -> bool:
        return name in self._dims

    def __iter__(self) -> Iterator[str]:
        return iter(self._dims)

    def get_value(self, name: str) -> float:
        return self._dim(name).value

    def get_min(self, name: str) -> float:
        return self._dim(name).min

    def get_max(self, name: str) -> float:
        return self._dim(name).max

    def define(self, name: str, min_value: float, max_value: float, value: float) -> None:
        """Creates or replaces the dimension ``name``."""
        check_bounds(name, min_value, max_value)
        value = enforce_bounds(name, value, min_value, max_value, self.bounds_policy)
        self._dims[name] = _Dimension(min_value, max_value, value)

    def set_value(self, name: str, value: float) -> None:
        dim = self._dim(name)
        dim.value = enforce_bounds(name, value, dim.min, dim.max, self.bounds_policy)

    def set_min(self, name: str, value: float) -> None:
        dim = self._dim(name)
        self.set_min_max_value(name, value, dim.max, dim.value)

    def set_max(self, name: str, value: float) -> None:
        dim = self._dim(name)
        self.set_min_max_value(name, dim.min, value, dim.value)

    def set_min_max_value(self, name: str, min_value: float, max_value: float, value: float) -> None:
        """
        Updates the bounds and value of an existing dimension in one step.

        Everything is validated before the dimension is touched, so on failure
        the dimension keeps its previous bounds and value.

        Raises:
            UnknownDimension: If ``name`` is not defined.
            InvalidBounds: If ``min_value > max_value``.
            OutOfBounds: If ``value`` is infeasible under the reject policy.
        """
        dim = self._dim(name)
        check_bounds(name, min_value, max_value)
        value = enforce_bounds(name, value, min_value, max_value, self.bounds_policy)
        dim.min, dim.max, dim.value = min_value, max_value, value

    def values(self) -> List[float]:
        return [dim.value for dim in self._dims.values()]

    def as_dict(self) -> Dict[str, float]:
        return {name: dim.value for name, dim in self._dims.items()}

    def clone(self) -> "HyperCube":
        copy = HyperCube(self.bounds_policy)
        copy._dims = {
            name: _Dimension(dim.min, dim.max, dim.value) for name, dim in self._dims.items()
        }
        return copy

    def configuration_description(self) -> str:
        return ", ".join(f"{name}={dim.value:.6g}" for name, dim in self._dims.items())

    def apply_configuration(self, system: ConfigurableSystem[float]) -> None:
        """
        Writes every dimension value onto ``system``.

        Raises:
            IncompatibleSystem: If ``system`` does not accept named parameters or
                lacks one of this hypercube's dimensions. Nothing is written in
                that case.
        """
        if not isinstance(system, ConfigurableSystem):
            raise IncompatibleSystem(
                f"{type(system).__name__} does not accept named parameter values"
            )
        accepted = set(system.parameter_names())
        missing = [name for name in self._dims if name not in accepted]
        if missing:
            raise IncompatibleSystem(
                f"{type(system).__name__} has no parameter(s) named {missing}"
            )
        for name, dim in self._dims.items():
            system.set_parameter(name, dim.value)

    def same_dimensions(self, other: Any) -> bool:
        return isinstance(other, HyperCube) and set(self._dims) == set(other._dims)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HyperCube):
            return NotImplemented
        return self._dims == other._dims

    __hash__ = None

    def __repr__(self) -> str:
        return f"HyperCube({self.configuration_description()})"
