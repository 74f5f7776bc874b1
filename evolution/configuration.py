"""Capabilities a system configuration may implement.

A configuration type implements only the protocols it needs; callers ask for a
capability with :func:`supports` instead of relying on a class hierarchy::

    if supports(candidate, Cloneable, BoundedNumeric):
        child = candidate.clone()
"""
from __future__ import annotations

from typing import Any, Protocol, Sequence, TypeVar, runtime_checkable

T_contra = TypeVar("T_contra", contravariant=True)


@runtime_checkable
class Describable(Protocol):
    def configuration_description(self) -> str:
        ...


@runtime_checkable
class Applicable(Protocol):
    def apply_configuration(self, system: Any) -> None:
        ...


@runtime_checkable
class Cloneable(Protocol):
    def clone(self) -> Any:
        ...


@runtime_checkable
class BoundedNumeric(Protocol):
    """Named numeric parameters, each with a feasible ``[min, max]`` range."""

    def dimension_names(self) -> Sequence[str]:
        ...

    def dimensions(self) -> int:
        ...

    def get_value(self, name: str) -> float:
        ...

    def get_min(self, name: str) -> float:
        ...

    def get_max(self, name: str) -> float:
        ...

    def set_value(self, name: str, value: float) -> None:
        ...


@runtime_checkable
class BoundsSettable(Protocol):
    def set_min(self, name: str, value: float) -> None:
        ...

    def set_max(self, name: str, value: float) -> None:
        ...

    def set_min_max_value(self, name: str, min_value: float, max_value: float, value: float) -> None:
        ...


@runtime_checkable
class ConfigurableSystem(Protocol[T_contra]):
    """A system (usually a model) that named parameter values can be written to."""

    def parameter_names(self) -> Sequence[str]:
        ...

    def set_parameter(self, name: str, value: T_contra) -> None:
        ...


def supports(obj: Any, *capabilities: type) -> bool:
    """Return True if ``obj`` implements every protocol in ``capabilities``."""
    return all(isinstance(obj, capability) for capability in capabilities)
