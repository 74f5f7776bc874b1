# evolution/constraints.py
from enum import Enum

from evolution.errors import InvalidBounds, OutOfBounds


class BoundsPolicy(Enum):
    """What a hypercube does with a value outside its ``[min, max]`` range."""

    REJECT = "reject"
    CLAMP = "clamp"


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def check_bounds(name: str, low: float, high: float) -> None:
    if low > high:
        raise InvalidBounds(f"Dimension {name!r}: min {low} is greater than max {high}")


def enforce_bounds(name: str, value: float, low: float, high: float, policy: BoundsPolicy) -> float:
    """
    Returns ``value`` if it lies within ``[low, high]``, otherwise applies ``policy``.

    Raises:
        OutOfBounds: If the value is infeasible and the policy is ``REJECT``.
    """
    if low <= value <= high:
        return value
    if policy is BoundsPolicy.CLAMP:
        return clamp(value, low, high)
    raise OutOfBounds(f"Dimension {name!r}: value {value} is outside [{low}, {high}]")
