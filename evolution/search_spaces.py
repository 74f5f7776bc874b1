# evolution/search_spaces.py
from evolution.constraints import BoundsPolicy
from evolution.hypercube import HyperCube


def hypercube_from_spec(parameters, bounds_policy=BoundsPolicy.REJECT):
    """
    Builds a template hypercube from a declarative parameter search space.

    Each entry may be a mapping ``{"min": .., "max": .., "value": ..}`` (value
    optional) or a tuple ``("uniform", min, max)``.
    """
    cube = HyperCube(bounds_policy)
    for name, spec in parameters.items():
        if isinstance(spec, dict):
            low, high = float(spec["min"]), float(spec["max"])
            value = float(spec.get("value", (low + high) / 2.0))
        elif isinstance(spec, (list, tuple)) and len(spec) == 3 and spec[0] == "uniform":
            low, high = float(spec[1]), float(spec[2])
            value = (low + high) / 2.0
        else:
            raise ValueError(f"Unsupported search space entry for {name!r}: {spec!r}")
        cube.define(name, low, high, value)
    return cube


def sphere_2d():
    """Two-dimensional search space used by the examples and tests."""
    return {
        "x": ("uniform", -5.0, 5.0),
        "y": ("uniform", -5.0, 5.0),
    }
