import gc

import pytest

from evolution.configuration import (
    Applicable,
    BoundedNumeric,
    BoundsSettable,
    Cloneable,
    ConfigurableSystem,
    Describable,
    supports,
)
from evolution.constraints import BoundsPolicy
from evolution.errors import IncompatibleSystem, InvalidBounds, OutOfBounds, UnknownDimension
from evolution.hypercube import HyperCube
from evolution.search_spaces import hypercube_from_spec, sphere_2d


class RecordingModel:
    """A minimal system under test that records the parameters written to it."""

    def __init__(self, names):
        self.params = {name: None for name in names}

    def parameter_names(self):
        return list(self.params)

    def set_parameter(self, name, value):
        self.params[name] = value


def make_cube(policy=BoundsPolicy.REJECT):
    cube = HyperCube(policy)
    cube.define("a", 0.0, 10.0, 5.0)
    cube.define("b", -1.0, 1.0, 0.0)
    return cube


def test_define_and_getters():
    cube = make_cube()
    assert cube.dimension_names() == ["a", "b"]
    assert cube.dimensions() == 2
    assert cube.get_value("a") == 5.0
    assert cube.get_min("b") == -1.0
    assert cube.get_max("b") == 1.0


def test_define_replaces_existing_dimension():
    cube = make_cube()
    cube.define("a", 100.0, 200.0, 150.0)
    assert cube.dimensions() == 2
    assert (cube.get_min("a"), cube.get_max("a"), cube.get_value("a")) == (100.0, 200.0, 150.0)


def test_set_value_within_bounds_round_trips():
    cube = make_cube()
    for v in [0.0, 3.25, 10.0]:
        cube.set_value("a", v)
        assert cube.get_value("a") == v


def test_reject_policy_raises_and_keeps_value():
    cube = make_cube(BoundsPolicy.REJECT)
    with pytest.raises(OutOfBounds):
        cube.set_value("a", 11.0)
    assert cube.get_value("a") == 5.0


def test_clamp_policy_clamps():
    cube = make_cube(BoundsPolicy.CLAMP)
    cube.set_value("a", 11.0)
    assert cube.get_value("a") == 10.0
    cube.set_value("b", -3.0)
    assert cube.get_value("b") == -1.0


@pytest.mark.parametrize("call", [
    lambda c: c.get_value("zzz"),
    lambda c: c.get_min("zzz"),
    lambda c: c.get_max("zzz"),
    lambda c: c.set_value("zzz", 1.0),
    lambda c: c.set_min("zzz", 1.0),
    lambda c: c.set_max("zzz", 1.0),
    lambda c: c.set_min_max_value("zzz", 0.0, 1.0, 0.5),
])
def test_unknown_dimension(call):
    with pytest.raises(UnknownDimension):
        call(make_cube())


def test_unknown_dimension_is_a_key_error():
    with pytest.raises(KeyError):
        make_cube().get_value("zzz")


def test_set_min_max_value_is_atomic():
    cube = make_cube()
    with pytest.raises(OutOfBounds):
        cube.set_min_max_value("a", 20.0, 30.0, 5.0)
    assert (cube.get_min("a"), cube.get_max("a"), cube.get_value("a")) == (0.0, 10.0, 5.0)

    with pytest.raises(InvalidBounds):
        cube.set_min_max_value("a", 30.0, 20.0, 25.0)
    assert (cube.get_min("a"), cube.get_max("a"), cube.get_value("a")) == (0.0, 10.0, 5.0)

    cube.set_min_max_value("a", 20.0, 30.0, 25.0)
    assert (cube.get_min("a"), cube.get_max("a"), cube.get_value("a")) == (20.0, 30.0, 25.0)


def test_set_min_applies_policy_to_current_value():
    rejecting = make_cube(BoundsPolicy.REJECT)
    with pytest.raises(OutOfBounds):
        rejecting.set_min("a", 6.0)
    assert rejecting.get_min("a") == 0.0

    clamping = make_cube(BoundsPolicy.CLAMP)
    clamping.set_min("a", 6.0)
    assert clamping.get_min("a") == 6.0
    assert clamping.get_value("a") == 6.0
    clamping.set_max("a", 6.5)
    assert clamping.get_max("a") == 6.5


def test_define_rejects_inverted_bounds():
    with pytest.raises(InvalidBounds):
        HyperCube().define("a", 1.0, 0.0, 0.5)


def test_clone_is_independent():
    cube = make_cube()
    copy = cube.clone()
    assert copy == cube
    copy.set_value("a", 1.0)
    copy.set_min("b", -0.5)
    assert cube.get_value("a") == 5.0
    assert cube.get_min("b") == -1.0


def test_capabilities():
    cube = make_cube()
    assert supports(cube, Describable, Applicable, Cloneable, BoundedNumeric, BoundsSettable)
    assert not supports({"a": 1.0}, BoundedNumeric)
    assert supports(RecordingModel(["a"]), ConfigurableSystem)


def test_apply_configuration_writes_values():
    model = RecordingModel(["a", "b", "untouched"])
    make_cube().apply_configuration(model)
    assert model.params == {"a": 5.0, "b": 0.0, "untouched": None}


def test_apply_configuration_incompatible_system():
    model = RecordingModel(["a"])
    with pytest.raises(IncompatibleSystem):
        make_cube().apply_configuration(model)
    # Nothing is written when the shapes do not match.
    assert model.params == {"a": None}

    with pytest.raises(IncompatibleSystem):
        make_cube().apply_configuration(object())


def test_configuration_description_and_dict():
    cube = make_cube()
    assert cube.configuration_description() == "a=5, b=0"
    assert cube.as_dict() == {"a": 5.0, "b": 0.0}
    assert cube.values() == [5.0, 0.0]


def test_from_bounds_defaults_to_mid_range():
    cube = HyperCube.from_bounds({"x": (0.0, 4.0), "y": (0.0, 1.0, 0.25)})
    assert cube.get_value("x") == 2.0
    assert cube.get_value("y") == 0.25


def test_hypercube_from_spec():
    cube = hypercube_from_spec(sphere_2d())
    assert cube.dimension_names() == ["x", "y"]
    assert cube.get_min("x") == -5.0 and cube.get_max("x") == 5.0

    cube = hypercube_from_spec({"k": {"min": 1, "max": 3, "value": 2.5}}, BoundsPolicy.CLAMP)
    assert cube.get_value("k") == 2.5
    assert cube.bounds_policy is BoundsPolicy.CLAMP

    with pytest.raises(ValueError):
        hypercube_from_spec({"k": ("log_uniform", 1e-5, 1e-3)})


def test_cube_can_be_weakly_referenced():
    import weakref

    cube = make_cube()
    ref = weakref.ref(cube)
    assert ref() is cube
    del cube
    gc.collect()
    assert ref() is None
