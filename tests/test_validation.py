import pytest

from mcp_minecraft_bridge.models import Point3D
from mcp_minecraft_bridge.server.errors import CoordinateOutOfBounds, ParameterOutOfRange
from mcp_minecraft_bridge.server.validation import (
    box_within_world,
    ensure_points_within_world,
    get_bool,
    get_choice,
    get_float,
    get_int,
    get_xyz,
    is_within_world,
)


@pytest.mark.parametrize(
    "xyz,inside",
    [
        ((0, 64, 0), True),
        ((30_000_000, 320, -30_000_000), True),
        ((0, -64, 0), True),
        ((30_000_001, 64, 0), False),
        ((0, -65, 0), False),
        ((0, 321, 0), False),
        ((0, 64, -30_000_001), False),
    ],
)
def test_world_bounds(xyz, inside):
    assert is_within_world(*xyz) is inside


def test_box_and_point_checks():
    assert box_within_world(Point3D(-5, -64, -5), Point3D(5, 320, 5))
    assert not box_within_world(Point3D(0, 0, 0), Point3D(0, 321, 0))
    with pytest.raises(CoordinateOutOfBounds) as exc:
        ensure_points_within_world([Point3D(0, 0, 0), Point3D(0, -70, 0)])
    assert exc.value.details["point"] == (0, -70, 0)


def test_get_xyz_accepts_dict_and_list():
    assert get_xyz({"p": {"x": 1, "y": 2, "z": 3}}, "p") == Point3D(1, 2, 3)
    assert get_xyz({"p": [0.9, 64.5, -0.1]}, "p") == Point3D(0, 64, -1)
    with pytest.raises(ParameterOutOfRange):
        get_xyz({"p": [1, 2]}, "p")
    with pytest.raises(ParameterOutOfRange):
        get_xyz({"p": {"x": 1, "y": "up", "z": 3}}, "p")
    with pytest.raises(ParameterOutOfRange):
        get_xyz({}, "p")
    with pytest.raises(CoordinateOutOfBounds):
        get_xyz({"p": [0, 500, 0]}, "p")


@pytest.mark.parametrize("bad", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_numbers_are_parameter_errors(bad):
    with pytest.raises(ParameterOutOfRange):
        get_xyz({"p": [bad, 64, 0]}, "p")
    with pytest.raises(ParameterOutOfRange):
        get_int({"n": bad}, "n")


def test_get_int_bounds_and_types():
    assert get_int({"n": "7"}, "n") == 7
    assert get_int({}, "n", 3) == 3
    with pytest.raises(ParameterOutOfRange):
        get_int({"n": True}, "n")
    with pytest.raises(ParameterOutOfRange):
        get_int({"n": 0}, "n", min_value=1)
    with pytest.raises(ParameterOutOfRange):
        get_int({"n": "many"}, "n")


def test_get_float_and_bool_and_choice():
    assert get_float({"t": 0.5}, "t", max_value=1) == 0.5
    with pytest.raises(ParameterOutOfRange):
        get_float({"t": 2}, "t", max_value=1)
    assert get_bool({}, "flag") is False
    with pytest.raises(ParameterOutOfRange):
        get_bool({"flag": "yes"}, "flag")
    assert get_choice({"s": "polling"}, "s", ("identifier", "polling")) == "polling"
    with pytest.raises(ParameterOutOfRange):
        get_choice({"s": "guess"}, "s", ("identifier", "polling"))
