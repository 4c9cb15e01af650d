import pytest

from mcp_minecraft_bridge.geometry import BUILD_LIMITS, generate
from mcp_minecraft_bridge.geometry.transform import transform_offsets
from mcp_minecraft_bridge.models import Point3D, parse_shape_request
from mcp_minecraft_bridge.server.errors import CoordinateOutOfBounds, ParameterOutOfRange, ShapeTooLarge


def _transform(transformation, size=(2, 3, 4), target=(10, 64, 0), material="stone"):
    w, h, d = size
    params = {
        "kind": "transform",
        "corner1": {"x": 0, "y": 64, "z": 0},
        "corner2": {"x": w - 1, "y": 64 + h - 1, "z": d - 1},
        "target": {"x": target[0], "y": target[1], "z": target[2]},
        "transformation": transformation,
    }
    if material is not None:
        params["material"] = material
    return params


def _box(lo, hi):
    return {
        Point3D(x, y, z)
        for x in range(lo[0], hi[0] + 1)
        for y in range(lo[1], hi[1] + 1)
        for z in range(lo[2], hi[2] + 1)
    }


@pytest.mark.parametrize("transformation", ["copy", "mirror_x", "mirror_y", "mirror_z"])
def test_copy_and_mirrors_fill_the_target_box(transformation):
    points = generate(_transform(transformation))
    assert len(points) == 24
    assert set(points) == _box((10, 64, 0), (11, 66, 3))


def test_mirror_x_flips_order():
    offsets = list(transform_offsets("mirror_x", 3, 1, 1))
    assert offsets == [(2, 0, 0), (1, 0, 0), (0, 0, 0)]


def test_quarter_turns_about_vertical_axis():
    assert list(transform_offsets("rotate_90", 2, 1, 1)) == [(0, 0, 0), (0, 0, 1)]
    assert list(transform_offsets("rotate_180", 2, 1, 1)) == [(0, 0, 0), (-1, 0, 0)]
    assert list(transform_offsets("rotate_270", 2, 1, 1)) == [(0, 0, 0), (0, 0, -1)]
    points = generate(_transform("rotate_90"))
    assert set(points) == _box((7, 64, 0), (10, 66, 1))


def test_scale_up_is_solid_and_eight_times_larger():
    points = generate(_transform("scale_up"))
    assert len(points) == 24 * 8
    assert set(points) == _box((10, 64, 0), (13, 69, 7))


def test_scale_down_merges_cells():
    points = generate(_transform("scale_down", size=(4, 4, 5)))
    assert set(points) == _box((10, 64, 0), (11, 65, 2))


def test_material_is_required_unless_copy():
    req = parse_shape_request(_transform("copy", material=None))
    assert req.material is None
    with pytest.raises(ParameterOutOfRange):
        parse_shape_request(_transform("mirror_x", material=None))
    with pytest.raises(ParameterOutOfRange):
        parse_shape_request(_transform("shear"))


def test_transform_limit():
    assert BUILD_LIMITS["transform"] == 50000
    with pytest.raises(ShapeTooLarge) as exc:
        generate(_transform("scale_up", size=(20, 20, 20)))
    assert exc.value.details["count"] == 64000


def test_transform_leaving_world_is_rejected():
    with pytest.raises(CoordinateOutOfBounds):
        generate(_transform("copy", target=(0, 319, 0)))
