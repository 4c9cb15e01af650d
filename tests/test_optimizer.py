import pytest

from mcp_minecraft_bridge.geometry import generate
from mcp_minecraft_bridge.geometry.optimizer import MAX_FILL_VOLUME, compress_to_boxes
from mcp_minecraft_bridge.models import Point3D


def _cells(box):
    return {
        (x, y, z)
        for x in range(box.lo.x, box.hi.x + 1)
        for y in range(box.lo.y, box.hi.y + 1)
        for z in range(box.lo.z, box.hi.z + 1)
    }


def _assert_exact_cover(points, boxes, max_volume=MAX_FILL_VOLUME):
    covered = set()
    for box in boxes:
        cells = _cells(box)
        assert box.volume == len(cells) <= max_volume
        assert not (covered & cells)
        covered |= cells
    assert covered == {p.as_tuple() for p in points}


@pytest.mark.parametrize(
    "params",
    [
        {"kind": "sphere", "center": {"x": 0, "y": 100, "z": 0}, "radius": 7},
        {"kind": "sphere", "center": {"x": 0, "y": 100, "z": 0}, "radius": 7, "hollow": True},
        {"kind": "torus", "center": {"x": 0, "y": 100, "z": 0}, "major_radius": 8, "minor_radius": 3},
        {"kind": "cube", "corner1": {"x": 0, "y": 0, "z": 0}, "corner2": {"x": 9, "y": 4, "z": 6}, "hollow": True},
    ],
)
def test_boxes_cover_shape_exactly(params):
    points = generate(params)
    boxes = compress_to_boxes(points)
    _assert_exact_cover(points, boxes)
    assert len(boxes) < len(points)


def test_solid_cube_is_one_box():
    points = generate({"kind": "cube", "corner1": {"x": 0, "y": 0, "z": 0}, "corner2": {"x": 9, "y": 9, "z": 9}})
    boxes = compress_to_boxes(points)
    assert len(boxes) == 1
    assert boxes[0].lo == Point3D(0, 0, 0) and boxes[0].hi == Point3D(9, 9, 9)


def test_volume_cap_splits_boxes():
    points = [Point3D(x, 0, z) for x in range(10) for z in range(10)]
    boxes = compress_to_boxes(points, max_volume=16)
    _assert_exact_cover(points, boxes, max_volume=16)


def test_empty_input():
    assert compress_to_boxes([]) == []
