import math

import pytest

from mcp_minecraft_bridge.geometry import generate
from mcp_minecraft_bridge.geometry.curves import helix_ring
from mcp_minecraft_bridge.server.errors import ParameterOutOfRange


def _helix(**kw):
    params = {"kind": "helix", "center": {"x": 0, "y": 0, "z": 0}, "radius": 5, "height": 20, "turns": 3}
    params.update(kw)
    return generate(params)


def _axis_values(points, axis):
    return [getattr(p, axis) for p in points]


@pytest.mark.parametrize("radius", [1, 2, 3, 7, 13, 50])
def test_ring_is_closed_adjacent_and_distinct(radius):
    ring = helix_ring(radius)
    assert ring[0] == (radius, 0)
    assert len(ring) == len(set(ring))
    for (u1, v1), (u2, v2) in zip(ring, ring[1:] + ring[:1]):
        assert max(abs(u1 - u2), abs(v1 - v2)) == 1
    for u, v in ring:
        assert abs(math.hypot(u, v) - radius) < 1.0


HELIX_CASES = [
    # radius, height, turns, axis, clockwise, direction, chirality
    (1, 2, 0.5, "y", True, "positive", "right"),
    (1, 100, 0.5, "y", False, "positive", "right"),
    (2, 5, 4, "y", True, "positive", "left"),
    (5, 20, 3, "x", True, "negative", "right"),
    (5, 4, 2.5, "z", False, "positive", "left"),
    (10, 30, 7.25, "y", True, "negative", "left"),
    (13, 21, 20, "x", False, "positive", "right"),
    (25, 100, 1, "z", True, "positive", "right"),
    (50, 21, 20, "y", True, "positive", "right"),
]


@pytest.mark.parametrize("radius,height,turns,axis,clockwise,direction,chirality", HELIX_CASES)
def test_helix_is_walkable_and_spans_height_layers(radius, height, turns, axis, clockwise, direction, chirality):
    points = _helix(
        radius=radius,
        height=height,
        turns=turns,
        axis=axis,
        clockwise=clockwise,
        direction=direction,
        chirality=chirality,
    )
    assert len(points) == len(set(points))
    for a, b in zip(points, points[1:]):
        assert abs(a.x - b.x) <= 1 and abs(a.y - b.y) <= 1 and abs(a.z - b.z) <= 1

    layers = _axis_values(points, axis)
    assert len(set(layers)) == height
    expected = set(range(0, height)) if direction == "positive" else set(range(-height + 1, 1))
    assert set(layers) == expected
    # the axis coordinate never goes back
    step = 1 if direction == "positive" else -1
    assert all((b - a) * step >= 0 for a, b in zip(layers, layers[1:]))


def test_helix_stays_on_its_radius():
    points = _helix(radius=8, height=40, turns=5)
    for p in points:
        assert abs(math.hypot(p.x, p.z) - 8) < 1.0


def test_winding_sense_mirrors():
    cw = _helix(clockwise=True)
    ccw = _helix(clockwise=False)
    assert [(p.x, p.y, -p.z) for p in cw] == [(p.x, p.y, p.z) for p in ccw]


def test_left_chirality_undoes_clockwise():
    ccw_right = _helix(clockwise=False, chirality="right")
    cw_left = _helix(clockwise=True, chirality="left")
    assert ccw_right == cw_left


def test_helix_is_deterministic():
    assert _helix(radius=9, height=33, turns=4.5) == _helix(radius=9, height=33, turns=4.5)


def test_helix_needs_a_layer_per_turn():
    with pytest.raises(ParameterOutOfRange):
        _helix(height=5, turns=5)
    # exactly ceil(turns) + 1 layers is accepted
    assert len({p.y for p in _helix(height=6, turns=5)}) == 6
