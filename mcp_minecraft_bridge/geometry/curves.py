"""Curves: helix, straight line and Bezier.

Rounding policy: helix ring cells are rounded half-up, Bezier samples are
floored, lines are exact (Bresenham).
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from ..models import BezierRequest, HelixRequest, LineRequest, Point3D, round_half_up
from .lattice import PointCollector, axis_mapper, step_towards
from .limits import limit_for


# ---------------------------------------------------------------------------
# Helix
# ---------------------------------------------------------------------------


def helix_ring(radius: int) -> List[Tuple[int, int]]:
    """One closed lap of lattice cells around the origin, counter-clockwise.

    Consecutive cells (including last -> first) differ by at most one on
    each axis and no cell repeats. Starts at (radius, 0).
    """
    samples = max(64, int(math.ceil(8 * math.pi * radius)))
    ring: List[Tuple[int, int]] = [(radius, 0)]
    for i in range(1, samples + 1):
        theta = 2.0 * math.pi * i / samples
        target = (round_half_up(radius * math.cos(theta)), round_half_up(radius * math.sin(theta)))
        ring.extend(step_towards(ring[-1], target))  # type: ignore[arg-type]
    # the final sample lands back on the start cell
    if len(ring) > 1 and ring[-1] == ring[0]:
        ring.pop()
    return ring


def helix_points(req: HelixRequest) -> List[Point3D]:
    """Walk ``turns`` laps of the ring while climbing ``height`` layers.

    Two discrete lines share one step counter: one advances the ring index,
    the other the axis layer. The longer of the two advances every step and
    the shorter at most once per step, so every move is to a neighbouring
    cell and every layer from 0 to ``height - 1`` is visited.
    """
    ring = helix_ring(req.radius)
    if req.clockwise != (req.chirality == "left"):
        ring = [(u, -v) for u, v in ring]
    lap = len(ring)
    planar_steps = max(1, round_half_up(req.turns * lap))
    climb = req.height - 1
    steps = max(planar_steps, climb)
    sign = 1 if req.direction == "positive" else -1

    place = axis_mapper(req.center.point(), req.axis)
    out = PointCollector("helix", limit_for("helix"))
    for s in range(steps + 1):
        u, v = ring[(s * planar_steps // steps) % lap]
        w = s * climb // steps
        out.add(*place(u, v, sign * w))
    return out.points()


# ---------------------------------------------------------------------------
# Line
# ---------------------------------------------------------------------------


def bresenham_3d(start: Point3D, end: Point3D) -> List[Tuple[int, int, int]]:
    x, y, z = start.x, start.y, start.z
    dx, dy, dz = abs(end.x - x), abs(end.y - y), abs(end.z - z)
    sx = 1 if end.x > x else -1
    sy = 1 if end.y > y else -1
    sz = 1 if end.z > z else -1
    cells = [(x, y, z)]
    if dx >= dy and dx >= dz:
        e1, e2 = 2 * dy - dx, 2 * dz - dx
        for _ in range(dx):
            x += sx
            if e1 >= 0:
                y += sy
                e1 -= 2 * dx
            if e2 >= 0:
                z += sz
                e2 -= 2 * dx
            e1 += 2 * dy
            e2 += 2 * dz
            cells.append((x, y, z))
    elif dy >= dx and dy >= dz:
        e1, e2 = 2 * dx - dy, 2 * dz - dy
        for _ in range(dy):
            y += sy
            if e1 >= 0:
                x += sx
                e1 -= 2 * dy
            if e2 >= 0:
                z += sz
                e2 -= 2 * dy
            e1 += 2 * dx
            e2 += 2 * dz
            cells.append((x, y, z))
    else:
        e1, e2 = 2 * dy - dz, 2 * dx - dz
        for _ in range(dz):
            z += sz
            if e1 >= 0:
                y += sy
                e1 -= 2 * dz
            if e2 >= 0:
                x += sx
                e2 -= 2 * dz
            e1 += 2 * dy
            e2 += 2 * dx
            cells.append((x, y, z))
    return cells


def line_points(req: LineRequest) -> List[Point3D]:
    out = PointCollector("line", limit_for("line"))
    for cell in bresenham_3d(req.start.point(), req.end.point()):
        out.add(*cell)
    return out.points()


# ---------------------------------------------------------------------------
# Bezier
# ---------------------------------------------------------------------------

MIN_ADAPTIVE_SEGMENTS = 50
MAX_SEGMENTS = 1000


def bezier_at(control: Sequence[Tuple[float, float, float]], t: float) -> Tuple[float, float, float]:
    """Evaluate the Bernstein form of the curve at ``t`` in [0, 1]."""
    n = len(control) - 1
    x = y = z = 0.0
    for i, (px, py, pz) in enumerate(control):
        b = math.comb(n, i) * (1.0 - t) ** (n - i) * t ** i
        x += b * px
        y += b * py
        z += b * pz
    return (x, y, z)


def adaptive_segments(control: Sequence[Tuple[float, float, float]]) -> int:
    # the control polygon is never shorter than the curve
    length = sum(math.dist(a, b) for a, b in zip(control, control[1:]))
    return min(MAX_SEGMENTS, max(MIN_ADAPTIVE_SEGMENTS, int(math.ceil(length))))


def bezier_points(req: BezierRequest) -> List[Point3D]:
    control = [(float(p.x), float(p.y), float(p.z)) for p in (req.start, *req.control_points, req.end)]
    segments = req.segments or adaptive_segments(control)
    out = PointCollector("bezier", limit_for("bezier"))
    prev = (req.start.x, req.start.y, req.start.z)
    out.add(*prev)
    for i in range(1, segments + 1):
        x, y, z = bezier_at(control, i / segments)
        cell = (int(math.floor(x)), int(math.floor(y)), int(math.floor(z)))
        # fill between samples that landed more than one cell apart
        for step in step_towards(prev, cell):
            out.add(*step)
        prev = cell
    return out.points()
