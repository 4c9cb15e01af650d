"""Rigid rotation of a source box about a pivot (Rodrigues' formula)."""

from __future__ import annotations

import math
from typing import Iterable, List, Tuple

from ..models import Point3D, RotationRequest, round_half_up
from .lattice import PointCollector
from .limits import limit_for


AXIS_VECTORS = {
    "x": (1.0, 0.0, 0.0),
    "y": (0.0, 1.0, 0.0),
    "z": (0.0, 0.0, 1.0),
}

Matrix = Tuple[Tuple[float, float, float], Tuple[float, float, float], Tuple[float, float, float]]


def rotation_matrix(axis: str, degrees: float) -> Matrix:
    """R = I + sin(θ)·K + (1 - cos(θ))·K² for the unit axis k."""
    kx, ky, kz = AXIS_VECTORS[axis]
    theta = math.radians(degrees)
    s, c = math.sin(theta), math.cos(theta)
    t = 1.0 - c
    return (
        (c + kx * kx * t, kx * ky * t - kz * s, kx * kz * t + ky * s),
        (ky * kx * t + kz * s, c + ky * ky * t, ky * kz * t - kx * s),
        (kz * kx * t - ky * s, kz * ky * t + kx * s, c + kz * kz * t),
    )


def rotate_points(points: Iterable[Point3D], pivot: Point3D, axis: str, degrees: float, limit: int) -> List[Point3D]:
    """Rotate each cell about ``pivot`` and snap to the nearest cell.

    Rotated lattices collide and leave gaps; collisions collapse through the
    collector's dedup, gaps are left as they fall.
    """
    m = rotation_matrix(axis, degrees)
    out = PointCollector("rotation", limit)
    for p in points:
        dx, dy, dz = p.x - pivot.x, p.y - pivot.y, p.z - pivot.z
        out.add(
            pivot.x + round_half_up(m[0][0] * dx + m[0][1] * dy + m[0][2] * dz),
            pivot.y + round_half_up(m[1][0] * dx + m[1][1] * dy + m[1][2] * dz),
            pivot.z + round_half_up(m[2][0] * dx + m[2][1] * dy + m[2][2] * dz),
        )
    return out.points()


def source_region(req: RotationRequest) -> List[Point3D]:
    lo, hi = req.source_bounds()
    return [
        Point3D(x, y, z)
        for x in range(lo.x, hi.x + 1)
        for y in range(lo.y, hi.y + 1)
        for z in range(lo.z, hi.z + 1)
    ]


def rotation_points(req: RotationRequest) -> List[Point3D]:
    return rotate_points(source_region(req), req.origin.point(), req.axis, req.angle, limit_for("rotation"))
