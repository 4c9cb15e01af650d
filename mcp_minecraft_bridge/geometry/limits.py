"""Per-shape build ceilings and cheap pre-generation size estimates."""

from __future__ import annotations

import math
from typing import Dict

from ..models import (
    BezierRequest,
    CubeRequest,
    CylinderRequest,
    EllipsoidRequest,
    HelixRequest,
    HyperboloidRequest,
    LineRequest,
    ParaboloidRequest,
    RotationRequest,
    SphereRequest,
    TorusRequest,
    TransformRequest,
)


# Maximum number of blocks one request may produce. Cube matches the
# server-side /fill volume cap. Lines and Bezier curves share one ceiling.
BUILD_LIMITS: Dict[str, int] = {
    "cube": 32768,
    "sphere": 50000,
    "ellipsoid": 60000,
    "cylinder": 80000,
    "torus": 40000,
    "hyperboloid": 30000,
    "paraboloid": 30000,
    "rotation": 50000,
    "transform": 50000,
    "helix": 10000,
    "bezier": 10000,
    "line": 10000,
}

# Estimates below are continuous volumes; lattice counts can exceed them a
# little, so only shapes clearly above the ceiling are rejected up front.
ESTIMATE_MARGIN = 0.85


def limit_for(kind: str) -> int:
    try:
        return BUILD_LIMITS[kind]
    except KeyError:
        raise ValueError(f"no build limit for shape kind: {kind}") from None


def _shell(outer: float, inner: float) -> float:
    return max(outer - inner, 0.0)


def estimate_points(request) -> int:
    """Rough block count for ``request`` without generating anything.

    Exact for cubes, lines, transforms and rotation sources; volume based
    elsewhere.
    """
    if isinstance(request, CubeRequest):
        lo, hi = request.bounds()
        dx, dy, dz = hi.x - lo.x + 1, hi.y - lo.y + 1, hi.z - lo.z + 1
        full = dx * dy * dz
        if request.hollow and dx > 2 and dy > 2 and dz > 2:
            return full - (dx - 2) * (dy - 2) * (dz - 2)
        return full
    if isinstance(request, RotationRequest):
        lo, hi = request.source_bounds()
        return (hi.x - lo.x + 1) * (hi.y - lo.y + 1) * (hi.z - lo.z + 1)
    if isinstance(request, TransformRequest):
        lo, hi = request.source_bounds()
        dx, dy, dz = hi.x - lo.x + 1, hi.y - lo.y + 1, hi.z - lo.z + 1
        if request.transformation == "scale_up":
            return dx * dy * dz * 8
        if request.transformation == "scale_down":
            return ((dx + 1) // 2) * ((dy + 1) // 2) * ((dz + 1) // 2)
        return dx * dy * dz
    if isinstance(request, LineRequest):
        s, e = request.start, request.end
        return max(abs(e.x - s.x), abs(e.y - s.y), abs(e.z - s.z)) + 1
    if isinstance(request, SphereRequest):
        r = request.radius
        v = 4.0 / 3.0 * math.pi * r ** 3
        if request.hollow:
            v = _shell(v, 4.0 / 3.0 * math.pi * (r - 1) ** 3)
        return int(v)
    if isinstance(request, EllipsoidRequest):
        a, b, c = request.radius_x, request.radius_y, request.radius_z
        v = 4.0 / 3.0 * math.pi * a * b * c
        if request.hollow:
            v = _shell(v, 4.0 / 3.0 * math.pi * max(a - 1, 0) * max(b - 1, 0) * max(c - 1, 0))
        return int(v)
    if isinstance(request, CylinderRequest):
        r = request.radius
        area = math.pi * r * r
        if request.hollow:
            area = _shell(area, math.pi * (r - 1) ** 2)
        return int(area * request.height)
    if isinstance(request, TorusRequest):
        R, r = request.major_radius, request.minor_radius
        v = 2 * math.pi ** 2 * R * r * r
        if request.hollow:
            v = _shell(v, 2 * math.pi ** 2 * R * (r - 1) ** 2)
        return int(v)
    if isinstance(request, HyperboloidRequest):
        # solid of revolution: integral of pi·r(t)² over the height
        a, b = request.waist_radius, request.base_radius - request.waist_radius
        mean_sq = a * a + b * b / 3.0
        if request.hollow:
            return int(2 * math.pi * math.sqrt(mean_sq) * request.height)
        return int(math.pi * mean_sq * request.height)
    if isinstance(request, ParaboloidRequest):
        r = request.radius
        if request.hollow:
            return int(math.pi * r * request.height)
        return int(math.pi * r * r * request.height / 2.0)
    if isinstance(request, HelixRequest):
        return int(request.turns * 2 * math.pi * request.radius)
    if isinstance(request, BezierRequest):
        return 0
    raise ValueError(f"unsupported shape: {type(request).__name__}")


def clearly_too_large(request) -> bool:
    kind = request.kind
    estimate = estimate_points(request)
    if kind in ("cube", "line", "rotation", "transform"):
        return estimate > limit_for(kind)
    return estimate * ESTIMATE_MARGIN > limit_for(kind)
