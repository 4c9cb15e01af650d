"""Surfaces of revolution built layer by layer along an axis."""

from __future__ import annotations

import math
from typing import List

from ..models import HyperboloidRequest, ParaboloidRequest, Point3D
from .lattice import PointCollector, axis_mapper, disc_offsets
from .limits import limit_for


def hyperboloid_layer_radius(layer: int, height: int, base_radius: float, waist_radius: float) -> float:
    """Radius of one-sheet hyperboloid layer ``layer`` (0 = first layer).

    ``t`` is the signed offset from the mid layer normalised by half the
    height, so the mid layer gets exactly ``waist_radius``.
    """
    half = height // 2
    t = (layer - half) / half
    a = float(waist_radius)
    b = float(base_radius) - a
    return a * math.sqrt(1.0 + (t * b / a) ** 2)


def hyperboloid_points(req: HyperboloidRequest) -> List[Point3D]:
    place = axis_mapper(req.center.point(), req.axis)
    out = PointCollector("hyperboloid", limit_for("hyperboloid"))
    for w in range(req.height):
        r = hyperboloid_layer_radius(w, req.height, req.base_radius, req.waist_radius)
        inner_sq = max(r - 1.0, 0.0) ** 2 if req.hollow else -1.0
        for u, v in disc_offsets(r * r, inner_sq):
            out.add(*place(u, v, w))
    return out.points()


def paraboloid_points(req: ParaboloidRequest) -> List[Point3D]:
    place = axis_mapper(req.center.point(), req.axis)
    sign = 1 if req.direction == "positive" else -1
    out = PointCollector("paraboloid", limit_for("paraboloid"))
    for w in range(req.height):
        # r² = 4·f·w with f = R² / (4·(height - 1)): the top layer reaches R
        r_sq = req.radius * req.radius * w / (req.height - 1)
        if req.hollow:
            inner = max(math.sqrt(r_sq) - 1.0, 0.0)
            # the vertex layer stays filled so the bowl is closed
            inner_sq = inner * inner if w > 0 else -1.0
        else:
            inner_sq = -1.0
        for u, v in disc_offsets(r_sq, inner_sq):
            out.add(*place(u, v, sign * w))
    return out.points()
