"""Closed solids: cube, sphere, ellipsoid, cylinder, torus.

All of these enumerate integer offsets from an integer center, so no
rounding is applied to output coordinates; radius tests compare squared
distances.
"""

from __future__ import annotations

import math
from typing import List

from ..models import (
    CubeRequest,
    CylinderRequest,
    EllipsoidRequest,
    Point3D,
    SphereRequest,
    TorusRequest,
)
from .lattice import PointCollector, axis_mapper, disc_offsets
from .limits import limit_for


def cube_points(req: CubeRequest) -> List[Point3D]:
    lo, hi = req.bounds()
    out = PointCollector("cube", limit_for("cube"))
    for x in range(lo.x, hi.x + 1):
        x_face = x == lo.x or x == hi.x
        for y in range(lo.y, hi.y + 1):
            y_face = y == lo.y or y == hi.y
            for z in range(lo.z, hi.z + 1):
                if req.hollow and not (x_face or y_face or z == lo.z or z == hi.z):
                    continue
                out.add(x, y, z)
    return out.points()


def sphere_points(req: SphereRequest) -> List[Point3D]:
    c = req.center
    r = req.radius
    r_sq = r * r
    inner_sq = (r - 1) * (r - 1)
    out = PointCollector("sphere", limit_for("sphere"))
    for dy in range(-r, r + 1):
        slice_sq = r_sq - dy * dy
        # inner surface test moved into the slice plane
        slice_inner = inner_sq - dy * dy if req.hollow else -1
        for dx, dz in disc_offsets(slice_sq, slice_inner):
            out.add(c.x + dx, c.y + dy, c.z + dz)
    return out.points()


def ellipsoid_points(req: EllipsoidRequest) -> List[Point3D]:
    c = req.center
    rx, ry, rz = req.radius_x, req.radius_y, req.radius_z
    # the shell is one cell thick; a radius of 1 leaves no inner cavity
    inner = (rx - 1, ry - 1, rz - 1) if req.hollow and min(rx, ry, rz) > 1 else None
    out = PointCollector("ellipsoid", limit_for("ellipsoid"))
    for dy in range(-ry, ry + 1):
        slice_t = 1.0 - (dy / ry) ** 2
        if slice_t < 0:
            continue
        reach_x = int(math.floor(rx * math.sqrt(slice_t)))
        reach_z = int(math.floor(rz * math.sqrt(slice_t)))
        for dx in range(-reach_x, reach_x + 1):
            for dz in range(-reach_z, reach_z + 1):
                if (dx / rx) ** 2 + (dz / rz) ** 2 > slice_t:
                    continue
                if inner is not None:
                    ix, iy, iz = inner
                    if (dx / ix) ** 2 + (dy / iy) ** 2 + (dz / iz) ** 2 < 1.0:
                        continue
                out.add(c.x + dx, c.y + dy, c.z + dz)
    return out.points()


def cylinder_points(req: CylinderRequest) -> List[Point3D]:
    place = axis_mapper(req.center.point(), req.axis)
    r_sq = req.radius * req.radius
    inner_sq = (req.radius - 1) ** 2 if req.hollow else -1
    ring = list(disc_offsets(r_sq, inner_sq))
    out = PointCollector("cylinder", limit_for("cylinder"))
    for w in range(req.height):
        for u, v in ring:
            out.add(*place(u, v, w))
    return out.points()


def torus_points(req: TorusRequest) -> List[Point3D]:
    place = axis_mapper(req.center.point(), req.axis)
    R, r = req.major_radius, req.minor_radius
    r_sq = r * r
    inner_sq = (r - 1) ** 2 if req.hollow else -1
    outer = R + r
    out = PointCollector("torus", limit_for("torus"))
    for w in range(-r, r + 1):
        tube_sq = r_sq - w * w
        for u in range(-outer, outer + 1):
            for v in range(-outer, outer + 1):
                ring_dist = math.sqrt(u * u + v * v) - R
                d = ring_dist * ring_dist
                if d > tube_sq:
                    continue
                if req.hollow and d + w * w < inner_sq:
                    continue
                out.add(*place(u, v, w))
    return out.points()
