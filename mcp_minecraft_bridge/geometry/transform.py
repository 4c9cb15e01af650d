"""Lattice transforms of a source box: copy, quarter turns, mirrors, scaling.

Offsets are taken from the source's min corner and placed from ``target``.
Quarter turns are about the vertical axis through ``target``.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

from ..models import Point3D, TransformRequest
from .lattice import PointCollector
from .limits import limit_for


Offset = Tuple[int, int, int]


def transform_offsets(transformation: str, width: int, height: int, depth: int) -> Iterator[Offset]:
    """Yield the target offsets of every source cell, source order x, y, z."""
    for x in range(width):
        for y in range(height):
            for z in range(depth):
                if transformation == "copy":
                    yield (x, y, z)
                elif transformation == "rotate_90":
                    yield (-z, y, x)
                elif transformation == "rotate_180":
                    yield (-x, y, -z)
                elif transformation == "rotate_270":
                    yield (z, y, -x)
                elif transformation == "mirror_x":
                    yield (width - 1 - x, y, z)
                elif transformation == "mirror_y":
                    yield (x, height - 1 - y, z)
                elif transformation == "mirror_z":
                    yield (x, y, depth - 1 - z)
                elif transformation == "scale_up":
                    # every cell becomes a 2x2x2 block
                    for dx in (0, 1):
                        for dy in (0, 1):
                            for dz in (0, 1):
                                yield (2 * x + dx, 2 * y + dy, 2 * z + dz)
                elif transformation == "scale_down":
                    yield (x // 2, y // 2, z // 2)
                else:
                    raise ValueError(f"unknown transformation: {transformation}")


def source_size(req: TransformRequest) -> Tuple[int, int, int]:
    lo, hi = req.source_bounds()
    return (hi.x - lo.x + 1, hi.y - lo.y + 1, hi.z - lo.z + 1)


def transform_points(req: TransformRequest) -> List[Point3D]:
    width, height, depth = source_size(req)
    t = req.target.point()
    out = PointCollector("transform", limit_for("transform"))
    for ox, oy, oz in transform_offsets(req.transformation, width, height, depth):
        out.add(t.x + ox, t.y + oy, t.z + oz)
    return out.points()
