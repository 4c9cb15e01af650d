"""Greedy compression of a point set into axis-aligned boxes.

Used when a caller asks for ``fill`` commands instead of one ``setblock``
per cell. The result covers exactly the input cells.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Set, Tuple

from ..models import Point3D


# /fill refuses regions above this many cells
MAX_FILL_VOLUME = 32768


@dataclass(frozen=True)
class Box:
    lo: Point3D
    hi: Point3D

    @property
    def volume(self) -> int:
        return (self.hi.x - self.lo.x + 1) * (self.hi.y - self.lo.y + 1) * (self.hi.z - self.lo.z + 1)

    def is_single(self) -> bool:
        return self.lo == self.hi


def compress_to_boxes(points: Sequence[Point3D], max_volume: int = MAX_FILL_VOLUME) -> List[Box]:
    """Grow boxes along x, then z, then y from the lowest free cell."""
    free: Set[Tuple[int, int, int]] = {p.as_tuple() for p in points}
    order = sorted(free, key=lambda c: (c[1], c[2], c[0]))
    boxes: List[Box] = []

    for start in order:
        if start not in free:
            continue
        x0, y0, z0 = start

        x1 = x0
        while (x1 + 1, y0, z0) in free and (x1 - x0 + 2) <= max_volume:
            x1 += 1
        width = x1 - x0 + 1

        z1 = z0
        while (width * (z1 - z0 + 2)) <= max_volume and all(
            (x, y0, z1 + 1) in free for x in range(x0, x1 + 1)
        ):
            z1 += 1
        depth = z1 - z0 + 1

        y1 = y0
        while (width * depth * (y1 - y0 + 2)) <= max_volume and all(
            (x, y1 + 1, z) in free for x in range(x0, x1 + 1) for z in range(z0, z1 + 1)
        ):
            y1 += 1

        for x in range(x0, x1 + 1):
            for y in range(y0, y1 + 1):
                for z in range(z0, z1 + 1):
                    free.discard((x, y, z))
        boxes.append(Box(Point3D(x0, y0, z0), Point3D(x1, y1, z1)))

    return boxes
