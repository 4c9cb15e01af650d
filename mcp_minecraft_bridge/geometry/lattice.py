"""Lattice helpers shared by the shape generators."""

from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

from ..models import Point3D
from ..server.errors import ShapeTooLarge


class PointCollector:
    """Ordered, deduplicated point accumulator with a hard ceiling.

    Insertion order is kept; a repeated cell is silently skipped. Adding the
    point that would take the set past ``limit`` raises ``ShapeTooLarge``
    immediately, so generation never allocates much beyond the ceiling.
    """

    def __init__(self, kind: str, limit: int) -> None:
        self.kind = kind
        self.limit = limit
        self._points: Dict[Tuple[int, int, int], Point3D] = {}

    def add(self, x: int, y: int, z: int) -> bool:
        key = (x, y, z)
        if key in self._points:
            return False
        if len(self._points) >= self.limit:
            raise ShapeTooLarge(self.kind, len(self._points) + 1, self.limit)
        self._points[key] = Point3D(x, y, z)
        return True

    def add_point(self, p: Point3D) -> bool:
        return self.add(p.x, p.y, p.z)

    def __len__(self) -> int:
        return len(self._points)

    def points(self) -> List[Point3D]:
        return list(self._points.values())


def axis_mapper(center: Point3D, axis: str):
    """Return f(u, v, w) -> (x, y, z) placing local offsets around ``center``.

    ``w`` runs along ``axis``; (u, v) span the perpendicular plane.
    """
    cx, cy, cz = center.x, center.y, center.z
    if axis == "x":
        return lambda u, v, w: (cx + w, cy + u, cz + v)
    if axis == "z":
        return lambda u, v, w: (cx + u, cy + v, cz + w)
    if axis == "y":
        return lambda u, v, w: (cx + u, cy + w, cz + v)
    raise ValueError(f"unknown axis: {axis}")


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


def step_towards(start: Tuple[int, ...], end: Tuple[int, ...]) -> Iterator[Tuple[int, ...]]:
    """Yield cells from ``start`` (exclusive) to ``end`` (inclusive).

    Each yielded cell moves at most one unit on every axis, so the walk is
    gap free in the chessboard sense. Works for 2-D and 3-D tuples.
    """
    cur = list(start)
    target = list(end)
    while cur != target:
        cur = [c + _sign(t - c) for c, t in zip(cur, target)]
        yield tuple(cur)


def disc_offsets(radius_sq: float, inner_sq: float = -1.0) -> Iterator[Tuple[int, int]]:
    """Integer (u, v) with inner_sq <= u² + v² <= radius_sq, row by row.

    A negative ``inner_sq`` means a filled disc.
    """
    if radius_sq < 0:
        return
    reach = int(radius_sq ** 0.5)
    for u in range(-reach, reach + 1):
        for v in range(-reach, reach + 1):
            d = u * u + v * v
            if d <= radius_sq and d >= inner_sq:
                yield (u, v)
