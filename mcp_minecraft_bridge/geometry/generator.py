"""Single entry point from a validated shape request to its point list."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping

from ..models import Point3D, parse_shape_request
from ..server.errors import ShapeTooLarge
from ..server.logging import get_logger
from ..server.validation import ensure_box_within_world, ensure_points_within_world
from .curves import bezier_points, helix_points, line_points
from .limits import clearly_too_large, estimate_points, limit_for
from .rotation import rotation_points
from .solids import cube_points, cylinder_points, ellipsoid_points, sphere_points, torus_points
from .surfaces import hyperboloid_points, paraboloid_points
from .transform import transform_points


log = get_logger(__name__)

# kinds whose output is a moved copy of a source box
_MOVES_CELLS = ("rotation", "transform")

GENERATORS: Dict[str, Callable[[Any], List[Point3D]]] = {
    "cube": cube_points,
    "sphere": sphere_points,
    "ellipsoid": ellipsoid_points,
    "cylinder": cylinder_points,
    "torus": torus_points,
    "helix": helix_points,
    "hyperboloid": hyperboloid_points,
    "paraboloid": paraboloid_points,
    "line": line_points,
    "bezier": bezier_points,
    "rotation": rotation_points,
    "transform": transform_points,
}


def generate(request: Any) -> List[Point3D]:
    """Produce the ordered, deduplicated cells for ``request``.

    ``request`` may be a ShapeRequest model or a raw dict (validated here).
    Checks run in order, each before any generation work: parameter ranges,
    world bounds of the implied extents, and a size estimate against the
    shape's ceiling. Rotation and transform output is checked cell by cell
    afterwards since it can leave the source box.

    Raises:
        ParameterOutOfRange, CoordinateOutOfBounds, ShapeTooLarge
    """
    if isinstance(request, Mapping):
        request = parse_shape_request(dict(request))
    kind = request.kind

    if kind in _MOVES_CELLS:
        lo, hi = request.source_bounds()
        ensure_box_within_world(lo, hi, what=f"{kind} source")
    else:
        lo, hi = request.bounds()
        ensure_box_within_world(lo, hi, what=kind)

    if clearly_too_large(request):
        raise ShapeTooLarge(kind, estimate_points(request), limit_for(kind), estimated=True)

    points = GENERATORS[kind](request)

    if kind in _MOVES_CELLS:
        ensure_points_within_world(points, what=kind)
    log.debug("generated %s: %d blocks", kind, len(points))
    return points
