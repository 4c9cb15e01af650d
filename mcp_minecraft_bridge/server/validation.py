from __future__ import annotations

import math
from typing import Any, Iterable, Optional, Sequence, Tuple

from ..models import WORLD_XZ_LIMIT, WORLD_Y_MAX, WORLD_Y_MIN, Point3D
from .errors import CoordinateOutOfBounds, ParameterOutOfRange


# ---- world bounds ----

def is_within_world(x: int, y: int, z: int) -> bool:
    return (
        -WORLD_XZ_LIMIT <= x <= WORLD_XZ_LIMIT
        and -WORLD_XZ_LIMIT <= z <= WORLD_XZ_LIMIT
        and WORLD_Y_MIN <= y <= WORLD_Y_MAX
    )


def point_within_world(p: Point3D) -> bool:
    return is_within_world(p.x, p.y, p.z)


def box_within_world(lo: Point3D, hi: Point3D) -> bool:
    """True when both corners of an axis-aligned box are inside the world.

    The box is convex, so checking its two extreme corners covers every
    cell in between.
    """
    return point_within_world(lo) and point_within_world(hi)


def first_out_of_world(points: Iterable[Point3D]) -> Optional[Point3D]:
    for p in points:
        if not point_within_world(p):
            return p
    return None


def ensure_box_within_world(lo: Point3D, hi: Point3D, what: str = "shape") -> None:
    if not box_within_world(lo, hi):
        raise CoordinateOutOfBounds(
            f"{what} extends outside the world "
            f"(x/z within ±{WORLD_XZ_LIMIT}, y within {WORLD_Y_MIN}..{WORLD_Y_MAX})",
            min=lo.as_tuple(),
            max=hi.as_tuple(),
        )


def ensure_points_within_world(points: Sequence[Point3D], what: str = "shape") -> None:
    bad = first_out_of_world(points)
    if bad is not None:
        raise CoordinateOutOfBounds(
            f"{what} places a block outside the world at {bad.x} {bad.y} {bad.z}",
            point=bad.as_tuple(),
        )


# ---- raw parameter helpers (tool arguments outside the shape union) ----

def get_str(params: dict, key: str, default: Optional[str] = None, required: bool = False) -> str:
    if key not in params:
        if required:
            raise ParameterOutOfRange(f"missing param: {key}")
        return default  # type: ignore[return-value]
    v = params[key]
    if not isinstance(v, str):
        raise ParameterOutOfRange(f"param '{key}' must be str")
    return v


def get_float(
    params: dict,
    key: str,
    default: Optional[float] = None,
    *,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> float:
    if key not in params or params[key] is None:
        if default is None:
            raise ParameterOutOfRange(f"missing param: {key}")
        v = float(default)
    else:
        try:
            v = float(params[key])
        except (TypeError, ValueError) as e:
            raise ParameterOutOfRange(f"param '{key}' must be float: {e}") from e
    if min_value is not None and v < min_value:
        raise ParameterOutOfRange(f"param '{key}' must be >= {min_value}")
    if max_value is not None and v > max_value:
        raise ParameterOutOfRange(f"param '{key}' must be <= {max_value}")
    return v


def get_int(params: dict, key: str, default: Optional[int] = None, *, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    if key not in params or params[key] is None:
        if default is None:
            raise ParameterOutOfRange(f"missing param: {key}")
        v = int(default)
    else:
        raw = params[key]
        if isinstance(raw, bool):
            raise ParameterOutOfRange(f"param '{key}' must be int")
        try:
            v = int(raw)
        except (TypeError, ValueError, OverflowError) as e:
            raise ParameterOutOfRange(f"param '{key}' must be int: {e}") from e
    if min_value is not None and v < min_value:
        raise ParameterOutOfRange(f"param '{key}' must be >= {min_value}")
    if max_value is not None and v > max_value:
        raise ParameterOutOfRange(f"param '{key}' must be <= {max_value}")
    return v


def get_bool(params: dict, key: str, default: bool = False) -> bool:
    v = params.get(key, default)
    if isinstance(v, bool):
        return v
    raise ParameterOutOfRange(f"param '{key}' must be bool")


def get_choice(params: dict, key: str, choices: Tuple[str, ...], default: Optional[str] = None) -> str:
    v = get_str(params, key, default, required=default is None)
    if v not in choices:
        raise ParameterOutOfRange(f"param '{key}' must be one of {', '.join(choices)}")
    return v


def get_xyz(params: dict, key: str) -> Point3D:
    """Read ``{"x":..,"y":..,"z":..}`` or ``[x, y, z]`` as an in-world point."""
    if key not in params:
        raise ParameterOutOfRange(f"missing param: {key}")
    v: Any = params[key]
    if isinstance(v, dict):
        v = [v.get("x"), v.get("y"), v.get("z")]
    if not isinstance(v, (list, tuple)) or len(v) != 3:
        raise ParameterOutOfRange(f"param '{key}' must be [x, y, z]")
    try:
        x, y, z = (math.floor(c) if isinstance(c, float) else int(c) for c in v)
    except (TypeError, ValueError, OverflowError) as e:
        raise ParameterOutOfRange(f"param '{key}' must be [x, y, z]: {e}") from e
    if not is_within_world(x, y, z):
        raise CoordinateOutOfBounds(f"param '{key}' is outside the world: {x} {y} {z}", point=(x, y, z))
    return Point3D(x, y, z)
