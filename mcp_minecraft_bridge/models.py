"""Data model: lattice points and validated shape requests.

Shape requests are a pydantic discriminated union keyed by ``kind``. Every
numeric field carries a closed range so generation never sees out-of-range
input; cross-field rules live in model validators.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union, get_args

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from .server.errors import ParameterOutOfRange


# World bounds (Bedrock): horizontal axes are symmetric, vertical is fixed.
WORLD_XZ_LIMIT = 30_000_000
WORLD_Y_MIN = -64
WORLD_Y_MAX = 320


@dataclass(frozen=True)
class Point3D:
    """A single world cell."""

    x: int
    y: int
    z: int

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.x, self.y, self.z)


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def _floor_number(v: Any) -> Any:
    # inf and nan are left for the int validator to reject
    if isinstance(v, float) and math.isfinite(v):
        return int(math.floor(v))
    return v


def _round_number(v: Any) -> Any:
    if isinstance(v, float) and math.isfinite(v):
        return round_half_up(v)
    return v


def normalize_block_id(block: str) -> str:
    block = block.strip().lower()
    if not block:
        raise ValueError("block id must not be empty")
    if ":" not in block:
        return f"minecraft:{block}"
    return block


XZ = Annotated[int, BeforeValidator(_floor_number), Field(ge=-WORLD_XZ_LIMIT, le=WORLD_XZ_LIMIT)]
Y = Annotated[int, BeforeValidator(_floor_number), Field(ge=WORLD_Y_MIN, le=WORLD_Y_MAX)]
Axis = Literal["x", "y", "z"]
Direction = Literal["positive", "negative"]


def _bounded(lo: int, hi: int) -> Any:
    return Annotated[int, BeforeValidator(_round_number), Field(ge=lo, le=hi)]


R1_20 = _bounded(1, 20)
R1_30 = _bounded(1, 30)
R1_50 = _bounded(1, 50)
R2_50 = _bounded(2, 50)
R3_50 = _bounded(3, 50)
H2_100 = _bounded(2, 100)
H4_100 = _bounded(4, 100)


class Vec3(BaseModel):
    """Integer world position; floats are floored."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    x: XZ
    y: Y
    z: XZ

    def point(self) -> Point3D:
        return Point3D(self.x, self.y, self.z)


class _ShapeBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    material: str = "minecraft:stone"

    @field_validator("material")
    @classmethod
    def _normalize_material(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else normalize_block_id(v)

    def bounds(self) -> Optional[Tuple[Point3D, Point3D]]:
        """Axis-aligned extents implied by the parameters (None when unknown)."""
        return None


def _centered(center: Vec3, axis: str, radial: int, low: int, high: int) -> Tuple[Point3D, Point3D]:
    # radial extent on the two non-axis coordinates, [low, high] along the axis
    c = center
    if axis == "x":
        return (Point3D(c.x + low, c.y - radial, c.z - radial), Point3D(c.x + high, c.y + radial, c.z + radial))
    if axis == "z":
        return (Point3D(c.x - radial, c.y - radial, c.z + low), Point3D(c.x + radial, c.y + radial, c.z + high))
    return (Point3D(c.x - radial, c.y + low, c.z - radial), Point3D(c.x + radial, c.y + high, c.z + radial))


def _box(a: Vec3, b: Vec3) -> Tuple[Point3D, Point3D]:
    return (
        Point3D(min(a.x, b.x), min(a.y, b.y), min(a.z, b.z)),
        Point3D(max(a.x, b.x), max(a.y, b.y), max(a.z, b.z)),
    )


class CubeRequest(_ShapeBase):
    kind: Literal["cube"] = "cube"
    corner1: Vec3
    corner2: Vec3
    hollow: bool = False

    def bounds(self) -> Tuple[Point3D, Point3D]:
        return _box(self.corner1, self.corner2)


class SphereRequest(_ShapeBase):
    kind: Literal["sphere"] = "sphere"
    center: Vec3
    radius: R1_50
    hollow: bool = False

    def bounds(self) -> Tuple[Point3D, Point3D]:
        return _centered(self.center, "y", self.radius, -self.radius, self.radius)


class EllipsoidRequest(_ShapeBase):
    kind: Literal["ellipsoid"] = "ellipsoid"
    center: Vec3
    radius_x: R1_50
    radius_y: R1_50
    radius_z: R1_50
    hollow: bool = False

    def bounds(self) -> Tuple[Point3D, Point3D]:
        c = self.center
        return (
            Point3D(c.x - self.radius_x, c.y - self.radius_y, c.z - self.radius_z),
            Point3D(c.x + self.radius_x, c.y + self.radius_y, c.z + self.radius_z),
        )


class CylinderRequest(_ShapeBase):
    kind: Literal["cylinder"] = "cylinder"
    center: Vec3
    radius: R1_30
    height: R1_50
    axis: Axis = "y"
    hollow: bool = False

    def bounds(self) -> Tuple[Point3D, Point3D]:
        return _centered(self.center, self.axis, self.radius, 0, self.height - 1)


class TorusRequest(_ShapeBase):
    kind: Literal["torus"] = "torus"
    center: Vec3
    major_radius: R3_50
    minor_radius: R1_20
    axis: Axis = "y"
    hollow: bool = False

    @model_validator(mode="after")
    def _minor_below_major(self) -> "TorusRequest":
        if self.minor_radius >= self.major_radius:
            raise ValueError("minor_radius must be smaller than major_radius")
        return self

    def bounds(self) -> Tuple[Point3D, Point3D]:
        outer = self.major_radius + self.minor_radius
        return _centered(self.center, self.axis, outer, -self.minor_radius, self.minor_radius)


class HelixRequest(_ShapeBase):
    kind: Literal["helix"] = "helix"
    center: Vec3
    radius: R1_50
    height: H2_100
    turns: float = Field(ge=0.5, le=20)
    axis: Axis = "y"
    clockwise: bool = True
    direction: Direction = "positive"
    chirality: Literal["right", "left"] = "right"

    @model_validator(mode="after")
    def _climbs_every_turn(self) -> "HelixRequest":
        # one layer per lap at least, otherwise laps overlap on the same layer
        if self.height - 1 < math.ceil(self.turns):
            raise ValueError(
                f"height must be at least {math.ceil(self.turns) + 1} for {self.turns} turns"
            )
        return self

    def bounds(self) -> Tuple[Point3D, Point3D]:
        span = self.height - 1
        low, high = (0, span) if self.direction == "positive" else (-span, 0)
        return _centered(self.center, self.axis, self.radius, low, high)


class HyperboloidRequest(_ShapeBase):
    kind: Literal["hyperboloid"] = "hyperboloid"
    center: Vec3
    base_radius: R3_50
    waist_radius: R1_30
    height: H4_100
    axis: Axis = "y"
    hollow: bool = False

    @model_validator(mode="after")
    def _waist_below_base(self) -> "HyperboloidRequest":
        if self.waist_radius >= self.base_radius:
            raise ValueError("waist_radius must be smaller than base_radius")
        return self

    def bounds(self) -> Tuple[Point3D, Point3D]:
        # r(t) peaks at |t| = 1: sqrt(waist² + (base - waist)²) <= base
        return _centered(self.center, self.axis, self.base_radius, 0, self.height - 1)


class ParaboloidRequest(_ShapeBase):
    kind: Literal["paraboloid"] = "paraboloid"
    center: Vec3
    radius: R2_50
    height: R2_50
    axis: Axis = "y"
    direction: Direction = "positive"
    hollow: bool = False

    def bounds(self) -> Tuple[Point3D, Point3D]:
        span = self.height - 1
        low, high = (0, span) if self.direction == "positive" else (-span, 0)
        return _centered(self.center, self.axis, self.radius, low, high)


class LineRequest(_ShapeBase):
    kind: Literal["line"] = "line"
    start: Vec3
    end: Vec3

    def bounds(self) -> Tuple[Point3D, Point3D]:
        return _box(self.start, self.end)


class BezierRequest(_ShapeBase):
    kind: Literal["bezier"] = "bezier"
    start: Vec3
    end: Vec3
    control_points: List[Vec3] = Field(min_length=1, max_length=10)
    segments: Optional[int] = Field(default=None, ge=10, le=1000)

    def bounds(self) -> Tuple[Point3D, Point3D]:
        # the curve stays inside the convex hull of its control polygon
        pts = [self.start, self.end, *self.control_points]
        return (
            Point3D(min(p.x for p in pts), min(p.y for p in pts), min(p.z for p in pts)),
            Point3D(max(p.x for p in pts), max(p.y for p in pts), max(p.z for p in pts)),
        )


class RotationRequest(_ShapeBase):
    kind: Literal["rotation"] = "rotation"
    corner1: Vec3
    corner2: Vec3
    origin: Vec3
    axis: Axis = "y"
    angle: float = Field(ge=0, le=360)

    def source_bounds(self) -> Tuple[Point3D, Point3D]:
        return _box(self.corner1, self.corner2)


Transformation = Literal[
    "copy",
    "rotate_90",
    "rotate_180",
    "rotate_270",
    "mirror_x",
    "mirror_y",
    "mirror_z",
    "scale_up",
    "scale_down",
]
TRANSFORMATIONS: Tuple[str, ...] = get_args(Transformation)


class TransformRequest(_ShapeBase):
    """Copy of a source box placed with its min corner at ``target``.

    Without ``material`` only a plain ``copy`` is possible (as one ``clone``).
    """

    kind: Literal["transform"] = "transform"
    corner1: Vec3
    corner2: Vec3
    target: Vec3
    transformation: Transformation
    material: Optional[str] = None

    @model_validator(mode="after")
    def _material_unless_copy(self) -> "TransformRequest":
        if self.material is None and self.transformation != "copy":
            raise ValueError("material is required for transformations other than copy")
        return self

    def source_bounds(self) -> Tuple[Point3D, Point3D]:
        return _box(self.corner1, self.corner2)


ShapeRequest = Annotated[
    Union[
        CubeRequest,
        SphereRequest,
        EllipsoidRequest,
        CylinderRequest,
        TorusRequest,
        HelixRequest,
        HyperboloidRequest,
        ParaboloidRequest,
        LineRequest,
        BezierRequest,
        RotationRequest,
        TransformRequest,
    ],
    Field(discriminator="kind"),
]

_shape_adapter: TypeAdapter = TypeAdapter(ShapeRequest)

SHAPE_KINDS = (
    "cube",
    "sphere",
    "ellipsoid",
    "cylinder",
    "torus",
    "helix",
    "hyperboloid",
    "paraboloid",
    "line",
    "bezier",
    "rotation",
    "transform",
)


def _describe(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in SHAPE_KINDS)
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def parse_shape_request(data: Dict[str, Any]) -> "ShapeRequest":
    """Validate a raw parameter dict into a ShapeRequest variant.

    Raises:
        ParameterOutOfRange: on any missing, malformed or out-of-range field.
    """
    try:
        return _shape_adapter.validate_python(data)
    except ValidationError as e:
        raise ParameterOutOfRange(_describe(e), errors=e.errors(include_url=False, include_context=False)) from e
