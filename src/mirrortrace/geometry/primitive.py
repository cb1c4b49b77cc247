"""Closed set of primitive kinds and intersection dispatch.

Primitives are stored as one tagged record per object: a ``kind`` tag plus
the fields every kind needs (center, size, up, material). ``size`` is the
radius for spheres and the side length for cubes. ``hit_primitive`` switches
on the tag; adding a kind means adding an enum member and a branch here.

Example:
    >>> from mirrortrace.geometry.primitive import PrimitiveKind, SphereShape
    >>> shape = SphereShape(center=(0, 0, 0), radius=1.0)
    >>> shape.kind
    <PrimitiveKind.SPHERE: 0>
"""

from dataclasses import dataclass
from enum import IntEnum

import taichi as ti

from mirrortrace.core.ray import Ray, as_direction, as_point, vec3
from mirrortrace.errors import InvalidGeometry

from .cube import Cube, hit_cube
from .sphere import HitRecord, Sphere, hit_sphere, make_miss


class PrimitiveKind(IntEnum):
    """Tag identifying the shape of a stored primitive."""

    SPHERE = 0
    CUBE = 1


# Plain ints for comparisons inside kernels
KIND_SPHERE = int(PrimitiveKind.SPHERE)
KIND_CUBE = int(PrimitiveKind.CUBE)


@ti.dataclass
class Primitive:
    """A stored primitive of any kind.

    Attributes:
        kind: The PrimitiveKind value.
        center: Center of the shape.
        size: Radius (sphere) or side length (cube).
        up: Orientation vector, part of the pose only.
        material_id: Index into the scene's material list.
    """

    kind: ti.i32
    center: vec3
    size: ti.f64
    up: vec3
    material_id: ti.i32


@ti.func
def hit_primitive(ray: Ray, prim: Primitive) -> HitRecord:
    """Intersect a ray with a primitive, dispatching on its kind.

    Args:
        ray: The ray to test.
        prim: The primitive to test against.

    Returns:
        The HitRecord of the kind-specific intersection routine.
    """
    result = make_miss()
    if prim.kind == KIND_SPHERE:
        result = hit_sphere(ray, Sphere(center=prim.center, radius=prim.size, up=prim.up))
    elif prim.kind == KIND_CUBE:
        result = hit_cube(ray, Cube(center=prim.center, side=prim.size, up=prim.up))
    return result


# =============================================================================
# Python-side Shape Descriptions
# =============================================================================


@dataclass(frozen=True)
class SphereShape:
    """A sphere to be added to a scene.

    Attributes:
        center: Center point (x, y, z).
        radius: Radius, must be positive.
        up: Orientation vector (unused by intersection).
    """

    center: tuple[float, float, float]
    radius: float
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)

    kind = PrimitiveKind.SPHERE

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_point(self.center, "center"))
        object.__setattr__(self, "up", as_direction(self.up, "up"))
        if not self.radius > 0.0 or self.radius == float("inf"):
            raise InvalidGeometry(f"Sphere radius must be positive and finite: {self.radius}")

    @property
    def size(self) -> float:
        return float(self.radius)

    def to_dict(self) -> dict:
        return {
            "type": "sphere",
            "center": list(self.center),
            "radius": self.radius,
            "up": list(self.up),
        }


@dataclass(frozen=True)
class CubeShape:
    """An axis-aligned cube to be added to a scene.

    Attributes:
        center: Center point (x, y, z).
        side: Edge length, must be positive.
        up: Orientation vector (unused by intersection).
    """

    center: tuple[float, float, float]
    side: float
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)

    kind = PrimitiveKind.CUBE

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_point(self.center, "center"))
        object.__setattr__(self, "up", as_direction(self.up, "up"))
        if not self.side > 0.0 or self.side == float("inf"):
            raise InvalidGeometry(f"Cube side must be positive and finite: {self.side}")

    @property
    def size(self) -> float:
        return float(self.side)

    def to_dict(self) -> dict:
        return {
            "type": "cube",
            "center": list(self.center),
            "side": self.side,
            "up": list(self.up),
        }


Shape = SphereShape | CubeShape


def shape_from_dict(data: dict) -> Shape:
    """Build a shape from the dictionary produced by ``to_dict()``.

    Raises:
        ValueError: If the shape type is unknown.
    """
    shape_type = str(data.get("type", "")).lower()
    up = data.get("up", (0.0, 1.0, 0.0))
    if shape_type == "sphere":
        return SphereShape(
            center=data.get("center", (0, 0, 0)), radius=data.get("radius", 1.0), up=up
        )
    if shape_type == "cube":
        return CubeShape(
            center=data.get("center", (0, 0, 0)), side=data.get("side", 1.0), up=up
        )
    raise ValueError(f"Unknown primitive type: {shape_type}")
