"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection
    cube: Axis-aligned cube tested face by face
    primitive: Tagged primitive variant and Python-side shape descriptions

All intersection routines are Taichi functions returning a HitRecord with
the nearest hit at a distance of at least PRECISION.
"""

from .cube import CUBE_FACES, CUBE_VERTEX_SIGNS, Cube, hit_cube
from .primitive import (
    CubeShape,
    Primitive,
    PrimitiveKind,
    Shape,
    SphereShape,
    hit_primitive,
    shape_from_dict,
)
from .sphere import HitRecord, Sphere, hit_sphere, make_miss, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss",
    "Cube",
    "CUBE_FACES",
    "CUBE_VERTEX_SIGNS",
    "hit_cube",
    "PrimitiveKind",
    "Primitive",
    "hit_primitive",
    "SphereShape",
    "CubeShape",
    "Shape",
    "shape_from_dict",
]
