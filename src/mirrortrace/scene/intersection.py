"""Scene-level primitive storage and nearest-hit queries.

Primitives of every kind live in one ordered table, so the index of a
primitive is its position in insertion order. The nearest-hit query scans the
whole table (there is no acceleration structure) and keeps the closest hit
that lies strictly within the ray's strength.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mirrortrace.scene.intersection import add_primitive, clear_scene
    >>> from mirrortrace.geometry.primitive import PrimitiveKind
    >>> clear_scene()
    >>> add_primitive(PrimitiveKind.SPHERE, (0, 0, 0), 1.0, (0, 1, 0), material_id=0)
    0
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from mirrortrace.core.ray import Ray, vec3
from mirrortrace.geometry.primitive import Primitive, PrimitiveKind, hit_primitive

# Index reported when a ray hits nothing
NO_HIT = -1


@ti.dataclass
class Intersection:
    """Record of a ray-scene intersection.

    Attributes:
        point: The 3D point where the ray intersected the surface.
        normal: The outward surface normal (not necessarily unit length).
        length: Distance from the ray origin to the hit point, -1 on a miss.
        index: Index of the hit primitive, or NO_HIT (-1).
    """

    point: vec3
    normal: vec3
    length: ti.f64
    index: ti.i32


# Maximum number of primitives supported in the scene
MAX_PRIMITIVES = 1024

# Primitive storage: Structure of Arrays layout
primitive_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_PRIMITIVES)
primitive_sizes = ti.field(dtype=ti.f64, shape=MAX_PRIMITIVES)
primitive_ups = ti.Vector.field(3, dtype=ti.f64, shape=MAX_PRIMITIVES)
primitive_material_ids = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive count to zero. The actual field data is not cleared
    but will be overwritten when new primitives are added.
    """
    num_primitives[None] = 0


def add_primitive(
    kind: PrimitiveKind,
    center: tuple[float, float, float],
    size: float,
    up: tuple[float, float, float],
    material_id: int,
) -> int:
    """Append a primitive to the scene.

    Args:
        kind: The primitive kind.
        center: Center of the shape.
        size: Radius for spheres, side length for cubes.
        up: Orientation vector.
        material_id: Index of the primitive's material.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")
    primitive_kinds[idx] = int(kind)
    primitive_centers[idx] = vec3(center[0], center[1], center[2])
    primitive_sizes[idx] = size
    primitive_ups[idx] = vec3(up[0], up[1], up[2])
    primitive_material_ids[idx] = material_id
    num_primitives[None] = idx + 1
    return idx


def get_primitive_count() -> int:
    """Get the number of primitives in the scene."""
    return int(num_primitives[None])


def get_primitive_material_ids() -> list[int]:
    """Get the material index of every stored primitive, in order."""
    count = num_primitives[None]
    return [int(primitive_material_ids[i]) for i in range(count)]


@ti.func
def get_primitive(index: ti.i32) -> Primitive:
    """Read the stored primitive at an index."""
    return Primitive(
        kind=primitive_kinds[index],
        center=primitive_centers[index],
        size=primitive_sizes[index],
        up=primitive_ups[index],
        material_id=primitive_material_ids[index],
    )


@ti.func
def get_primitive_material_id(index: ti.i32) -> ti.i32:
    """Material index of the stored primitive at an index."""
    return primitive_material_ids[index]


@ti.func
def make_no_hit() -> Intersection:
    """Create an Intersection indicating that nothing was hit."""
    return Intersection(
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        length=-1.0,
        index=NO_HIT,
    )


@ti.func
def intersect_scene(ray: Ray) -> Intersection:
    """Find the nearest primitive hit along a ray.

    A hit qualifies when its distance is >= 0 and strictly less than both
    the ray's strength and the nearest distance found so far. For primary
    rays the strength is the camera's far plane; for shadow and reflection
    rays it is their travel budget.

    Args:
        ray: The ray to trace.

    Returns:
        The nearest qualifying Intersection, or one with index NO_HIT.
    """
    closest = ray.strength
    result = make_no_hit()

    for i in range(num_primitives[None]):
        rec = hit_primitive(ray, get_primitive(i))
        if rec.hit == 1 and rec.length >= 0.0 and rec.length < closest:
            closest = rec.length
            result = Intersection(point=rec.point, normal=rec.normal, length=rec.length, index=i)

    return result
