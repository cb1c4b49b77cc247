"""Axis-aligned cube primitive with ray-cube intersection.

A cube is defined by its center and side length. Its eight vertices are
center +/- side/2 on every axis. Each of the six faces is described by three
vertices: a pivot and two neighbours. The face normal is the cross product of
the unit edge directions pivot->a and pivot->b; the vertex order below makes
every normal point outward.

Ray-cube intersection tests each face as an infinite plane:
1. Find where the ray crosses the plane through the pivot
2. Reject crossings behind the origin (distance < PRECISION)
3. Reject points outside the cube's [-side/2, side/2] box on any axis
4. Keep the nearest surviving crossing

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mirrortrace.geometry.cube import Cube, hit_cube
    >>> cube = Cube(center=vec3(0, 0, 0), side=2.0, up=vec3(0, 1, 0))
    >>> # Use hit_cube within a Taichi kernel
"""

import taichi as ti

from mirrortrace.core.ray import PRECISION, Ray, cross, dot, length, unitary, vec3

from .sphere import HitRecord, make_miss


@ti.dataclass
class Cube:
    """An axis-aligned cube.

    Attributes:
        center: The center point of the cube (vec3).
        side: The edge length of the cube (positive float).
        up: Orientation of the cube. Part of the pose, not used by the
            intersection math.
    """

    center: vec3
    side: ti.f64
    up: vec3


# Vertex positions as multiples of side/2 from the center
CUBE_VERTEX_SIGNS = (
    (1.0, 1.0, -1.0),
    (1.0, 1.0, 1.0),
    (-1.0, 1.0, -1.0),
    (-1.0, 1.0, 1.0),
    (-1.0, -1.0, 1.0),
    (1.0, -1.0, 1.0),
    (1.0, -1.0, -1.0),
    (-1.0, -1.0, -1.0),
)

# (pivot, a, b) vertex indices per face
CUBE_FACES = (
    (3, 1, 2),  # top    (+y)
    (6, 5, 7),  # bottom (-y)
    (1, 3, 5),  # front  (+z)
    (7, 2, 6),  # back   (-z)
    (0, 1, 6),  # right  (+x)
    (4, 3, 7),  # left   (-x)
)


@ti.func
def _cube_vertex(cube: Cube, signs: ti.template()) -> vec3:
    """Position of the cube vertex with the given static sign triple."""
    half = cube.side / 2.0
    return cube.center + half * vec3(signs[0], signs[1], signs[2])


@ti.func
def _inside_box(cube: Cube, point: vec3) -> ti.i32:
    """Check that a point lies within the cube bounds on all three axes."""
    half = cube.side / 2.0
    q = point - cube.center
    return (
        ti.abs(q.x) - half <= PRECISION
        and ti.abs(q.y) - half <= PRECISION
        and ti.abs(q.z) - half <= PRECISION
    )


@ti.func
def hit_cube(ray: Ray, cube: Cube) -> HitRecord:
    """Find the nearest positive-distance intersection of a ray with a cube.

    Args:
        ray: The ray to test. Its direction must be unit length.
        cube: The cube to test against.

    Returns:
        A HitRecord for the nearest face hit, or a miss record. The normal is
        the outward unit normal of the face that was hit.
    """
    result = make_miss()

    for face in ti.static(CUBE_FACES):
        pivot = _cube_vertex(cube, ti.static(CUBE_VERTEX_SIGNS[face[0]]))
        a = _cube_vertex(cube, ti.static(CUBE_VERTEX_SIGNS[face[1]]))
        b = _cube_vertex(cube, ti.static(CUBE_VERTEX_SIGNS[face[2]]))
        normal = cross(unitary(a - pivot), unitary(b - pivot))

        denom = dot(ray.direction, normal)
        if denom != 0.0:
            t = dot(pivot - ray.origin, normal) / denom
            if t >= PRECISION:
                point = ray.origin + t * ray.direction
                if _inside_box(cube, point):
                    dist = length(point - ray.origin)
                    if result.hit == 0 or dist < result.length:
                        result = HitRecord(hit=1, length=dist, point=point, normal=normal)

    return result
