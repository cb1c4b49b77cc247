"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection solves, for a unit ray direction d:

    |origin + t * d - center|^2 = radius^2

With oc = origin - center, b = d . oc and c = oc . oc, the roots are

    t = -b +/- sqrt(delta),    delta = b^2 - c + radius^2

A discriminant within PRECISION of zero is reported as a miss: grazing rays
do not hit. This keeps silhouettes free of single-point speckles and is the
intended behavior, not a numerical special case.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mirrortrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=vec3(0, 0, 0), radius=1.0, up=vec3(0, 1, 0))
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from mirrortrace.core.ray import PRECISION, Ray, dot, length, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        up: Orientation of the sphere. Part of the pose, not used by the
            intersection math.
    """

    center: vec3
    radius: ti.f64
    up: vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        length: Distance from the ray origin to the hit point, or -1 on a miss.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The outward surface normal at the hit point. Not guaranteed
            to be unit length; normalize before using it for shading.
            Only valid if hit == 1.
    """

    hit: ti.i32
    length: ti.f64
    point: vec3
    normal: vec3


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        length=-1.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere) -> HitRecord:
    """Find the nearest positive-distance intersection of a ray with a sphere.

    Both roots of the quadratic are computed. Roots closer than PRECISION to
    the origin, or behind it, are rejected; of the remaining ones the nearer
    is kept.

    Args:
        ray: The ray to test. Its direction must be unit length.
        sphere: The sphere to test against.

    Returns:
        A HitRecord for the nearest hit, or a miss record.
    """
    oc = ray.origin - sphere.center
    b = dot(ray.direction, oc)
    c = dot(oc, oc)
    delta = b * b - c + sphere.radius * sphere.radius

    result = make_miss()

    # Tangent rays (|delta| <= PRECISION) and real misses (delta < 0) both miss
    if delta > PRECISION:
        root = ti.sqrt(delta)
        far_t = -b + root
        near_t = -b - root

        t = -1.0
        if near_t >= PRECISION:
            t = near_t
        elif far_t >= PRECISION:
            t = far_t

        if t > 0.0:
            point = ray.origin + t * ray.direction
            result = HitRecord(
                hit=1,
                length=length(point - ray.origin),
                point=point,
                normal=(point - sphere.center) / sphere.radius,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f64, up: vec3) -> Sphere:
    """Create a sphere from center, radius and orientation."""
    return Sphere(center=center, radius=radius, up=up)
