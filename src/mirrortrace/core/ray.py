"""Ray data structure plus vector and color utilities.

This module provides the Ray dataclass and the vector/color algebra used by
intersection and shading. Everything here is designed to run inside Taichi
kernels. All quantities are 64-bit floats.

A ray carries a ``strength`` scalar next to its origin and direction. The
strength is both the maximum travel distance for the nearest-hit query and
the energy budget that bounds mirror reflection: every bounce subtracts the
distance travelled and scales what is left by the surface reflectivity.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction, strength=800.0)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import math

import taichi as ti
import taichi.math as tm

from mirrortrace.errors import InvalidGeometry

# Tolerance for distances, coincident points and unit length checks
PRECISION = 1e-7

# 64-bit vector types used by every kernel
vec3 = ti.types.vector(3, ti.f64)
vec4 = ti.types.vector(4, ti.f64)
mat4 = ti.types.matrix(4, 4, ti.f64)


@ti.dataclass
class Ray:
    """A ray with origin, direction and strength.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Expected to be unit length;
            distances reported by intersection routines assume it is.
        strength: Maximum travel distance for the nearest-hit query, and the
            remaining reflection budget.
    """

    origin: vec3
    direction: vec3
    strength: ti.f64


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3, strength: ti.f64) -> Ray:
    """Create a ray from origin, direction and strength."""
    return Ray(origin=origin, direction=direction, strength=strength)


@ti.func
def ray_between(start: vec3, end: vec3, strength: ti.f64) -> Ray:
    """Create a ray from ``start`` aimed at ``end``.

    The caller must guarantee that the two points differ.

    Args:
        start: Origin of the ray.
        end: Point the ray passes through.
        strength: Strength given to the ray.

    Returns:
        A ray with unit direction from start toward end.
    """
    return Ray(origin=start, direction=unitary(end - start), strength=strength)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def unitary(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Undefined for zero-length input; callers must never pass one.

    Args:
        v: The input vector.

    Returns:
        v / length(v).
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def mirror(incident: vec3, normal: vec3) -> vec3:
    """Mirror a direction about a normal: 2 (N . I) N - I.

    Unlike the usual ``reflect`` convention, ``incident`` points away from the
    surface (toward the viewer or the light), and so does the result.

    Args:
        incident: Unit direction leaving the surface point.
        normal: Unit surface normal.

    Returns:
        The mirrored direction.
    """
    return 2.0 * tm.dot(normal, incident) * normal - incident


@ti.func
def points_equal(a: vec3, b: vec3) -> ti.i32:
    """Check whether two points coincide within PRECISION on every axis.

    Returns:
        1 if the points coincide, 0 otherwise.
    """
    return (
        ti.abs(a.x - b.x) < PRECISION
        and ti.abs(a.y - b.y) < PRECISION
        and ti.abs(a.z - b.z) < PRECISION
    )


# =============================================================================
# Color Utility Functions
# =============================================================================
# Colors are unbounded RGB vec3 values. No clamping or gamma is applied here;
# that belongs to presentation (see mirrortrace.preview.display).


@ti.func
def color_add(a: vec3, b: vec3) -> vec3:
    """Add two colors channel-wise."""
    return a + b


@ti.func
def color_modulate(a: vec3, b: vec3) -> vec3:
    """Multiply two colors channel-wise."""
    return a * b


@ti.func
def color_divide(a: vec3, b: vec3) -> vec3:
    """Divide two colors channel-wise."""
    return a / b


@ti.func
def color_scale(c: vec3, s: ti.f64) -> vec3:
    """Scale a color by a scalar."""
    return s * c


# =============================================================================
# Python-side Helpers
# =============================================================================


def as_point(value, name: str = "vector") -> tuple[float, float, float]:
    """Convert a 3-sequence into a tuple of finite floats.

    Args:
        value: Any sequence of three numbers.
        name: Name used in error messages.

    Returns:
        The value as a (x, y, z) tuple of floats.

    Raises:
        InvalidGeometry: If the value does not have three finite components.
    """
    try:
        x, y, z = (float(c) for c in value)
    except (TypeError, ValueError) as e:
        raise InvalidGeometry(f"{name} must have three numeric components: {value!r}") from e
    if not all(math.isfinite(c) for c in (x, y, z)):
        raise InvalidGeometry(f"{name} has non-finite components: {value!r}")
    return (x, y, z)


def as_direction(value, name: str = "direction") -> tuple[float, float, float]:
    """Like as_point(), but also rejects zero-length vectors.

    Raises:
        InvalidGeometry: If the vector is not finite or has zero length.
    """
    x, y, z = as_point(value, name)
    if math.sqrt(x * x + y * y + z * z) < PRECISION:
        raise InvalidGeometry(f"{name} has zero length: {value!r}")
    return (x, y, z)
