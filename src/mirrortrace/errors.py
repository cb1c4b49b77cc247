"""Exceptions raised by the ray tracer.

The core is pure computation over caller-supplied data, so the taxonomy is
narrow. "No intersection", "fully shadowed" and "non-reflective" are normal
outcomes and never raise.
"""


class RayTraceError(Exception):
    """Base class for all ray tracer errors."""


class InvalidGeometry(RayTraceError, ValueError):
    """Degenerate geometric input.

    Raised for vectors that would have to be normalized while having zero
    length (eye at the look-at point, up parallel to the view direction),
    non-positive primitive sizes, invalid camera planes, non-finite
    coordinates, and non-finite colors reaching the frame buffer.
    """


class InvalidViewport(RayTraceError, ValueError):
    """Viewport dimensions below one pixel or above the preallocated maximum."""


class SceneCorruption(RayTraceError, RuntimeError):
    """A primitive references a material index outside the material list."""
