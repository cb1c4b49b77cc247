"""Core rendering module.

This module contains the fundamental building blocks of the ray tracer:

Components:
    ray: Ray data structure, vector and color algebra
    sampling: Fixed sub-pixel sampling patterns for anti-aliasing
    integrator: Whitted-style shading and the full-frame rendering kernel
    frame: Render context with a lazily recomputed frame cache

All per-ray work runs in Taichi functions and kernels with 64-bit floats.
"""

from .ray import (
    PRECISION,
    Ray,
    as_direction,
    as_point,
    color_add,
    color_divide,
    color_modulate,
    color_scale,
    cross,
    dot,
    length,
    make_ray,
    mirror,
    points_equal,
    ray_at,
    ray_between,
    unitary,
    vec3,
)
from .sampling import (
    MAX_SAMPLES,
    PATTERN_OFFSETS,
    SamplingPattern,
    get_offsets,
    parse_pattern,
    pattern_size,
)

# Note: integrator and frame are NOT imported here; they declare Taichi fields
# and depend on the scene and camera packages. Import them directly:
#   from mirrortrace.core.frame import FrameRenderer

__all__ = [
    "PRECISION",
    "Ray",
    "vec3",
    "ray_at",
    "make_ray",
    "ray_between",
    "length",
    "unitary",
    "dot",
    "cross",
    "mirror",
    "points_equal",
    "color_add",
    "color_modulate",
    "color_divide",
    "color_scale",
    "as_point",
    "as_direction",
    "SamplingPattern",
    "PATTERN_OFFSETS",
    "MAX_SAMPLES",
    "parse_pattern",
    "pattern_size",
    "get_offsets",
]
