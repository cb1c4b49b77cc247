"""Taichi-based recursive ray tracer.

This package renders a static scene of spheres and cubes lit by point lights
into a color buffer, using Whitted-style ray tracing:
- Phong-style ambient, diffuse and specular shading
- Shadow rays cast from every light toward the shaded point
- Mirror reflection bounded by a per-ray distance budget ("strength")
- Anti-aliasing with fixed sub-pixel sampling patterns
- A frame cache recomputed only when the camera or viewport changes

Subpackages:
    core: Vector utilities, rays, sampling patterns, shading and the frame cache
    geometry: Sphere and cube primitives and their intersection routines
    materials: Phong material registry
    scene: Primitive storage, lights and the scene manager
    camera: Pinhole camera with view/projection transform and unprojection
    preview: Tone mapping and PNG export of rendered buffers
"""

__version__ = "0.1.0"
