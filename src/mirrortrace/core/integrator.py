"""Whitted-style shading integrator and full-frame rendering kernel.

This module computes the color seen along a ray and renders whole frames into
the preallocated color buffer.

Shading a hit combines:
    - ambient: material.color * ambient_intensity * material.ambient
    - mirror reflection: the ambient term is scaled by (1 - reflection) and
      reflection * (color seen along the mirrored ray) is added
    - for every light that reaches the point unoccluded: a Phong specular
      highlight and a Lambert diffuse term, both with inverse-square falloff

Reflection is naturally recursive:

    shade(ray, hit) = base * (1 - r) + lights + r * shade(reflected, bounce)

Taichi functions cannot recurse, so the recursion is unrolled into a loop
that carries the running product of reflectivities as a weight. The sum is
the same. There is no depth counter: the reflected ray's strength shrinks by
the distance travelled and is scaled by the reflectivity at every bounce, so
the loop ends once no primitive lies within the remaining strength, the
mirrored ray hits the point it left from, or the material is not reflective.

A light reaches a point when the nearest hit of the shadow ray cast from the
light toward the point is the point itself.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mirrortrace.core.integrator import setup_render_target, render_image
    >>> from mirrortrace.camera.pinhole import setup_camera
    >>> from mirrortrace.scene.demo import create_demo_scene
    >>>
    >>> scene, camera = create_demo_scene()
    >>> setup_camera(camera, 100, 100)
    >>> setup_render_target(100, 100)
    >>> render_image(samples=5)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

from mirrortrace.camera.pinhole import get_ray
from mirrortrace.core.ray import (
    PRECISION,
    Ray,
    dot,
    length,
    make_ray,
    mirror,
    points_equal,
    ray_between,
    unitary,
    vec3,
)
from mirrortrace.core.sampling import MAX_SAMPLES, SamplingPattern, get_offsets
from mirrortrace.errors import InvalidGeometry, InvalidViewport
from mirrortrace.materials.phong import PhongMaterial, get_material
from mirrortrace.scene.intersection import (
    NO_HIT,
    Intersection,
    get_primitive_material_id,
    intersect_scene,
)
from mirrortrace.scene.lights import (
    ambient_intensity,
    light_colors,
    light_intensities,
    light_positions,
    num_lights,
)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer indexed [column, row], row 0 at the bottom (preallocated to max size)
_color_buffer = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sub-pixel sample offsets of the active sampling pattern
_sample_offsets = ti.Vector.field(2, dtype=ti.f64, shape=MAX_SAMPLES)

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffer.

    Sets the active image dimensions and clears the buffer. The buffer is
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT to avoid Taichi kernel
    recompilation.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        InvalidViewport: If dimensions are below one pixel or exceed the
            maximum supported size.
    """
    if width < 1 or height < 1:
        raise InvalidViewport(f"Image dimensions must be at least 1x1: {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise InvalidViewport(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to black."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Clear the buffer and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def set_sampling(pattern: SamplingPattern, samples: int) -> int:
    """Load the offsets of a sampling pattern into the kernel-side table.

    Returns:
        The number of offsets loaded.

    Raises:
        ValueError: If the pattern is unknown or samples is out of range.
    """
    offsets = get_offsets(pattern, samples)
    for k, (dx, dy) in enumerate(offsets):
        _sample_offsets[k] = [dx, dy]
    return len(offsets)


# =============================================================================
# Shading
# =============================================================================


@ti.func
def attenuate(strength: ti.f64, travelled: ti.f64, reflection: ti.f64) -> ti.f64:
    """Strength left to a reflected ray after a bounce.

    Args:
        strength: Strength of the ray that was reflected.
        travelled: Distance from the reflecting point to the next hit.
        reflection: Reflectivity of the reflecting surface.

    Returns:
        (strength - travelled) * reflection.
    """
    return (strength - travelled) * reflection


@ti.func
def spawn_reflection(ray: Ray, point: vec3, normal: vec3) -> Ray:
    """Mirror a ray about a surface normal at a hit point.

    The reflected ray starts at the hit point and keeps the incoming ray's
    strength; it is attenuated only after its own hit is known.

    Args:
        ray: The incoming ray.
        point: The hit point.
        normal: Unit surface normal at the hit point.

    Returns:
        The reflected ray.
    """
    view = -ray.direction
    return make_ray(point, unitary(mirror(view, normal)), ray.strength)


@ti.func
def light_contribution(ray: Ray, point: vec3, normal: vec3, material: PhongMaterial) -> vec3:
    """Sum of specular and diffuse terms from every light reaching a point.

    Args:
        ray: The ray that hit the point (gives the view direction).
        point: The shaded point.
        normal: Unit surface normal at the point.
        material: The surface material.

    Returns:
        The summed contribution of all lights (RGB).
    """
    total = vec3(0.0, 0.0, 0.0)
    view = -ray.direction

    for i in range(num_lights[None]):
        position = light_positions[i]
        to_light = position - point
        distance = length(to_light)

        # A light sitting on the point has no direction to it
        if distance >= PRECISION:
            shadow = ray_between(position, point, light_intensities[i])
            blocker = intersect_scene(shadow)

            if blocker.index != NO_HIT and points_equal(blocker.point, point):
                falloff = light_intensities[i] / (distance * distance)
                light_dir = to_light / distance
                nl = dot(normal, light_dir)
                reflected_light = mirror(light_dir, normal)
                phi = dot(reflected_light, view) / length(reflected_light)

                if phi > 0.0:
                    highlight = material.specular * phi**material.shininess * falloff
                    total += highlight * light_colors[i]
                if material.reflection < 1.0:
                    diffuse = material.diffuse * (1.0 - material.reflection) * nl * falloff
                    total += ti.max(diffuse, 0.0) * material.color * light_colors[i]

    return total


@ti.func
def shade(ray: Ray, hit: Intersection) -> vec3:
    """Compute the color seen along a ray that hit a primitive.

    Args:
        ray: The ray.
        hit: Its nearest scene intersection; index must not be NO_HIT.

    Returns:
        The shaded color (RGB, unbounded).
    """
    color = vec3(0.0, 0.0, 0.0)
    weight = 1.0
    current_ray = ray
    current_hit = hit
    active = 1

    while active == 1:
        material = get_material(get_primitive_material_id(current_hit.index))
        normal = unitary(current_hit.normal)
        local = material.color * ambient_intensity[None] * material.ambient

        next_ray = current_ray
        next_hit = current_hit
        active = 0

        if material.reflection > 0.0:
            local *= 1.0 - material.reflection
            reflected = spawn_reflection(current_ray, current_hit.point, normal)
            bounce = intersect_scene(reflected)
            if bounce.index != NO_HIT and not points_equal(bounce.point, current_hit.point):
                reflected.strength = attenuate(
                    reflected.strength, bounce.length, material.reflection
                )
                next_ray = reflected
                next_hit = bounce
                active = 1

        local += light_contribution(current_ray, current_hit.point, normal, material)
        color += weight * local

        if active == 1:
            weight *= material.reflection
            current_ray = next_ray
            current_hit = next_hit

    return color


@ti.func
def trace(ray: Ray) -> vec3:
    """Color seen along a ray: black on a miss, the shaded hit otherwise."""
    color = vec3(0.0, 0.0, 0.0)
    hit = intersect_scene(ray)
    if hit.index != NO_HIT:
        color = shade(ray, hit)
    return color


@ti.func
def render_pixel(pixel_i: ti.i32, pixel_j: ti.i32, num_samples: ti.i32) -> vec3:
    """Average the shaded color of every sample of a pixel.

    Sample k is taken at the pixel center displaced by the k-th offset of the
    active pattern. Samples that miss contribute black but still count.

    The pattern is centred on the pixel centre (i + 0.5, j + 0.5), not on
    the pixel's lower-left corner.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        num_samples: Number of pattern offsets to use.

    Returns:
        The mean color of the samples.
    """
    color = vec3(0.0, 0.0, 0.0)
    for k in range(num_samples):
        offset = _sample_offsets[k]
        x = ti.cast(pixel_i, ti.f64) + 0.5 + offset[0]
        y = ti.cast(pixel_j, ti.f64) + 0.5 + offset[1]
        color += trace(get_ray(x, y))
    return color / ti.cast(num_samples, ti.f64)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32, num_samples: ti.i32):
    """Recompute every pixel of the active region.

    Pixels are independent, so the outer loop runs in parallel; every pixel
    cell is written by exactly one iteration.
    """
    for i, j in ti.ndrange(width, height):
        _color_buffer[i, j] = render_pixel(i, j, num_samples)


@ti.kernel
def _render_single_pixel(pixel_i: ti.i32, pixel_j: ti.i32, num_samples: ti.i32) -> vec3:
    """Render one pixel without touching the buffer. Used for testing."""
    return render_pixel(pixel_i, pixel_j, num_samples)


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, strength: ti.f64) -> vec3:
    """Trace one ray given in world space. Used for testing."""
    return trace(make_ray(origin, direction, strength))


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(
    pattern: SamplingPattern = SamplingPattern.CIRCLE,
    samples: int = 5,
) -> None:
    """Recompute the whole active image.

    The camera must have been set up for the current dimensions with
    setup_camera().

    Args:
        pattern: Sub-pixel sampling pattern.
        samples: Number of pattern offsets averaged per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the pattern is unknown or samples is out of range.
    """
    _check_render_target_initialized()

    num_samples = set_sampling(pattern, samples)
    width, height = get_image_dimensions()
    _render_frame(width, height, num_samples)


def render_sample(
    pixel_i: int,
    pixel_j: int,
    pattern: SamplingPattern = SamplingPattern.CIRCLE,
    samples: int = 5,
) -> tuple[float, float, float]:
    """Render a single pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        pattern: Sub-pixel sampling pattern.
        samples: Number of pattern offsets averaged.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    num_samples = set_sampling(pattern, samples)
    color = _render_single_pixel(pixel_i, pixel_j, num_samples)

    return (float(color[0]), float(color[1]), float(color[2]))


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    strength: float,
) -> tuple[float, float, float]:
    """Shade a single world-space ray against the current scene.

    Args:
        origin: Ray origin.
        direction: Ray direction; normalized here.
        strength: Ray strength (maximum travel distance and reflection budget).

    Returns:
        Tuple of (R, G, B) color values; black if the ray hits nothing.

    Raises:
        InvalidGeometry: If the direction has zero length.
    """
    d = np.asarray(direction, dtype=np.float64)
    norm = float(np.linalg.norm(d))
    if not norm > PRECISION:
        raise InvalidGeometry(f"Ray direction has zero length: {direction!r}")
    d = d / norm

    color = _trace_single_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(d[0], d[1], d[2]),
        float(strength),
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_numpy() -> npt.NDArray[np.float64]:
    """Get the active region of the color buffer as a NumPy array.

    The array shape is (height, width, 3), row 0 at the top, unclamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    # Extract active region, (width, height, 3) with row 0 at the bottom
    image = _color_buffer.to_numpy()[:width, :height, :]

    # Transpose to (height, width, 3) and flip so row 0 is the top
    image = np.flipud(np.transpose(image, (1, 0, 2)))

    return np.ascontiguousarray(image, dtype=np.float64)


def check_finite(image: npt.NDArray[np.float64]) -> None:
    """Raise if any channel of a rendered image is NaN or infinite.

    Raises:
        InvalidGeometry: If the image contains a non-finite value.
    """
    bad = ~np.isfinite(image)
    if np.any(bad):
        row, col, _ = np.argwhere(bad)[0]
        raise InvalidGeometry(
            f"Non-finite color at pixel (row={row}, col={col}); "
            "check the scene for degenerate geometry"
        )
