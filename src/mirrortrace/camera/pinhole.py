"""Pinhole camera with a view/projection transform pair.

The camera is described by a pose (eye, look-at target, up vector), near and
far planes, and a vertical field of view in degrees. For a given viewport it
builds:
- a view matrix, as gluLookAt does
- a perspective projection matrix, as gluPerspective does

Primary rays are generated by unprojecting a window position at the far
depth plane back into world space and aiming a ray from the eye at it. The
ray's strength is the far plane distance, which both limits the primary hit
search and seeds the reflection budget.

Window coordinates follow OpenGL: x grows to the right from the left edge,
y grows upward from the bottom edge, both in pixels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mirrortrace.camera.pinhole import Camera, setup_camera, get_ray
    >>>
    >>> camera = Camera(
    ...     look_at=(0.0, 0.0, 0.0),
    ...     look_from=(0.0, 0.0, 5.0),
    ...     up=(0.0, 1.0, 0.0),
    ...     near=1.0,
    ...     far=100.0,
    ...     fov_y=45.0,
    ... )
    >>> setup_camera(camera, 64, 64)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(32.0, 32.0)  # Ray through the viewport center
"""

import math
from dataclasses import dataclass, replace

import numpy as np
import numpy.typing as npt
import taichi as ti

from mirrortrace.core.ray import PRECISION, Ray, as_direction, as_point, ray_between, vec3, vec4
from mirrortrace.errors import InvalidGeometry, InvalidViewport

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Pose and projection parameters of a pinhole camera.

    The harness may mutate a Camera freely; the renderer copies it when it is
    handed over, so a frame always uses one consistent pose.

    Attributes:
        look_at: Point the camera looks at (x, y, z).
        look_from: Eye position (x, y, z).
        up: Up direction; must not be parallel to the view direction.
        near: Near plane distance (positive).
        far: Far plane distance (greater than near). Also the strength of
            every primary ray.
        fov_y: Vertical field of view in degrees, in (0, 180).
    """

    look_at: tuple[float, float, float]
    look_from: tuple[float, float, float]
    up: tuple[float, float, float]
    near: float
    far: float
    fov_y: float

    def moved(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "Camera":
        """Return a copy with the eye translated by (dx, dy, dz)."""
        x, y, z = self.look_from
        return replace(self, look_from=(x + dx, y + dy, z + dz))

    def zoomed(self, dfov: float) -> "Camera":
        """Return a copy with the vertical field of view changed by dfov degrees."""
        return replace(self, fov_y=self.fov_y + dfov)

    def validate(self) -> None:
        """Check that the camera describes a usable projection.

        Raises:
            InvalidGeometry: If any vector is not finite, the eye coincides
                with the look-at point, the up vector is zero or parallel to
                the view direction, or the planes or field of view are invalid.
        """
        eye = np.array(as_point(self.look_from, "look_from"))
        target = np.array(as_point(self.look_at, "look_at"))
        up = np.array(as_direction(self.up, "up"))

        forward = target - eye
        if np.linalg.norm(forward) < PRECISION:
            raise InvalidGeometry("Camera eye coincides with the look-at point")
        if np.linalg.norm(np.cross(forward / np.linalg.norm(forward), up)) < PRECISION:
            raise InvalidGeometry("Camera up vector is parallel to the view direction")

        near, far, fov_y = float(self.near), float(self.far), float(self.fov_y)
        if not (math.isfinite(near) and math.isfinite(far)) or near <= 0.0 or far <= near:
            raise InvalidGeometry(f"Camera planes must satisfy 0 < near < far: {near}, {far}")
        if not 0.0 < fov_y < 180.0:
            raise InvalidGeometry(f"Camera field of view must be in (0, 180): {fov_y}")


# =============================================================================
# Transform Construction (Python-side, NumPy)
# =============================================================================


def look_at_matrix(camera: Camera) -> npt.NDArray[np.float64]:
    """Build the world-to-eye view matrix of a camera (gluLookAt).

    Args:
        camera: The camera; assumed valid.

    Returns:
        A 4x4 matrix.
    """
    eye = np.array(camera.look_from, dtype=np.float64)
    target = np.array(camera.look_at, dtype=np.float64)
    up = np.array(camera.up, dtype=np.float64)

    f = target - eye
    f = f / np.linalg.norm(f)
    s = np.cross(f, up)
    s = s / np.linalg.norm(s)
    u = np.cross(s, f)

    view = np.identity(4, dtype=np.float64)
    view[0, :3] = s
    view[1, :3] = u
    view[2, :3] = -f
    view[:3, 3] = -view[:3, :3] @ eye
    return view


def perspective_matrix(
    fov_y: float,
    aspect: float,
    near: float,
    far: float,
) -> npt.NDArray[np.float64]:
    """Build a perspective projection matrix (gluPerspective).

    Args:
        fov_y: Vertical field of view in degrees.
        aspect: Viewport width divided by height.
        near: Near plane distance.
        far: Far plane distance.

    Returns:
        A 4x4 matrix.
    """
    f = 1.0 / math.tan(math.radians(fov_y) / 2.0)
    projection = np.zeros((4, 4), dtype=np.float64)
    projection[0, 0] = f / aspect
    projection[1, 1] = f
    projection[2, 2] = (far + near) / (near - far)
    projection[2, 3] = 2.0 * far * near / (near - far)
    projection[3, 2] = -1.0
    return projection


def unproject_matrix(camera: Camera, width: int, height: int) -> npt.NDArray[np.float64]:
    """Inverse of projection @ view for a camera and viewport.

    Raises:
        InvalidGeometry: If the camera is invalid.
        InvalidViewport: If the viewport is smaller than one pixel.
    """
    if width < 1 or height < 1:
        raise InvalidViewport(f"Viewport must be at least 1x1 pixels: {width}x{height}")
    camera.validate()
    view = look_at_matrix(camera)
    projection = perspective_matrix(camera.fov_y, width / height, camera.near, camera.far)
    return np.linalg.inv(projection @ view)


def unproject(
    inverse: npt.NDArray[np.float64],
    x: float,
    y: float,
    depth: float,
    width: int,
    height: int,
) -> npt.NDArray[np.float64]:
    """Map a window position back into world space (gluUnProject).

    Args:
        inverse: Result of unproject_matrix().
        x: Window x in pixels (0 = left edge).
        y: Window y in pixels (0 = bottom edge).
        depth: Window depth in [0, 1] (0 = near plane, 1 = far plane).
        width: Viewport width in pixels.
        height: Viewport height in pixels.

    Returns:
        The world-space point as a length-3 array.
    """
    ndc = np.array([2.0 * x / width - 1.0, 2.0 * y / height - 1.0, 2.0 * depth - 1.0, 1.0])
    world = inverse @ ndc
    return world[:3] / world[3]


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_far = ti.field(dtype=ti.f64, shape=())
_viewport_size = ti.Vector.field(2, dtype=ti.f64, shape=())
_inverse_view_projection = ti.Matrix.field(4, 4, dtype=ti.f64, shape=())


def setup_camera(camera: Camera, width: int, height: int) -> None:
    """Compute and store the camera transform for a viewport.

    Must be called after every camera or viewport change, before generating
    rays.

    Args:
        camera: The camera pose and projection parameters.
        width: Viewport width in pixels.
        height: Viewport height in pixels.

    Raises:
        InvalidGeometry: If the camera is invalid.
        InvalidViewport: If the viewport is smaller than one pixel.
    """
    inverse = unproject_matrix(camera, width, height)
    if not np.all(np.isfinite(inverse)):
        raise InvalidGeometry("Camera transform is not invertible")

    _camera_eye[None] = list(camera.look_from)
    _camera_far[None] = float(camera.far)
    _viewport_size[None] = [float(width), float(height)]
    _inverse_view_projection[None] = inverse.tolist()


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def unproject_far(x: ti.f64, y: ti.f64) -> vec3:
    """Unproject a window position at the far depth plane into world space.

    Args:
        x: Window x in pixels.
        y: Window y in pixels.

    Returns:
        The world-space point.
    """
    size = _viewport_size[None]
    ndc = vec4(2.0 * x / size[0] - 1.0, 2.0 * y / size[1] - 1.0, 1.0, 1.0)
    world = _inverse_view_projection[None] @ ndc
    return vec3(world[0], world[1], world[2]) / world[3]


@ti.func
def get_ray(x: ti.f64, y: ti.f64) -> Ray:
    """Generate the primary ray through a window position.

    Args:
        x: Window x in pixels (0 = left edge).
        y: Window y in pixels (0 = bottom edge).

    Returns:
        A ray from the eye toward the unprojected far-plane point, with
        strength equal to the far plane distance.
    """
    return ray_between(_camera_eye[None], unproject_far(x, y), _camera_far[None])


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get the stored camera state for debugging.

    Returns:
        Dictionary with the eye position, far distance and viewport size.
    """
    eye = _camera_eye[None]
    size = _viewport_size[None]
    return {
        "eye": (float(eye[0]), float(eye[1]), float(eye[2])),
        "far": (float(_camera_far[None]),),
        "viewport": (float(size[0]), float(size[1])),
    }
