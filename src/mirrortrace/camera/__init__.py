"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole camera with gluLookAt/gluPerspective style transforms

Primary rays start at the eye and pass through the window position
unprojected at the far plane. Window coordinates are in pixels with the
origin at the bottom-left corner.
"""

from .pinhole import (
    Camera,
    get_camera_info,
    get_ray,
    look_at_matrix,
    perspective_matrix,
    setup_camera,
    unproject,
    unproject_matrix,
)

__all__ = [
    "Camera",
    "look_at_matrix",
    "perspective_matrix",
    "unproject_matrix",
    "unproject",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
