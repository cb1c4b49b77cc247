"""Scene module for scene management and nearest-hit queries.

Components:
    intersection: Primitive storage and the nearest-hit scene query
    lights: Point lights and the ambient intensity
    manager: Scene manager coordinating primitives, materials and lights
    demo: The demo scene (a sphere resting on a large cube)

Scene data lives in Taichi fields using a Structure-of-Arrays layout.
"""

from .demo import DEMO_SETTINGS, DemoSceneParams, create_demo_camera, create_demo_scene
from .intersection import (
    MAX_PRIMITIVES,
    NO_HIT,
    Intersection,
    add_primitive,
    clear_scene,
    get_primitive_count,
    intersect_scene,
)
from .lights import (
    MAX_LIGHTS,
    PointLight,
    add_light,
    clear_lights,
    get_light_count,
    set_ambient_intensity,
)
from .manager import PrimitiveInfo, SceneConfig, SceneManager

__all__ = [
    # Intersection module
    "NO_HIT",
    "MAX_PRIMITIVES",
    "Intersection",
    "add_primitive",
    "clear_scene",
    "get_primitive_count",
    "intersect_scene",
    # Lights module
    "MAX_LIGHTS",
    "PointLight",
    "add_light",
    "clear_lights",
    "get_light_count",
    "set_ambient_intensity",
    # Manager module
    "PrimitiveInfo",
    "SceneConfig",
    "SceneManager",
    # Demo scene
    "DEMO_SETTINGS",
    "DemoSceneParams",
    "create_demo_camera",
    "create_demo_scene",
]
