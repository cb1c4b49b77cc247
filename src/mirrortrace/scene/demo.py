"""Demo scene: a white sphere resting on a large blue cube.

The scene consists of:
- A white sphere of radius 2 centered at (0, -2, 0)
- A blue cube of side 80 centered at (0, 40, 0), its bottom face at y = 0
  touching the top of the sphere
- A strong key light at (0, -11, 11) and a weaker fill light at (-5, -5, 10)

The camera sits far away with a narrow 2 degree field of view, looking at the
sphere's center, so the sphere fills the middle of the frame and the cube's
face forms the backdrop.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mirrortrace.scene.demo import create_demo_scene, DEMO_SETTINGS
    >>> from mirrortrace.core.frame import FrameRenderer
    >>>
    >>> scene, camera = create_demo_scene()
    >>> renderer = FrameRenderer(
    ...     scene, 400, 400, camera=camera,
    ...     pattern=DEMO_SETTINGS.pattern, samples=DEMO_SETTINGS.samples,
    ... )
"""

from dataclasses import dataclass

from mirrortrace.camera.pinhole import Camera
from mirrortrace.config import RenderSettings
from mirrortrace.materials.phong import Material
from mirrortrace.scene.lights import PointLight
from mirrortrace.scene.manager import SceneManager

# Sampling used when rendering the demo scene
DEMO_SETTINGS = RenderSettings()


@dataclass
class DemoSceneParams:
    """Parameters for configuring the demo scene.

    Attributes:
        ambient_intensity: Scene-wide ambient intensity. Default 0.0, so only
            lit surfaces are visible.
        key_light_intensity: Intensity of the light at (0, -11, 11).
        fill_light_intensity: Intensity of the light at (-5, -5, 10).
        light_color: RGB color shared by both lights.
        sphere_color: RGB base color of the sphere.
        cube_color: RGB base color of the cube.
        sphere_reflection: Mirror reflectivity of the sphere in [0, 1].

    Example:
        >>> params = DemoSceneParams(ambient_intensity=0.2, sphere_reflection=0.5)
        >>> scene, camera = create_demo_scene(params)
    """

    ambient_intensity: float = 0.0
    key_light_intensity: float = 250.0
    fill_light_intensity: float = 50.0
    light_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    sphere_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    cube_color: tuple[float, float, float] = (0.0, 0.0, 1.0)
    sphere_reflection: float = 0.0


def create_demo_camera() -> Camera:
    """Create the demo camera pose."""
    return Camera(
        look_at=(0.0, -2.0, 0.0),
        look_from=(-203.0, -155.0, 104.0),
        up=(0.0, 1.0, 0.0),
        near=1.0,
        far=800.0,
        fov_y=2.0,
    )


def create_demo_scene(
    params: DemoSceneParams | None = None,
) -> tuple[SceneManager, Camera]:
    """Create the demo scene.

    Args:
        params: Optional scene parameters. Defaults reproduce the reference
            demo.

    Returns:
        Tuple of (SceneManager, Camera).
    """
    if params is None:
        params = DemoSceneParams()

    scene = SceneManager(ambient_intensity=params.ambient_intensity)

    sphere_material = Material(
        reflection=params.sphere_reflection,
        specular=0.5,
        shininess=50.0,
        diffuse=0.5,
        ambient=0.8,
        color=params.sphere_color,
    )
    cube_material = Material(
        reflection=0.0,
        specular=0.5,
        shininess=50.0,
        diffuse=0.5,
        ambient=0.1,
        color=params.cube_color,
    )

    scene.add_sphere(center=(0.0, -2.0, 0.0), radius=2.0, material=sphere_material)
    scene.add_cube(center=(0.0, 40.0, 0.0), side=80.0, material=cube_material)

    scene.add_light(
        PointLight(
            position=(0.0, -11.0, 11.0),
            color=params.light_color,
            intensity=params.key_light_intensity,
        )
    )
    scene.add_light(
        PointLight(
            position=(-5.0, -5.0, 10.0),
            color=params.light_color,
            intensity=params.fill_light_intensity,
        )
    )

    return scene, create_demo_camera()
