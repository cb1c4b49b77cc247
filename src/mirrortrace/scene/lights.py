"""Point lights and ambient intensity.

A point light has a position, a color and an intensity. The intensity is the
numerator of the inverse-square falloff, and it also bounds the shadow ray
cast from the light: surfaces farther from a light than its intensity are
never lit by it.

Example:
    >>> from mirrortrace.scene.lights import PointLight
    >>> key = PointLight(position=(0.0, -11.0, 11.0), color=(1.0, 1.0, 1.0), intensity=250.0)
"""

import math
from dataclasses import dataclass

import taichi as ti

from mirrortrace.core.ray import as_point, vec3


@dataclass(frozen=True)
class PointLight:
    """A point light source.

    Attributes:
        position: Light position (x, y, z).
        color: Light color (R, G, B), multiplies diffuse and specular terms.
        intensity: Falloff numerator and shadow ray budget (non-negative).
    """

    position: tuple[float, float, float]
    color: tuple[float, float, float]
    intensity: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_point(self.position, "light position"))
        color = tuple(float(c) for c in self.color)
        if len(color) != 3 or not all(math.isfinite(c) for c in color):
            raise ValueError(f"Light color must be three finite floats: {self.color!r}")
        object.__setattr__(self, "color", color)
        intensity = float(self.intensity)
        if not math.isfinite(intensity) or intensity < 0.0:
            raise ValueError(f"Light intensity = {intensity} must be finite and non-negative.")
        object.__setattr__(self, "intensity", intensity)

    def to_dict(self) -> dict:
        return {
            "position": list(self.position),
            "color": list(self.color),
            "intensity": self.intensity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PointLight":
        return cls(
            position=tuple(data.get("position", (0.0, 0.0, 0.0))),
            color=tuple(data.get("color", (1.0, 1.0, 1.0))),
            intensity=data.get("intensity", 1.0),
        )


# Maximum number of point lights
MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f64, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

# Scene-wide ambient intensity
ambient_intensity = ti.field(dtype=ti.f64, shape=())


def clear_lights() -> None:
    """Remove all lights and reset the ambient intensity to zero."""
    num_lights[None] = 0
    ambient_intensity[None] = 0.0


def add_light(light: PointLight) -> int:
    """Append a point light.

    Args:
        light: The light to add.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = vec3(light.position[0], light.position[1], light.position[2])
    light_colors[idx] = vec3(light.color[0], light.color[1], light.color[2])
    light_intensities[idx] = light.intensity
    num_lights[None] = idx + 1
    return idx


def set_ambient_intensity(value: float) -> None:
    """Set the scene-wide ambient intensity.

    Raises:
        ValueError: If the value is negative or not finite.
    """
    value = float(value)
    if not math.isfinite(value) or value < 0.0:
        raise ValueError(f"Ambient intensity = {value} must be finite and non-negative.")
    ambient_intensity[None] = value


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])
