"""Phong-style material with mirror reflection.

A material combines:
    - ambient: fraction of the scene's ambient intensity reflected
    - diffuse: Lambert term weight, scaled by (1 - reflection)
    - specular, shininess: Phong highlight weight and exponent
    - reflection: mirror reflectivity in [0, 1], blending the surface color
      with whatever the reflected ray sees
    - color: base RGB color (unbounded)

Materials are value objects compared structurally. The scene stores each
distinct material once and primitives refer to it by index.

Example:
    >>> from mirrortrace.materials.phong import Material
    >>> matte_white = Material(
    ...     reflection=0.0, specular=0.5, shininess=50.0,
    ...     diffuse=0.5, ambient=0.1, color=(1.0, 1.0, 1.0),
    ... )
    >>> # Inside a kernel: mat = get_material(material_id)
"""

import math
from dataclasses import dataclass

import taichi as ti

from mirrortrace.core.ray import vec3


@dataclass(frozen=True)
class Material:
    """Phong material parameters.

    Equality is structural: two materials are equal when every field is.

    Attributes:
        reflection: Mirror reflectivity in [0, 1].
        specular: Specular highlight weight (non-negative).
        shininess: Specular exponent (non-negative).
        diffuse: Diffuse weight (non-negative).
        ambient: Ambient weight (non-negative).
        color: Base color as (R, G, B). Not clamped.
    """

    reflection: float
    specular: float
    shininess: float
    diffuse: float
    ambient: float
    color: tuple[float, float, float]

    def __post_init__(self) -> None:
        for name in ("reflection", "specular", "shininess", "diffuse", "ambient"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value < 0.0:
                raise ValueError(f"Material {name} = {value} must be finite and non-negative.")
            object.__setattr__(self, name, value)
        if self.reflection > 1.0:
            raise ValueError(f"Material reflection = {self.reflection} is outside [0, 1].")

        color = tuple(float(c) for c in self.color)
        if len(color) != 3 or not all(math.isfinite(c) for c in color):
            raise ValueError(f"Material color must be three finite floats: {self.color!r}")
        object.__setattr__(self, "color", color)

    def to_dict(self) -> dict:
        return {
            "reflection": self.reflection,
            "specular": self.specular,
            "shininess": self.shininess,
            "diffuse": self.diffuse,
            "ambient": self.ambient,
            "color": list(self.color),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Material":
        return cls(
            reflection=data.get("reflection", 0.0),
            specular=data.get("specular", 0.0),
            shininess=data.get("shininess", 0.0),
            diffuse=data.get("diffuse", 0.0),
            ambient=data.get("ambient", 0.0),
            color=tuple(data.get("color", (1.0, 1.0, 1.0))),
        )


@ti.dataclass
class PhongMaterial:
    """Kernel-side copy of a Material."""

    reflection: ti.f64
    specular: ti.f64
    shininess: ti.f64
    diffuse: ti.f64
    ambient: ti.f64
    color: vec3


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of distinct materials in the scene
MAX_MATERIALS = 256

# Structure of Arrays storage for material properties
material_reflection = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_specular = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_shininess = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_diffuse = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_ambient = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_phong_material(material: Material) -> int:
    """Append a material to the registry.

    No deduplication happens here; see SceneManager.add_primitive().

    Args:
        material: The material to store.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_reflection[idx] = material.reflection
    material_specular[idx] = material.specular
    material_shininess[idx] = material.shininess
    material_diffuse[idx] = material.diffuse
    material_ambient[idx] = material.ambient
    material_colors[idx] = vec3(material.color[0], material.color[1], material.color[2])
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material(material_id: ti.i32) -> PhongMaterial:
    """Get the material stored at an index.

    The index must be valid; the renderer checks every primitive's material
    index before launching a kernel.

    Args:
        material_id: The index of the material in the registry.

    Returns:
        The material parameters.
    """
    return PhongMaterial(
        reflection=material_reflection[material_id],
        specular=material_specular[material_id],
        shininess=material_shininess[material_id],
        diffuse=material_diffuse[material_id],
        ambient=material_ambient[material_id],
        color=material_colors[material_id],
    )
