"""Scene manager coordinating primitives, materials and lights.

This module provides the high-level scene building API. It keeps the
Python-side description of the scene (shapes, materials, lights) in sync with
the Taichi fields read by the renderer.

The SceneManager maintains:
- An ordered list of primitives, each referencing a material by index
- A deduplicated list of materials: adding a primitive whose material is
  structurally equal to a stored one reuses that material's index
- An ordered list of point lights and one ambient intensity
- A revision counter bumped on every change, used by the frame cache

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mirrortrace.scene.manager import SceneManager
    >>> from mirrortrace.geometry.primitive import SphereShape
    >>> from mirrortrace.materials.phong import Material
    >>> scene = SceneManager(ambient_intensity=0.2)
    >>> white = Material(0.0, 0.5, 50.0, 0.5, 0.8, (1.0, 1.0, 1.0))
    >>> scene.add_primitive(SphereShape((0, -2, 0), 2.0), white)
    0
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any

from mirrortrace.errors import SceneCorruption
from mirrortrace.geometry.primitive import CubeShape, Shape, SphereShape, shape_from_dict
from mirrortrace.materials.phong import (
    MAX_MATERIALS,
    Material,
    add_phong_material,
    clear_materials,
    get_material_count,
)
from mirrortrace.scene.intersection import (
    MAX_PRIMITIVES,
    add_primitive,
    clear_scene,
    get_primitive_count,
    get_primitive_material_ids,
)
from mirrortrace.scene.lights import (
    PointLight,
    add_light,
    clear_lights,
    get_light_count,
    set_ambient_intensity,
)

logger = logging.getLogger(__name__)

# The scene fields are shared by every SceneManager; this holds the token of
# the manager whose description they currently contain.
_manager_tokens = itertools.count()
_storage_owner: int | None = None


@dataclass
class PrimitiveInfo:
    """Information about a primitive in the scene.

    Attributes:
        index: The index in the primitive storage arrays.
        shape: The shape description.
        material_id: The index of the primitive's material.
    """

    index: int
    shape: Shape
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        primitives: List of primitive configurations (shape + material_id).
        lights: List of light configurations.
        ambient_intensity: The scene's ambient intensity.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    primitives: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    ambient_intensity: float = 0.0


class SceneManager:
    """Scene of primitives, deduplicated materials and point lights.

    Primitives and lights are append-only while the scene is built; the
    renderer only reads the scene.

    All managers share one set of Taichi fields. A manager writes its
    description back into them (upload()) before changing or validating
    them whenever another manager wrote there last, so several scenes can
    coexist and each renders its own geometry.

    Attributes:
        materials: Distinct materials, in index order.
        primitives: PrimitiveInfo for every primitive, in index order.
        lights: The point lights, in index order.

    Example:
        >>> scene = SceneManager()
        >>> blue = Material(0.0, 0.5, 50.0, 0.5, 0.1, (0.0, 0.0, 1.0))
        >>> scene.add_primitive(CubeShape((0, 40, 0), 80.0), blue)
        0
        >>> scene.add_light(PointLight((0, -11, 11), (1, 1, 1), 250.0))
        0
    """

    def __init__(self, ambient_intensity: float = 0.0) -> None:
        """Initialize an empty scene.

        Args:
            ambient_intensity: The scene's ambient intensity.
        """
        self.materials: list[Material] = []
        self.primitives: list[PrimitiveInfo] = []
        self.lights: list[PointLight] = []
        self._ambient_intensity = 0.0
        self._revision = 0
        self._token = next(_manager_tokens)
        self._clear_all()
        self.set_ambient_intensity(ambient_intensity)

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        global _storage_owner

        clear_scene()
        clear_materials()
        clear_lights()
        _storage_owner = self._token
        self.materials.clear()
        self.primitives.clear()
        self.lights.clear()
        self._ambient_intensity = 0.0
        self._revision += 1

    def clear(self) -> None:
        """Clear the entire scene (primitives, materials and lights)."""
        self._clear_all()

    @property
    def owns_storage(self) -> bool:
        """Whether the Taichi fields currently hold this scene."""
        return _storage_owner == self._token

    def upload(self) -> None:
        """Rewrite the Taichi fields from this scene's description.

        Indices are assigned in the same order as when the scene was built,
        so primitive and material indices are unchanged. The revision is not
        bumped: the scene itself did not change.
        """
        global _storage_owner

        clear_scene()
        clear_materials()
        clear_lights()
        for material in self.materials:
            add_phong_material(material)
        for prim in self.primitives:
            shape = prim.shape
            add_primitive(shape.kind, shape.center, shape.size, shape.up, prim.material_id)
        for light in self.lights:
            add_light(light)
        set_ambient_intensity(self._ambient_intensity)
        _storage_owner = self._token
        logger.debug(
            "Uploaded scene with %d primitives, %d materials, %d lights",
            len(self.primitives),
            len(self.materials),
            len(self.lights),
        )

    def _claim_storage(self) -> None:
        """Upload this scene if another manager wrote the fields last."""
        if not self.owns_storage:
            self.upload()

    @property
    def revision(self) -> int:
        """Counter incremented by every change to the scene."""
        return self._revision

    @property
    def ambient_intensity(self) -> float:
        """The scene's ambient intensity."""
        return self._ambient_intensity

    # =========================================================================
    # Scene Construction
    # =========================================================================

    def _material_index(self, material: Material) -> int:
        """Return the index of a structurally equal stored material, adding it if new."""
        for idx, stored in enumerate(self.materials):
            if stored == material:
                logger.debug("Reusing material %d for %r", idx, material)
                return idx

        if len(self.materials) >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
        idx = add_phong_material(material)
        self.materials.append(material)
        return idx

    def add_primitive(self, shape: Shape, material: Material) -> int:
        """Add a primitive with its material.

        Args:
            shape: A SphereShape or CubeShape.
            material: The primitive's material. Reuses the index of an equal
                stored material, otherwise stores it as a new material.

        Returns:
            The index of the added primitive.

        Raises:
            TypeError: If shape is not a known shape type.
            RuntimeError: If the primitive or material capacity is exceeded.
        """
        if not isinstance(shape, (SphereShape, CubeShape)):
            raise TypeError(f"Unsupported shape type: {type(shape).__name__}")
        if len(self.primitives) >= MAX_PRIMITIVES:
            raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")

        self._claim_storage()
        material_id = self._material_index(material)
        index = add_primitive(shape.kind, shape.center, shape.size, shape.up, material_id)
        self.primitives.append(PrimitiveInfo(index=index, shape=shape, material_id=material_id))
        self._revision += 1
        return index

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: Material,
        up: tuple[float, float, float] = (0.0, 1.0, 0.0),
    ) -> int:
        """Add a sphere. Convenience wrapper around add_primitive()."""
        return self.add_primitive(SphereShape(center=center, radius=radius, up=up), material)

    def add_cube(
        self,
        center: tuple[float, float, float],
        side: float,
        material: Material,
        up: tuple[float, float, float] = (0.0, 1.0, 0.0),
    ) -> int:
        """Add an axis-aligned cube. Convenience wrapper around add_primitive()."""
        return self.add_primitive(CubeShape(center=center, side=side, up=up), material)

    def add_light(self, light: PointLight) -> int:
        """Add a point light.

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
        """
        self._claim_storage()
        index = add_light(light)
        self.lights.append(light)
        self._revision += 1
        return index

    def set_ambient_intensity(self, value: float) -> None:
        """Set the scene's ambient intensity.

        Raises:
            ValueError: If the value is negative or not finite.
        """
        self._claim_storage()
        set_ambient_intensity(value)
        self._ambient_intensity = float(value)
        self._revision += 1

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_primitive_count(self) -> int:
        """Get the number of primitives in the scene."""
        return len(self.primitives)

    def get_material_count(self) -> int:
        """Get the number of distinct materials in the scene."""
        return len(self.materials)

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return len(self.lights)

    def get_material(self, material_id: int) -> Material:
        """Get a stored material by index.

        Raises:
            SceneCorruption: If the index is out of range.
        """
        if not 0 <= material_id < len(self.materials):
            raise SceneCorruption(
                f"Material index {material_id} outside [0, {len(self.materials)})"
            )
        return self.materials[material_id]

    def validate(self) -> None:
        """Check that the stored scene is consistent before rendering.

        Uploads the scene first if another manager wrote the fields last.
        Every primitive in the Taichi fields must reference a stored material.

        Raises:
            SceneCorruption: If a primitive references a missing material, or
                the field storage disagrees with the Python-side description.
        """
        self._claim_storage()
        count = get_material_count()
        if (
            count != len(self.materials)
            or get_primitive_count() != len(self.primitives)
            or get_light_count() != len(self.lights)
        ):
            raise SceneCorruption("Scene storage is out of sync with the scene description")
        for index, material_id in enumerate(get_primitive_material_ids()):
            if not 0 <= material_id < count:
                raise SceneCorruption(
                    f"Primitive {index} references material {material_id}, "
                    f"but only {count} materials are stored"
                )

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all materials, primitives and lights.
        """
        config = SceneConfig(ambient_intensity=self._ambient_intensity)
        config.materials = [material.to_dict() for material in self.materials]
        for prim in self.primitives:
            config.primitives.append({**prim.shape.to_dict(), "material_id": prim.material_id})
        config.lights = [light.to_dict() for light in self.lights]
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration. Primitives are
        added in order with their referenced material, so equal materials in
        the configuration collapse into one.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
            SceneCorruption: If a primitive references a missing material.
        """
        self.clear()

        materials = [Material.from_dict(mat_config) for mat_config in config.materials]
        for prim_config in config.primitives:
            material_id = prim_config.get("material_id", 0)
            if not 0 <= material_id < len(materials):
                raise SceneCorruption(
                    f"Primitive references material {material_id}, "
                    f"but the configuration defines {len(materials)}"
                )
            self.add_primitive(shape_from_dict(prim_config), materials[material_id])

        for light_config in config.lights:
            self.add_light(PointLight.from_dict(light_config))

        self.set_ambient_intensity(config.ambient_intensity)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary representation of the scene.
        """
        config = self.to_config()
        return {
            "materials": config.materials,
            "primitives": config.primitives,
            "lights": config.lights,
            "ambient_intensity": config.ambient_intensity,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'primitives', 'lights' and
                'ambient_intensity' keys.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            primitives=data.get("primitives", []),
            lights=data.get("lights", []),
            ambient_intensity=data.get("ambient_intensity", 0.0),
        )
        self.from_config(config)
