"""Materials module.

Components:
    phong: Phong material description and the deduplicated material registry

A material combines mirror reflection, a specular highlight, a diffuse
term and an ambient term over a base color.
"""

from .phong import (
    MAX_MATERIALS,
    Material,
    PhongMaterial,
    add_phong_material,
    clear_materials,
    get_material,
    get_material_count,
)

__all__ = [
    "Material",
    "PhongMaterial",
    "MAX_MATERIALS",
    "add_phong_material",
    "clear_materials",
    "get_material",
    "get_material_count",
]
