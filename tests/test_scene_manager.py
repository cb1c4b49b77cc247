"""Tests for the scene manager.

Tests cover:
- Adding primitives and lights
- Structural material deduplication
- Material and light validation
- Revision tracking
- Consistency validation before rendering
- Several scenes sharing the scene fields
- Export and import of scene descriptions
"""

import pytest

WHITE = dict(reflection=0.0, specular=0.5, shininess=50.0, diffuse=0.5, ambient=0.8,
             color=(1.0, 1.0, 1.0))
BLUE = dict(reflection=0.0, specular=0.5, shininess=50.0, diffuse=0.5, ambient=0.1,
            color=(0.0, 0.0, 1.0))


class TestMaterial:
    """Tests for the Material value object."""

    def test_structural_equality(self):
        from mirrortrace.materials.phong import Material

        assert Material(**WHITE) == Material(**WHITE)
        assert Material(**WHITE) != Material(**BLUE)

    def test_ambient_participates_in_equality(self):
        from mirrortrace.materials.phong import Material

        assert Material(**WHITE) != Material(**{**WHITE, "ambient": 0.1})

    def test_integer_inputs_compare_equal_to_floats(self):
        from mirrortrace.materials.phong import Material

        a = Material(0, 1, 10, 1, 0, (1, 0, 0))
        b = Material(0.0, 1.0, 10.0, 1.0, 0.0, (1.0, 0.0, 0.0))
        assert a == b

    @pytest.mark.parametrize(
        "field,value",
        [("reflection", 1.5), ("reflection", -0.1), ("specular", float("nan")),
         ("diffuse", -1.0), ("shininess", float("inf"))],
    )
    def test_invalid_coefficients(self, field, value):
        from mirrortrace.materials.phong import Material

        with pytest.raises(ValueError):
            Material(**{**WHITE, field: value})

    def test_invalid_color(self):
        from mirrortrace.materials.phong import Material

        with pytest.raises(ValueError, match="color"):
            Material(**{**WHITE, "color": (1.0, 1.0)})


class TestPointLight:
    """Tests for the PointLight value object."""

    def test_negative_intensity_rejected(self):
        from mirrortrace.scene.lights import PointLight

        with pytest.raises(ValueError, match="intensity"):
            PointLight((0, 0, 0), (1, 1, 1), -1.0)

    def test_non_finite_position_rejected(self):
        from mirrortrace.errors import InvalidGeometry
        from mirrortrace.scene.lights import PointLight

        with pytest.raises(InvalidGeometry):
            PointLight((0, float("inf"), 0), (1, 1, 1), 1.0)


class TestSceneConstruction:
    """Tests for building scenes."""

    def test_add_primitives_and_lights(self):
        from mirrortrace.geometry.primitive import CubeShape, SphereShape
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.lights import PointLight
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager()
        assert scene.add_primitive(SphereShape((0, -2, 0), 2.0), Material(**WHITE)) == 0
        assert scene.add_primitive(CubeShape((0, 40, 0), 80.0), Material(**BLUE)) == 1
        assert scene.add_light(PointLight((0, -11, 11), (1, 1, 1), 250.0)) == 0

        assert scene.get_primitive_count() == 2
        assert scene.get_material_count() == 2
        assert scene.get_light_count() == 1
        assert scene.primitives[1].material_id == 1

    def test_identical_materials_are_deduplicated(self):
        """Test two primitives with equal materials share one stored material."""
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, 0), 1.0, Material(**WHITE))
        scene.add_cube((5, 0, 0), 2.0, Material(**WHITE))

        assert scene.get_material_count() == 1
        assert len(scene.materials) == 1
        assert scene.primitives[0].material_id == scene.primitives[1].material_id == 0

    def test_dedup_reuses_earlier_index(self):
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, 0), 1.0, Material(**WHITE))
        scene.add_sphere((3, 0, 0), 1.0, Material(**BLUE))
        scene.add_sphere((6, 0, 0), 1.0, Material(**WHITE))

        assert [p.material_id for p in scene.primitives] == [0, 1, 0]
        assert scene.get_material(1) == Material(**BLUE)

    def test_unknown_shape_rejected(self):
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(TypeError, match="Unsupported shape"):
            scene.add_primitive(("sphere", 1.0), Material(**WHITE))

    @pytest.mark.parametrize("radius", [0.0, -1.0, float("nan")])
    def test_invalid_sphere_radius(self, radius):
        from mirrortrace.errors import InvalidGeometry
        from mirrortrace.geometry.primitive import SphereShape

        with pytest.raises(InvalidGeometry):
            SphereShape((0, 0, 0), radius)

    def test_ambient_intensity(self):
        from mirrortrace.scene.lights import ambient_intensity
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager(ambient_intensity=0.25)
        assert scene.ambient_intensity == 0.25
        assert ambient_intensity[None] == 0.25

        with pytest.raises(ValueError):
            scene.set_ambient_intensity(-1.0)

    def test_clear(self):
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.lights import PointLight
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager(ambient_intensity=0.5)
        scene.add_sphere((0, 0, 0), 1.0, Material(**WHITE))
        scene.add_light(PointLight((0, 5, 0), (1, 1, 1), 10.0))
        scene.clear()

        assert scene.get_primitive_count() == 0
        assert scene.get_material_count() == 0
        assert scene.get_light_count() == 0
        assert scene.ambient_intensity == 0.0


class TestRevision:
    """Tests for change tracking."""

    def test_every_change_bumps_revision(self):
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.lights import PointLight
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager()
        revisions = [scene.revision]
        scene.add_sphere((0, 0, 0), 1.0, Material(**WHITE))
        revisions.append(scene.revision)
        scene.add_light(PointLight((0, 5, 0), (1, 1, 1), 10.0))
        revisions.append(scene.revision)
        scene.set_ambient_intensity(0.3)
        revisions.append(scene.revision)
        scene.clear()
        revisions.append(scene.revision)

        assert revisions == sorted(set(revisions))


class TestValidation:
    """Tests for consistency checks before rendering."""

    def test_valid_scene_passes(self):
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, 0), 1.0, Material(**WHITE))
        scene.validate()

    def test_out_of_range_material_index_fails_fast(self):
        from mirrortrace.errors import SceneCorruption
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.intersection import primitive_material_ids
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, 0), 1.0, Material(**WHITE))
        primitive_material_ids[0] = 7

        with pytest.raises(SceneCorruption, match="material 7"):
            scene.validate()

    def test_storage_out_of_sync(self):
        from mirrortrace.errors import SceneCorruption
        from mirrortrace.materials.phong import Material, clear_materials
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, 0), 1.0, Material(**WHITE))
        clear_materials()

        with pytest.raises(SceneCorruption):
            scene.validate()

    def test_get_material_out_of_range(self):
        from mirrortrace.errors import SceneCorruption
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(SceneCorruption):
            scene.get_material(0)


class TestSharedStorage:
    """Tests for several scenes sharing the scene fields."""

    def test_new_scene_takes_over_storage(self):
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.manager import SceneManager

        first = SceneManager()
        first.add_sphere((0, 0, 0), 1.0, Material(**WHITE))
        assert first.owns_storage

        second = SceneManager()
        assert second.owns_storage
        assert not first.owns_storage
        assert first.get_primitive_count() == 1
        assert second.get_primitive_count() == 0

    def test_validate_restores_scene(self):
        from mirrortrace.materials.phong import Material, get_material_count
        from mirrortrace.scene.intersection import get_primitive_count, get_primitive_material_ids
        from mirrortrace.scene.lights import PointLight, get_light_count
        from mirrortrace.scene.manager import SceneManager

        first = SceneManager(ambient_intensity=0.3)
        first.add_sphere((0, 0, 0), 1.0, Material(**WHITE))
        first.add_cube((0, 5, 0), 2.0, Material(**BLUE))
        first.add_sphere((3, 0, 0), 1.0, Material(**BLUE))
        first.add_light(PointLight((0, 10, 0), (1, 1, 1), 50.0))

        second = SceneManager()
        second.add_sphere((0, 0, 0), 2.0, Material(**BLUE))
        revision = first.revision

        first.validate()

        assert first.owns_storage
        assert get_primitive_count() == 3
        assert get_material_count() == 2
        assert get_light_count() == 1
        assert get_primitive_material_ids() == [0, 1, 1]
        assert first.revision == revision

    def test_adding_to_older_scene_keeps_its_primitives(self):
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.intersection import get_primitive_count
        from mirrortrace.scene.manager import SceneManager

        first = SceneManager()
        first.add_sphere((0, 0, 0), 1.0, Material(**WHITE))
        SceneManager().add_sphere((0, 0, 0), 2.0, Material(**BLUE))

        index = first.add_sphere((4, 0, 0), 1.0, Material(**WHITE))

        assert index == 1
        assert get_primitive_count() == 2
        first.validate()


class TestSerialization:
    """Tests for exporting and importing scene descriptions."""

    def test_to_dict_and_back(self):
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.lights import PointLight
        from mirrortrace.scene.manager import SceneManager

        scene = SceneManager(ambient_intensity=0.2)
        scene.add_sphere((0, -2, 0), 2.0, Material(**WHITE))
        scene.add_cube((0, 40, 0), 80.0, Material(**BLUE))
        scene.add_sphere((3, -2, 0), 1.0, Material(**WHITE))
        scene.add_light(PointLight((0, -11, 11), (1, 1, 1), 250.0))
        data = scene.to_dict()

        other = SceneManager()
        other.from_dict(data)

        assert other.to_dict() == data
        assert other.get_material_count() == 2
        assert [p.material_id for p in other.primitives] == [0, 1, 0]
        assert other.ambient_intensity == 0.2

    def test_bad_material_reference(self):
        from mirrortrace.errors import SceneCorruption
        from mirrortrace.scene.manager import SceneManager

        data = {
            "materials": [],
            "primitives": [{"type": "sphere", "center": [0, 0, 0], "radius": 1.0,
                            "material_id": 0}],
        }
        with pytest.raises(SceneCorruption):
            SceneManager().from_dict(data)

    def test_unknown_primitive_type(self):
        from mirrortrace.scene.manager import SceneManager

        data = {
            "materials": [WHITE],
            "primitives": [{"type": "torus", "material_id": 0}],
        }
        with pytest.raises(ValueError, match="Unknown primitive type"):
            SceneManager().from_dict(data)
