"""Tests for the frame renderer and its cache.

Tests cover:
- Viewport configuration and resizing
- Idempotent rendering without changes
- Invalidation by camera, viewport, sampling and scene changes
- Camera snapshot semantics
- Rendering one scene after another scene was built
- Error conditions
"""

import numpy as np
import pytest


def _scene():
    from mirrortrace.materials.phong import Material
    from mirrortrace.scene.lights import PointLight
    from mirrortrace.scene.manager import SceneManager

    scene = SceneManager(ambient_intensity=0.2)
    scene.add_sphere(
        (0.0, 0.0, 0.0), 1.0, Material(0.0, 0.5, 20.0, 0.8, 1.0, (1.0, 0.6, 0.2))
    )
    scene.add_light(PointLight((2.0, 3.0, 5.0), (1.0, 1.0, 1.0), 40.0))
    return scene


def _camera():
    from mirrortrace.camera.pinhole import Camera

    return Camera(
        look_at=(0.0, 0.0, 0.0),
        look_from=(0.0, 0.0, 6.0),
        up=(0.0, 1.0, 0.0),
        near=1.0,
        far=100.0,
        fov_y=30.0,
    )


class TestFrameRendererInit:
    """Tests for construction and configuration."""

    def test_init(self):
        from mirrortrace.core.frame import FrameRenderer
        from mirrortrace.core.sampling import SamplingPattern

        renderer = FrameRenderer(_scene(), 24, 16, camera=_camera())

        assert renderer.width == 24
        assert renderer.height == 16
        assert renderer.pattern is SamplingPattern.CIRCLE
        assert renderer.samples == 5
        assert renderer.dirty
        assert renderer.frames_rendered == 0

    @pytest.mark.parametrize("width,height", [(0, 16), (16, 0), (4096, 16)])
    def test_invalid_viewport(self, width, height):
        from mirrortrace.core.frame import FrameRenderer
        from mirrortrace.errors import InvalidViewport

        with pytest.raises(InvalidViewport):
            FrameRenderer(_scene(), width, height, camera=_camera())

    def test_invalid_sampling(self):
        from mirrortrace.core.frame import FrameRenderer

        with pytest.raises(ValueError):
            FrameRenderer(_scene(), 8, 8, pattern="hexagon", samples=7)

    def test_render_without_camera(self):
        from mirrortrace.core.frame import FrameRenderer

        renderer = FrameRenderer(_scene(), 8, 8)
        with pytest.raises(RuntimeError, match="No camera"):
            renderer.render_frame()

    def test_invalid_camera_rejected_on_set(self):
        from mirrortrace.core.frame import FrameRenderer
        from mirrortrace.errors import InvalidGeometry

        renderer = FrameRenderer(_scene(), 8, 8)
        with pytest.raises(InvalidGeometry):
            renderer.set_camera(_camera().zoomed(200.0))


class TestFrameCache:
    """Tests for the dirty flag and cached frames."""

    def test_frame_shape_and_dtype(self):
        from mirrortrace.core.frame import FrameRenderer

        renderer = FrameRenderer(_scene(), 24, 16, camera=_camera())
        frame = renderer.render_frame()

        assert frame.shape == (16, 24, 3)
        assert frame.dtype == np.float64
        assert not renderer.dirty
        assert renderer.frames_rendered == 1

    def test_render_twice_is_bit_identical(self):
        """Test two renders without a change return identical buffers."""
        from mirrortrace.core.frame import FrameRenderer

        renderer = FrameRenderer(_scene(), 16, 16, camera=_camera())
        first = renderer.render_frame()
        second = renderer.render_frame()

        assert np.array_equal(first, second)
        assert first is not second
        assert renderer.frames_rendered == 1

    def test_returned_frame_is_a_copy(self):
        from mirrortrace.core.frame import FrameRenderer

        renderer = FrameRenderer(_scene(), 8, 8, camera=_camera())
        frame = renderer.render_frame()
        frame[:] = 123.0

        assert not np.array_equal(renderer.render_frame(), frame)

    def test_set_camera_marks_dirty(self):
        from mirrortrace.core.frame import FrameRenderer

        renderer = FrameRenderer(_scene(), 16, 16, camera=_camera())
        before = renderer.render_frame()

        renderer.set_camera(_camera().moved(1.0, 0.0, 0.0))
        assert renderer.dirty

        after = renderer.render_frame()
        assert renderer.frames_rendered == 2
        assert not np.array_equal(before, after)

    def test_recompute_with_same_pose_is_identical(self):
        from mirrortrace.core.frame import FrameRenderer

        renderer = FrameRenderer(_scene(), 16, 16, camera=_camera())
        before = renderer.render_frame()
        renderer.set_camera(_camera())
        after = renderer.render_frame()

        assert renderer.frames_rendered == 2
        assert np.array_equal(before, after)

    def test_resize_reallocates(self):
        from mirrortrace.core.frame import FrameRenderer

        renderer = FrameRenderer(_scene(), 16, 16, camera=_camera())
        renderer.render_frame()

        renderer.configure_viewport(20, 10)
        assert renderer.dirty
        assert renderer.render_frame().shape == (10, 20, 3)

    def test_sampling_change_marks_dirty(self):
        from mirrortrace.core.frame import FrameRenderer

        renderer = FrameRenderer(_scene(), 8, 8, camera=_camera())
        renderer.render_frame()

        renderer.set_sampling("circle", 5)
        assert not renderer.dirty
        renderer.set_sampling("square", 8)
        assert renderer.dirty

    def test_scene_change_marks_dirty(self):
        from mirrortrace.core.frame import FrameRenderer
        from mirrortrace.scene.lights import PointLight

        scene = _scene()
        renderer = FrameRenderer(scene, 8, 8, camera=_camera())
        renderer.render_frame()

        scene.add_light(PointLight((-3.0, 0.0, 4.0), (1.0, 1.0, 1.0), 20.0))
        assert renderer.dirty

    def test_invalidate(self):
        from mirrortrace.core.frame import FrameRenderer

        renderer = FrameRenderer(_scene(), 8, 8, camera=_camera())
        renderer.render_frame()
        renderer.invalidate()
        renderer.render_frame()
        assert renderer.frames_rendered == 2

    def test_camera_is_snapshotted(self):
        """Test mutating the caller's camera does not affect the renderer."""
        from mirrortrace.core.frame import FrameRenderer

        camera = _camera()
        renderer = FrameRenderer(_scene(), 8, 8, camera=camera)
        renderer.render_frame()

        camera.look_from = (50.0, 0.0, 0.0)
        camera.fov_y = 90.0

        assert not renderer.dirty
        assert renderer.camera.look_from == (0.0, 0.0, 6.0)

    def test_corrupt_scene_fails_fast(self):
        from mirrortrace.core.frame import FrameRenderer
        from mirrortrace.errors import SceneCorruption
        from mirrortrace.scene.intersection import primitive_material_ids

        renderer = FrameRenderer(_scene(), 8, 8, camera=_camera())
        primitive_material_ids[0] = 3
        renderer.invalidate()

        with pytest.raises(SceneCorruption):
            renderer.render_frame()

    def test_cache_survives_other_renderer(self):
        """Test a second renderer drawing into the shared buffer leaves the cache intact."""
        from mirrortrace.core.frame import FrameRenderer

        scene = _scene()
        first = FrameRenderer(scene, 16, 16, camera=_camera())
        expected = first.render_frame()

        second = FrameRenderer(scene, 10, 12, camera=_camera().moved(0.0, 2.0, 0.0))
        second.render_frame()

        assert np.array_equal(first.render_frame(), expected)
        assert first.frames_rendered == 1

    def test_second_scene_does_not_leak_into_first(self):
        """Test a renderer keeps drawing its own scene after another scene is built."""
        from mirrortrace.core.frame import FrameRenderer
        from mirrortrace.materials.phong import Material
        from mirrortrace.scene.manager import SceneManager

        def flat_sphere(color):
            scene = SceneManager(ambient_intensity=1.0)
            scene.add_sphere((0.0, 0.0, 0.0), 1.0, Material(0.0, 0.0, 1.0, 0.0, 1.0, color))
            return scene

        red = flat_sphere((1.0, 0.0, 0.0))
        renderer = FrameRenderer(red, 9, 9, camera=_camera(), pattern="circle", samples=1)
        before = renderer.render_frame()[4, 4]
        assert np.allclose(before, [1.0, 0.0, 0.0])

        blue = flat_sphere((0.0, 0.0, 1.0))
        assert not red.owns_storage

        renderer.set_camera(_camera())
        after = renderer.render_frame()[4, 4]

        assert renderer.frames_rendered == 2
        assert np.allclose(after, before)
        assert red.owns_storage

        other = FrameRenderer(blue, 9, 9, camera=_camera(), pattern="circle", samples=1)
        assert np.allclose(other.render_frame()[4, 4], [0.0, 0.0, 1.0])


class TestSaveImage:
    """Tests for FrameRenderer.save_image()."""

    def test_save_image(self, tmp_path):
        from PIL import Image

        from mirrortrace.core.frame import FrameRenderer

        renderer = FrameRenderer(_scene(), 12, 10, camera=_camera())
        path = tmp_path / "frame.png"
        renderer.save_image(str(path))

        with Image.open(path) as image:
            assert image.size == (12, 10)
            assert image.mode == "RGB"
