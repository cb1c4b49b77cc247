"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    The renderer compares distances against a 1e-7 tolerance, so every
    kernel runs with 64-bit default floats.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material, light and render target data around each test."""
    # Import here so the fields are created after ti.init()
    from mirrortrace.core.integrator import reset_render_target
    from mirrortrace.materials.phong import clear_materials
    from mirrortrace.scene.intersection import clear_scene
    from mirrortrace.scene.lights import clear_lights

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_lights()
        reset_render_target()

    _clear_all()
    yield
    _clear_all()
