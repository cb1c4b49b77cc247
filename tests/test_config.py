"""Tests for runtime configuration and the error hierarchy."""

import pytest


class TestRenderSettings:
    def test_defaults(self):
        from mirrortrace.config import RenderSettings
        from mirrortrace.core.sampling import SamplingPattern

        settings = RenderSettings()
        assert settings.pattern is SamplingPattern.CIRCLE
        assert settings.samples == 5
        assert settings.arch == "cpu"


class TestInitTaichi:
    def test_unknown_backend(self):
        """Test an unknown backend is rejected before Taichi is touched."""
        from mirrortrace.config import init_taichi

        with pytest.raises(ValueError, match="Unknown Taichi backend"):
            init_taichi("abacus")


class TestErrors:
    def test_hierarchy(self):
        from mirrortrace.errors import (
            InvalidGeometry,
            InvalidViewport,
            RayTraceError,
            SceneCorruption,
        )

        assert issubclass(InvalidGeometry, RayTraceError)
        assert issubclass(InvalidGeometry, ValueError)
        assert issubclass(InvalidViewport, ValueError)
        assert issubclass(SceneCorruption, RuntimeError)
        assert not issubclass(SceneCorruption, ValueError)
