"""Runtime configuration for the ray tracer.

The renderer needs 64-bit floats everywhere: intersection and shadow tests
compare points with a 1e-7 tolerance, which is below single precision
resolution for typical scene coordinates.

Example:
    >>> from mirrortrace.config import RenderSettings, init_taichi
    >>> settings = RenderSettings(samples=8)
    >>> init_taichi(settings.arch)
"""

from dataclasses import dataclass

import taichi as ti

from mirrortrace.core.sampling import SamplingPattern

# Backends accepted by init_taichi(), by name
_ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
}


@dataclass
class RenderSettings:
    """Renderer configuration.

    Attributes:
        pattern: Sub-pixel sampling pattern used for anti-aliasing.
        samples: Number of pattern offsets used per pixel. Must not exceed
            the number of offsets the pattern defines.
        arch: Taichi backend name ("cpu", "gpu", "cuda" or "vulkan"). The
            backend must support 64-bit floats.
    """

    pattern: SamplingPattern = SamplingPattern.CIRCLE
    samples: int = 5
    arch: str = "cpu"


def init_taichi(arch: str = "cpu", **kwargs) -> None:
    """Initialize the Taichi runtime with 64-bit default floats.

    Must be called before any mirrortrace module that declares Taichi fields
    is imported.

    Args:
        arch: Backend name, see RenderSettings.arch.
        **kwargs: Extra keyword arguments forwarded to ti.init().

    Raises:
        ValueError: If the backend name is unknown.
    """
    try:
        backend = _ARCHES[arch]
    except KeyError:
        raise ValueError(
            f"Unknown Taichi backend: {arch!r} (expected one of {sorted(_ARCHES)})"
        ) from None
    ti.init(arch=backend, default_fp=ti.f64, **kwargs)
