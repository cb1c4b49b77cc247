"""Display transforms for rendered frames.

The core leaves colors unbounded: a brightly lit surface easily exceeds 1.0
in a channel. This module maps a linear frame into the displayable [0, 1]
range. It is the only place where colors are clamped.

Pipeline:
    1. Optional tone mapping (Reinhard or exposure)
    2. Clamp to [0, 1]
    3. Gamma encoding

Example:
    >>> from mirrortrace.preview.display import process_image_for_display
    >>> frame = renderer.render_frame()
    >>> shown = process_image_for_display(frame, tone_map="reinhard")
"""

from typing import Literal

import numpy as np
import numpy.typing as npt

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]

TONE_MAP_METHODS: tuple[str, ...] = ("none", "reinhard", "exposure")


def tone_map_reinhard(image: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Apply Reinhard tone mapping: c / (1 + c), per channel.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        Tone mapped image in [0, 1).
    """
    image = np.maximum(np.asarray(image, dtype=np.float64), 0.0)
    return image / (1.0 + image)


def tone_map_exposure(
    image: npt.NDArray[np.float64],
    exposure: float = 1.0,
) -> npt.NDArray[np.float64]:
    """Apply exposure tone mapping: 1 - exp(-c * exposure), per channel.

    Args:
        image: Linear image array of shape (H, W, 3).
        exposure: Exposure value. Higher values brighten the image.

    Returns:
        Tone mapped image in [0, 1).

    Raises:
        ValueError: If exposure is not positive.
    """
    if not exposure > 0.0:
        raise ValueError(f"Exposure must be positive: {exposure}")
    image = np.maximum(np.asarray(image, dtype=np.float64), 0.0)
    return 1.0 - np.exp(-image * exposure)


def clamp_image(image: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Clamp every channel to [0, 1]."""
    return np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)


def apply_gamma(
    image: npt.NDArray[np.float64],
    gamma: float = 2.2,
) -> npt.NDArray[np.float64]:
    """Clamp to [0, 1] and gamma encode: out = in^(1/gamma).

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value (2.2 for sRGB display, 1.0 for none).

    Returns:
        Gamma encoded image in [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if not gamma > 0.0:
        raise ValueError(f"Gamma must be positive: {gamma}")
    image = clamp_image(image)
    if gamma == 1.0:
        return image
    return np.power(image, 1.0 / gamma)


def process_image_for_display(
    image: npt.NDArray[np.float64],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.float64]:
    """Run the full display pipeline on a linear frame.

    Args:
        image: Linear image array of shape (H, W, 3), as returned by
            FrameRenderer.render_frame().
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value.
        exposure: Exposure value for exposure tone mapping.

    Returns:
        A new float64 image in [0, 1].

    Raises:
        ValueError: If the image is not (H, W, 3) or the method is unknown.
    """
    image = np.asarray(image, dtype=np.float64)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    if tone_map == "reinhard":
        result = tone_map_reinhard(image)
    elif tone_map == "exposure":
        result = tone_map_exposure(image, exposure)
    elif tone_map == "none":
        result = image.copy()
    else:
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    return apply_gamma(result, gamma)


def difference_image(
    image_a: npt.NDArray[np.float64],
    image_b: npt.NDArray[np.float64],
    scale: float = 10.0,
) -> npt.NDArray[np.float64]:
    """Amplified absolute difference of two frames, clamped for display.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")
    diff = np.abs(np.asarray(image_a, np.float64) - np.asarray(image_b, np.float64))
    return clamp_image(diff * scale)
