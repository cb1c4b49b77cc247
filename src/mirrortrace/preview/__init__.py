"""Preview module for output of rendered frames.

Components:
    display: Tone mapping, clamping and gamma for display
    export: 8-bit PNG export via Pillow

Example:
    >>> from mirrortrace.preview import save_png
    >>> from mirrortrace.core.frame import FrameRenderer
    >>>
    >>> renderer = FrameRenderer(scene, 512, 512, camera=camera)
    >>> save_png(renderer, "output.png", tone_map="reinhard")
"""

from mirrortrace.preview.display import (
    TONE_MAP_METHODS,
    ToneMapMethod,
    apply_gamma,
    clamp_image,
    difference_image,
    process_image_for_display,
    tone_map_exposure,
    tone_map_reinhard,
)
from mirrortrace.preview.export import (
    compute_rmse,
    image_to_uint8,
    load_png,
    save_png,
    save_png_from_array,
)

__all__ = [
    # Display functions
    "TONE_MAP_METHODS",
    "ToneMapMethod",
    "tone_map_reinhard",
    "tone_map_exposure",
    "clamp_image",
    "apply_gamma",
    "process_image_for_display",
    "difference_image",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "load_png",
    "compute_rmse",
]
