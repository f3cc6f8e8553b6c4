"""
Material Dither
===============

Turn any image into a 1-bit black & white rendition. Pick a method,
tune threshold, pixel size, contrast and brightness:

- **Threshold** (plain cut)
- **Floyd-Steinberg** and **Atkinson** (error diffusion)
- **Bayer 4x4 / 8x8** (ordered)
- **Random Noise** (noisy threshold)
"""

__version__ = "1.0.0"

from material_dither.config import DitherMethod, DitherSettings, RunConfig
from material_dither.dithering import (
    BAYER_4,
    BAYER_8,
    InvalidBufferSizeError,
    dither_rgba,
    process,
    quantize,
)
from material_dither.image_io import (
    compute_processing_size,
    load_rgba,
    make_comparison_grid,
    prepare_rgba,
    save_upscaled,
    upscale,
)
from material_dither.tone import apply_tone, contrast_factor, tone_image

__all__ = [
    "BAYER_4",
    "BAYER_8",
    "DitherMethod",
    "DitherSettings",
    "InvalidBufferSizeError",
    "RunConfig",
    "apply_tone",
    "compute_processing_size",
    "contrast_factor",
    "dither_rgba",
    "load_rgba",
    "make_comparison_grid",
    "prepare_rgba",
    "process",
    "quantize",
    "save_upscaled",
    "tone_image",
    "upscale",
]
