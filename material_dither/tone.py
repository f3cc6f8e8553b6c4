"""Greyscale conversion with brightness and contrast adjustment."""

from __future__ import annotations

import numpy as np

from material_dither.config import DitherSettings

# Luma weights in thousandths: 0.299, 0.587, 0.114
_LUMA_WEIGHTS = np.array([299, 587, 114], dtype=np.int64)

# contrast = 259 zeroes the denominator; larger magnitudes are clipped here
CONTRAST_FACTOR_LIMIT = 1e6


def contrast_factor(contrast: float) -> float:
    """Contrast remap slope, always finite.

    ``259 * (c + 255) / (255 * (259 - c))``, limited to
    ``±CONTRAST_FACTOR_LIMIT``. At ``c == 259`` the slope is
    ``+CONTRAST_FACTOR_LIMIT``.
    """
    denominator = 255.0 * (259.0 - contrast)
    if denominator == 0:
        return CONTRAST_FACTOR_LIMIT
    factor = (259.0 * (contrast + 255.0)) / denominator
    return float(np.clip(factor, -CONTRAST_FACTOR_LIMIT, CONTRAST_FACTOR_LIMIT))


def luma(rgb: np.ndarray) -> np.ndarray:
    """Convert (..., 3+) uint8 RGB(A) → (...) float32 perceptual luma."""
    channels = np.asarray(rgb)[..., :3].astype(np.int64)
    return (channels @ _LUMA_WEIGHTS / 1000.0).astype(np.float32)


def apply_tone(
    rgb: np.ndarray,
    brightness: float = 0,
    contrast: float = 0,
) -> np.ndarray:
    """Luma, then brightness, then contrast, then clamp to [0, 255].

    Args:
        rgb: (H, W, 3) or (H, W, 4) uint8. Alpha is ignored.
        brightness: Added directly to luminance.
        contrast: See :func:`contrast_factor`.

    Returns:
        (H, W) float32 toned luminance.
    """
    gray = luma(rgb).astype(np.float64) + brightness
    gray = contrast_factor(contrast) * (gray - 128.0) + 128.0
    gray = np.nan_to_num(gray, nan=0.0)
    return np.clip(gray, 0.0, 255.0).astype(np.float32)


def tone_image(rgb: np.ndarray, settings: DitherSettings) -> np.ndarray:
    """(H, W) uint8 greyscale preview of the toned image."""
    gray = apply_tone(rgb, settings.brightness, settings.contrast)
    return np.rint(gray).astype(np.uint8)
