"""How faithfully a 1-bit rendition carries the tone it was made from."""

from __future__ import annotations

import numpy as np
from scipy.ndimage import gaussian_filter
from skimage.metrics import structural_similarity as _ssim


def _as_gray(array: np.ndarray) -> np.ndarray:
    """(H, W) or (H, W, C) → (H, W) float64, taking the first channel."""
    arr = np.asarray(array, dtype=np.float64)
    if arr.ndim == 3:
        arr = arr[..., 0]
    return arr


def perceived(dithered: np.ndarray, sigma: float = 1.5) -> np.ndarray:
    """Blur a binary image the way the eye averages dots at a distance."""
    return gaussian_filter(_as_gray(dithered), sigma=sigma, mode="nearest")


def tone_error(
    tone: np.ndarray,
    dithered: np.ndarray,
    sigma: float = 1.5,
) -> float:
    """Mean absolute difference (0-255) between *tone* and blurred output."""
    return float(np.mean(np.abs(_as_gray(tone) - perceived(dithered, sigma))))


def structural_similarity(
    tone: np.ndarray,
    dithered: np.ndarray,
    sigma: float = 1.5,
) -> float:
    """SSIM between *tone* and blurred output, 1.0 = identical structure."""
    t = _as_gray(tone)
    d = perceived(dithered, sigma)
    win_size = min(7, *t.shape)
    if win_size % 2 == 0:
        win_size -= 1
    if win_size < 3:
        return float("nan")
    return float(_ssim(t, d, data_range=255.0, win_size=win_size))


def black_ratio(dithered: np.ndarray) -> float:
    """Share of black pixels in a binary rendition."""
    return float(np.mean(_as_gray(dithered) < 128))
