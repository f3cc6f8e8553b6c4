"""1-bit quantisation: threshold, ordered (Bayer), noise and error diffusion.

This is the core of the package.  It takes RGBA pixels plus a
:class:`~material_dither.config.DitherSettings` and returns RGBA pixels in
which every pixel is pure black or pure white, alpha forced opaque.

Luminance is held in a float32 scratch buffer for the whole pass so that
error diffusion accumulates fractional residuals instead of truncating at
every step.  A value strictly below the effective threshold becomes black,
anything else white, in every mode.

Resampling for the pixel-size mosaic happens outside this module (see
:mod:`material_dither.image_io`).
"""

from __future__ import annotations

import logging
import time

import numpy as np

from material_dither.config import DitherMethod, DitherSettings
from material_dither.tone import apply_tone

logger = logging.getLogger(__name__)

BLACK = 0.0
WHITE = 255.0

# Ordered dither thresholds; each is a permutation of 0..n²-1
BAYER_4 = np.array([
    [0, 8, 2, 10],
    [12, 4, 14, 6],
    [3, 11, 1, 9],
    [15, 7, 13, 5],
], dtype=np.int64)
BAYER_4.setflags(write=False)

BAYER_8 = np.array([
    [0, 32, 8, 40, 2, 34, 10, 42],
    [48, 16, 56, 24, 50, 18, 58, 26],
    [12, 44, 4, 36, 14, 46, 6, 38],
    [60, 28, 52, 20, 62, 30, 54, 22],
    [3, 35, 11, 43, 1, 33, 9, 41],
    [51, 19, 59, 27, 49, 17, 57, 25],
    [15, 47, 7, 39, 13, 45, 5, 37],
    [63, 31, 55, 23, 61, 29, 53, 21],
], dtype=np.int64)
BAYER_8.setflags(write=False)

# Error diffusion kernels as (dy, dx, weight), all pointing at unvisited pixels
FLOYD_STEINBERG_KERNEL: tuple[tuple[int, int, float], ...] = (
    (0, 1, 7 / 16),
    (1, -1, 3 / 16),
    (1, 0, 5 / 16),
    (1, 1, 1 / 16),
)

# Atkinson spreads only 6/8 of the error; the rest is dropped
ATKINSON_KERNEL: tuple[tuple[int, int, float], ...] = (
    (0, 1, 1 / 8),
    (0, 2, 1 / 8),
    (1, -1, 1 / 8),
    (1, 0, 1 / 8),
    (1, 1, 1 / 8),
    (2, 0, 1 / 8),
)

DIFFUSION_KERNELS = {
    DitherMethod.FLOYD_STEINBERG: FLOYD_STEINBERG_KERNEL,
    DitherMethod.ATKINSON: ATKINSON_KERNEL,
}

_BAYER_MATRICES = {
    DitherMethod.BAYER_4: BAYER_4,
    DitherMethod.BAYER_8: BAYER_8,
}

# Noise is (u - 0.5) * NOISE_SPAN for u in [0, 1), i.e. [-30, 30)
NOISE_SPAN = 60.0


class InvalidBufferSizeError(ValueError):
    """The pixel buffer length does not match width x height x 4."""


def threshold_map(
    method: DitherMethod,
    height: int,
    width: int,
    threshold: float,
) -> np.ndarray:
    """Effective per-pixel threshold for the non-diffusing cut.

    For Bayer modes the matrix value is scaled to 0-255 and averaged 50/50
    with *threshold*; otherwise every pixel uses *threshold* as is.

    Returns:
        (height, width) float64 array.
    """
    matrix = _BAYER_MATRICES.get(method)
    if matrix is None:
        return np.full((height, width), float(threshold))

    n = matrix.shape[0]
    scaled = matrix / float(n * n) * 255.0
    reps_y = -(-height // n)
    reps_x = -(-width // n)
    tiled = np.tile(scaled, (reps_y, reps_x))[:height, :width]
    return (tiled + threshold) / 2.0


def diffusion_step(
    gray: np.ndarray,
    y: int,
    x: int,
    kernel: tuple[tuple[int, int, float], ...],
    threshold: float,
) -> float:
    """Quantise ``gray[y, x]`` and push its error onto later neighbours.

    Neighbours outside the image are skipped (no wrap-around).  *gray* is
    mutated in place.

    Returns:
        The quantisation error ``old - new``.
    """
    h, w = gray.shape
    old = float(gray[y, x])
    new = BLACK if old < threshold else WHITE
    gray[y, x] = new
    quant_err = old - new

    for dy, dx, weight in kernel:
        ny, nx = y + dy, x + dx
        if ny >= h or nx < 0 or nx >= w:
            continue
        gray[ny, nx] += quant_err * weight

    return quant_err


def _diffuse(
    gray: np.ndarray,
    kernel: tuple[tuple[int, int, float], ...],
    threshold: float,
) -> None:
    h, w = gray.shape
    # Raster order matters: each decision sees error from earlier pixels
    for y in range(h):
        for x in range(w):
            diffusion_step(gray, y, x, kernel, threshold)


def quantize(
    gray: np.ndarray,
    settings: DitherSettings,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Reduce toned luminance to pure black / white.

    Args:
        gray:     (H, W) toned luminance.  Not modified.
        settings: Method and threshold to use.
        rng:      Generator for :attr:`DitherMethod.NOISE`; a fresh
                  unseeded one is created when omitted.

    Returns:
        (H, W) float32 array containing only 0 and 255.
    """
    method = DitherMethod.parse(settings.method)
    work = np.array(gray, dtype=np.float32, copy=True)
    h, w = work.shape

    if method.diffuses_error:
        _diffuse(work, DIFFUSION_KERNELS[method], settings.threshold)
        return work

    if method == DitherMethod.NOISE:
        if rng is None:
            rng = np.random.default_rng()
        noise = (rng.random((h, w)) - 0.5) * NOISE_SPAN
        values = work + noise
        cut = np.full((h, w), float(settings.threshold))
    else:
        values = work
        cut = threshold_map(method, h, w, settings.threshold)

    return np.where(values < cut, BLACK, WHITE).astype(np.float32)


def dither_rgba(
    rgba: np.ndarray,
    settings: DitherSettings,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Tone-adjust and quantise an RGBA image.

    Args:
        rgba:     (H, W, 4) or (H, W, 3) uint8.
        settings: Dithering parameters.
        rng:      Optional generator for the noise mode.

    Returns:
        (H, W, 4) uint8 with R = G = B in {0, 255} and A = 255.
    """
    rgba = np.asarray(rgba)
    if rgba.ndim != 3 or rgba.shape[2] not in (3, 4):
        msg = f"Expected (H, W, 3|4) pixels, got shape {rgba.shape}"
        raise ValueError(msg)

    h, w = rgba.shape[:2]
    t0 = time.perf_counter()

    gray = apply_tone(rgba, settings.brightness, settings.contrast)
    binary = quantize(gray, settings, rng=rng).astype(np.uint8)

    out = np.empty((h, w, 4), dtype=np.uint8)
    out[..., 0] = binary
    out[..., 1] = binary
    out[..., 2] = binary
    out[..., 3] = 255

    logger.debug(
        "Dithered %dx%d with %s (threshold=%s)  (%.3f s)",
        w, h, DitherMethod.parse(settings.method).value, settings.threshold,
        time.perf_counter() - t0,
    )
    return out


def process(
    buffer: bytearray | np.ndarray,
    width: int,
    height: int,
    settings: DitherSettings,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Dither a flat row-major RGBA buffer in place.

    Args:
        buffer:   Writable ``bytearray`` or uint8 array holding exactly
                  ``width * height * 4`` bytes.
        width:    Image width in pixels (>= 1).
        height:   Image height in pixels (>= 1).
        settings: Dithering parameters.
        rng:      Optional generator for the noise mode.

    Returns:
        (height, width, 4) uint8 - the same pixels now written to *buffer*.

    Raises:
        InvalidBufferSizeError: buffer length is not ``width * height * 4``.
        TypeError: buffer is not writable.
    """
    if width < 1 or height < 1:
        msg = f"width and height must be >= 1, got {width}x{height}"
        raise ValueError(msg)

    expected = width * height * 4
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            msg = f"Expected a uint8 buffer, got {buffer.dtype}"
            raise TypeError(msg)
        if not buffer.flags.writeable:
            msg = "Pixel buffer is read-only"
            raise TypeError(msg)
        flat = buffer.reshape(-1)
    elif isinstance(buffer, bytearray):
        flat = np.frombuffer(bytes(buffer), dtype=np.uint8)
    else:
        msg = f"Expected a bytearray or uint8 ndarray, got {type(buffer).__name__}"
        raise TypeError(msg)

    if flat.size != expected:
        msg = (
            f"invalid buffer size: {flat.size} bytes for {width}x{height} RGBA "
            f"(expected {expected})"
        )
        raise InvalidBufferSizeError(msg)

    out = dither_rgba(flat.reshape(height, width, 4), settings, rng=rng)

    if isinstance(buffer, np.ndarray):
        buffer[...] = out.reshape(buffer.shape)
    else:
        buffer[:] = out.tobytes()
    return out
