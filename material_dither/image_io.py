"""Image loading, pixel-size resampling, saving, and comparison grids."""

from __future__ import annotations

import math
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont


def compute_processing_size(
    width: int,
    height: int,
    pixel_size: int,
    max_width: int = 1000,
) -> tuple[int, int]:
    """Compute the (w, h) grid the core works on.

    Each side is divided by *pixel_size* and rounded up.  If the result is
    wider than *max_width* it is scaled down to that width, height rounded
    down (minimum 1).
    """
    if pixel_size < 1:
        msg = f"pixel_size must be >= 1, got {pixel_size}"
        raise ValueError(msg)

    w = math.ceil(width / pixel_size)
    h = math.ceil(height / pixel_size)
    if w > max_width:
        h = max(1, math.floor(h * max_width / w))
        w = max_width
    return w, h


def load_rgba(path: str | Path) -> Image.Image:
    """Open an image and convert it to RGBA."""
    with Image.open(path) as img:
        return img.convert("RGBA")


def prepare_rgba(
    image: Image.Image,
    pixel_size: int = 1,
    max_width: int = 1000,
) -> np.ndarray:
    """Downsample *image* to its processing size.

    Returns:
        (H, W, 4) uint8 array.
    """
    w, h = compute_processing_size(image.width, image.height, pixel_size, max_width)
    rgba = image.convert("RGBA")
    if (w, h) != rgba.size:
        rgba = rgba.resize((w, h), Image.BILINEAR)
    return np.array(rgba, dtype=np.uint8)


def upscale(array: np.ndarray, factor: int = 1) -> Image.Image:
    """Nearest-neighbour blow-up so every processed pixel becomes a block."""
    img = Image.fromarray(array.astype(np.uint8))
    if factor <= 1:
        return img
    h, w = array.shape[:2]
    return img.resize((w * factor, h * factor), Image.NEAREST)


def save_upscaled(
    array: np.ndarray,
    path: str | Path,
    factor: int = 1,
) -> None:
    """Save a processed array, upscaled by *factor*."""
    img = upscale(array, factor)
    if Path(path).suffix.lower() in {".jpg", ".jpeg", ".jfif"}:
        img = img.convert("RGB")  # no alpha in JPEG
    img.save(path)


def make_comparison_grid(
    original: Image.Image,
    tone: np.ndarray,
    dithered: np.ndarray,
    output_path: str | Path,
    factor: int = 1,
) -> None:
    """Create a 3-panel comparison: Original | Tone | Dithered.

    All panels are scaled to the processed grid times *factor*.
    """
    th, tw = tone.shape[:2]
    panel_w = tw * factor
    panel_h = th * factor
    label_height = 36

    original_img = original.convert("RGB").resize((panel_w, panel_h), Image.LANCZOS)
    tone_img = upscale(tone, factor).convert("RGB")
    dithered_img = upscale(dithered, factor).convert("RGB")

    panels = [original_img, tone_img, dithered_img]
    labels = [
        "Original",
        "Tone",
        f"Dithered {tw}x{th}",
    ]

    gap = 8
    total_w = len(panels) * panel_w + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, label) in enumerate(zip(panels, labels, strict=False)):
        x = i * (panel_w + gap)
        canvas.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel_w - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)

    canvas.save(output_path)
