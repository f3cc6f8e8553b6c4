"""Centralised configuration via frozen dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class DitherMethod(str, Enum):
    """Quantisation strategies. Values are the display labels."""

    THRESHOLD = "Threshold"
    FLOYD_STEINBERG = "Floyd-Steinberg"
    ATKINSON = "Atkinson"
    BAYER_4 = "Bayer 4x4"
    BAYER_8 = "Bayer 8x8"
    NOISE = "Random Noise"

    @property
    def diffuses_error(self) -> bool:
        return self in (DitherMethod.FLOYD_STEINBERG, DitherMethod.ATKINSON)

    @classmethod
    def parse(cls, text: str | DitherMethod) -> DitherMethod:
        """Resolve a method from its name, a dashed alias or its label.

        ``"FLOYD_STEINBERG"``, ``"floyd-steinberg"`` and
        ``"Floyd-Steinberg"`` all give :attr:`FLOYD_STEINBERG`.
        """
        if isinstance(text, cls):
            return text
        key = str(text).strip()
        normalised = key.upper().replace("-", "_").replace(" ", "_")
        for method in cls:
            label = method.value.upper().replace("-", "_").replace(" ", "_")
            if normalised in (method.name, label):
                return method
        available = ", ".join(m.name.lower().replace("_", "-") for m in cls)
        msg = f"Unknown dither method '{text}'. Available: {available}"
        raise ValueError(msg)


@dataclass(frozen=True)
class DitherSettings:
    """Parameters of one dithering pass.

    Attributes:
        method:     Quantisation strategy.
        threshold:  Black/white cut, nominally 0-255. Not range-checked.
        pixel_size: Mosaic block size. Only used for down/up-scaling around
                    the core, never inside the quantisation itself.
        contrast:   Contrast adjustment, nominally -100..100.
        brightness: Added to luminance before contrast, nominally -100..100.
    """

    method: DitherMethod = DitherMethod.ATKINSON
    threshold: int = 128
    pixel_size: int = 2
    contrast: int = 10
    brightness: int = 0

    def validate(self) -> DitherSettings:
        if not isinstance(self.method, DitherMethod):
            msg = f"method must be a DitherMethod, got {self.method!r}"
            raise ValueError(msg)
        if self.pixel_size < 1:
            msg = f"pixel_size must be >= 1, got {self.pixel_size}"
            raise ValueError(msg)
        return self


@dataclass(frozen=True)
class RunConfig:
    """Caller-side parameters for a run over one or more images.

    Attributes:
        max_proc_width:  Processing width cap after pixel-size downsampling.
        output_format:   Image format for saved files.
        save_comparison: Generate an Original | Tone | Dithered grid.
        seed:            Seed for the noise generator (None = non-deterministic).
        input_dir:       Folder to scan for source images.
        output_dir:      Folder for results.
    """

    max_proc_width: int = 1000
    output_format: str = "png"
    save_comparison: bool = True
    seed: int | None = None

    # Paths
    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".jfif", ".gif"}
    )
