"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import numpy as np
import typer
from PIL import Image
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from material_dither.config import DitherMethod, DitherSettings, RunConfig
from material_dither.dithering import dither_rgba
from material_dither.image_io import (
    load_rgba,
    make_comparison_grid,
    prepare_rgba,
    save_upscaled,
)
from material_dither.metrics import black_ratio, tone_error
from material_dither.tone import tone_image

app = typer.Typer(
    name="material-dither",
    help="Turn any image into a 1-bit dithered rendition.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _parse_method(value: str) -> DitherMethod:
    try:
        return DitherMethod.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _build_settings(
    method: str,
    threshold: int,
    pixel_size: int,
    contrast: int,
    brightness: int,
) -> DitherSettings:
    try:
        return DitherSettings(
            method=_parse_method(method),
            threshold=threshold,
            pixel_size=pixel_size,
            contrast=contrast,
            brightness=brightness,
        ).validate()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _render(
    img_path: Path,
    settings: DitherSettings,
    cfg: RunConfig,
    rng: np.random.Generator,
) -> tuple[Image.Image, np.ndarray, np.ndarray]:
    """Load, downsample and dither one image."""
    original = load_rgba(img_path)
    rgba = prepare_rgba(original, settings.pixel_size, cfg.max_proc_width)
    dithered = dither_rgba(rgba, settings, rng=rng)
    return original, rgba, dithered


# Defaults come from the config dataclasses - single source of truth
_DEFAULTS = DitherSettings()
_RUN_DEFAULTS = RunConfig()


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        _RUN_DEFAULTS.input_dir, "--input", "-i", help="Folder with source images",
    ),
    output_dir: Path = typer.Option(
        _RUN_DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    method: str = typer.Option(
        _DEFAULTS.method.name.lower().replace("_", "-"), "--method", "-M",
        help="Dither method (see the 'methods' command)",
    ),
    threshold: int = typer.Option(
        _DEFAULTS.threshold, "--threshold", "-t", help="Black/white cut (0-255)",
    ),
    pixel_size: int = typer.Option(
        _DEFAULTS.pixel_size, "--pixel-size", "-p",
        help="Mosaic block size; the image is processed at 1/pixel-size",
    ),
    contrast: int = typer.Option(
        _DEFAULTS.contrast, "--contrast", "-c", help="Contrast (-100..100)",
    ),
    brightness: int = typer.Option(
        _DEFAULTS.brightness, "--brightness", "-b", help="Brightness (-100..100)",
    ),
    max_width: int = typer.Option(
        _RUN_DEFAULTS.max_proc_width, "--max-width",
        help="Cap on the processing width after downsampling",
    ),
    seed: int | None = typer.Option(
        _RUN_DEFAULTS.seed, "--seed", "-s", help="Noise seed (None = random)",
    ),
    compare: bool = typer.Option(
        _RUN_DEFAULTS.save_comparison, "--compare/--no-compare",
        help="Save an Original | Tone | Dithered grid",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Dither all images in INPUT_DIR and write results to OUTPUT_DIR."""
    _setup_logging(verbose)
    logger = logging.getLogger("material_dither")

    settings = _build_settings(method, threshold, pixel_size, contrast, brightness)
    cfg = RunConfig(
        max_proc_width=max_width,
        save_comparison=compare,
        seed=seed,
        input_dir=input_dir,
        output_dir=output_dir,
    )

    input_dir.mkdir(exist_ok=True)
    output_dir.mkdir(parents=True, exist_ok=True)

    images = _collect_images(input_dir, cfg.SUPPORTED_EXTENSIONS)
    if not images:
        console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        console.print("Place .jpg / .png / ... files there and re-run.\n")
        raise typer.Exit(0)

    console.print(Panel.fit(
        f"[bold]MATERIAL DITHER[/bold]\n"
        f"Method: {settings.method.value}  |  Threshold: {settings.threshold}\n"
        f"Pixel size: {settings.pixel_size}  |  Contrast: {settings.contrast}"
        f"  |  Brightness: {settings.brightness}\n"
        f"Images: {len(images)}",
        border_style="cyan",
    ))

    rng = np.random.default_rng(cfg.seed)

    for idx, img_path in enumerate(images, 1):
        stem = img_path.stem
        console.rule(f"[bold cyan][{idx}/{len(images)}] {img_path.name}[/bold cyan]")
        t_total = time.perf_counter()

        original, rgba, dithered = _render(img_path, settings, cfg, rng)
        h, w = dithered.shape[:2]
        logger.info(
            "Source %dx%d → processing grid %dx%d",
            original.width, original.height, w, h,
        )

        out_path = output_dir / f"{stem}_dither.{cfg.output_format}"
        save_upscaled(dithered, out_path, settings.pixel_size)

        tone = tone_image(rgba, settings)
        if cfg.save_comparison:
            comp_path = output_dir / f"{stem}_comparison.{cfg.output_format}"
            make_comparison_grid(
                original, tone, dithered, comp_path, settings.pixel_size,
            )

        err = tone_error(tone, dithered)
        elapsed = time.perf_counter() - t_total

        console.print(
            f"  [green]✓[/green] {out_path.name}  "
            f"[dim]{w}x{h} px  black={black_ratio(dithered):.0%}"
            f"  tone error={err:.1f}  time={elapsed:.1f}s[/dim]"
        )

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - results in [bold]{output_dir}/[/bold]",
        border_style="green",
    ))


# -- single-image command ----------------------------------------------

@app.command()
def single(
    source: Path = typer.Argument(..., help="Path to the source image"),
    output: Path | None = typer.Option(
        None, "--output", "-o",
        help="Output file (default: output/material-dither-<timestamp>.png)",
    ),
    method: str = typer.Option(
        _DEFAULTS.method.name.lower().replace("_", "-"), "--method", "-M",
    ),
    threshold: int = typer.Option(_DEFAULTS.threshold, "--threshold", "-t"),
    pixel_size: int = typer.Option(_DEFAULTS.pixel_size, "--pixel-size", "-p"),
    contrast: int = typer.Option(_DEFAULTS.contrast, "--contrast", "-c"),
    brightness: int = typer.Option(_DEFAULTS.brightness, "--brightness", "-b"),
    max_width: int = typer.Option(_RUN_DEFAULTS.max_proc_width, "--max-width"),
    seed: int | None = typer.Option(_RUN_DEFAULTS.seed, "--seed", "-s"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Dither a single image."""
    _setup_logging(verbose)

    if not source.exists():
        raise typer.BadParameter(f"No such file: {source}", param_hint="SOURCE")

    settings = _build_settings(method, threshold, pixel_size, contrast, brightness)
    cfg = RunConfig(max_proc_width=max_width, seed=seed)

    if output is None:
        output = cfg.output_dir / f"material-dither-{int(time.time() * 1000)}.png"
    output.parent.mkdir(parents=True, exist_ok=True)

    _, rgba, dithered = _render(source, settings, cfg, np.random.default_rng(seed))
    h, w = dithered.shape[:2]
    save_upscaled(dithered, output, settings.pixel_size)

    err = tone_error(tone_image(rgba, settings), dithered)
    console.print(
        f"[green]✓[/green] Saved to {output}  "
        f"[dim]{settings.method.value}  {w}x{h} px  tone error={err:.1f}[/dim]"
    )


# -- methods listing ---------------------------------------------------

@app.command()
def methods() -> None:
    """List the available dither methods."""
    table = Table(title="Dither methods", border_style="cyan")
    table.add_column("Option")
    table.add_column("Name")
    table.add_column("Kind")
    for m in DitherMethod:
        if m.diffuses_error:
            kind = "error diffusion"
        elif m == DitherMethod.NOISE:
            kind = "random threshold"
        elif m == DitherMethod.THRESHOLD:
            kind = "fixed threshold"
        else:
            kind = "ordered"
        table.add_row(m.name.lower().replace("_", "-"), m.value, kind)
    console.print(table)


if __name__ == "__main__":
    app()
