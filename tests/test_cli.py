"""Tests for the command-line and Streamlit front-ends."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image
from typer.testing import CliRunner

from material_dither.cli import app

ROOT = Path(__file__).resolve().parent.parent

runner = CliRunner()


@pytest.fixture
def tmp_image(tmp_path: Path) -> Path:
    """Write a small non-square gradient PNG to disk."""
    ramp = np.tile(np.linspace(0, 255, 40, dtype=np.uint8), (30, 1))
    p = tmp_path / "gradient.png"
    Image.fromarray(np.dstack([ramp, ramp, ramp])).save(p)
    return p


class TestCli:
    def test_methods(self) -> None:
        result = runner.invoke(app, ["methods"])
        assert result.exit_code == 0
        assert "floyd-steinberg" in result.output
        assert "bayer-8" in result.output

    def test_single(self, tmp_image: Path, tmp_path: Path) -> None:
        out = tmp_path / "out" / "dithered.png"
        result = runner.invoke(
            app,
            ["single", str(tmp_image), "-o", str(out), "-M", "bayer-8", "-p", "3"],
        )
        assert result.exit_code == 0, result.output
        img = Image.open(out)
        # 40x30 → ceil(40/3) x ceil(30/3) = 14x10 grid, blown up by 3
        assert img.size == (42, 30)
        pixels = np.array(img)
        assert set(np.unique(pixels[..., :3])) <= {0, 255}

    def test_single_unknown_method(self, tmp_image: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            app,
            ["single", str(tmp_image), "-o", str(tmp_path / "x.png"), "-M", "stucki"],
        )
        assert result.exit_code != 0
        assert not (tmp_path / "x.png").exists()

    def test_single_bad_pixel_size(self, tmp_image: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            app,
            ["single", str(tmp_image), "-o", str(tmp_path / "x.png"), "-p", "0"],
        )
        assert result.exit_code != 0

    def test_single_missing_source(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["single", str(tmp_path / "nope.png")])
        assert result.exit_code != 0

    def test_batch(self, tmp_image: Path, tmp_path: Path) -> None:
        out_dir = tmp_path / "results"
        result = runner.invoke(
            app,
            [
                "batch", "-i", str(tmp_image.parent), "-o", str(out_dir),
                "-M", "noise", "--seed", "5", "-p", "2",
            ],
        )
        assert result.exit_code == 0, result.output
        assert (out_dir / "gradient_dither.png").exists()
        assert (out_dir / "gradient_comparison.png").exists()
        assert Image.open(out_dir / "gradient_dither.png").size == (40, 30)

    def test_batch_no_compare(self, tmp_image: Path, tmp_path: Path) -> None:
        out_dir = tmp_path / "results"
        result = runner.invoke(
            app,
            ["batch", "-i", str(tmp_image.parent), "-o", str(out_dir), "--no-compare"],
        )
        assert result.exit_code == 0, result.output
        assert (out_dir / "gradient_dither.png").exists()
        assert not (out_dir / "gradient_comparison.png").exists()

    def test_batch_empty_folder(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        result = runner.invoke(
            app, ["batch", "-i", str(empty), "-o", str(tmp_path / "out")],
        )
        assert result.exit_code == 0
        assert "No images found" in result.output


class TestStreamlitApp:
    def test_renders_without_upload(self) -> None:
        from streamlit.testing.v1 import AppTest

        at = AppTest.from_file(str(ROOT / "streamlit_app.py"), default_timeout=60)
        at.run()
        assert not at.exception
        assert len(at.slider) == 4
        assert len(at.selectbox) == 1
