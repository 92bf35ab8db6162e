"""Integration tests for the end-to-end rendering pipeline.

These run the command-line renderer in a subprocess, from scene creation
through to the written image. Each run gets a fresh Taichi runtime, which
is the only way to check seeded reproducibility since Taichi cannot be
re-initialized with a new seed inside the test session.

Tests are kept fast (tiny images, few samples) while still exercising the
full pipeline.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import numpy as np
from PIL import Image as PILImage

REPO_ROOT = Path(__file__).resolve().parent.parent

SMALL_SHOWCASE = ["--scene", "showcase", "--width", "8", "--samples", "2", "--max-depth", "4"]


def run_cli(*args: str) -> subprocess.CompletedProcess:
    """Run the renderer CLI and capture its output."""
    return subprocess.run(
        [sys.executable, "-m", "src.pathtracer.cli", *args],
        cwd=REPO_ROOT,
        capture_output=True,
        text=True,
        timeout=600,
    )


def is_sky_color(r: int, g: int, b: int) -> bool:
    """Check a quantized color lies on the white-to-blue sky gradient."""
    if b != 255:
        return False
    # Recover the blend factor from red, then predict green from it
    a = 2.0 * (1.0 - (r + 0.5) / 256.0)
    expected_g = int(256.0 * min(1.0 - 0.3 * a, 0.999))
    return 0.0 <= a <= 1.0 + 1e-2 and abs(g - expected_g) <= 1


def parse_ppm(text: str) -> tuple[int, int, np.ndarray]:
    """Parse plain PPM text into (width, height, pixels)."""
    lines = text.splitlines()
    assert lines[0] == "P3"
    width, height = (int(v) for v in lines[1].split())
    assert lines[2] == "255"
    pixels = np.array([[int(v) for v in line.split()] for line in lines[3:]])
    return width, height, pixels


class TestCommandLinePpm:
    """Tests for PPM output on stdout."""

    def test_showcase_ppm_layout(self) -> None:
        """Test the header and pixel count of a small showcase render."""
        result = run_cli(*SMALL_SHOWCASE, "--quiet")

        assert result.returncode == 0, result.stderr
        assert result.stdout.startswith("P3\n8 4\n255\n")
        width, height, pixels = parse_ppm(result.stdout)
        assert (width, height) == (8, 4)
        assert pixels.shape == (32, 3)
        assert pixels.min() >= 0
        assert pixels.max() <= 255

    def test_same_seed_same_image(self) -> None:
        """Test two runs with the same seed produce identical output."""
        first = run_cli(*SMALL_SHOWCASE, "--seed", "3", "--quiet")
        second = run_cli(*SMALL_SHOWCASE, "--seed", "3", "--quiet")

        assert first.returncode == 0, first.stderr
        assert second.returncode == 0, second.stderr
        assert first.stdout == second.stdout

    def test_single_sphere_scene(self) -> None:
        """Test the single sphere scene renders its 2x2 image."""
        result = run_cli("--scene", "single", "--quiet")

        assert result.returncode == 0, result.stderr
        width, height, pixels = parse_ppm(result.stdout)
        assert (width, height) == (2, 2)
        assert pixels.shape == (4, 3)

    def test_single_sphere_regression(self) -> None:
        """Test the 2x2 single sphere render is reproducible and well formed.

        With one bounce a camera ray either hits the sphere (black) or
        escapes to the sky, so every pixel is 0 0 0 or a gradient color.
        """
        first = run_cli("--scene", "single", "--seed", "5", "--quiet")
        second = run_cli("--scene", "single", "--seed", "5", "--quiet")

        assert first.returncode == 0, first.stderr
        assert first.stdout == second.stdout

        lines = first.stdout.splitlines()
        assert lines[:3] == ["P3", "2 2", "255"]
        assert len(lines) == 3 + 4

        _, _, pixels = parse_ppm(first.stdout)
        for index, (r, g, b) in enumerate(pixels):
            if (r, g, b) == (0, 0, 0):
                continue
            assert is_sky_color(r, g, b), (r, g, b)
            # Rays through the top row point up, bluer than the horizon
            if index < 2:
                assert r <= 192
            else:
                assert r >= 191

    def test_negative_defocus_is_pinhole(self) -> None:
        """Test a negative defocus angle renders like a pinhole camera."""
        negative = run_cli("--scene", "single", "--defocus-angle", "-1", "--quiet")
        pinhole = run_cli("--scene", "single", "--defocus-angle", "0", "--quiet")

        assert negative.returncode == 0, negative.stderr
        assert negative.stdout == pinhole.stdout

    def test_negative_depth_renders_black(self) -> None:
        """Test a negative bounce budget renders a black image."""
        result = run_cli("--scene", "single", "--max-depth", "-1", "--quiet")

        assert result.returncode == 0, result.stderr
        _, _, pixels = parse_ppm(result.stdout)
        assert np.all(pixels == 0)

    def test_progress_reported_on_stderr(self) -> None:
        """Test progress goes to stderr and stdout stays a clean image."""
        result = run_cli(*SMALL_SHOWCASE)

        assert result.returncode == 0, result.stderr
        assert "Scanlines remaining: 4" in result.stderr
        assert "Done." in result.stderr
        assert result.stdout.startswith("P3\n")

    def test_quiet_suppresses_progress(self) -> None:
        """Test --quiet leaves no progress text."""
        result = run_cli(*SMALL_SHOWCASE, "--quiet")

        assert "Scanlines remaining" not in result.stderr


class TestCommandLineFiles:
    """Tests for writing images to files."""

    def test_png_output(self, tmp_path: Path) -> None:
        """Test a .png output path is written as a PNG file."""
        output = tmp_path / "showcase.png"
        result = run_cli(*SMALL_SHOWCASE, "--quiet", "--output", str(output))

        assert result.returncode == 0, result.stderr
        assert result.stdout == ""
        with PILImage.open(output) as img:
            assert img.format == "PNG"
            assert img.size == (8, 4)

    def test_ppm_output(self, tmp_path: Path) -> None:
        """Test a .ppm output path matches what stdout would carry."""
        output = tmp_path / "showcase.ppm"
        to_file = run_cli(*SMALL_SHOWCASE, "--quiet", "--output", str(output))
        to_stdout = run_cli(*SMALL_SHOWCASE, "--quiet")

        assert to_file.returncode == 0, to_file.stderr
        assert output.read_text() == to_stdout.stdout


class TestCommandLineErrors:
    """Tests for rejected configurations."""

    def test_zero_width_rejected(self) -> None:
        """Test a degenerate image width exits with an error."""
        result = run_cli("--width", "0", "--quiet")

        assert result.returncode == 1
        assert "Error:" in result.stderr
        assert "image_width" in result.stderr
        assert result.stdout == ""

    def test_unknown_scene_rejected(self) -> None:
        """Test argparse rejects scene names it does not know."""
        result = run_cli("--scene", "cornell")

        assert result.returncode == 2
        assert "invalid choice" in result.stderr
