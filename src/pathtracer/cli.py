#!/usr/bin/env python3
"""Render a built-in scene from the command line.

The image is written as plain-text PPM to stdout unless --output names a
file; progress goes to stderr, so the output can be redirected.

Usage:
    python -m src.pathtracer.cli [options] > image.ppm

Options:
    --scene NAME            Built-in scene: single or showcase (default: showcase)
    --width WIDTH           Image width in pixels
    --aspect-ratio RATIO    Image width over height
    --samples SAMPLES       Samples per pixel
    --max-depth DEPTH       Maximum ray bounces
    --vfov DEGREES          Vertical field of view
    --defocus-angle DEG     Defocus blur cone angle, 0 for a pinhole camera
    --focus-distance DIST   Distance to the plane of perfect focus
    --seed SEED             Random seed (default: 0)
    --output OUTPUT         Output file; .png writes PNG, anything else PPM
    --quiet                 Suppress progress output

Scene-specific camera settings are used for every option left out.

Example:
    python -m src.pathtracer.cli --scene showcase --width 200 --samples 20 > showcase.ppm
"""

from __future__ import annotations

import argparse
import contextlib
import dataclasses
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.pathtracer.core.renderer import Renderer

# Option name -> CameraConfig field it overrides
CAMERA_OVERRIDES = {
    "width": "image_width",
    "aspect_ratio": "aspect_ratio",
    "samples": "samples_per_pixel",
    "max_depth": "max_depth",
    "vfov": "vfov",
    "defocus_angle": "defocus_angle",
    "focus_distance": "focus_distance",
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a built-in scene with the path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("single", "showcase"),
        default="showcase",
        help="Built-in scene to render (default: showcase)",
    )
    parser.add_argument("--width", type=int, help="Image width in pixels")
    parser.add_argument("--aspect-ratio", type=float, help="Image width over height")
    parser.add_argument("--samples", type=int, help="Samples per pixel")
    parser.add_argument("--max-depth", type=int, help="Maximum ray bounces")
    parser.add_argument("--vfov", type=float, help="Vertical field of view in degrees")
    parser.add_argument(
        "--defocus-angle",
        type=float,
        help="Defocus blur cone angle in degrees, 0 for a pinhole camera",
    )
    parser.add_argument(
        "--focus-distance",
        type=float,
        help="Distance from the camera to the plane of perfect focus",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file path; PPM to stdout when omitted",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_scene(args: argparse.Namespace) -> Renderer:
    """Build the chosen scene and render it.

    Taichi must already be initialized.

    Returns:
        The Renderer holding the finished image.

    Raises:
        ValueError: If the camera configuration is degenerate.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.core.renderer import Renderer
    from src.pathtracer.scene.presets import SCENES

    _, camera_config = SCENES[args.scene]()

    overrides = {}
    for option, field_name in CAMERA_OVERRIDES.items():
        value = getattr(args, option)
        if value is not None:
            overrides[field_name] = value
    camera_config = dataclasses.replace(camera_config, **overrides)

    renderer = Renderer(camera_config)

    def progress_callback(remaining: int, height: int) -> None:
        if not args.quiet:
            print(f"\rScanlines remaining: {remaining} ", end="", file=sys.stderr, flush=True)

    renderer.render(callback=progress_callback)

    if not args.quiet:
        print("\rDone.       ", file=sys.stderr, flush=True)

    return renderer


def write_output(renderer: Renderer, output: str | None) -> None:
    """Write the image to the output file, or as PPM to stdout."""
    if output is None:
        renderer.write_ppm(sys.stdout)
        sys.stdout.flush()
    else:
        renderer.save_image(Path(output))


@contextlib.contextmanager
def stdout_to_stderr():
    """Send everything written to file descriptor 1 to stderr.

    Taichi logs to stdout from native code, below the reach of
    contextlib.redirect_stdout alone.
    """
    sys.stdout.flush()
    saved_fd = os.dup(1)
    try:
        os.dup2(2, 1)
        with contextlib.redirect_stdout(sys.stderr):
            yield
    finally:
        sys.stdout.flush()
        os.dup2(saved_fd, 1)
        os.close(saved_fd)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # stdout carries the image; keep Taichi's log lines off it
    try:
        with stdout_to_stderr():
            import taichi as ti

            ti.init(arch=ti.cpu, random_seed=args.seed)
            renderer = render_scene(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    write_output(renderer, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
