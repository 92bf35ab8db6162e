#!/usr/bin/env python3
"""Render the material showcase scene to a PNG file.

This script demonstrates using the path tracer as a library: it builds the
showcase scene, optionally overrides the camera resolution and sampling,
renders row by row with a progress line and saves a PNG.

Usage:
    python -m examples.render_showcase [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --samples SAMPLES   Number of samples per pixel (default: 100)
    --max-depth DEPTH   Maximum ray bounces (default: 50)
    --output OUTPUT     Output file path (default: showcase.png)
    --quiet             Suppress progress output

Example:
    python -m examples.render_showcase --width 200 --samples 20
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the material showcase scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum ray bounces (default: 50)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="showcase.png",
        help="Output file path (default: showcase.png)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_showcase(
    width: int = 400,
    num_samples: int = 100,
    max_depth: int = 50,
    output_path: str = "showcase.png",
    quiet: bool = False,
) -> Path:
    """Render the material showcase scene and save to file.

    Args:
        width: Image width in pixels.
        num_samples: Number of samples per pixel.
        max_depth: Maximum number of ray bounces.
        output_path: Output file path.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.core.renderer import Renderer
    from src.pathtracer.scene.presets import create_material_showcase_scene

    scene, camera_config = create_material_showcase_scene()
    camera_config = dataclasses.replace(
        camera_config,
        image_width=width,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
    )

    renderer = Renderer(camera_config)
    if not quiet:
        print(f"Rendering {scene} at {renderer.width}x{renderer.height}, {num_samples} spp...")

    start_time = time.time()
    for remaining, height in renderer.render_rows():
        if not quiet:
            progress_pct = (height - remaining) / height * 100
            print(f"\r  Progress: {progress_pct:.1f}% ", end="", flush=True)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    renderer.save_image(output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Falls back to CPU when no GPU backend is available
    ti.init(arch=ti.gpu)

    try:
        render_showcase(
            width=args.width,
            num_samples=args.samples,
            max_depth=args.max_depth,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
