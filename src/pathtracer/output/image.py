"""Image output for rendered images.

Colors leave the renderer as linear floats. They are written without
gamma correction or tone mapping: each component is clamped to
[0.000, 0.999], scaled by 256 and truncated to an integer in [0, 255].

Supported formats:
    - Plain-text PPM (P3), the renderer's native output
    - PNG (8-bit via Pillow)

Example:
    >>> import sys
    >>> import numpy as np
    >>> from src.pathtracer.output.image import write_ppm
    >>> write_ppm(np.zeros((1, 1, 3), dtype=np.float32), sys.stdout)
    P3
    1 1
    255
    0 0 0
"""

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Clamping interval applied before scaling to 8 bits
INTENSITY_MIN = 0.000
INTENSITY_MAX = 0.999


def quantize(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert linear colors to 8-bit values.

    Args:
        image: Array of shape (H, W, 3) with linear color values.

    Returns:
        Array of shape (H, W, 3) with dtype uint8.
    """
    clamped = np.clip(np.asarray(image, dtype=np.float64), INTENSITY_MIN, INTENSITY_MAX)
    return (256.0 * clamped).astype(np.uint8)


def _check_shape(image: npt.NDArray[np.floating]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def write_ppm(image: npt.NDArray[np.floating], stream: TextIO) -> None:
    """Write an image as plain-text PPM.

    The header is ``P3``, the width and height, and 255; then one
    ``r g b`` line per pixel, rows top to bottom, left to right.

    Args:
        image: Array of shape (H, W, 3) with linear color values.
        stream: Text stream to write to.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    stream.write(format_ppm(image))


def format_ppm(image: npt.NDArray[np.floating]) -> str:
    """Render an image to a PPM string."""
    _check_shape(image)
    height, width, _ = image.shape
    lines = [f"P3\n{width} {height}\n255\n"]
    for r, g, b in quantize(image).reshape(-1, 3):
        lines.append(f"{r} {g} {b}\n")
    return "".join(lines)


def save_ppm(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save an image as a PPM file."""
    with open(filepath, "w", encoding="ascii") as f:
        write_ppm(image, f)


def save_png(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save an image as an 8-bit PNG file, quantized as for PPM.

    Args:
        image: Array of shape (H, W, 3) with linear color values.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    _check_shape(image)
    pil_image = PILImage.fromarray(quantize(image))
    pil_image.save(filepath)
