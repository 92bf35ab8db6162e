"""Output module for writing rendered images.

Components:
    image: Quantization to 8 bits, PPM (P3) writer and PNG export via Pillow
"""

from .image import format_ppm, quantize, save_png, save_ppm, write_ppm

__all__ = [
    "quantize",
    "write_ppm",
    "format_ppm",
    "save_ppm",
    "save_png",
]
