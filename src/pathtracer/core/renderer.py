"""Renderer wrapper around the scanline integrator.

This module provides a convenient interface over the integrator functions:
- One-call rendering of the current scene through a camera configuration
- Row-by-row rendering as a generator, for callers that want control
  between scanlines
- Progress callbacks
- Saving the result as PPM or PNG

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=0)
    >>> from src.pathtracer.core.renderer import Renderer
    >>> from src.pathtracer.scene.presets import create_material_showcase_scene
    >>>
    >>> scene, camera_config = create_material_showcase_scene()
    >>> renderer = Renderer(camera_config)
    >>> image = renderer.render()
    >>> renderer.save_image("showcase.png")
"""

from collections.abc import Generator
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt

from src.pathtracer.camera.camera import CameraConfig, CameraFrame, setup_camera
from src.pathtracer.core.integrator import (
    ProgressCallback,
    get_image_numpy,
    render_row,
    setup_render_target,
)
from src.pathtracer.output.image import quantize, save_png, save_ppm, write_ppm


class Renderer:
    """Renders the current scene through one camera configuration.

    The renderer validates its configuration up front and delegates to the
    global integrator buffers (which are Taichi fields), so only one render
    is in flight at a time.

    Attributes:
        config: The camera configuration.
    """

    def __init__(self, config: CameraConfig) -> None:
        """Initialize the renderer.

        Args:
            config: The camera configuration to render with.

        Raises:
            ValueError: If the configuration is degenerate.
        """
        config.validate()
        self.config = config
        self._rows_rendered = 0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.image_height

    @property
    def rows_rendered(self) -> int:
        """Get the number of scanlines finished in the current render."""
        return self._rows_rendered

    def _begin(self) -> CameraFrame:
        frame = setup_camera(self.config)
        setup_render_target(frame.image_width, frame.image_height)
        self._rows_rendered = 0
        return frame

    def render_rows(self) -> Generator[tuple[int, int], None, None]:
        """Render the image one scanline at a time, top to bottom.

        Yields:
            Tuple of (scanlines_remaining, image_height) before each row
            is rendered.

        Example:
            >>> for remaining, height in renderer.render_rows():
            ...     print(f"Scanlines remaining: {remaining}")
        """
        frame = self._begin()
        for row in range(frame.image_height):
            yield (frame.image_height - row, frame.image_height)
            render_row(row, self.config)
            self._rows_rendered = row + 1

    def render(self, callback: ProgressCallback | None = None) -> npt.NDArray[np.float32]:
        """Render the whole image.

        Args:
            callback: Optional callback function called before each row.
                Receives (scanlines_remaining, image_height).

        Returns:
            NumPy array of shape (height, width, 3) with linear colors.
        """
        for remaining, height in self.render_rows():
            if callback is not None:
                callback(remaining, height)
        return self.get_image_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the rendered image as a NumPy array of shape (height, width, 3)."""
        return get_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image quantized to 8 bits, as written to files."""
        return quantize(self.get_image_numpy())

    def write_ppm(self, stream: TextIO) -> None:
        """Write the rendered image to a text stream as PPM."""
        write_ppm(self.get_image_numpy(), stream)

    def save_image(self, filepath: str | Path) -> None:
        """Save the rendered image to a file.

        A ``.png`` suffix writes PNG; anything else writes PPM.

        Args:
            filepath: Path to save the image (e.g., "output.ppm").
        """
        if Path(filepath).suffix.lower() == ".png":
            save_png(self.get_image_numpy(), filepath)
        else:
            save_ppm(self.get_image_numpy(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.config.samples_per_pixel}, "
            f"max_depth={self.config.max_depth})"
        )
