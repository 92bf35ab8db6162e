"""Ray color evaluation and the scanline render loop.

A camera ray is followed through the world: at every hit the material
decides whether the ray scatters (and with what attenuation) or is
absorbed, and a ray that escapes picks up the sky gradient. The color of
the sample is the product of the attenuations along the path times the
sky color, or black when the path is absorbed or runs out of depth.

The evaluation is written as a loop carrying the attenuation product and
the remaining depth, so the call stack does not grow with ``max_depth``.

Rendering walks the image one scanline at a time, top to bottom. Each row
is a kernel whose column loop is serialized, so the Taichi random stream
is consumed in a fixed order and a given seed always reproduces the same
image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=1)
    >>> from src.pathtracer.camera.camera import CameraConfig
    >>> from src.pathtracer.core.integrator import render_image
    >>> from src.pathtracer.scene.manager import SceneManager
    >>>
    >>> scene = SceneManager()
    >>> scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
    >>> image = render_image(CameraConfig(image_width=64, samples_per_pixel=4))
"""

from collections.abc import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.camera import CameraConfig, get_ray, setup_camera
from src.pathtracer.core.ray import Ray, make_ray
from src.pathtracer.core.vector import unit_vector, vec3
from src.pathtracer.materials.material import scatter
from src.pathtracer.scene.world import hit_world

# =============================================================================
# Rendering Constants
# =============================================================================

# Interval searched for hits; the lower bound skips the surface a ray
# just left ("shadow acne")
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints
SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)

# Callback receives (scanlines_remaining, image_height) before each row
ProgressCallback = Callable[[int, int], None]

# =============================================================================
# Color Evaluation
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky color seen along a direction that escapes the world.

    Blends white to light blue by the height of the unit direction:
    a = 0.5 * (y + 1) maps y in [-1, 1] to [0, 1].
    """
    unit_direction = unit_vector(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * SKY_WHITE + a * SKY_BLUE


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Color carried back along a ray.

    Args:
        ray: The ray to follow.
        depth: How many more bounces are allowed. At 0 or below the ray
            contributes black.

    Returns:
        The RGB color of the ray.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction
    remaining = depth

    # Active flag for path continuation
    active = 1
    while active == 1:
        if remaining <= 0:
            # Bounce limit reached: no more light is gathered
            active = 0
        else:
            current = make_ray(origin, direction)
            rec = hit_world(current, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(direction)
                active = 0
            else:
                did_scatter, attenuation, scattered = scatter(rec.material_id, current, rec)

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = scattered.origin
                    direction = scattered.direction
                    remaining -= 1

    return color


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    return ray_color(make_ray(origin, direction), depth)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
) -> tuple[float, float, float]:
    """Evaluate the color of a single ray from Python.

    Useful for testing and debugging; rendering goes through render_image.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z).
        depth: Remaining bounce budget.

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = _trace_ray_kernel(vec3(*origin), vec3(*direction), depth)
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Averaged pixel colors, indexed [row, column] with row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image dimensions and clear the buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions exceed the maximum supported size.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to black."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Colors are the averaged linear samples, not clamped.

    Returns:
        Array of shape (height, width, 3), row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float32)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_row(
    row: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    pixel_samples_scale: ti.f32,
):
    """Render one scanline, left to right.

    Args:
        row: The image row (0 = top).
        width: Image width in pixels.
        samples_per_pixel: Samples averaged for each pixel.
        max_depth: Bounce budget of every camera ray.
        pixel_samples_scale: 1 / samples_per_pixel.
    """
    ti.loop_config(serialize=True)
    for i in range(width):
        pixel_color = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            pixel_color += ray_color(get_ray(i, row), max_depth)
        _color_buffer[row, i] = pixel_samples_scale * pixel_color


# =============================================================================
# Public Rendering API
# =============================================================================


def render_row(row: int, config: CameraConfig) -> None:
    """Render one scanline into the render target.

    The camera and the render target must already be set up for config.

    Args:
        row: The image row (0 = top).
        config: The configuration the camera was set up with.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, _ = get_image_dimensions()
    _render_row(
        row,
        width,
        config.samples_per_pixel,
        config.max_depth,
        1.0 / config.samples_per_pixel,
    )


def render_image(
    config: CameraConfig,
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.float32]:
    """Render the current world through a camera.

    Sets up the camera and the render target, then renders every row from
    top to bottom.

    Args:
        config: The camera configuration.
        callback: Optional callback called before each row with
            (scanlines_remaining, image_height).

    Returns:
        The image, an array of shape (height, width, 3).

    Raises:
        ValueError: If the configuration is degenerate or the image is
            larger than the render target.
    """
    frame = setup_camera(config)
    setup_render_target(frame.image_width, frame.image_height)

    for row in range(frame.image_height):
        if callback is not None:
            callback(frame.image_height - row, frame.image_height)
        render_row(row, config)

    return get_image_numpy()
