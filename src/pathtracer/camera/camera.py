"""Positionable thin-lens camera for primary ray generation.

The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios, with the image height derived from the width
- Jittered sampling for anti-aliasing
- Defocus blur by sampling ray origins on a disk around the camera center

Configuration is an immutable ``CameraConfig``. ``compute_camera_frame``
derives the per-render geometry on the host with NumPy; ``setup_camera``
validates, computes and uploads that frame into Taichi fields, where
``get_ray`` reads it from inside kernels.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.camera.camera import CameraConfig, setup_camera
    >>> config = CameraConfig(image_width=400, aspect_ratio=16.0 / 9.0, vfov=20.0,
    ...                       lookfrom=(-2.0, 2.0, 1.0), lookat=(0.0, 0.0, -1.0))
    >>> frame = setup_camera(config)
    >>> frame.image_height
    225
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.pathtracer.core.ray import Ray, make_ray
from src.pathtracer.core.vector import random_in_unit_disk, sample_square, vec3

Vector3 = tuple[float, float, float]

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class CameraConfig:
    """Configuration for a render: image size, sampling and view.

    Attributes:
        aspect_ratio: Ratio of image width over height.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Count of random samples for each pixel.
        max_depth: Maximum number of ray bounces into the scene. 0 or less
            renders black.
        vfov: Vertical view angle (field of view) in degrees.
        lookfrom: Point the camera is looking from.
        lookat: Point the camera is looking at.
        vup: Camera-relative "up" direction.
        defocus_angle: Variation angle of rays through each pixel, in degrees.
            0 or less disables defocus blur.
        focus_distance: Distance from lookfrom to the plane of perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    lookfrom: Vector3 = (0.0, 0.0, 0.0)
    lookat: Vector3 = (0.0, 0.0, -1.0)
    vup: Vector3 = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_distance: float = 10.0

    @property
    def image_height(self) -> int:
        """Image height in pixels, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))

    def validate(self) -> None:
        """Reject configurations that would yield an ill-defined frame.

        Raises:
            ValueError: On a non-positive size, sample count or focus
                distance, a field of view outside (0, 180) degrees, coincident
                lookfrom and lookat, or an up vector parallel to the view
                direction.
        """
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.focus_distance <= 0.0:
            raise ValueError(f"focus_distance must be positive, got {self.focus_distance}")

        view = np.subtract(self.lookfrom, self.lookat, dtype=np.float64)
        if not np.any(view):
            raise ValueError(f"lookfrom and lookat coincide at {self.lookfrom}")
        if np.linalg.norm(np.cross(np.asarray(self.vup, dtype=np.float64), view)) == 0.0:
            raise ValueError(f"vup {self.vup} is parallel to the view direction")


@dataclass(frozen=True)
class CameraFrame:
    """Geometry derived from a CameraConfig, fixed for one render.

    Attributes:
        image_width: Image width in pixels.
        image_height: Image height in pixels.
        pixel_samples_scale: Color scale factor for a sum of pixel samples.
        center: Camera center.
        pixel00_loc: Location of pixel (0, 0), the top-left one.
        pixel_delta_u: Offset to the pixel to the right.
        pixel_delta_v: Offset to the pixel below.
        u: Camera frame basis vector pointing right.
        v: Camera frame basis vector pointing up.
        w: Camera frame basis vector pointing backward.
        defocus_disk_u: Defocus disk horizontal radius.
        defocus_disk_v: Defocus disk vertical radius.
        defocus_angle: Defocus angle in degrees; 0 or less means pinhole.
    """

    image_width: int
    image_height: int
    pixel_samples_scale: float
    center: npt.NDArray[np.float64]
    pixel00_loc: npt.NDArray[np.float64]
    pixel_delta_u: npt.NDArray[np.float64]
    pixel_delta_v: npt.NDArray[np.float64]
    u: npt.NDArray[np.float64]
    v: npt.NDArray[np.float64]
    w: npt.NDArray[np.float64]
    defocus_disk_u: npt.NDArray[np.float64]
    defocus_disk_v: npt.NDArray[np.float64]
    defocus_angle: float


def _unit(v: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return v / np.linalg.norm(v)


def compute_camera_frame(config: CameraConfig) -> CameraFrame:
    """Derive the render geometry from a camera configuration.

    Pure host-side computation; calling it twice on the same config gives
    the same frame. The config is not validated here.

    Args:
        config: The camera configuration.

    Returns:
        The derived CameraFrame.
    """
    image_width = config.image_width
    image_height = config.image_height

    center = np.asarray(config.lookfrom, dtype=np.float64)
    lookat = np.asarray(config.lookat, dtype=np.float64)
    vup = np.asarray(config.vup, dtype=np.float64)

    # Viewport dimensions at the focus plane
    theta = math.radians(config.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * config.focus_distance
    viewport_width = viewport_height * (image_width / image_height)

    # u, v, w basis vectors for the camera coordinate frame
    w = _unit(center - lookat)
    u = _unit(np.cross(vup, w))
    v = np.cross(w, u)

    # Vectors across the horizontal and down the vertical viewport edges
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    # Horizontal and vertical delta vectors from pixel to pixel
    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    # Location of the upper left pixel
    viewport_upper_left = (
        center - config.focus_distance * w - viewport_u / 2.0 - viewport_v / 2.0
    )
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    # Camera defocus disk basis vectors
    defocus_radius = config.focus_distance * math.tan(math.radians(config.defocus_angle / 2.0))

    return CameraFrame(
        image_width=image_width,
        image_height=image_height,
        pixel_samples_scale=1.0 / config.samples_per_pixel,
        center=center,
        pixel00_loc=pixel00_loc,
        pixel_delta_u=pixel_delta_u,
        pixel_delta_v=pixel_delta_v,
        u=u,
        v=v,
        w=w,
        defocus_disk_u=u * defocus_radius,
        defocus_disk_v=v * defocus_radius,
        defocus_angle=config.defocus_angle,
    )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_angle = ti.field(dtype=ti.f32, shape=())


def upload_camera_frame(frame: CameraFrame) -> None:
    """Write a frame into the Taichi fields read by get_ray."""
    _camera_center[None] = frame.center.tolist()
    _pixel00_loc[None] = frame.pixel00_loc.tolist()
    _pixel_delta_u[None] = frame.pixel_delta_u.tolist()
    _pixel_delta_v[None] = frame.pixel_delta_v.tolist()
    _camera_u[None] = frame.u.tolist()
    _camera_v[None] = frame.v.tolist()
    _camera_w[None] = frame.w.tolist()
    _defocus_disk_u[None] = frame.defocus_disk_u.tolist()
    _defocus_disk_v[None] = frame.defocus_disk_v.tolist()
    _defocus_angle[None] = frame.defocus_angle


def setup_camera(config: CameraConfig) -> CameraFrame:
    """Validate a configuration, derive its frame and make it current.

    Must be called before rendering, from Python scope.

    Args:
        config: The camera configuration.

    Returns:
        The frame now used by get_ray.

    Raises:
        ValueError: If the configuration is degenerate.
    """
    config.validate()
    frame = compute_camera_frame(config)
    upload_camera_frame(frame)
    return frame


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def defocus_disk_sample() -> vec3:
    """Random point on the camera's defocus disk."""
    p = random_in_unit_disk()
    return _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]


@ti.func
def get_ray(i: ti.i32, j: ti.i32) -> Ray:
    """Generate a sampled camera ray for pixel (i, j).

    The ray originates on the defocus disk (or at the camera center when
    defocus is off) and passes through a random point in the square
    around the pixel center.

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).

    Returns:
        The camera ray; its direction is not normalized.
    """
    offset = sample_square()
    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(i, ti.f32) + offset.x) * _pixel_delta_u[None]
        + (ti.cast(j, ti.f32) + offset.y) * _pixel_delta_v[None]
    )

    ray_origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        ray_origin = defocus_disk_sample()

    return make_ray(ray_origin, pixel_sample - ray_origin)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with center, pixel00_loc, pixel_delta_u, pixel_delta_v,
        u, v, w, defocus_disk_u and defocus_disk_v.
    """
    fields = {
        "center": _camera_center,
        "pixel00_loc": _pixel00_loc,
        "pixel_delta_u": _pixel_delta_u,
        "pixel_delta_v": _pixel_delta_v,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "defocus_disk_u": _defocus_disk_u,
        "defocus_disk_v": _defocus_disk_v,
    }
    info = {}
    for name, field in fields.items():
        vec = field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
