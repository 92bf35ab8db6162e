"""Camera module for view and ray generation.

Components:
    camera: Thin-lens camera configuration, frame setup and ray sampling

Camera responsibilities:
    - Derive the viewport and pixel grid from the view parameters
    - Apply anti-aliasing jitter for sub-pixel sampling
    - Support look-at positioning with up vector
    - Sample ray origins on a defocus disk for depth of field
"""

from .camera import (
    CameraConfig,
    CameraFrame,
    compute_camera_frame,
    defocus_disk_sample,
    get_camera_info,
    get_ray,
    setup_camera,
    upload_camera_frame,
)

__all__ = [
    "CameraConfig",
    "CameraFrame",
    "compute_camera_frame",
    "setup_camera",
    "upload_camera_frame",
    "get_ray",
    "defocus_disk_sample",
    "get_camera_info",
]
