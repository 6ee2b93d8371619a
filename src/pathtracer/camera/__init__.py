"""Camera module for primary ray generation.

Components:
    pinhole: Fixed-orientation pinhole camera looking through the Z = 0 plane

Pixel coordinates use row 0 at the top of the image; the camera flips rows so
that world +Y points up in the rendered image.
"""

from .pinhole import (
    DEFAULT_CAMERA_POSITION,
    PinholeCamera,
    generate_ray,
    get_camera_info,
    get_camera_ray,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "DEFAULT_CAMERA_POSITION",
    "setup_camera",
    "get_ray",
    "get_camera_ray",
    "generate_ray",
    "get_camera_info",
]
