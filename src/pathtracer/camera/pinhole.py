"""Pinhole camera model for primary ray generation.

The camera sits at a world-space position and looks through a fixed image
plane at world Z = 0. The plane is one unit tall and aspect_ratio units wide,
centred on the Z axis; the camera does not rotate.

A pixel (x, y) with row 0 at the top of the image maps to a point on the plane
as follows:

    screen_y = height - y                      (world +Y is up)
    norm     = ((x + 0.5) / width, (screen_y + 0.5) / height)
    centered = norm - 0.5
    target   = (centered.x * width / height, centered.y, 0)
    ray      = (position, target - position)

The direction is left unnormalised. No sub-pixel jitter is applied: every
sample of a pixel reuses the same ray.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.camera.pinhole import PinholeCamera, generate_ray, setup_camera
    >>> camera = PinholeCamera(position=(0.0, 0.0, 1.0))
    >>> setup_camera(camera)
    >>> origin, direction = generate_ray(50, 50, 100, 100, camera.position)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, make_ray, vec3

# Default camera position: one unit in front of the image plane
DEFAULT_CAMERA_POSITION = (0.0, 0.0, 1.0)

# World Z coordinate of the image plane
IMAGE_PLANE_Z = 0.0


@dataclass
class PinholeCamera:
    """Configuration for a pinhole camera looking through the Z = 0 plane.

    Attributes:
        position: Camera position in world space (x, y, z).
    """

    position: tuple[float, float, float] = DEFAULT_CAMERA_POSITION


# Camera position (set by setup_camera, read by the rendering kernels)
_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())

# Single-ray query results (written by _query_ray)
_query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Make camera the active camera for rendering.

    Args:
        camera: Camera configuration.
    """
    _camera_position[None] = camera.position


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with the active camera's position.
    """
    p = _camera_position[None]
    return {"position": (float(p[0]), float(p[1]), float(p[2]))}


@ti.func
def get_ray(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    camera_position: vec3,
) -> Ray:
    """Generate the primary ray through a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        camera_position: Camera position in world space.

    Returns:
        A Ray from camera_position toward the pixel's point on the image
        plane. The direction is not normalized.
    """
    screen_y = height - pixel_y
    resolution = tm.vec2(ti.cast(width, ti.f32), ti.cast(height, ti.f32))
    aspect_ratio = resolution.x / resolution.y

    normal_position = (
        tm.vec2(ti.cast(pixel_x, ti.f32), ti.cast(screen_y, ti.f32)) + 0.5
    ) / resolution
    centered_position = normal_position - 0.5
    aspect_position = centered_position * tm.vec2(aspect_ratio, 1.0)

    target = vec3(aspect_position.x, aspect_position.y, IMAGE_PLANE_Z)
    return make_ray(camera_position, target - camera_position)


@ti.func
def get_camera_ray(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through a pixel for the active camera."""
    return get_ray(pixel_x, pixel_y, width, height, _camera_position[None])


@ti.kernel
def _query_ray(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32, position: vec3):
    ray = get_ray(pixel_x, pixel_y, width, height, position)
    _query_origin[None] = ray.origin
    _query_direction[None] = ray.direction


def generate_ray(
    pixel_x: int,
    pixel_y: int,
    width: int,
    height: int,
    camera_position: tuple[float, float, float] = DEFAULT_CAMERA_POSITION,
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Generate the primary ray through a pixel from Python.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        camera_position: Camera position in world space.

    Returns:
        Tuple of (origin, direction).

    Raises:
        ValueError: If width or height is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Resolution must be positive, got {width}x{height}")

    _query_ray(
        pixel_x,
        pixel_y,
        width,
        height,
        vec3(camera_position[0], camera_position[1], camera_position[2]),
    )
    o = _query_origin[None]
    d = _query_direction[None]
    return (
        (float(o[0]), float(o[1]), float(o[2])),
        (float(d[0]), float(d[1]), float(d[2])),
    )
