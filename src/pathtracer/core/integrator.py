"""Path tracing integrator and frame loop kernels.

This module implements the rendering kernels: one path per sample is traced
from the camera through the scene, accumulating emitted light weighted by the
product of the albedos seen so far, for at most max_bounces bounces.

The estimator:
    - bounce directions are uniform over the hemisphere of the hit normal
    - no BRDF, cosine or pdf factor is applied; throughput is the product of
      albedos along the path
    - paths are truncated at max_bounces (no Russian roulette)
    - rays that escape the scene contribute BACKGROUND_COLOR (black)

Each pixel generates its camera ray once and reuses it for every sample. The
per-sample radiance is summed into a per-pixel accumulator; resolving the
image divides by the total sample count and quantises each channel to a byte
with saturation (values above 1.0 become 255, negative values and NaN
become 0).

Every sample starts from its own random state (see core.sampler), derived
from the render seed, the pixel index and the sample index, so a render is
reproducible for a given seed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.camera.pinhole import setup_camera
    >>> from src.pathtracer.core.integrator import (
    ...     get_pixel_buffer_numpy, render_image, setup_render_target
    ... )
    >>> from src.pathtracer.scene.presets import create_lit_scene
    >>>
    >>> scene, camera = create_lit_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(320, 180, seed=1)
    >>> render_image(num_samples=50, max_bounces=20)
    >>> pixels = get_pixel_buffer_numpy()  # (180, 320, 3) uint8
"""

from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.pinhole import get_camera_ray
from src.pathtracer.core.sampler import random_hemisphere_direction, seed_rng, seed_sample_rng
from src.pathtracer.materials.material import emitted_radiance
from src.pathtracer.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum path length
DEFAULT_MAX_BOUNCES = 20

# Samples traced per pixel
DEFAULT_SAMPLES_PER_PIXEL = 50

# Radiance of rays that escape the scene
BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)


class ShadingMode(IntEnum):
    """What each sample of a pixel measures.

    PATH_TRACE is the Monte Carlo estimate of incoming light. ALBEDO and
    NORMALS are deterministic first-hit previews: the hit material's albedo,
    or the hit normal remapped from [-1, 1] to [0, 1].
    """

    PATH_TRACE = 0
    ALBEDO = 1
    NORMALS = 2


# Plain integer mode values for use inside kernels
_MODE_PATH_TRACE = int(ShadingMode.PATH_TRACE)
_MODE_ALBEDO = int(ShadingMode.ALBEDO)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 3840
MAX_IMAGE_HEIGHT = 2160

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of all radiance samples per pixel
_radiance_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Quantised 8-bit output, written by _resolve_pixels
_pixels = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Samples accumulated into every pixel so far
_total_samples = ti.field(dtype=ti.i32, shape=())

# Seed the per-sample random states are derived from
_render_seed = ti.field(dtype=ti.u32, shape=())

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Python-side trace_samples() output
MAX_TRACE_SAMPLES = 1 << 16
_trace_buffer = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRACE_SAMPLES)


@ti.kernel
def _clear_active_region(width: ti.i32, height: ti.i32):
    for x, y in ti.ndrange(width, height):
        _radiance_sum[x, y] = vec3(0.0, 0.0, 0.0)
        _pixels[x, y] = ti.Vector([0, 0, 0], dt=ti.u8)


def setup_render_target(width: int, height: int, seed: int = 0) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and seed, then clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).
        seed: Seed for the per-sample random states.

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_seed[None] = seed & 0xFFFFFFFF
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the accumulated samples and restart the sample count at zero."""
    width, height = get_image_dimensions()
    _clear_active_region(width, height)
    _total_samples[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_path(ray_origin: vec3, ray_direction: vec3, max_bounces: ti.i32, rng: ti.u32):
    """Trace a single path through the scene.

    At every hit the surface's emitted light, weighted by the current
    throughput, is added to the result; the throughput is then multiplied by
    the surface albedo and the path continues from the hit point in a
    uniformly sampled hemisphere direction. The loop ends when the ray escapes
    or after max_bounces intersections.

    Args:
        ray_origin: Origin of the primary ray.
        ray_direction: Direction of the primary ray (need not be normalized).
        max_bounces: Maximum number of surface interactions.
        rng: The random state for this path.

    Returns:
        A tuple of (incoming_light, advanced_state).
    """
    origin = ray_origin
    direction = ray_direction
    state = rng

    incoming_light = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation
    active = 1

    for _ in range(max_bounces):
        if active == 1:
            rec = intersect_scene(origin, direction)

            if rec.hit == 0:
                # Ray escaped
                incoming_light += throughput * BACKGROUND_COLOR
                active = 0
            else:
                emission = emitted_radiance(rec.emission_colour, rec.emission_strength)
                incoming_light += emission * throughput
                throughput *= rec.albedo

                origin = rec.position
                direction, state = random_hemisphere_direction(rec.normal, state)

    return incoming_light, state


@ti.func
def shade_first_hit(ray_origin: vec3, ray_direction: vec3, mode: ti.i32) -> vec3:
    """Deterministic preview colour of the first surface along a ray.

    Args:
        ray_origin: Origin of the primary ray.
        ray_direction: Direction of the primary ray.
        mode: ShadingMode.ALBEDO or ShadingMode.NORMALS.

    Returns:
        The albedo or remapped normal of the closest hit, or the background.
    """
    colour = vec3(0.0, 0.0, 0.0)
    rec = intersect_scene(ray_origin, ray_direction)
    if rec.hit == 1:
        if mode == _MODE_ALBEDO:
            colour = rec.albedo
        else:
            colour = rec.normal * 0.5 + 0.5
    return colour


@ti.func
def quantize_channel(value: ti.f32) -> ti.u8:
    """Map a linear channel value to a byte with saturation.

    value * 255 is clamped to [0, 255] and truncated. NaN maps to 0. NaN is
    detected from its bit pattern, which fast-math compilation leaves intact.
    """
    magnitude_bits = ti.bit_cast(value, ti.u32) & ti.u32(0x7FFFFFFF)
    result = 0.0
    if magnitude_bits <= ti.u32(0x7F800000):
        result = tm.clamp(value * 255.0, 0.0, 255.0)
    return ti.cast(result, ti.u8)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_samples(
    width: ti.i32,
    height: ti.i32,
    num_samples: ti.i32,
    max_bounces: ti.i32,
    mode: ti.i32,
    seed: ti.u32,
    first_sample: ti.i32,
):
    """Accumulate samples first_sample .. first_sample + num_samples - 1 into every pixel."""
    for x, y in ti.ndrange(width, height):
        ray = get_camera_ray(x, y, width, height)
        pixel = ti.cast(x + y * width, ti.u32)
        total = vec3(0.0, 0.0, 0.0)

        for s in range(num_samples):
            sample = vec3(0.0, 0.0, 0.0)
            if mode == _MODE_PATH_TRACE:
                rng = seed_sample_rng(seed, pixel, ti.cast(first_sample + s, ti.u32))
                sample, rng = trace_path(ray.origin, ray.direction, max_bounces, rng)
            else:
                sample = shade_first_hit(ray.origin, ray.direction, mode)
            total += sample

        _radiance_sum[x, y] += total


@ti.kernel
def _resolve_pixels(width: ti.i32, height: ti.i32, total_samples: ti.i32):
    """Average the accumulated radiance and quantise it into the byte buffer."""
    for x, y in ti.ndrange(width, height):
        average = _radiance_sum[x, y] / ti.cast(total_samples, ti.f32)
        for c in ti.static(range(3)):
            _pixels[x, y][c] = quantize_channel(average[c])


@ti.kernel
def _trace_samples(
    count: ti.i32,
    max_bounces: ti.i32,
    seed: ti.u32,
    origin: vec3,
    direction: vec3,
):
    for i in range(count):
        rng = seed_rng(seed, ti.cast(i, ti.u32))
        radiance, rng = trace_path(origin, direction, max_bounces, rng)
        _trace_buffer[i] = radiance


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(
    num_samples: int = 1,
    max_bounces: int = DEFAULT_MAX_BOUNCES,
    shading: ShadingMode = ShadingMode.PATH_TRACE,
) -> None:
    """Accumulate num_samples more samples into every pixel.

    Can be called repeatedly. Sample k of a pixel always starts from the same
    random state, so the accumulated result does not depend on how the
    samples are split across calls.

    Args:
        num_samples: Number of samples to add per pixel.
        max_bounces: Maximum path length for PATH_TRACE shading.
        shading: What each sample measures.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If num_samples or max_bounces is not positive.
    """
    _check_render_target_initialized()

    if num_samples <= 0:
        raise ValueError(f"num_samples must be positive, got {num_samples}")
    if max_bounces <= 0:
        raise ValueError(f"max_bounces must be positive, got {max_bounces}")

    width, height = get_image_dimensions()
    _render_samples(
        width,
        height,
        num_samples,
        max_bounces,
        int(shading),
        int(_render_seed[None]),
        int(_total_samples[None]),
    )
    _total_samples[None] += num_samples


def get_total_samples() -> int:
    """Get the number of samples accumulated into every pixel so far.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_total_samples[None])


def get_radiance_image_numpy() -> npt.NDArray[np.float32]:
    """Get the average linear radiance per pixel as a NumPy array.

    Values are not clamped. Row 0 is the top of the image.

    Returns:
        NumPy array of shape (height, width, 3), all zero before any samples.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    total = get_total_samples()

    image = _radiance_sum.to_numpy()[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    if total > 0:
        image = image / np.float32(total)

    return np.ascontiguousarray(image, dtype=np.float32)


def get_pixel_buffer_numpy() -> npt.NDArray[np.uint8]:
    """Resolve the accumulated samples into the 8-bit RGB pixel buffer.

    Returns:
        NumPy array of shape (height, width, 3) with dtype uint8, row 0 at
        the top of the image. All zero before any samples.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    total = get_total_samples()

    if total > 0:
        _resolve_pixels(width, height, total)

    pixels = _pixels.to_numpy()[:width, :height, :]
    return np.ascontiguousarray(np.transpose(pixels, (1, 0, 2)), dtype=np.uint8)


def trace_samples(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    num_samples: int,
    max_bounces: int = DEFAULT_MAX_BOUNCES,
    seed: int = 0,
) -> npt.NDArray[np.float32]:
    """Trace independent path samples along one ray.

    Samples run in parallel, each with its own random stream derived from
    seed and the sample index.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), not necessarily normalized.
        num_samples: Number of paths to trace (at most MAX_TRACE_SAMPLES).
        max_bounces: Maximum path length.
        seed: Seed for the per-sample random streams.

    Returns:
        NumPy array of shape (num_samples, 3) with one radiance estimate per row.

    Raises:
        ValueError: If num_samples is out of range or max_bounces is not positive.
    """
    if num_samples <= 0 or num_samples > MAX_TRACE_SAMPLES:
        raise ValueError(
            f"num_samples must be in [1, {MAX_TRACE_SAMPLES}], got {num_samples}"
        )
    if max_bounces <= 0:
        raise ValueError(f"max_bounces must be positive, got {max_bounces}")

    _trace_samples(
        num_samples,
        max_bounces,
        seed & 0xFFFFFFFF,
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
    )
    return _trace_buffer.to_numpy()[:num_samples]
