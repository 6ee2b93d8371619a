"""Frame renderer with progressive sample accumulation.

This module wraps the integrator kernels in a Renderer class that:
- validates and holds the render settings (resolution, samples, bounces, seed)
- renders the configured samples per pixel in batches
- reports progress through a callback or a generator
- resolves the accumulated radiance into the 8-bit pixel buffer

Splitting the samples into batches does not change the result: each sample
of a pixel draws from a state derived from its index in the pixel, not from
the batch it runs in, and the buffer is only divided by
the total sample count when it is resolved.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.renderer import RenderSettings, render_frame
    >>> from src.pathtracer.scene.presets import create_lit_scene
    >>>
    >>> scene, camera = create_lit_scene()
    >>> settings = RenderSettings.from_preset("thumbnail", samples_per_pixel=16)
    >>> pixels = render_frame(scene, camera, settings)  # (100, 100, 3) uint8
"""

from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt

from src.pathtracer.camera.pinhole import PinholeCamera, setup_camera
from src.pathtracer.core.integrator import (
    DEFAULT_MAX_BOUNCES,
    DEFAULT_SAMPLES_PER_PIXEL,
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    ShadingMode,
    clear_render_target,
    get_pixel_buffer_numpy,
    get_radiance_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from src.pathtracer.scene.manager import Scene

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]

# Named output resolutions as (width, height)
RESOLUTION_PRESETS: dict[str, tuple[int, int]] = {
    "uhd": (3840, 2160),
    "fhd": (1920, 1080),
    "hd": (1280, 720),
    "thumbnail": (100, 100),
}


@dataclass(frozen=True)
class RenderSettings:
    """Parameters of a single frame render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Paths traced per pixel.
        max_bounces: Maximum path length.
        seed: Seed for the per-sample random states.
        shading: What each sample measures (path tracing by default).
    """

    width: int = 1280
    height: int = 720
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_bounces: int = DEFAULT_MAX_BOUNCES
    seed: int = 0
    shading: ShadingMode = ShadingMode.PATH_TRACE

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Resolution must be positive, got {self.width}x{self.height}")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Resolution ({self.width}x{self.height}) exceeds maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_bounces <= 0:
            raise ValueError(f"max_bounces must be positive, got {self.max_bounces}")
        object.__setattr__(self, "shading", ShadingMode(self.shading))

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @classmethod
    def from_preset(cls, name: str, **overrides: Any) -> "RenderSettings":
        """Create settings for a named resolution preset.

        Args:
            name: One of RESOLUTION_PRESETS.
            **overrides: Any other RenderSettings fields.

        Raises:
            ValueError: If the preset name is unknown.
        """
        try:
            width, height = RESOLUTION_PRESETS[name]
        except KeyError:
            raise ValueError(
                f"Unknown resolution preset {name!r}; "
                f"expected one of {sorted(RESOLUTION_PRESETS)}"
            ) from None
        return cls(width=width, height=height, **overrides)


class Renderer:
    """A renderer that accumulates a frame's samples over time.

    The renderer owns the render target state for its settings and delegates
    to the global integrator buffers (which are Taichi fields). The scene and
    camera must be set up before rendering.

    Attributes:
        settings: The active render settings.
    """

    def __init__(self, settings: RenderSettings | None = None) -> None:
        """Initialize the renderer.

        Args:
            settings: Render settings. Defaults to RenderSettings().
        """
        self.settings = settings if settings is not None else RenderSettings()
        setup_render_target(self.settings.width, self.settings.height, self.settings.seed)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    @property
    def remaining_samples(self) -> int:
        """Samples still needed to reach settings.samples_per_pixel."""
        return max(self.settings.samples_per_pixel - self.sample_count, 0)

    @property
    def is_complete(self) -> bool:
        """Whether every pixel has received samples_per_pixel samples."""
        return self.remaining_samples == 0

    def reset(self) -> None:
        """Discard accumulated samples and restart the sample count at zero."""
        clear_render_target()

    def configure(self, settings: RenderSettings) -> None:
        """Switch to new settings and reset the accumulator."""
        self.settings = settings
        setup_render_target(settings.width, settings.height, settings.seed)

    def render(
        self,
        batch_size: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the remaining samples with an optional progress callback.

        Args:
            batch_size: Samples per pixel rendered between callbacks. Defaults
                to all remaining samples in one batch.
            callback: Optional callback called after each batch.
                Receives (current_samples, target_samples).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        batch_size: int | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the remaining samples, yielding progress after each batch.

        Args:
            batch_size: Samples per pixel rendered before each yield.

        Yields:
            Tuple of (current_samples, target_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if batch_size is not None and batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.settings.samples_per_pixel
        remaining = self.remaining_samples
        if batch_size is None:
            batch_size = max(remaining, 1)

        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(
                num_samples=batch,
                max_bounces=self.settings.max_bounces,
                shading=self.settings.shading,
            )
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_radiance_numpy(self) -> npt.NDArray[np.float32]:
        """Get the average linear radiance as an array of shape (height, width, 3)."""
        return get_radiance_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the 8-bit RGB pixel buffer of shape (height, width, 3)."""
        return get_pixel_buffer_numpy()

    def save_image(self, filepath: str) -> None:
        """Save the rendered image to a file.

        Args:
            filepath: Path to save the image (e.g., "output.png").
        """
        from src.pathtracer.preview.export import save_png

        save_png(self, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}/{self.settings.samples_per_pixel})"
        )


def render_frame(
    scene: Scene,
    camera: PinholeCamera,
    settings: RenderSettings | None = None,
    callback: ProgressCallback | None = None,
    batch_size: int | None = None,
) -> npt.NDArray[np.uint8]:
    """Render one frame of a scene and return its pixel buffer.

    Args:
        scene: The scene to render.
        camera: The camera to render from.
        settings: Render settings. Defaults to RenderSettings().
        callback: Optional progress callback, see Renderer.render().
        batch_size: Samples per pixel rendered between callbacks.

    Returns:
        NumPy array of shape (height, width, 3) with dtype uint8, row 0 at
        the top of the image.
    """
    if settings is None:
        settings = RenderSettings()

    scene.activate()
    setup_camera(camera)
    renderer = Renderer(settings)
    renderer.render(batch_size=batch_size, callback=callback)
    return renderer.get_image_uint8()
