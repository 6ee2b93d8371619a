"""Image export utilities for rendered frames.

Frames are written as 8-bit RGB PNG files through Pillow. No tone mapping or
gamma correction is applied: linear radiance is scaled by 255 and saturated,
the same quantisation the renderer applies to its pixel buffer.

Example:
    >>> from src.pathtracer.core.renderer import Renderer, RenderSettings
    >>> from src.pathtracer.preview.export import save_png
    >>>
    >>> renderer = Renderer(RenderSettings.from_preset("thumbnail"))
    >>> renderer.render()
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from src.pathtracer.core.renderer import Renderer


def save_png(renderer: Renderer, filepath: str) -> None:
    """Save the renderer's resolved pixel buffer as a PNG file.

    Args:
        renderer: The Renderer whose accumulated samples are saved.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(renderer.get_image_uint8())
    pil_image.save(filepath)


def save_png_from_array(image: npt.NDArray[np.generic], filepath: str) -> None:
    """Save an image array as a PNG file.

    uint8 arrays are written unchanged. Float arrays are treated as linear
    radiance and quantised with image_to_uint8().

    Args:
        image: Image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If image is not of shape (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")

    if image.dtype != np.uint8:
        image = image_to_uint8(image)

    pil_image = PILImage.fromarray(np.ascontiguousarray(image))
    pil_image.save(filepath)


def image_to_uint8(image: npt.NDArray[np.floating[npt.NBitBase]]) -> npt.NDArray[np.uint8]:
    """Quantise a linear float image to bytes.

    Each channel becomes clamp(value * 255, 0, 255) truncated toward zero.
    NaN becomes 0.

    Args:
        image: Linear radiance array of any shape.

    Returns:
        Array of the same shape with dtype uint8.
    """
    scaled = np.nan_to_num(np.asarray(image, dtype=np.float64) * 255.0, nan=0.0)
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
