"""Preview module for image output.

Components:
    export: PNG export through Pillow and image comparison helpers

Example:
    >>> from src.pathtracer.preview import save_png
    >>> save_png(renderer, "output.png")
"""

from src.pathtracer.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)

__all__ = [
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "compute_rmse",
]
