"""Preview module for saving and comparing rendered images."""

from .export import compute_rmse, image_to_uint8, save_png

__all__ = [
    "save_png",
    "image_to_uint8",
    "compute_rmse",
]
