"""Image export utilities for rendered images.

Supported formats:
    - PNG (8-bit RGBA or RGB via Pillow)

Example:
    >>> from whitted.core.sampler import render
    >>> from whitted.preview.export import save_png
    >>> from whitted.scene.cornell_box import create_reference_scene
    >>>
    >>> pixels = render(create_reference_scene())
    >>> save_png(pixels, "reference.png")
"""

from __future__ import annotations

import logging
import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from whitted.core.sampler import to_rgba8

logger = logging.getLogger(__name__)


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear float RGB image to 8-bit RGBA.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 4).
    """
    return to_rgba8(image)


def save_png(image: npt.NDArray[np.generic], filepath: str | os.PathLike[str]) -> None:
    """Save a pixel array as a PNG file.

    uint8 arrays are written as-is; float arrays are treated as linear
    color and converted with image_to_uint8 first.

    Args:
        image: Array of shape (H, W, 4) or (H, W, 3).
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array is not an RGB or RGBA image.
    """
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) image, got shape {image.shape}")

    if np.issubdtype(image.dtype, np.floating):
        if image.shape[2] != 3:
            raise ValueError("Float images must have 3 channels")
        image = image_to_uint8(image)

    # Pillow infers RGB or RGBA from the channel count
    pil_image = PILImage.fromarray(np.ascontiguousarray(image, dtype=np.uint8))
    pil_image.save(filepath)
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)


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
