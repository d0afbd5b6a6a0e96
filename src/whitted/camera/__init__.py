"""Camera module for primary ray generation.

The pinhole camera looks down +Z from the eye and samples each pixel on
a regular sub-pixel grid.
"""

from .pinhole import PinholeCamera, get_camera_info, get_primary_ray, setup_camera

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_primary_ray",
    "get_camera_info",
]
