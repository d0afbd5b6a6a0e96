"""Render configuration.

RenderConfig collects the knobs of a render pass. Defaults reproduce the
reference render: 250x250 pixels, a 2x2 stratified grid per pixel and a
recursion depth of 3.

Example:
    >>> config = RenderConfig(width=64, height=64)
    >>> config.grid_size
    2
    >>> RenderConfig(samples_per_pixel=3)
    Traceback (most recent call last):
        ...
    ValueError: samples_per_pixel must be a perfect square, got 3
"""

import math
from dataclasses import dataclass
from enum import IntEnum


class RefractionBlend(IntEnum):
    """How the refracted color is combined with the surface color.

    ADDITIVE reproduces the reference renderer: the blend is added on top
    of the already accumulated color, color += color*(1-k) + refracted*k.
    LINEAR replaces it with the mix color = color*(1-k) + refracted*k.
    """

    ADDITIVE = 0
    LINEAR = 1


# Reference render settings
DEFAULT_WIDTH = 250
DEFAULT_HEIGHT = 250
DEFAULT_SAMPLES_PER_PIXEL = 4
DEFAULT_MAX_DEPTH = 3
DEFAULT_ROWS_PER_BATCH = 16


@dataclass(frozen=True)
class RenderConfig:
    """Parameters for a render pass.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Primary rays per pixel, laid out as a square
            grid. Must be a perfect square.
        max_depth: Recursion depth of the ray tree. 0 renders black.
        refraction_blend: Refraction blend formula.
        rows_per_batch: Rows rendered per kernel launch; progress callbacks
            and cancellation happen between batches.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    refraction_blend: RefractionBlend = RefractionBlend.ADDITIVE
    rows_per_batch: int = DEFAULT_ROWS_PER_BATCH

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel <= 0 or math.isqrt(self.samples_per_pixel) ** 2 != (
            self.samples_per_pixel
        ):
            raise ValueError(
                f"samples_per_pixel must be a perfect square, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.rows_per_batch <= 0:
            raise ValueError(f"rows_per_batch must be positive, got {self.rows_per_batch}")
        object.__setattr__(self, "refraction_blend", RefractionBlend(self.refraction_blend))

    @property
    def grid_size(self) -> int:
        """Number of sub-samples along each pixel axis."""
        return math.isqrt(self.samples_per_pixel)

    @property
    def aspect_ratio(self) -> float:
        """Image width divided by height."""
        return self.width / self.height
