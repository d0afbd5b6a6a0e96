"""Image sampler: renders a scene into an RGBA8 image in row bands.

Each pixel averages a square grid of stratified primary rays. The image is
rendered in bands of rows, one kernel launch per band, so callers can
report progress or stop between bands.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.config import RenderConfig
    >>> from whitted.core.sampler import ImageSampler
    >>> from whitted.scene.cornell_box import create_reference_scene
    >>>
    >>> sampler = ImageSampler(create_reference_scene(), RenderConfig(64, 64))
    >>> for rows_done, total_rows in sampler.render_progressive():
    ...     print(f"{rows_done}/{total_rows} rows")
    >>> pixels = sampler.get_image_rgba8()
"""

import logging
import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from whitted.core.config import RenderConfig
from whitted.core.integrator import (
    clear_render_target,
    get_image_numpy,
    render_rows,
    setup_render_target,
    setup_scene,
)
from whitted.scene.graph import Scene

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


def to_rgba8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear float RGB image to 8-bit RGBA.

    Channels are scaled by 255, rounded to nearest (ties to even) and
    saturated to [0, 255]. Alpha is always 255.

    Args:
        image: Float image of shape (H, W, 3).

    Returns:
        Array of shape (H, W, 4) with dtype uint8.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    rgb = np.clip(np.rint(image.astype(np.float64) * 255.0), 0, 255).astype(np.uint8)
    alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=2)


class ImageSampler:
    """Renders a scene with a fixed configuration.

    The scene is uploaded to the device when the sampler is created; the
    render target is shared module state in the integrator, so only one
    sampler should render at a time.

    Attributes:
        scene: The scene being rendered.
        config: The render configuration.
    """

    def __init__(self, scene: Scene, config: RenderConfig | None = None) -> None:
        """Initialize the sampler.

        Args:
            scene: Scene to render.
            config: Render settings (defaults to RenderConfig()).

        Raises:
            ValueError: If dimensions exceed maximum supported size.
            RuntimeError: If the scene has too many primitives.
        """
        self._scene = scene
        self._config = config if config is not None else RenderConfig()
        self._rows_done = 0
        setup_render_target(self._config.width, self._config.height)
        count = setup_scene(scene)
        logger.debug("Sampler ready for %r with %d primitives", scene.name, count)

    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def config(self) -> RenderConfig:
        return self._config

    @property
    def rows_done(self) -> int:
        """Number of image rows rendered so far."""
        return self._rows_done

    @property
    def is_complete(self) -> bool:
        return self._rows_done >= self._config.height

    def reset(self) -> None:
        """Clear the image so the next render starts from the top row."""
        clear_render_target()
        setup_scene(self._scene)
        self._rows_done = 0

    def render(self, callback: ProgressCallback | None = None) -> None:
        """Render the remaining rows.

        Args:
            callback: Optional callback called after each band with
                (rows_done, total_rows).
        """
        for rows_done, total_rows in self.render_progressive():
            if callback is not None:
                callback(rows_done, total_rows)

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render the remaining rows, yielding progress after each band.

        Stopping iteration early leaves the remaining rows black; calling
        again resumes where it stopped.

        Yields:
            Tuple of (rows_done, total_rows).
        """
        config = self._config
        total_rows = config.height
        start = time.perf_counter()

        while self._rows_done < total_rows:
            y_start = self._rows_done
            y_end = min(y_start + config.rows_per_batch, total_rows)
            render_rows(
                y_start,
                y_end,
                config.grid_size,
                config.max_depth,
                config.refraction_blend,
            )
            self._rows_done = y_end
            logger.debug("Rendered rows %d-%d of %d", y_start, y_end, total_rows)
            yield (self._rows_done, total_rows)

        logger.info(
            "Rendered %s at %dx%d, %d spp, depth %d in %.2fs",
            self._scene.name,
            config.width,
            config.height,
            config.samples_per_pixel,
            config.max_depth,
            time.perf_counter() - start,
        )

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the averaged linear color image, shape (height, width, 3)."""
        return get_image_numpy()

    def get_image_rgba8(self) -> npt.NDArray[np.uint8]:
        """Get the image as 8-bit RGBA, shape (height, width, 4)."""
        return to_rgba8(self.get_image_numpy())


def render(scene: Scene, config: RenderConfig | None = None) -> npt.NDArray[np.uint8]:
    """Render a scene to an RGBA8 pixel array.

    Args:
        scene: Scene to render.
        config: Render settings (defaults to the reference settings).

    Returns:
        Array of shape (height, width, 4), row 0 at the top.
    """
    sampler = ImageSampler(scene, config)
    sampler.render()
    return sampler.get_image_rgba8()
