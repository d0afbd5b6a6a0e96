"""Tests for the image sampler.

This module tests the ImageSampler class including:
- Initialization and setup
- Band rendering with progress callbacks and generators
- Resuming and resetting
- RGBA8 conversion and determinism

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import numpy as np
import pytest


def _empty_room():
    from whitted.scene.cornell_box import create_reference_scene

    return create_reference_scene(include_objects=False)


class TestToRgba8:
    """Tests for the float to 8-bit conversion."""

    def test_saturates_and_sets_alpha(self):
        from whitted.core.sampler import to_rgba8

        image = np.array([[[0.0, 1.0, 2.0], [-0.5, 0.5, 0.002]]], dtype=np.float32)

        rgba = to_rgba8(image)

        assert rgba.dtype == np.uint8
        assert rgba.shape == (1, 2, 4)
        assert rgba[0, 0].tolist() == [0, 255, 255, 255]
        # 127.5 rounds to the even neighbor, 0.51 rounds up
        assert rgba[0, 1].tolist() == [0, 128, 1, 255]

    def test_rejects_wrong_shape(self):
        from whitted.core.sampler import to_rgba8

        with pytest.raises(ValueError, match="H, W, 3"):
            to_rgba8(np.zeros((4, 4)))


class TestImageSamplerInit:
    """Test ImageSampler initialization."""

    def test_init(self):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import ImageSampler

        sampler = ImageSampler(_empty_room(), RenderConfig(width=16, height=8))

        assert sampler.rows_done == 0
        assert not sampler.is_complete
        assert sampler.config.width == 16

    def test_default_config(self):
        from whitted.core.sampler import ImageSampler

        sampler = ImageSampler(_empty_room())

        assert sampler.config.width == 250

    def test_rejects_oversized_dimensions(self):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import ImageSampler

        with pytest.raises(ValueError, match="exceed maximum"):
            ImageSampler(_empty_room(), RenderConfig(width=4096, height=16))


class TestImageSamplerRender:
    """Tests for band rendering."""

    def test_callback_per_band(self):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import ImageSampler

        config = RenderConfig(width=8, height=10, samples_per_pixel=1, rows_per_batch=4)
        sampler = ImageSampler(_empty_room(), config)
        calls = []

        sampler.render(callback=lambda done, total: calls.append((done, total)))

        assert calls == [(4, 10), (8, 10), (10, 10)]
        assert sampler.is_complete

    def test_progressive_can_stop_and_resume(self):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import ImageSampler

        config = RenderConfig(width=8, height=8, samples_per_pixel=1, rows_per_batch=2)
        sampler = ImageSampler(_empty_room(), config)

        progress = sampler.render_progressive()
        assert next(progress) == (2, 8)
        progress.close()

        partial = sampler.get_image_numpy()
        assert partial[2:].max() == 0.0
        assert partial[:2].max() > 0.0

        list(sampler.render_progressive())
        assert sampler.is_complete
        assert sampler.get_image_numpy().max(axis=2).min() > 0.0

    def test_reset_clears_image(self):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import ImageSampler

        sampler = ImageSampler(_empty_room(), RenderConfig(8, 8, samples_per_pixel=1))
        sampler.render()
        sampler.reset()

        assert sampler.rows_done == 0
        assert sampler.get_image_numpy().max() == 0.0

    def test_rgba_output(self):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import ImageSampler

        sampler = ImageSampler(_empty_room(), RenderConfig(12, 6, samples_per_pixel=1))
        sampler.render()
        pixels = sampler.get_image_rgba8()

        assert pixels.shape == (6, 12, 4)
        assert pixels.dtype == np.uint8
        assert (pixels[..., 3] == 255).all()


class TestRenderFunction:
    """Tests for the module-level render()."""

    def test_empty_room_is_deterministic(self):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import render

        config = RenderConfig(width=16, height=16)

        first = render(_empty_room(), config)
        second = render(_empty_room(), config)

        assert np.array_equal(first, second)

    def test_red_wall_left_green_wall_right(self):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import render

        pixels = render(_empty_room(), RenderConfig(width=16, height=16)).astype(int)
        left = pixels[8, 0]
        right = pixels[8, 15]

        assert left[0] > 0 and left[1] == 0 and left[2] == 0
        assert right[1] > 0 and right[0] == 0 and right[2] == 0

    def test_depth_zero_renders_black(self):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import render

        pixels = render(_empty_room(), RenderConfig(width=8, height=8, max_depth=0))

        assert pixels[..., :3].max() == 0
        assert (pixels[..., 3] == 255).all()

    def test_reference_scene_renders(self):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import render
        from whitted.scene.cornell_box import create_reference_scene

        pixels = render(create_reference_scene(), RenderConfig(width=24, height=24))

        assert pixels.shape == (24, 24, 4)
        assert pixels[..., :3].max() > 0
