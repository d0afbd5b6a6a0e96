"""Tests for image export utilities.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
"""

import numpy as np
import pytest
from PIL import Image as PILImage


class TestSavePng:
    """Tests for save_png."""

    def test_rgba_round_trip(self, tmp_path):
        from whitted.preview.export import save_png

        pixels = np.zeros((4, 6, 4), dtype=np.uint8)
        pixels[..., 0] = 200
        pixels[..., 3] = 255
        path = tmp_path / "out.png"

        save_png(pixels, path)

        with PILImage.open(path) as img:
            assert img.mode == "RGBA"
            assert img.size == (6, 4)
            assert np.array_equal(np.asarray(img), pixels)

    def test_float_image_is_converted(self, tmp_path):
        from whitted.preview.export import save_png

        image = np.full((2, 3, 3), 0.5, dtype=np.float32)
        path = tmp_path / "float.png"

        save_png(image, path)

        with PILImage.open(path) as img:
            data = np.asarray(img)
        assert data.shape == (2, 3, 4)
        assert data[0, 0].tolist() == [128, 128, 128, 255]

    def test_rejects_bad_shape(self, tmp_path):
        from whitted.preview.export import save_png

        with pytest.raises(ValueError, match="Expected"):
            save_png(np.zeros((4, 4), dtype=np.uint8), tmp_path / "bad.png")

    def test_rendered_image_saves(self, tmp_path):
        from whitted.core.config import RenderConfig
        from whitted.core.sampler import render
        from whitted.preview.export import save_png
        from whitted.scene.cornell_box import create_reference_scene

        pixels = render(
            create_reference_scene(include_objects=False),
            RenderConfig(width=8, height=8, samples_per_pixel=1),
        )
        path = tmp_path / "room.png"

        save_png(pixels, path)

        with PILImage.open(path) as img:
            assert np.array_equal(np.asarray(img), pixels)


class TestComputeRmse:
    """Tests for compute_rmse."""

    def test_identical_images(self):
        from whitted.preview.export import compute_rmse

        image = np.random.default_rng(0).random((4, 4, 3))
        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        from whitted.preview.export import compute_rmse

        a = np.zeros((2, 2, 3))
        b = np.full((2, 2, 3), 0.5)
        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_uint8_inputs_do_not_wrap(self):
        from whitted.preview.export import compute_rmse

        a = np.zeros((1, 1, 4), dtype=np.uint8)
        b = np.full((1, 1, 4), 255, dtype=np.uint8)
        assert compute_rmse(a, b) == pytest.approx(255.0)

    def test_shape_mismatch(self):
        from whitted.preview.export import compute_rmse

        with pytest.raises(ValueError, match="must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)))
