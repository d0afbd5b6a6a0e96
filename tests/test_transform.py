"""Tests for the NumPy transform helpers."""

import numpy as np
import pytest

from whitted.geometry.transform import (
    apply_to_points,
    as_matrix,
    compose,
    identity,
    scaling,
    translation,
)


class TestTransformBuilders:
    """Tests for matrix construction."""

    def test_identity(self):
        assert np.array_equal(identity(), np.eye(4))

    def test_translation_moves_points(self):
        points = apply_to_points(translation((1.0, 2.0, 3.0)), [(0.0, 0.0, 0.0)])
        assert points.tolist() == [[1.0, 2.0, 3.0]]

    def test_uniform_and_per_axis_scaling(self):
        assert np.diag(scaling(2.0)).tolist() == [2.0, 2.0, 2.0, 1.0]
        assert np.diag(scaling((1.0, 2.0, 3.0))).tolist() == [1.0, 2.0, 3.0, 1.0]

    def test_scale_applies_before_translation(self):
        """translation @ scaling scales about the origin, then moves."""
        m = compose(translation((1.0, 0.0, 0.0)), scaling(0.5))
        points = apply_to_points(m, [(2.0, 2.0, 2.0)])
        assert points[0].tolist() == pytest.approx([2.0, 1.0, 1.0])


class TestAsMatrix:
    """Tests for transform validation."""

    def test_none_is_identity(self):
        assert np.array_equal(as_matrix(None), np.eye(4))

    def test_copy_is_read_only(self):
        source = translation((1.0, 0.0, 0.0))
        m = as_matrix(source)
        source[0, 3] = 5.0
        assert m[0, 3] == 1.0
        with pytest.raises(ValueError):
            m[0, 0] = 2.0

    def test_rejects_wrong_shape(self):
        with pytest.raises(ValueError, match="4x4"):
            as_matrix(np.eye(3))
