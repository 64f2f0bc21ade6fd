# -*- coding: utf-8 -*-
"""
Tests for the offset-estimation module.

Recovers known whole-pixel translations between synthetic images and
checks the trimming helper used to align them.

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-02-27

Modified
--------
2026-03-02
"""

import numpy as np
import pytest

from terrcorr.coregistration import (
    OffsetEstimator,
    OffsetResult,
    round_half_up,
    shift_image,
)
from terrcorr.exceptions import ProcessorError, ValidationError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def base_image():
    """96x96 textured image with a couple of blocks."""
    rng = np.random.default_rng(42)
    img = rng.random((96, 96))
    img[30:40, 30:40] = 2.0
    img[60:75, 20:35] = 0.0
    return img


@pytest.fixture
def pair(base_image):
    """Reference and a moving image showing it shifted by (dx, dy) = (3, -2)."""
    reference = base_image[10:74, 10:74]
    moving = base_image[12:76, 7:71]
    return reference, moving


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestRoundHalfUp:

    def test_halves_go_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(-2.5) == -2

    def test_ordinary_rounding(self):
        assert round_half_up(2.4) == 2
        assert round_half_up(-2.6) == -3


class TestOffsetResult:

    def test_magnitude_and_rounding(self):
        r = OffsetResult(dx=3.0, dy=-4.0, peak=0.9)
        assert r.magnitude == pytest.approx(5.0)
        assert r.rounded() == (3, -4)
        assert r.metadata == {}
        assert 'dx=3.000' in repr(r)


class TestShiftImage:

    def test_window_origin(self):
        img = np.arange(12, dtype=np.float64).reshape(3, 4)
        out = shift_image(img, 1, 1)
        assert out.shape == (3, 4)
        assert out[0, 0] == img[1, 1]
        np.testing.assert_array_equal(out[:2, :3], img[1:, 1:])
        np.testing.assert_array_equal(out[2], 0.0)
        np.testing.assert_array_equal(out[:, 3], 0.0)

    def test_negative_origin_and_fill(self):
        img = np.arange(12, dtype=np.float64).reshape(3, 4)
        out = shift_image(img, -1, 0, shape=(2, 2), fill=-9.0)
        np.testing.assert_array_equal(out[:, 0], -9.0)
        assert out[0, 1] == img[0, 0]
        assert out[1, 1] == img[1, 0]

    def test_window_outside_image(self):
        out = shift_image(np.ones((4, 4)), 10, 10, fill=7.0)
        np.testing.assert_array_equal(out, 7.0)

    def test_rejects_non_2d(self):
        with pytest.raises(ValidationError):
            shift_image(np.zeros((2, 3, 4)), 0, 0)


# ---------------------------------------------------------------------------
# OffsetEstimator
# ---------------------------------------------------------------------------

class TestOffsetEstimator:

    def test_identity(self, base_image):
        r = OffsetEstimator().estimate(base_image, base_image)
        assert r.rounded() == (0, 0)
        assert r.magnitude < 0.1
        assert r.peak == pytest.approx(1.0)

    def test_recovers_translation(self, pair):
        reference, moving = pair
        r = OffsetEstimator().estimate(reference, moving)
        assert r.rounded() == (3, -2)
        assert r.dx == pytest.approx(3.0, abs=0.25)
        assert r.dy == pytest.approx(-2.0, abs=0.25)
        assert r.metadata['integer_peak'] == (-2, 3)

    def test_verify_after_alignment(self, pair):
        reference, moving = pair
        est = OffsetEstimator()
        dx, dy = est.estimate(reference, moving).rounded()
        aligned = shift_image(moving, dx, dy)
        residual = est.verify(reference, aligned)
        assert residual.magnitude <= 1.0

    def test_verify_rejects_misaligned(self, pair):
        reference, moving = pair
        with pytest.raises(ProcessorError, match="failed to match"):
            OffsetEstimator().verify(reference, moving)

    def test_constant_image(self, base_image):
        with pytest.raises(ProcessorError):
            OffsetEstimator().estimate(base_image, np.ones_like(base_image))

    def test_shape_mismatch(self, base_image):
        with pytest.raises(ValidationError):
            OffsetEstimator().estimate(base_image, base_image[:-1])

    def test_bad_tolerance(self):
        with pytest.raises(ValidationError):
            OffsetEstimator(tolerance=0.0)
