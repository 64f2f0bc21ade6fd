# -*- coding: utf-8 -*-
"""
Radiometric Compensator Tests - Local-slope intensity correction.

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
2026-02-21

Modified
--------
2026-03-02
"""

import numpy as np
import pytest

from terrcorr.constants import BAD_DEM_HEIGHT
from terrcorr.exceptions import ConfigurationError, ValidationError
from terrcorr.image_processing.terrain.radiometric import (
    RadiometricCompensator,
    check_formula,
)
from terrcorr.vocabulary import MaskValue, RadiometricFormula

NS = 512


class TestCheckFormula:

    def test_production_formula(self):
        assert check_formula(RadiometricFormula.KELLNDORFER) is RadiometricFormula.KELLNDORFER
        assert check_formula(5) is RadiometricFormula.KELLNDORFER

    @pytest.mark.parametrize("legacy", [1, 2, 3, 4, 6])
    def test_legacy_formulas_rejected(self, legacy):
        with pytest.raises(ConfigurationError, match="untested"):
            check_formula(legacy)

    def test_unknown_formula(self):
        with pytest.raises(ConfigurationError, match="Unknown"):
            check_formula(42)

    def test_constructor_rejects_legacy(self, geometry):
        with pytest.raises(ConfigurationError):
            RadiometricCompensator(geometry, formula=RadiometricFormula.DIFFUSE)


class TestCompensate:

    def test_flat_terrain_unchanged(self, geometry):
        comp = RadiometricCompensator(geometry)
        line = np.full(NS, 100.0)
        dem = np.zeros(NS)
        n = comp.compensate(line, dem, dem)
        assert n == NS - 1
        np.testing.assert_allclose(line, 100.0, rtol=1e-12)

    def test_facing_slope_scaled(self, geometry):
        comp = RadiometricCompensator(geometry)
        slope = 10.0
        dem = slope * np.arange(NS, dtype=np.float64)
        line = np.full(NS, 100.0)
        comp.compensate(line, dem, dem)

        dx = slope / geometry.ground_pixel_size
        sin_i = geometry.sin_incidence[1:]
        cos_ang = (dx * sin_i + geometry.cos_incidence[1:]) / np.sqrt(dx * dx + 1)
        expected = 100.0 * np.sqrt(1.0 - cos_ang ** 2) / sin_i
        np.testing.assert_allclose(line[1:], expected)
        assert line[0] == 100.0
        assert np.all(line[1:] < 100.0)

    def test_slope_facing_away_unchanged(self, geometry):
        comp = RadiometricCompensator(geometry)
        dem = -200.0 * np.arange(NS, dtype=np.float64)
        line = np.full(NS, 100.0)
        n = comp.compensate(line, dem, np.zeros(NS))
        assert n == 0
        np.testing.assert_array_equal(line, 100.0)

    def test_user_masked_skipped(self, geometry):
        comp = RadiometricCompensator(geometry)
        dem = 10.0 * np.arange(NS, dtype=np.float64)
        mask = np.full(NS, float(MaskValue.NORMAL))
        mask[50] = MaskValue.USER_MASKED
        line = np.full(NS, 100.0)
        comp.compensate(line, dem, dem, mask)
        assert line[50] == 100.0
        assert line[51] != 100.0

    def test_bad_heights_skipped(self, geometry):
        comp = RadiometricCompensator(geometry)
        dem = 10.0 * np.arange(NS, dtype=np.float64)
        prev = dem.copy()
        prev[80] = BAD_DEM_HEIGHT
        dem[120] = -901.0
        line = np.full(NS, 100.0)
        comp.compensate(line, dem, prev)
        assert line[80] == 100.0
        # Column 120 and its right neighbour both see the bad height.
        assert line[120] == 100.0
        assert line[121] == 100.0
        assert line[122] != 100.0

    def test_apply_returns_copy(self, geometry):
        comp = RadiometricCompensator(geometry)
        dem = 10.0 * np.arange(NS, dtype=np.float64)
        source = np.full(NS, 100.0)
        out = comp.apply(source, ground_dem=dem, previous_ground_dem=dem)
        assert np.all(source == 100.0)
        assert np.all(out[1:] < 100.0)

    def test_shape_mismatch(self, geometry):
        comp = RadiometricCompensator(geometry)
        with pytest.raises(ValidationError):
            comp.compensate(np.zeros(NS), np.zeros(10), np.zeros(NS))
