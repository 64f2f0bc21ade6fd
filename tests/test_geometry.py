# -*- coding: utf-8 -*-
"""
Geometry Tests - SceneGeometry tables and CoordinateMapper conversions.

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
2026-02-18

Modified
--------
2026-10-17
"""

import numpy as np
import pytest

from terrcorr.exceptions import GeometryError, ValidationError
from terrcorr.geometry import CoordinateMapper, SceneGeometry

from conftest import (
    EARTH_RADIUS,
    SATELLITE_HEIGHT,
    SLANT_FIRST,
    SLANT_SPACING,
)


# ---------------------------------------------------------------------------
# SceneGeometry
# ---------------------------------------------------------------------------

class TestSceneGeometryBuild:
    """Tabulated range geometry."""

    def test_slant_range_table(self, geometry):
        expected = SLANT_FIRST + np.arange(512) * SLANT_SPACING
        np.testing.assert_allclose(geometry.slant_range, expected)
        np.testing.assert_allclose(geometry.slant_range_sq, expected ** 2)

    def test_incidence_matches_law_of_cosines(self, geometry):
        s = geometry.slant_range
        R, H = EARTH_RADIUS, SATELLITE_HEIGHT
        expected = np.pi - np.arccos((s * s + R * R - H * H) / (2 * R * s))
        np.testing.assert_allclose(geometry.incidence, expected)
        assert 20.0 < np.degrees(geometry.incidence[0]) < 22.0
        assert np.all(np.diff(geometry.incidence) > 0)

    def test_sin_cos_tables(self, geometry):
        np.testing.assert_allclose(geometry.sin_incidence,
                                   np.sin(geometry.incidence))
        np.testing.assert_allclose(geometry.cos_incidence,
                                   np.cos(geometry.incidence))

    def test_phi_mul_spans_columns(self, geometry):
        span = (geometry.max_phi - geometry.min_phi) * geometry.phi_mul
        assert span == pytest.approx(511.0)

    def test_ground_pixel_size(self, geometry):
        # Roughly slant spacing over sin(incidence).
        approx = SLANT_SPACING / np.sin(geometry.incidence[256])
        assert geometry.ground_pixel_size == pytest.approx(approx, rel=0.05)
        assert geometry.ground_pixel_size == pytest.approx(
            EARTH_RADIUS / geometry.phi_mul)

    def test_end_columns_coincide(self, geometry):
        assert geometry.slant_of_ground[0] == pytest.approx(0.0, abs=1e-4)
        assert geometry.slant_of_ground[-1] == pytest.approx(511.0, abs=1e-4)
        assert geometry.ground_of_slant[0] == pytest.approx(0.0, abs=1e-9)
        assert geometry.ground_of_slant[-1] == pytest.approx(511.0, abs=1e-9)

    def test_height_shift_signs(self, geometry):
        # Raised terrain appears at nearer slant range.
        assert np.all(geometry.height_shift_ground > 0)
        assert np.all(geometry.height_shift_slant < 0)

    def test_phi_conversions_inverse(self, geometry):
        x = np.array([0.0, 10.5, 300.25])
        np.testing.assert_allclose(
            geometry.phi_to_ground(geometry.ground_to_phi(x)), x)

    def test_from_metadata_applies_start_sample(self, make_metadata):
        meta = make_metadata(4, 64, start_sample=10, sample_increment=2)
        geom = SceneGeometry.from_metadata(meta)
        assert geom.slant_first == pytest.approx(SLANT_FIRST + 10 * SLANT_SPACING)
        assert geom.slant_spacing == pytest.approx(2 * SLANT_SPACING)
        assert geom.num_samples == 64


class TestSceneGeometryErrors:
    """Degenerate geometries are rejected."""

    def _build(self, **changes):
        kwargs = dict(earth_radius=EARTH_RADIUS,
                      satellite_height=SATELLITE_HEIGHT,
                      slant_first=SLANT_FIRST, slant_spacing=SLANT_SPACING,
                      num_samples=32)
        kwargs.update(changes)
        return SceneGeometry.build(**kwargs)

    def test_satellite_below_surface(self):
        with pytest.raises(GeometryError):
            self._build(satellite_height=EARTH_RADIUS - 1.0)

    def test_too_few_samples(self):
        with pytest.raises(GeometryError):
            self._build(num_samples=1)

    def test_non_positive_spacing(self):
        with pytest.raises(GeometryError):
            self._build(slant_spacing=0.0)

    def test_slant_range_misses_earth(self):
        with pytest.raises(GeometryError):
            self._build(slant_first=100000.0)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            self._build(num_samples=0)

    def test_metadata_without_orbit(self, make_metadata):
        meta = make_metadata(4, 64, earth_radius=None)
        with pytest.raises(GeometryError):
            SceneGeometry.from_metadata(meta)

    def test_metadata_without_slant_block(self, make_metadata):
        meta = make_metadata(4, 64, slant_range_first=None)
        with pytest.raises(ValidationError):
            SceneGeometry.from_metadata(meta)


# ---------------------------------------------------------------------------
# CoordinateMapper
# ---------------------------------------------------------------------------

class TestCoordinateMapper:
    """Slant/ground column conversions."""

    def test_sea_level_uses_tables(self, geometry):
        mapper = CoordinateMapper(geometry)
        cols = np.arange(512, dtype=np.float64)
        np.testing.assert_allclose(
            mapper.ground_to_slant(cols[:-1], 0.0), geometry.slant_of_ground[:-1])
        np.testing.assert_allclose(
            mapper.slant_to_ground(cols[:-1], 0.0), geometry.ground_of_slant[:-1])

    def test_scalar_returns_float(self, geometry):
        mapper = CoordinateMapper(geometry)
        value = mapper.slant_to_ground(100.0, 250.0)
        assert isinstance(value, float)

    @pytest.mark.parametrize("elevation", [0.0, 150.0, 800.0])
    def test_round_trip_within_one_column(self, geometry, elevation):
        mapper = CoordinateMapper(geometry)
        ground = np.linspace(120.0, 400.0, 57)
        slant = mapper.ground_to_slant(ground, elevation)
        back = mapper.slant_to_ground(slant, elevation)
        assert np.max(np.abs(back - ground)) < 1.0

    def test_elevation_moves_toward_near_range(self, geometry):
        mapper = CoordinateMapper(geometry)
        assert mapper.ground_to_slant(300.0, 500.0) < mapper.ground_to_slant(300.0, 0.0)
        assert mapper.slant_to_ground(300.0, 500.0) > mapper.slant_to_ground(300.0, 0.0)

    def test_out_of_range_clamps(self, geometry):
        mapper = CoordinateMapper(geometry)
        far = mapper.ground_to_slant(511.0, -5000.0)
        near = mapper.ground_to_slant(0.0, 5000.0)
        assert far <= geometry.slant_of_ground[-1]
        assert near == pytest.approx(geometry.slant_of_ground[0])

    def test_broadcast_elevation(self, geometry):
        mapper = CoordinateMapper(geometry)
        cols = np.array([10.0, 20.0, 30.0])
        out = mapper.ground_to_slant(cols, np.array([0.0, 100.0, 200.0]))
        assert out.shape == (3,)

    def test_non_finite_elevation_reads_as_sea_level(self, geometry):
        mapper = CoordinateMapper(geometry)
        out = mapper.slant_to_ground(
            np.array([100.0, 200.0]), np.array([np.nan, np.inf]))
        assert np.all(np.isfinite(out))
        np.testing.assert_allclose(out, geometry.ground_of_slant[[100, 200]])
        assert mapper.ground_to_slant(100.0, np.nan) == pytest.approx(
            geometry.slant_of_ground[100])
