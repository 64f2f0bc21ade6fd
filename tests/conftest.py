# -*- coding: utf-8 -*-
"""
Shared fixtures - Synthetic scene metadata and range geometry.

The reference scene looks from 800 km altitude with a 12.5 m slant-range
spacing starting at 850 km, giving incidence angles around 21 degrees
and a ground pixel of roughly 35 m.

Author
------
Steven Siebert

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-02-19

Modified
--------
2026-03-02
"""

import numpy as np
import pytest

from terrcorr.geometry.scene import SceneGeometry
from terrcorr.IO.models import SceneMetadata
from terrcorr.vocabulary import ImageType

EARTH_RADIUS = 6371000.0
SATELLITE_HEIGHT = EARTH_RADIUS + 800000.0
SLANT_FIRST = 850000.0
SLANT_SPACING = 12.5


def scene_metadata(lines, samples, **changes):
    """Slant-range metadata for the reference scene."""
    meta = SceneMetadata(
        line_count=lines,
        sample_count=samples,
        image_type=ImageType.SLANT_RANGE,
        x_pixel_size=SLANT_SPACING,
        y_pixel_size=10.0,
        slant_range_first=SLANT_FIRST,
        slant_range_per_pixel=SLANT_SPACING,
        earth_radius=EARTH_RADIUS,
        satellite_height=SATELLITE_HEIGHT,
    )
    return meta.copy(**changes) if changes else meta


@pytest.fixture
def make_metadata():
    """Factory for reference-scene metadata."""
    return scene_metadata


@pytest.fixture
def geometry():
    """512-sample reference geometry."""
    return SceneGeometry.build(
        earth_radius=EARTH_RADIUS,
        satellite_height=SATELLITE_HEIGHT,
        slant_first=SLANT_FIRST,
        slant_spacing=SLANT_SPACING,
        num_samples=512,
    )


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
