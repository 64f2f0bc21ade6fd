# -*- coding: utf-8 -*-
"""
Terrain Correction Constants - Sentinels and fixed algorithm constants.

Two elevation sentinels are used throughout. ``BAD_DEM_HEIGHT`` marks a
sample with no usable elevation (a hole); ``NO_DEM_DATA`` marks a sample
outside DEM coverage. Both lie below ``MIN_VALID_HEIGHT``, so any
elevation under that floor is treated as unusable by the compensators.

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
2026-03-02
"""

#: Elevation of a sample with no usable height.
BAD_DEM_HEIGHT = -10000.0

#: Elevation of a sample outside DEM coverage.
NO_DEM_DATA = -9999.0

#: Elevations strictly below this are never used as terrain heights.
MIN_VALID_HEIGHT = -900.0

#: Tolerance for recognising ``NO_DEM_DATA`` in float rasters.
NO_DEM_DATA_TOLERANCE = 1.0e-4

#: Reference elevation (m) used to tabulate the per-metre height shifts.
PROBE_HEIGHT = 1000.0

#: Longest ground-range gap (columns) bridged when hole filling is off.
MAX_BREAK_LENGTH = 5

#: Mapping hits a slant column may receive before it is declared layover.
LAYOVER_HIT_SLOTS = 2

#: Extra far-range samples clipped from the DEM beyond the SAR swath.
DEM_GRID_RHS_PADDING = 400

#: Default side length of the SAR-to-DEM tie-point grid.
DEFAULT_DEM_GRID_SIZE = 20

#: Default order of the SAR-to-DEM mapping polynomial.
DEFAULT_POLY_ORDER = 5

#: Largest residual offset (pixels) accepted when verifying a co-registration.
MAX_OFFSET_RESIDUAL = 1.0


def is_no_dem_data(value: float) -> bool:
    """Whether *value* is the ``NO_DEM_DATA`` sentinel."""
    return abs(value - NO_DEM_DATA) < NO_DEM_DATA_TOLERANCE


def is_valid_height(value: float) -> bool:
    """Whether *value* is a usable terrain height."""
    return value >= MIN_VALID_HEIGHT and value != BAD_DEM_HEIGHT
