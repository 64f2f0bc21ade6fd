# -*- coding: utf-8 -*-
"""
DEM Module - Tie-point grids, mapping polynomials and DEM clipping.

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
2026-02-27
"""

from terrcorr.dem.extract import DemGrid, create_dem_grid, remap_poly
from terrcorr.dem.polyfit import Poly2D, PolyFitResult, fit_poly

__all__ = [
    'DemGrid',
    'Poly2D',
    'PolyFitResult',
    'create_dem_grid',
    'fit_poly',
    'remap_poly',
]
