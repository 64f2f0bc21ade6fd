# -*- coding: utf-8 -*-
"""
Coordinate Mapper - Height-aware slant/ground column conversion.

Converts fractional column positions between slant range and ground range
for a given terrain height, using the tables of a ``SceneGeometry``. The
height is first removed by the per-metre shift of the source column, then
the sea-level position is looked up with linear interpolation. Positions
are clamped to the table and non-finite inputs read as zero, so the
mapping never fails; callers range-check the result.

Dependencies
------------
numpy

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

# Standard library
from typing import Union

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.geometry.scene import SceneGeometry

ArrayLike = Union[float, np.ndarray]


class CoordinateMapper:
    """Map column positions between slant and ground range.

    Both methods accept scalars or arrays (broadcast together) and return
    the same kind.

    Parameters
    ----------
    geometry : SceneGeometry
        Tabulated scene geometry.

    Examples
    --------
    >>> mapper = CoordinateMapper(geometry)
    >>> gx = mapper.slant_to_ground(100.0, 250.0)
    >>> sx = mapper.ground_to_slant(gx, 250.0)
    """

    def __init__(self, geometry: SceneGeometry) -> None:
        self.geometry = geometry

    def slant_to_ground(self, column: ArrayLike, elevation: ArrayLike) -> ArrayLike:
        """Ground column imaged at slant *column* by terrain at *elevation*."""
        return self._convert(
            column, elevation,
            self.geometry.height_shift_slant,
            self.geometry.ground_of_slant)

    def ground_to_slant(self, column: ArrayLike, elevation: ArrayLike) -> ArrayLike:
        """Slant column that images ground *column* at *elevation*."""
        return self._convert(
            column, elevation,
            self.geometry.height_shift_ground,
            self.geometry.slant_of_ground)

    def _convert(
        self,
        column: ArrayLike,
        elevation: ArrayLike,
        shift: np.ndarray,
        table: np.ndarray,
    ) -> ArrayLike:
        ns = self.geometry.num_samples
        column = np.asarray(column, dtype=np.float64)
        elevation = np.asarray(elevation, dtype=np.float64)
        # Non-finite inputs read as sea level at the near edge.
        column = np.where(np.isfinite(column), column, 0.0)
        elevation = np.where(np.isfinite(elevation), elevation, 0.0)

        # Truncation toward zero selects the shift entry.
        idx = np.clip(np.trunc(column), 0, ns - 1).astype(np.intp)
        sea = column - elevation * shift[idx]
        sea = np.where(sea >= ns - 1, ns - 2, sea)
        sea = np.maximum(sea, 0.0)

        ix = sea.astype(np.intp)
        dx = sea - ix
        out = table[ix] + dx * (table[ix + 1] - table[ix])
        if out.ndim == 0:
            return float(out)
        return out
