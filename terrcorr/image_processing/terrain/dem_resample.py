# -*- coding: utf-8 -*-
"""
DEM Resampler - Move DEM lines between slant and ground range.

``slant_to_ground`` forward-maps every slant-range DEM sample to the ground
column it images (taking its own height into account) and fills the
ground columns between consecutive placed samples by linear interpolation.
Foreshortened terrain leaves gaps; layover makes placements step
backwards. ``shift_ground`` re-indexes a DEM that is already in ground
range by pure position lookup.

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
2026-02-19

Modified
--------
2026-10-17
"""

# Standard library
import logging
from typing import Annotated, Any, Optional

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.constants import BAD_DEM_HEIGHT, MAX_BREAK_LENGTH, NO_DEM_DATA, is_no_dem_data
from terrcorr.exceptions import ValidationError
from terrcorr.geometry.mapper import CoordinateMapper
from terrcorr.geometry.scene import SceneGeometry
from terrcorr.image_processing.base import ImageTransform
from terrcorr.image_processing.params import Desc
from terrcorr.image_processing.versioning import processor_version

logger = logging.getLogger(__name__)


def _place_and_fill(
    heights: np.ndarray,
    targets: np.ndarray,
    ns: int,
    fill_holes: bool,
) -> np.ndarray:
    """Place each height at its truncated target column and bridge the gaps."""
    out = np.full(ns, BAD_DEM_HEIGHT, dtype=np.float64)
    out_cols = np.trunc(targets).astype(np.intp)

    last_x = -1
    last_value = BAD_DEM_HEIGHT
    for height, out_x in zip(heights.tolist(), out_cols.tolist()):
        if not (height > BAD_DEM_HEIGHT and 0 <= out_x < ns):
            continue
        if is_no_dem_data(last_value) or is_no_dem_data(height):
            out[last_x + 1:out_x + 1] = NO_DEM_DATA
        elif last_value != BAD_DEM_HEIGHT and (
                fill_holes or out_x - last_x < MAX_BREAK_LENGTH):
            span = out_x - last_x
            if span > 0:
                step = (height - last_value) / span
                out[last_x + 1:out_x + 1] = (
                    last_value + step * np.arange(1, span + 1))
        last_value = height
        last_x = out_x
    return out


@processor_version('1.0.0')
class DEMResampler(ImageTransform):
    """Resample DEM lines from slant range into ground range.

    Parameters
    ----------
    geometry : SceneGeometry
        Scene range geometry.
    fill_holes : bool
        Bridge every gap between placed samples. When ``False`` only gaps
        shorter than ``MAX_BREAK_LENGTH`` columns are bridged and longer
        ones stay ``BAD_DEM_HEIGHT``.

    Notes
    -----
    A gap touching a ``NO_DEM_DATA`` sample on either side is filled with
    ``NO_DEM_DATA``. Samples at exactly ``BAD_DEM_HEIGHT`` and NaN
    samples are never placed. The first placed sample only anchors interpolation, so its
    own column is written by the next placement.
    """

    fill_holes: Annotated[bool, Desc('Bridge all gaps between placed samples')] = True

    def __init__(self, geometry: SceneGeometry, **kwargs: Any) -> None:
        self.geometry = geometry
        self.mapper = CoordinateMapper(geometry)
        self._init_params(kwargs)

    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """Resample a slant-range DEM line to ground range.

        Accepts a ``fill_holes`` override in *kwargs*.
        """
        params = self._resolve_params(kwargs)
        return self.slant_to_ground(source, fill_holes=params['fill_holes'])

    def _check_line(self, line: np.ndarray) -> np.ndarray:
        line = np.asarray(line, dtype=np.float64)
        if line.shape != (self.geometry.num_samples,):
            raise ValidationError(
                f"DEM line has shape {line.shape}, expected "
                f"({self.geometry.num_samples},)")
        return line

    def slant_to_ground(
        self,
        slant_dem: np.ndarray,
        fill_holes: Optional[bool] = None,
    ) -> np.ndarray:
        """Convert one slant-range DEM line to ground range.

        Parameters
        ----------
        slant_dem : np.ndarray
            Heights per slant column, shape ``(num_samples,)``.
        fill_holes : bool, optional
            Overrides the instance setting.

        Returns
        -------
        np.ndarray
            Heights per ground column (float64). Unfilled columns hold
            ``BAD_DEM_HEIGHT``.
        """
        if fill_holes is None:
            fill_holes = self.fill_holes
        heights = self._check_line(slant_dem)
        ns = self.geometry.num_samples

        targets = self.mapper.slant_to_ground(
            np.arange(ns, dtype=np.float64), heights)
        return _place_and_fill(heights, targets, ns, fill_holes)

    def ground_to_slant(
        self,
        ground_dem: np.ndarray,
        fill_holes: Optional[bool] = None,
    ) -> np.ndarray:
        """Convert one ground-range DEM line to slant range.

        The mirror of :meth:`slant_to_ground`: every ground sample is
        placed at the slant column that images it and the gaps are filled
        by the same rules.
        """
        if fill_holes is None:
            fill_holes = self.fill_holes
        heights = self._check_line(ground_dem)
        ns = self.geometry.num_samples
        targets = self.mapper.ground_to_slant(
            np.arange(ns, dtype=np.float64), heights)
        return _place_and_fill(heights, targets, ns, fill_holes)

    def shift_ground(self, ground_dem: np.ndarray) -> np.ndarray:
        """Re-index a ground-range DEM line onto the scene's ground columns.

        Each output column ``x`` takes the input sampled at fractional
        position ``slant_of_ground[x]`` with linear interpolation. Positions
        before the first or after the last input sample take that end
        sample.

        Parameters
        ----------
        ground_dem : np.ndarray
            Heights per input ground column, shape ``(num_samples,)``.

        Returns
        -------
        np.ndarray
            Shifted heights (float64).
        """
        heights = self._check_line(ground_dem)
        ns = self.geometry.num_samples
        pos = self.geometry.slant_of_ground
        base = np.floor(pos).astype(np.intp)

        inner = np.clip(base, 0, ns - 2)
        frac = pos - inner
        out = heights[inner] + frac * (heights[inner + 1] - heights[inner])
        out = np.where(base < 0, heights[0], out)
        out = np.where(base > ns - 2, heights[ns - 1], out)
        return out
