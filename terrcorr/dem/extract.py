# -*- coding: utf-8 -*-
"""
DEM Extraction - Clip a DEM into a SAR scene's pixel footprint.

``create_dem_grid`` samples a regular grid of SAR pixel positions
(extended past far range so that the clipped DEM covers terrain imaged by
the last samples) and maps each into DEM pixel coordinates through a
caller-supplied geolocation function. ``remap_poly`` then resamples the
DEM onto the SAR line/sample grid through a fitted polynomial mapping.

Dependencies
------------
scipy

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

# Standard library
import logging
from dataclasses import dataclass
from typing import Callable, Tuple

# Third-party
import numpy as np
from scipy.ndimage import map_coordinates

# terrcorr internal
from terrcorr.constants import (
    DEFAULT_DEM_GRID_SIZE,
    DEM_GRID_RHS_PADDING,
    NO_DEM_DATA,
    NO_DEM_DATA_TOLERANCE,
)
from terrcorr.dem.polyfit import PolyFitResult
from terrcorr.exceptions import ValidationError

logger = logging.getLogger(__name__)

#: ``to_dem(sar_lines, sar_samples) -> (dem_lines, dem_samples)``
PixelMapper = Callable[[np.ndarray, np.ndarray], Tuple[np.ndarray, np.ndarray]]


@dataclass
class DemGrid:
    """Tie points between SAR and DEM pixel coordinates (flat arrays)."""

    sar_lines: np.ndarray
    sar_samples: np.ndarray
    dem_lines: np.ndarray
    dem_samples: np.ndarray

    @property
    def size(self) -> int:
        return int(self.sar_lines.size)


def create_dem_grid(
    shape: Tuple[int, int],
    to_dem: PixelMapper,
    grid_size: int = DEFAULT_DEM_GRID_SIZE,
    padding: int = DEM_GRID_RHS_PADDING,
) -> DemGrid:
    """Build a ``grid_size x grid_size`` tie-point grid over a SAR scene.

    Parameters
    ----------
    shape : Tuple[int, int]
        SAR ``(lines, samples)``.
    to_dem : callable
        Vectorized ``(sar_lines, sar_samples) -> (dem_lines, dem_samples)``.
    grid_size : int
        Points per axis.
    padding : int
        Extra samples beyond far range covered by the grid.

    Returns
    -------
    DemGrid
        Points whose DEM coordinates are finite.

    Raises
    ------
    ValidationError
        If the grid is smaller than 2x2 or *shape* is empty.
    """
    nl, ns = shape
    if grid_size < 2:
        raise ValidationError(f"grid_size must be at least 2, got {grid_size}")
    if nl < 1 or ns < 1:
        raise ValidationError(f"Empty SAR shape {shape}")

    lines = np.linspace(0.0, nl - 1, grid_size)
    samples = np.linspace(0.0, ns - 1 + padding, grid_size)
    ll, ss = np.meshgrid(lines, samples, indexing='ij')
    ll = ll.ravel()
    ss = ss.ravel()
    dem_l, dem_s = to_dem(ll, ss)
    dem_l = np.asarray(dem_l, dtype=np.float64).ravel()
    dem_s = np.asarray(dem_s, dtype=np.float64).ravel()

    keep = np.isfinite(dem_l) & np.isfinite(dem_s)
    if not keep.all():
        logger.warning("Dropped %d of %d grid points with no DEM position",
                       int((~keep).sum()), keep.size)
    logger.debug("Created %dx%d DEM grid over %dx%d SAR pixels (+%d padding)",
                 grid_size, grid_size, nl, ns, padding)
    return DemGrid(sar_lines=ll[keep], sar_samples=ss[keep],
                   dem_lines=dem_l[keep], dem_samples=dem_s[keep])


def remap_poly(
    dem: np.ndarray,
    fit: PolyFitResult,
    width: int,
    height: int,
) -> np.ndarray:
    """Resample *dem* onto a ``height x width`` SAR pixel grid.

    Each output pixel takes the DEM bilinearly interpolated at the
    forward-mapped position. Pixels outside the DEM, or touching a
    ``NO_DEM_DATA`` DEM sample, are ``NO_DEM_DATA``.

    Parameters
    ----------
    dem : np.ndarray
        2-D DEM heights.
    fit : PolyFitResult
        Mapping from :func:`~terrcorr.dem.polyfit.fit_poly`.
    width, height : int
        Output samples and lines.

    Returns
    -------
    np.ndarray
        float32 heights, shape ``(height, width)``.
    """
    dem = np.asarray(dem, dtype=np.float64)
    if dem.ndim != 2:
        raise ValidationError(f"DEM must be 2-D, got shape {dem.shape}")
    yy, xx = np.mgrid[0:height, 0:width].astype(np.float64)
    cols, rows = fit.sar_to_dem(xx, yy)
    coords = np.array([rows, cols])

    out = map_coordinates(dem, coords, order=1, mode='constant',
                          cval=NO_DEM_DATA)
    holes = (np.abs(dem - NO_DEM_DATA) < NO_DEM_DATA_TOLERANCE).astype(np.float64)
    touched = map_coordinates(holes, coords, order=1, mode='constant', cval=1.0)
    out[touched > 0.0] = NO_DEM_DATA
    logger.debug("Remapped %dx%d DEM to %dx%d", dem.shape[0], dem.shape[1],
                 height, width)
    return out.astype(np.float32)
