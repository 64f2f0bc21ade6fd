# -*- coding: utf-8 -*-
"""
Reskew - Ground-range DEM to slant-range DEM and simulated amplitude.

Projects a ground-range DEM into the radar's slant-range geometry and
renders a simulated amplitude image from it. Each ground pixel contributes
its local illumination (the cosine of its local incidence angle, floored
at zero) to the slant column that images it, so layover brightens and
slopes facing away from the radar darken. The simulated amplitude is
correlated against the real SAR image to register the DEM.

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
2026-02-26

Modified
--------
2026-10-17
"""

# Standard library
import logging
from typing import Any, Callable, Optional, Tuple

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.constants import BAD_DEM_HEIGHT, MIN_VALID_HEIGHT
from terrcorr.exceptions import ValidationError
from terrcorr.geometry.scene import SceneGeometry
from terrcorr.image_processing.base import ImageTransform
from terrcorr.image_processing.terrain.dem_resample import DEMResampler
from terrcorr.image_processing.versioning import processor_version

logger = logging.getLogger(__name__)


@processor_version('1.0.0')
class DEMReskewer(ImageTransform):
    """Render slant-range DEM and simulated amplitude lines.

    Parameters
    ----------
    geometry : SceneGeometry
        Range geometry of the (possibly padded) scene.
    """

    def __init__(self, geometry: SceneGeometry, **kwargs: Any) -> None:
        self.geometry = geometry
        self.resampler = DEMResampler(geometry, fill_holes=True)
        self._init_params(kwargs)

    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """Simulated amplitude of one ground-range DEM line."""
        return self.reskew_line(source)[1]

    def reskew_line(self, ground_dem: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Reskew one line.

        Parameters
        ----------
        ground_dem : np.ndarray
            Heights per ground column, shape ``(num_samples,)``.

        Returns
        -------
        slant_dem : np.ndarray
            Heights per slant column.
        amplitude : np.ndarray
            Simulated amplitude per slant column.
        """
        g = self.geometry
        ns = g.num_samples
        heights = np.asarray(ground_dem, dtype=np.float64)
        if heights.shape != (ns,):
            raise ValidationError(
                f"DEM line has shape {heights.shape}, expected ({ns},)")

        slant_dem = self.resampler.ground_to_slant(heights)

        valid = (heights >= MIN_VALID_HEIGHT) & (heights != BAD_DEM_HEIGHT)
        slant_x = self.resampler.mapper.ground_to_slant(
            np.arange(ns, dtype=np.float64), heights)
        cols = np.trunc(slant_x).astype(np.intp)

        usable = np.zeros(ns, dtype=bool)
        usable[1:] = valid[1:] & valid[:-1]
        usable &= (slant_x >= 0) & (cols < ns)

        dx = np.zeros(ns)
        dx[1:] = (heights[1:] - heights[:-1]) / g.ground_pixel_size
        idx = np.clip(cols, 0, ns - 1)
        cos_local = (dx * g.sin_incidence[idx] + g.cos_incidence[idx]) / np.sqrt(
            dx * dx + 1.0)
        brightness = np.clip(cos_local, 0.0, None)

        amplitude = np.zeros(ns, dtype=np.float64)
        np.add.at(amplitude, cols[usable], brightness[usable])
        return slant_dem, amplitude

    def reskew(
        self,
        ground_dem: np.ndarray,
        progress_callback: Optional[Callable[[float], None]] = None,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Reskew a whole ``(lines, samples)`` ground-range DEM.

        Returns
        -------
        slant_dem, amplitude : np.ndarray
            Both ``(lines, samples)`` float64.
        """
        ground_dem = np.asarray(ground_dem, dtype=np.float64)
        if ground_dem.ndim != 2:
            raise ValidationError(
                f"DEM must be 2-D, got shape {ground_dem.shape}")
        nl = ground_dem.shape[0]
        slant_dem = np.empty_like(ground_dem)
        amplitude = np.empty_like(ground_dem)
        for y in range(nl):
            slant_dem[y], amplitude[y] = self.reskew_line(ground_dem[y])
            if progress_callback is not None:
                progress_callback((y + 1) / nl)
        logger.debug("Reskewed %d DEM lines", nl)
        return slant_dem, amplitude
