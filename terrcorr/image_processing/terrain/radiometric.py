# -*- coding: utf-8 -*-
"""
Radiometric Compensation - Local-slope brightness correction.

Rescales ground-range amplitudes by the local terrain slope so that
foreslopes, which collect more backscatter, are not over-bright. Uses the
formula of Kellndorfer et al. (IEEE TGRS 1998): the amplitude is scaled by
``sin(theta_local) / sin(theta_ellipsoid)`` where ``theta_local`` is the
angle between the terrain normal and the incidence vector.

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
2026-02-21

Modified
--------
2026-03-02
"""

# Standard library
import logging
from typing import Annotated, Any, Optional

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.constants import BAD_DEM_HEIGHT, MIN_VALID_HEIGHT
from terrcorr.exceptions import ConfigurationError, ValidationError
from terrcorr.geometry.scene import SceneGeometry
from terrcorr.image_processing.base import ImageTransform
from terrcorr.image_processing.params import Desc
from terrcorr.image_processing.versioning import processor_version
from terrcorr.vocabulary import MaskValue, RadiometricFormula

logger = logging.getLogger(__name__)


def _bad_heights(heights: np.ndarray) -> np.ndarray:
    return ~(heights >= MIN_VALID_HEIGHT) | (heights == BAD_DEM_HEIGHT)


def check_formula(formula) -> RadiometricFormula:
    """Coerce *formula* to a supported ``RadiometricFormula``.

    Raises
    ------
    ConfigurationError
        If *formula* is unknown or one of the untested legacy formulas.
    """
    try:
        selected = RadiometricFormula(formula)
    except ValueError:
        raise ConfigurationError(
            f"Unknown radiometric correction formula: {formula!r}") from None
    if not selected.supported:
        raise ConfigurationError(
            f"Use of an untested radiometric terrain correction formula: "
            f"#{int(selected)} ({selected.name})")
    return selected


@processor_version('1.0.0')
class RadiometricCompensator(ImageTransform):
    """Scale a ground-range line by its local terrain slope.

    Parameters
    ----------
    geometry : SceneGeometry
        Scene range geometry (incidence angles, ground pixel size).
    formula : RadiometricFormula or int
        Correction formula. Only ``RadiometricFormula.KELLNDORFER`` is
        accepted.

    Raises
    ------
    ConfigurationError
        If a legacy formula is selected.
    """

    formula: Annotated[object, Desc('Radiometric correction formula')] = (
        RadiometricFormula.KELLNDORFER)

    def __init__(self, geometry: SceneGeometry, **kwargs: Any) -> None:
        self.geometry = geometry
        self._init_params(kwargs)
        self.formula = check_formula(self.formula)

    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """Return a radiometrically corrected copy of *source*.

        Parameters
        ----------
        source : np.ndarray
            Ground-range amplitude line, shape ``(num_samples,)``.
        ground_dem : np.ndarray
            Ground-range heights for this line.
        previous_ground_dem : np.ndarray
            Ground-range heights for the previous line.
        mask : np.ndarray, optional
            Ground-range mask line. USER_MASKED pixels are left alone.

        Returns
        -------
        np.ndarray
            Corrected line (float64). Column 0, pixels with a bad height
            at the column, its left neighbour or the previous line, and
            pixels facing away from the radar are unchanged.
        """
        out = np.array(source, dtype=np.float64)
        self.compensate(
            out,
            kwargs['ground_dem'],
            kwargs['previous_ground_dem'],
            kwargs.get('mask'),
        )
        return out

    def compensate(
        self,
        line: np.ndarray,
        ground_dem: np.ndarray,
        previous_ground_dem: np.ndarray,
        mask: Optional[np.ndarray] = None,
    ) -> int:
        """Correct *line* in place.

        Returns
        -------
        int
            Number of pixels rescaled.
        """
        ns = self.geometry.num_samples
        dem = np.asarray(ground_dem, dtype=np.float64)
        prev = np.asarray(previous_ground_dem, dtype=np.float64)
        for name, arr in (('line', line), ('ground_dem', dem),
                          ('previous_ground_dem', prev)):
            if np.shape(arr) != (ns,):
                raise ValidationError(
                    f"{name} has shape {np.shape(arr)}, expected ({ns},)")

        cur = dem[1:]
        left = dem[:-1]
        usable = ~(_bad_heights(cur) | _bad_heights(left)
                   | _bad_heights(prev[1:]))
        if mask is not None:
            usable &= np.asarray(mask)[1:] != int(MaskValue.USER_MASKED)

        # The along-track slope does not enter this formula.
        dx = (cur - left) / self.geometry.ground_pixel_size
        sin_inc = self.geometry.sin_incidence[1:]
        cos_inc = self.geometry.cos_incidence[1:]
        cos_ang = (dx * sin_inc + cos_inc) / np.sqrt(dx * dx + 1.0)
        usable &= cos_ang >= 0.0

        scale = np.sqrt(np.clip(1.0 - cos_ang * cos_ang, 0.0, None)) / sin_inc
        target = line[1:]
        target[usable] = target[usable] * scale[usable]
        return int(np.count_nonzero(usable))
