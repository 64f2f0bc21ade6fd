# -*- coding: utf-8 -*-
"""
Geometric Compensation - Resample slant-range lines into ground range.

For each ground-range column the slant-range source position is found
from the ground-range DEM height, and the SAR line is sampled there. When
a mask line is supplied the same pass classifies terrain-induced
distortion: LAYOVER when a slant column is reached from too many ground
columns, SHADOW when the look angle to the terrain fails to increase
across the line, and INVALID_DATA beyond the outermost columns that
received real samples.

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
2026-02-20

Modified
--------
2026-10-17
"""

# Standard library
import logging
import math
from dataclasses import dataclass
from typing import Annotated, Any, Dict, Optional

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.constants import BAD_DEM_HEIGHT, LAYOVER_HIT_SLOTS, MIN_VALID_HEIGHT
from terrcorr.exceptions import ValidationError
from terrcorr.geometry.mapper import CoordinateMapper
from terrcorr.geometry.scene import SceneGeometry
from terrcorr.image_processing.base import ImageTransform
from terrcorr.image_processing.params import Desc, Options
from terrcorr.image_processing.versioning import processor_version
from terrcorr.vocabulary import InterpolationMethod, MaskValue

logger = logging.getLogger(__name__)

_NORMAL = int(MaskValue.NORMAL)
_LAYOVER = int(MaskValue.LAYOVER)
_SHADOW = int(MaskValue.SHADOW)
_PRESERVED = (int(MaskValue.USER_MASKED), int(MaskValue.INVALID_DATA))

#: Slack, in ground columns, when flooring the far-range edge.
EDGE_TOLERANCE = 1e-6


@dataclass
class CorrectionCounts:
    """Running totals of classified pixels over a run.

    Attributes
    ----------
    layover : int
        Pixels marked LAYOVER.
    shadow : int
        Pixels marked SHADOW.
    user_masked : int
        Pixels excluded by the user mask.
    """

    layover: int = 0
    shadow: int = 0
    user_masked: int = 0

    def __add__(self, other: 'CorrectionCounts') -> 'CorrectionCounts':
        return CorrectionCounts(
            layover=self.layover + other.layover,
            shadow=self.shadow + other.shadow,
            user_masked=self.user_masked + other.user_masked,
        )

    def percentages(self, total: int) -> Dict[str, float]:
        """Each count as a percentage of *total* pixels."""
        if total <= 0:
            return {'layover': 0.0, 'shadow': 0.0, 'user_masked': 0.0}
        return {
            'layover': 100.0 * self.layover / total,
            'shadow': 100.0 * self.shadow / total,
            'user_masked': 100.0 * self.user_masked / total,
        }


def _fill_forward(values: np.ndarray, valid: np.ndarray, initial: float) -> np.ndarray:
    """Last valid value at or before each index, *initial* before the first."""
    idx = np.where(valid, np.arange(valid.size), -1)
    np.maximum.accumulate(idx, out=idx)
    return np.where(idx >= 0, values[np.maximum(idx, 0)], initial)


def _fill_backward(values: np.ndarray, valid: np.ndarray, initial: float) -> np.ndarray:
    """Next valid value at or after each index, *initial* after the last."""
    return _fill_forward(values[::-1], valid[::-1], initial)[::-1]


def _sample(src: np.ndarray, base: np.ndarray, frac: np.ndarray,
            method: str) -> np.ndarray:
    """Read *src* between ``base`` and ``base + 1`` at fraction *frac*.

    Nearest neighbour rounds an exact half up to ``base + 1``.
    """
    if method == InterpolationMethod.BILINEAR.value:
        return (1.0 - frac) * src[base] + frac * src[base + 1]
    return np.where(frac < 0.5, src[base], src[base + 1])


@processor_version('1.0.0')
class GeometricCompensator(ImageTransform):
    """Resample one SAR line from slant range into ground range.

    Parameters
    ----------
    geometry : SceneGeometry
        Scene range geometry.
    interpolation : str
        ``'bilinear'`` blends the two bracketing slant samples;
        ``'nearest'`` takes the closer one (ties go to the higher column).

    Examples
    --------
    >>> comp = GeometricCompensator(geometry)
    >>> mask = np.ones(geometry.num_samples, dtype=np.float32)
    >>> counts = CorrectionCounts()
    >>> ground = comp.apply(slant_line, ground_dem=dem_line,
    ...                     mask=mask, counts=counts)
    """

    interpolation: Annotated[
        str,
        Options(*(m.value for m in InterpolationMethod)),
        Desc('Slant-range sampling'),
    ] = InterpolationMethod.BILINEAR.value

    def __init__(self, geometry: SceneGeometry, **kwargs: Any) -> None:
        self.geometry = geometry
        self.mapper = CoordinateMapper(geometry)
        self._init_params(kwargs)
        self._cur_look_base = self._look_angle_terms()

    def _look_angle_terms(self) -> np.ndarray:
        """Per-column ``(H^2 + R^2 - sr^2) / (H R)`` at zero height."""
        g = self.geometry
        h = g.satellite_height
        er = g.earth_radius
        return (h * h + er * er - g.slant_range_sq) / (h * er)

    def _look_cosines(self, heights: np.ndarray) -> np.ndarray:
        """Negative cosine of the look angle to each column's terrain."""
        h = self.geometry.satellite_height
        er = self.geometry.earth_radius + heights
        sr = np.sqrt(h * h + er * er - h * er * self._cur_look_base)
        return -(sr * sr + h * h - er * er) / (2.0 * sr * h)

    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """Geometrically compensate one line.

        Parameters
        ----------
        source : np.ndarray
            Slant-range line, shape ``(num_samples,)``.
        ground_dem : np.ndarray
            Ground-range heights for the line, shape ``(num_samples,)``.
            Heights below ``MIN_VALID_HEIGHT`` are unusable.
        mask : np.ndarray, optional
            Ground-range mask line, updated in place. Entries other than
            USER_MASKED and INVALID_DATA are reset to NORMAL first.
        counts : CorrectionCounts, optional
            Incremented by the LAYOVER and SHADOW pixels this call marks.
        interpolation : str, optional
            Overrides the instance setting.

        Returns
        -------
        np.ndarray
            Ground-range line (float64). Columns with no slant-range source
            are 0.
        """
        params = self._resolve_params(kwargs)
        if 'ground_dem' not in kwargs:
            raise ValidationError("GeometricCompensator.apply requires ground_dem")
        mask: Optional[np.ndarray] = kwargs.get('mask')
        counts: Optional[CorrectionCounts] = kwargs.get('counts')

        ns = self.geometry.num_samples
        src = np.asarray(source, dtype=np.float64)
        heights = np.asarray(kwargs['ground_dem'], dtype=np.float64)
        for name, arr in (('source', src), ('ground_dem', heights)):
            if arr.shape != (ns,):
                raise ValidationError(
                    f"{name} has shape {arr.shape}, expected ({ns},)")
        if mask is not None and mask.shape != (ns,):
            raise ValidationError(
                f"mask has shape {mask.shape}, expected ({ns},)")

        cols = np.arange(ns, dtype=np.float64)
        valid = (heights >= MIN_VALID_HEIGHT) & (heights != BAD_DEM_HEIGHT)

        # Unusable heights borrow the last usable height to their left.
        left_heights = _fill_forward(heights, valid, 0.0)
        slant_x = self.mapper.ground_to_slant(cols, left_heights)

        out = np.zeros(ns, dtype=np.float64)
        in_range = valid & (slant_x >= 1) & (slant_x < ns - 1)
        base = np.clip(np.floor(slant_x), 0, ns - 2).astype(np.intp)
        frac = slant_x - base
        sampled = _sample(src, base, frac, params['interpolation'])
        out[in_range] = sampled[in_range]

        seen_valid = np.logical_or.accumulate(in_range)
        copied = ~valid & seen_valid & (slant_x >= 0) & (slant_x < ns - 1)
        nearest = np.clip(np.trunc(slant_x + 0.5), 0, ns - 1).astype(np.intp)
        out[copied] = src[nearest[copied]]

        contributing = in_range | (copied & (out != 0.0))
        if np.any(contributing):
            first = int(np.argmax(np.where(contributing, slant_x, -np.inf)))
            max_valid = (float(slant_x[first]), float(left_heights[first]))
        else:
            max_valid = (-1.0, 0.0)

        if mask is not None:
            self._classify(mask, heights, in_range, base, counts)

        min_valid = self._scan_near_edge(src, out, heights, valid, cols)

        if mask is not None:
            self._invalidate_edges(mask, out, in_range, max_valid, min_valid)
        return out

    def _classify(
        self,
        mask: np.ndarray,
        heights: np.ndarray,
        in_range: np.ndarray,
        base: np.ndarray,
        counts: Optional[CorrectionCounts],
    ) -> None:
        """Mark LAYOVER and SHADOW pixels, then close 1-pixel gaps."""
        ns = self.geometry.num_samples
        m = [v if v in _PRESERVED else _NORMAL for v in mask.tolist()]
        hits = [[-1] * ns for _ in range(LAYOVER_HIT_SLOTS)]
        cur_look = self._look_cosines(
            np.where(in_range, heights, 0.0)).tolist()
        n_layover = 0
        n_shadow = 0
        biggest_look = -2.0

        for gx in np.flatnonzero(in_range).tolist():
            sx = int(base[gx])
            for slot in hits:
                if slot[sx] == -1:
                    slot[sx] = gx
                    break
            else:
                for slot in hits:
                    if m[slot[sx]] == _NORMAL:
                        m[slot[sx]] = _LAYOVER
                        n_layover += 1
                if m[gx] == _NORMAL:
                    m[gx] = _LAYOVER
                    n_layover += 1

            look = cur_look[gx]
            if look >= biggest_look:
                biggest_look = look
            elif m[gx] == _NORMAL:
                m[gx] = _SHADOW
                n_shadow += 1

        for gx in range(2, ns - 2):
            if m[gx] != _NORMAL:
                continue
            if m[gx - 1] == _LAYOVER and m[gx + 1] == _LAYOVER:
                m[gx] = _LAYOVER
                n_layover += 1
            elif m[gx - 1] == _SHADOW and m[gx + 1] == _SHADOW:
                m[gx] = _SHADOW
                n_shadow += 1

        mask[:] = m
        if counts is not None:
            counts.layover += n_layover
            counts.shadow += n_shadow

    def _scan_near_edge(
        self,
        src: np.ndarray,
        out: np.ndarray,
        heights: np.ndarray,
        valid: np.ndarray,
        cols: np.ndarray,
    ):
        """Find the nearest-range slant column reached, scanning right to left.

        Unusable heights borrow the next usable height to their right, and
        a still-empty output column picks up the nearest slant sample.
        """
        ns = self.geometry.num_samples
        right_heights = _fill_backward(heights, valid, 0.0)
        slant_x = self.mapper.ground_to_slant(cols, right_heights).tolist()
        right_list = right_heights.tolist()
        valid_list = valid.tolist()

        min_srx = float(ns - 1)
        min_height = 0.0
        for gx in range(ns - 1, -1, -1):
            sx = slant_x[gx]
            if sx >= 0 and sx < min_srx:
                min_srx = sx
                min_height = right_list[gx]
                if not valid_list[gx] and out[gx] == 0.0:
                    out[gx] = src[min(int(sx + 0.5), ns - 1)]
        return min_srx, min_height

    def _invalidate_edges(self, mask, out, in_range, max_valid,
                          min_valid) -> None:
        ns = self.geometry.num_samples
        # The ground-slant-ground round trip lands just short of whole columns.
        max_gx = math.floor(
            self.mapper.slant_to_ground(*max_valid) + EDGE_TOLERANCE)
        min_gx = math.ceil(self.mapper.slant_to_ground(*min_valid))
        invalid = int(MaskValue.INVALID_DATA)
        if 0 <= max_gx < ns - 1:
            mask[max_gx:] = invalid
        if 0 <= min_gx < ns - 1:
            near = np.arange(ns) <= min_gx
            mask[near & (out == 0.0)] = invalid
        if np.any(in_range):
            # Empty columns before the first sampled one see no data.
            first = int(np.argmax(in_range))
            mask[:first][out[:first] == 0.0] = invalid
