# -*- coding: utf-8 -*-
"""
Offset Estimation - FFT cross-correlation of a SAR image and its simulation.

Finds the translation between a reference image (the SAR amplitude) and a
moving image (the amplitude simulated from the DEM) from the peak of their
circular cross-correlation, refined to sub-pixel precision with a
three-point parabola on each axis. ``shift_image`` applies a whole-pixel
offset by trimming, and ``OffsetEstimator.verify`` re-measures the offset
after alignment.

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
2026-02-27

Modified
--------
2026-03-02
"""

# Standard library
import logging
import math
from typing import Any, Dict, Optional, Tuple

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.constants import MAX_OFFSET_RESIDUAL
from terrcorr.exceptions import ProcessorError, ValidationError

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return int(math.floor(value + 0.5))


class OffsetResult:
    """Translation of a moving image relative to a reference image.

    The moving image shows reference pixel ``(y, x)`` at
    ``(y + dy, x + dx)``.

    Parameters
    ----------
    dx, dy : float
        Sample and line offsets in pixels.
    peak : float
        Normalized cross-correlation at the peak, in [-1, 1].
    metadata : Dict[str, Any], optional
        Estimator-specific details.
    """

    def __init__(
        self,
        dx: float,
        dy: float,
        peak: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.dx = float(dx)
        self.dy = float(dy)
        self.peak = float(peak)
        self.metadata = metadata or {}

    @property
    def magnitude(self) -> float:
        """Euclidean length of the offset in pixels."""
        return math.hypot(self.dx, self.dy)

    def rounded(self) -> Tuple[int, int]:
        """Whole-pixel ``(dx, dy)``."""
        return round_half_up(self.dx), round_half_up(self.dy)

    def __repr__(self) -> str:
        return (f"OffsetResult(dx={self.dx:.3f}, dy={self.dy:.3f}, "
                f"peak={self.peak:.3f})")


def shift_image(
    image: np.ndarray,
    dx: int,
    dy: int,
    shape: Optional[Tuple[int, int]] = None,
    fill: float = 0.0,
) -> np.ndarray:
    """Trim a window of *image* starting at ``(dy, dx)``.

    ``out[y, x] = image[y + dy, x + dx]``; positions outside *image* take
    *fill*.

    Parameters
    ----------
    image : np.ndarray
        2-D source.
    dx, dy : int
        Window origin in *image* (may be negative).
    shape : Tuple[int, int], optional
        Output ``(lines, samples)``; defaults to the shape of *image*.
    fill : float
        Value outside *image*.

    Returns
    -------
    np.ndarray
    """
    image = np.asarray(image)
    if image.ndim != 2:
        raise ValidationError(f"Image must be 2-D, got shape {image.shape}")
    nl, ns = shape if shape is not None else image.shape
    out = np.full((nl, ns), fill, dtype=np.result_type(image.dtype, np.float32))

    src_y0 = max(dy, 0)
    src_x0 = max(dx, 0)
    src_y1 = min(dy + nl, image.shape[0])
    src_x1 = min(dx + ns, image.shape[1])
    if src_y1 > src_y0 and src_x1 > src_x0:
        out[src_y0 - dy:src_y1 - dy, src_x0 - dx:src_x1 - dx] = (
            image[src_y0:src_y1, src_x0:src_x1])
    return out


def _parabolic_peak(minus: float, centre: float, plus: float) -> float:
    denom = minus - 2.0 * centre + plus
    if denom == 0.0:
        return 0.0
    return 0.5 * (minus - plus) / denom


class OffsetEstimator:
    """Estimate translation by normalized FFT cross-correlation.

    Parameters
    ----------
    tolerance : float
        Largest residual offset (pixels) accepted by :meth:`verify`.

    Examples
    --------
    >>> est = OffsetEstimator()
    >>> off = est.estimate(sar_amp, sim_amp)
    >>> dx, dy = off.rounded()
    >>> aligned = shift_image(sim_amp, dx, dy)
    >>> est.verify(sar_amp, aligned)
    """

    def __init__(self, tolerance: float = MAX_OFFSET_RESIDUAL) -> None:
        if tolerance <= 0:
            raise ValidationError(f"tolerance must be positive, got {tolerance}")
        self.tolerance = tolerance

    def estimate(self, reference: np.ndarray, moving: np.ndarray) -> OffsetResult:
        """Offset of *moving* relative to *reference*.

        Raises
        ------
        ValidationError
            If the images differ in shape or are not 2-D.
        ProcessorError
            If either image has no variation to correlate.
        """
        ref = np.asarray(reference, dtype=np.float64)
        mov = np.asarray(moving, dtype=np.float64)
        if ref.ndim != 2 or ref.shape != mov.shape:
            raise ValidationError(
                f"Images must be 2-D and equal in shape: "
                f"{ref.shape} vs {mov.shape}")
        ref = ref - ref.mean()
        mov = mov - mov.mean()
        norm = math.sqrt(float(np.sum(ref * ref)) * float(np.sum(mov * mov)))
        if norm == 0.0:
            raise ProcessorError("Cannot correlate an image with no variation")

        cc = np.real(np.fft.ifft2(np.conj(np.fft.fft2(ref)) * np.fft.fft2(mov)))
        cc /= norm
        nr, nc = cc.shape
        r, c = np.unravel_index(int(np.argmax(cc)), cc.shape)

        dr = _parabolic_peak(cc[(r - 1) % nr, c], cc[r, c], cc[(r + 1) % nr, c])
        dc = _parabolic_peak(cc[r, (c - 1) % nc], cc[r, c], cc[r, (c + 1) % nc])
        row = r - nr if r > nr // 2 else r
        col = c - nc if c > nc // 2 else c

        result = OffsetResult(
            dx=col + dc, dy=row + dr, peak=float(cc[r, c]),
            metadata={'integer_peak': (int(row), int(col))})
        logger.info("Correlation: dx=%g dy=%g", result.dx, result.dy)
        return result

    def verify(self, reference: np.ndarray, aligned: np.ndarray) -> OffsetResult:
        """Re-estimate after alignment and require a near-zero offset.

        Raises
        ------
        ProcessorError
            If the residual offset exceeds ``tolerance``.
        """
        residual = self.estimate(reference, aligned)
        logger.info("Correlation after shift: dx=%g dy=%g",
                    residual.dx, residual.dy)
        if residual.magnitude > self.tolerance:
            raise ProcessorError(
                f"Correlated images failed to match: residual offset "
                f"(dx, dy) = ({residual.dx:.3f}, {residual.dy:.3f}) exceeds "
                f"{self.tolerance} pixel(s)")
        return residual
