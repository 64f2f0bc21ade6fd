# -*- coding: utf-8 -*-
"""
Polynomial Mapping - 2-D polynomials relating SAR and DEM pixel grids.

``fit_poly`` fits a forward pair of polynomials (SAR line/sample to DEM
line/sample) and the matching backward pair by least squares over a grid
of tie points, and reports how far the forward fit strays from the tie
points. Inputs are centred and scaled before fitting so that high orders
stay well conditioned on image-sized coordinates.

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
from dataclasses import dataclass
from typing import List, Tuple

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.constants import DEFAULT_POLY_ORDER
from terrcorr.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _exponents(order: int) -> List[Tuple[int, int]]:
    return [(i, t - i) for t in range(order + 1) for i in range(t, -1, -1)]


def num_terms(order: int) -> int:
    """Number of coefficients of a full 2-D polynomial of *order*."""
    return (order + 1) * (order + 2) // 2


class Poly2D:
    """Full 2-D polynomial ``f(x, y) = sum c_ij u^i v^j`` with ``i + j <= order``.

    ``u`` and ``v`` are *x* and *y* after centring on ``offset`` and
    dividing by ``scale``.

    Parameters
    ----------
    order : int
        Total polynomial degree.
    coefficients : np.ndarray
        One coefficient per term, ordered by total degree.
    offset : Tuple[float, float]
        ``(x0, y0)`` subtracted before evaluation.
    scale : Tuple[float, float]
        ``(sx, sy)`` dividing the centred inputs.
    """

    def __init__(
        self,
        order: int,
        coefficients: np.ndarray,
        offset: Tuple[float, float] = (0.0, 0.0),
        scale: Tuple[float, float] = (1.0, 1.0),
    ) -> None:
        coefficients = np.asarray(coefficients, dtype=np.float64)
        if coefficients.shape != (num_terms(order),):
            raise ValidationError(
                f"Order {order} needs {num_terms(order)} coefficients, "
                f"got {coefficients.shape}")
        self.order = order
        self.coefficients = coefficients
        self.offset = (float(offset[0]), float(offset[1]))
        self.scale = (float(scale[0]), float(scale[1]))

    def design_matrix(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Term values for every point, shape ``(N, num_terms)``."""
        u = (np.ravel(np.asarray(x, dtype=np.float64)) - self.offset[0]) / self.scale[0]
        v = (np.ravel(np.asarray(y, dtype=np.float64)) - self.offset[1]) / self.scale[1]
        return np.stack([u ** i * v ** j for i, j in _exponents(self.order)],
                        axis=-1)

    def __call__(self, x, y):
        x_arr = np.asarray(x, dtype=np.float64)
        values = self.design_matrix(x_arr, y) @ self.coefficients
        if x_arr.ndim == 0:
            return float(values[0])
        return values.reshape(np.broadcast(x_arr, np.asarray(y)).shape)

    @classmethod
    def fit(
        cls,
        x: np.ndarray,
        y: np.ndarray,
        values: np.ndarray,
        order: int = DEFAULT_POLY_ORDER,
    ) -> 'Poly2D':
        """Least-squares fit of *values* sampled at ``(x, y)``.

        Raises
        ------
        ValidationError
            If there are fewer points than coefficients.
        """
        x = np.ravel(np.asarray(x, dtype=np.float64))
        y = np.ravel(np.asarray(y, dtype=np.float64))
        values = np.ravel(np.asarray(values, dtype=np.float64))
        if order < 0:
            raise ValidationError(f"order must be non-negative, got {order}")
        if not (x.size == y.size == values.size):
            raise ValidationError("x, y and values must have the same size")
        if x.size < num_terms(order):
            raise ValidationError(
                f"Order {order} fit needs at least {num_terms(order)} points, "
                f"got {x.size}")

        offset = (float(x.mean()), float(y.mean()))
        scale = (float(np.ptp(x)) / 2.0 or 1.0, float(np.ptp(y)) / 2.0 or 1.0)
        proto = cls(order, np.zeros(num_terms(order)), offset, scale)
        a = proto.design_matrix(x, y)
        coeffs, _, rank, _ = np.linalg.lstsq(a, values, rcond=None)
        if rank < a.shape[1]:
            logger.warning("Order %d polynomial fit is rank deficient "
                           "(rank %d of %d)", order, rank, a.shape[1])
        proto.coefficients = coeffs
        return proto


@dataclass
class PolyFitResult:
    """Forward and backward SAR/DEM pixel mappings.

    Attributes
    ----------
    forward_x, forward_y : Poly2D
        SAR ``(sample, line)`` to DEM sample and DEM line.
    backward_x, backward_y : Poly2D
        DEM ``(sample, line)`` to SAR sample and SAR line.
    max_error : float
        Largest distance, in DEM pixels, between a tie point and its
        forward-mapped position.
    rms_error : float
        Root-mean-square of the same distances.
    """

    forward_x: Poly2D
    forward_y: Poly2D
    backward_x: Poly2D
    backward_y: Poly2D
    max_error: float
    rms_error: float

    def sar_to_dem(self, sample, line):
        """DEM ``(sample, line)`` for SAR ``(sample, line)``."""
        return self.forward_x(sample, line), self.forward_y(sample, line)

    def dem_to_sar(self, sample, line):
        """SAR ``(sample, line)`` for DEM ``(sample, line)``."""
        return self.backward_x(sample, line), self.backward_y(sample, line)


def fit_poly(grid, order: int = DEFAULT_POLY_ORDER) -> PolyFitResult:
    """Fit the SAR/DEM mapping polynomials to a tie-point grid.

    Parameters
    ----------
    grid : DemGrid
        Tie points from :func:`~terrcorr.dem.extract.create_dem_grid`.
    order : int
        Polynomial degree.

    Returns
    -------
    PolyFitResult
    """
    fx = Poly2D.fit(grid.sar_samples, grid.sar_lines, grid.dem_samples, order)
    fy = Poly2D.fit(grid.sar_samples, grid.sar_lines, grid.dem_lines, order)
    bx = Poly2D.fit(grid.dem_samples, grid.dem_lines, grid.sar_samples, order)
    by = Poly2D.fit(grid.dem_samples, grid.dem_lines, grid.sar_lines, order)

    err = np.hypot(fx(grid.sar_samples, grid.sar_lines) - grid.dem_samples,
                   fy(grid.sar_samples, grid.sar_lines) - grid.dem_lines)
    result = PolyFitResult(
        forward_x=fx, forward_y=fy, backward_x=bx, backward_y=by,
        max_error=float(err.max()),
        rms_error=float(np.sqrt(np.mean(err ** 2))),
    )
    logger.info("Order %d mapping fit over %d points: max error %.4f, "
                "rms %.4f DEM pixels", order, grid.size,
                result.max_error, result.rms_error)
    return result
