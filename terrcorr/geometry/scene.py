# -*- coding: utf-8 -*-
"""
Scene Geometry - Spherical-Earth range model for a SAR scene.

Tabulates, once per scene, how slant-range columns relate to ground-range
columns and how far each column moves per metre of terrain height. The
model treats the Earth as a sphere of radius ``R`` centred on the origin
and the satellite as a point at geocentric distance ``H``. Ground range is
sampled uniformly in Earth-central angle ``phi`` so that the ground raster
spans the same angular extent as the slant swath with the same number of
columns.

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
2026-03-02
"""

# Standard library
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.constants import PROBE_HEIGHT
from terrcorr.exceptions import GeometryError

if TYPE_CHECKING:
    from terrcorr.IO.models import SceneMetadata

logger = logging.getLogger(__name__)


def _central_angle(
    sat_height: float, radius: float, slant: np.ndarray
) -> np.ndarray:
    """Earth-central angle subtended by a point at *radius* and *slant* range."""
    cos_phi = (sat_height ** 2 + radius ** 2 - slant ** 2) / (
        2.0 * sat_height * radius)
    return np.arccos(cos_phi)


@dataclass(frozen=True, eq=False)
class SceneGeometry:
    """Immutable per-scene range geometry tables.

    All tables have one entry per column (``num_samples``). Build with
    :meth:`build` or :meth:`from_metadata`; the constructor does no
    validation.

    Attributes
    ----------
    earth_radius : float
        Local Earth radius ``R`` in metres.
    satellite_height : float
        Geocentric satellite distance ``H`` in metres.
    slant_first : float
        Slant range to the first column, metres.
    slant_spacing : float
        Slant-range spacing between columns, metres.
    num_samples : int
        Number of columns in both the slant and ground rasters.
    min_phi, max_phi : float
        Central angles of the first and last slant columns.
    phi_mul : float
        Ground columns per radian.
    slant_range, slant_range_sq : np.ndarray
        Slant range of each slant column and its square.
    incidence, sin_incidence, cos_incidence : np.ndarray
        Incidence angle of each slant column on a flat sphere.
    slant_of_ground : np.ndarray
        Fractional slant column imaged by each sea-level ground column.
    ground_of_slant : np.ndarray
        Fractional ground column imaged by each sea-level slant column.
    height_shift_ground : np.ndarray
        Ground-column shift per metre of height, indexed by ground column.
    height_shift_slant : np.ndarray
        Slant-column shift per metre of height, indexed by slant column.
    """

    earth_radius: float
    satellite_height: float
    slant_first: float
    slant_spacing: float
    num_samples: int
    min_phi: float
    max_phi: float
    phi_mul: float
    slant_range: np.ndarray
    slant_range_sq: np.ndarray
    incidence: np.ndarray
    sin_incidence: np.ndarray
    cos_incidence: np.ndarray
    slant_of_ground: np.ndarray
    ground_of_slant: np.ndarray
    height_shift_ground: np.ndarray
    height_shift_slant: np.ndarray

    @property
    def ground_pixel_size(self) -> float:
        """Ground-range column spacing in metres (``R / phi_mul``)."""
        return self.earth_radius / self.phi_mul

    def phi_to_ground(self, phi):
        """Convert central angle to fractional ground column."""
        return (phi - self.min_phi) * self.phi_mul

    def ground_to_phi(self, ground_x):
        """Convert fractional ground column to central angle."""
        return self.min_phi + ground_x / self.phi_mul

    @classmethod
    def build(
        cls,
        earth_radius: float,
        satellite_height: float,
        slant_first: float,
        slant_spacing: float,
        num_samples: int,
    ) -> 'SceneGeometry':
        """Tabulate the range geometry for a scene.

        Parameters
        ----------
        earth_radius : float
            Local Earth radius, metres.
        satellite_height : float
            Geocentric satellite distance, metres. Must exceed
            ``earth_radius``.
        slant_first : float
            Slant range to the first column, metres.
        slant_spacing : float
            Slant-range column spacing, metres. Must be positive.
        num_samples : int
            Number of columns, at least 2.

        Returns
        -------
        SceneGeometry

        Raises
        ------
        GeometryError
            If the inputs cannot describe a side-looking geometry.
        """
        R = float(earth_radius)
        H = float(satellite_height)
        s0 = float(slant_first)
        ds = float(slant_spacing)
        ns = int(num_samples)

        if ns < 2:
            raise GeometryError(
                f"Scene needs at least 2 samples, got {ns}")
        if not R > 0.0:
            raise GeometryError(f"Earth radius must be positive, got {R}")
        if not H > R:
            raise GeometryError(
                f"Satellite height {H} must exceed Earth radius {R}")
        if not ds > 0.0:
            raise GeometryError(
                f"Slant range spacing must be positive, got {ds}")

        x = np.arange(ns, dtype=np.float64)
        slant = s0 + x * ds
        slant_sq = slant * slant

        with np.errstate(invalid='ignore'):
            phi_slant = _central_angle(H, R, slant)
            incid = np.pi - np.arccos(
                (slant_sq + R * R - H * H) / (2.0 * R * slant))
        if not (np.all(np.isfinite(phi_slant)) and np.all(np.isfinite(incid))):
            raise GeometryError(
                f"Slant ranges {slant[0]:.1f}..{slant[-1]:.1f} m do not "
                f"intersect an Earth of radius {R:.1f} m seen from {H:.1f} m")

        min_phi = float(phi_slant[0])
        max_phi = float(phi_slant[-1])
        if not max_phi > min_phi:
            raise GeometryError(
                "Slant ranges must increase away from nadir")
        phi_mul = (ns - 1) / (max_phi - min_phi)

        # Ground columns at sea level, then their slant ranges.
        phi_ground = min_phi + x / phi_mul
        slant_ground = np.sqrt(H * H + R * R - 2.0 * H * R * np.cos(phi_ground))
        slant_of_ground = (slant_ground - s0) / ds

        Rp = R + PROBE_HEIGHT
        with np.errstate(invalid='ignore'):
            phi_raised = np.arccos(
                (H * H + Rp * Rp - slant_ground ** 2) / (2.0 * H * Rp))
        height_shift_ground = (
            (phi_raised - min_phi) * phi_mul - x) / PROBE_HEIGHT

        ground_of_slant = (phi_slant - min_phi) * phi_mul
        slant_raised = np.sqrt(
            H * H + Rp * Rp - 2.0 * H * Rp * np.cos(phi_slant))
        height_shift_slant = (
            (slant_raised - s0) / ds - x) / PROBE_HEIGHT

        if not np.all(np.isfinite(height_shift_ground)):
            raise GeometryError(
                "Height-shift table is undefined for this geometry")

        geometry = cls(
            earth_radius=R,
            satellite_height=H,
            slant_first=s0,
            slant_spacing=ds,
            num_samples=ns,
            min_phi=min_phi,
            max_phi=max_phi,
            phi_mul=phi_mul,
            slant_range=slant,
            slant_range_sq=slant_sq,
            incidence=incid,
            sin_incidence=np.sin(incid),
            cos_incidence=np.cos(incid),
            slant_of_ground=slant_of_ground,
            ground_of_slant=ground_of_slant,
            height_shift_ground=height_shift_ground,
            height_shift_slant=height_shift_slant,
        )
        logger.debug(
            "Scene geometry: %d samples, ground pixel %.3f m, "
            "incidence %.2f..%.2f deg",
            ns, geometry.ground_pixel_size,
            np.degrees(incid[0]), np.degrees(incid[-1]))
        return geometry

    @classmethod
    def from_metadata(cls, metadata: 'SceneMetadata') -> 'SceneGeometry':
        """Build the geometry of a slant-range scene from its metadata.

        The slant range of the first column accounts for the scene's
        ``start_sample`` offset, and the column spacing for its
        ``sample_increment``.
        """
        if metadata.earth_radius is None or metadata.satellite_height is None:
            raise GeometryError(
                "Metadata lacks earth_radius/satellite_height; "
                "cannot build a range model")
        slant_first, slant_spacing = metadata.slant_geometry()
        return cls.build(
            earth_radius=metadata.earth_radius,
            satellite_height=metadata.satellite_height,
            slant_first=slant_first,
            slant_spacing=slant_spacing,
            num_samples=metadata.sample_count,
        )
