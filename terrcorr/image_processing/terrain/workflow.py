# -*- coding: utf-8 -*-
"""
Terrain Correction Workflow - From a SAR scene and a DEM to a deskewed image.

Chains the steps that turn an arbitrary DEM into a slant-range DEM
registered to a SAR scene, then terrain corrects the scene:

1. Tie the SAR footprint (plus a far-range buffer) to DEM pixels and fit
   mapping polynomials.
2. Clip the DEM into the scene's ground-range grid.
3. Reskew the clipped DEM to slant range and simulate its amplitude.
4. Correlate the simulated amplitude with the SAR image, shift the slant
   DEM by the measured offset and, unless disabled, verify the alignment.
5. Run :class:`TerrainCorrectionPipeline` with the aligned slant DEM.

Everything between the inputs and the pipeline stays in memory.

Dependencies
------------
numpy
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
2026-02-28

Modified
--------
2026-10-17
"""

# Standard library
import logging
from pathlib import Path
from typing import Callable, Optional, Union

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.constants import (
    DEFAULT_DEM_GRID_SIZE,
    DEFAULT_POLY_ORDER,
    DEM_GRID_RHS_PADDING,
    MAX_OFFSET_RESIDUAL,
    NO_DEM_DATA,
)
from terrcorr.coregistration.offset import (
    OffsetEstimator,
    OffsetResult,
    shift_image,
)
from terrcorr.dem.extract import PixelMapper, create_dem_grid, remap_poly
from terrcorr.dem.polyfit import PolyFitResult, fit_poly
from terrcorr.exceptions import PreconditionError, ValidationError
from terrcorr.geometry.scene import SceneGeometry
from terrcorr.image_processing.terrain.pipeline import (
    RasterSource,
    TerrainCorrectionPipeline,
    TerrainCorrectionResult,
)
from terrcorr.image_processing.terrain.reskew import DEMReskewer
from terrcorr.IO import open_raster
from terrcorr.IO.base import RasterReader
from terrcorr.IO.numpy_io import ArrayRasterReader
from terrcorr.vocabulary import ImageType

logger = logging.getLogger(__name__)


class WorkflowResult:
    """Products of a :class:`TerrainCorrectionWorkflow` run.

    Attributes
    ----------
    correction : TerrainCorrectionResult
        Result of the final terrain-correction pass.
    offset : OffsetResult
        Offset of the simulated amplitude relative to the SAR image.
    residual : OffsetResult or None
        Offset remaining after alignment; ``None`` when verification is
        skipped.
    fit : PolyFitResult
        SAR/DEM mapping polynomials.
    slant_dem : np.ndarray
        Aligned slant-range DEM, ``(lines, samples)``.
    simulated : np.ndarray
        Aligned simulated amplitude, ``(lines, samples)``.
    """

    def __init__(
        self,
        correction: TerrainCorrectionResult,
        offset: OffsetResult,
        residual: Optional[OffsetResult],
        fit: PolyFitResult,
        slant_dem: np.ndarray,
        simulated: np.ndarray,
    ) -> None:
        self.correction = correction
        self.offset = offset
        self.residual = residual
        self.fit = fit
        self.slant_dem = slant_dem
        self.simulated = simulated


class TerrainCorrectionWorkflow:
    """Register a DEM to a SAR scene and terrain correct the scene.

    Parameters
    ----------
    sar : str, Path or RasterReader
        Slant-range SAR image with range metadata.
    dem : np.ndarray
        2-D DEM heights in metres.
    to_dem : callable
        Vectorized ``(sar_lines, ground_columns) -> (dem_lines,
        dem_samples)``. Ground columns are the scene's sea-level ground
        range columns, extended ``padding`` columns past far range.
    grid_size : int
        Tie points per axis.
    poly_order : int
        Degree of the mapping polynomials.
    padding : int
        Far-range columns added to the clipped DEM.
    radiometric : bool
        Apply radiometric compensation in the final pass.
    fill_holes : bool
        Keep resampled data in layover and shadow.
    fill_value : float, optional
        Value for user-masked pixels; ``None`` leaves them.
    tolerance : float
        Largest residual offset accepted after alignment, pixels.
    verify : bool
        Re-estimate the offset after alignment and reject a residual
        beyond *tolerance*.

    Examples
    --------
    >>> wf = TerrainCorrectionWorkflow('scene.npy', dem, to_dem)
    >>> result = wf.run(output='scene_gr.npy', mask_output='mask.npy')
    >>> result.offset.rounded()
    (2, -1)
    """

    def __init__(
        self,
        sar: RasterSource,
        dem: np.ndarray,
        to_dem: PixelMapper,
        grid_size: int = DEFAULT_DEM_GRID_SIZE,
        poly_order: int = DEFAULT_POLY_ORDER,
        padding: int = DEM_GRID_RHS_PADDING,
        radiometric: bool = False,
        fill_holes: bool = True,
        fill_value: Optional[float] = None,
        tolerance: float = MAX_OFFSET_RESIDUAL,
        verify: bool = True,
    ) -> None:
        dem = np.asarray(dem, dtype=np.float64)
        if dem.ndim != 2:
            raise ValidationError(f"DEM must be 2-D, got shape {dem.shape}")
        if padding < 0:
            raise ValidationError(f"padding must be non-negative, got {padding}")
        self.sar = sar
        self.dem = dem
        self.to_dem = to_dem
        self.grid_size = grid_size
        self.poly_order = poly_order
        self.padding = padding
        self.radiometric = radiometric
        self.fill_holes = fill_holes
        self.fill_value = fill_value
        self.verify = verify
        self.estimator = OffsetEstimator(tolerance=tolerance)

    def run(
        self,
        output: Optional[Union[str, Path]] = None,
        mask_output: Optional[Union[str, Path]] = None,
        want_mask: bool = True,
        progress_callback: Optional[Callable[[float], None]] = None,
    ) -> WorkflowResult:
        """Execute the workflow.

        Parameters
        ----------
        output : str or Path, optional
            Corrected image path; in memory when omitted.
        mask_output : str or Path, optional
            Mask path; in memory when omitted and *want_mask* is set.
        want_mask : bool
            Produce the layover/shadow mask.
        progress_callback : callable, optional
            Progress of the final correction pass.

        Raises
        ------
        PreconditionError
            If the SAR image is not in slant range.
        ProcessorError
            If the simulated amplitude cannot be aligned with the SAR image.
            With *verify* set, also if the aligned residual exceeds the
            tolerance.
        """
        if isinstance(self.sar, RasterReader):
            sar, owned = self.sar, False
        else:
            sar, owned = open_raster(self.sar), True
        try:
            return self._run(sar, output, mask_output, want_mask,
                             progress_callback)
        finally:
            if owned:
                sar.close()

    def _run(self, sar, output, mask_output, want_mask, progress_callback):
        meta = sar.metadata
        if meta.image_type is not ImageType.SLANT_RANGE:
            raise PreconditionError(
                f"SAR image must be in slant range, got "
                f"{meta.image_type.name.lower()}")
        nl, ns = meta.line_count, meta.sample_count
        width = ns + self.padding

        padded = SceneGeometry.from_metadata(meta.copy(sample_count=width))
        logger.info("Fitting SAR to DEM mapping (%dx%d grid, order %d)",
                    self.grid_size, self.grid_size, self.poly_order)
        grid = create_dem_grid((nl, ns), self.to_dem,
                               grid_size=self.grid_size, padding=self.padding)
        fit = fit_poly(grid, order=self.poly_order)

        clipped = remap_poly(self.dem, fit, width=width, height=nl)
        logger.info("Reskewing %dx%d clipped DEM", nl, width)
        slant_dem, simulated = DEMReskewer(padded).reskew(clipped)

        reference = np.asarray(sar.read_full(), dtype=np.float64)
        offset = self.estimator.estimate(reference, simulated[:, :ns])
        dx, dy = offset.rounded()
        aligned_sim = shift_image(simulated, dx, dy, shape=(nl, ns))
        if self.verify:
            residual = self.estimator.verify(reference, aligned_sim)
        else:
            logger.info("Skipping offset verification")
            residual = None

        aligned_dem = shift_image(slant_dem, dx, dy, shape=(nl, ns),
                                  fill=NO_DEM_DATA)
        dem_meta = meta.copy(band_count=1, data_type='float32',
                             radiometry='HEIGHT')
        logger.info("Slant DEM aligned with offset (dx, dy) = (%d, %d)", dx, dy)

        pipeline = (TerrainCorrectionPipeline()
                    .with_slant_dem(ArrayRasterReader(aligned_dem, dem_meta))
                    .with_sar(sar)
                    .with_output(output)
                    .with_radiometric(self.radiometric)
                    .with_fill_holes(self.fill_holes)
                    .with_fill_value(self.fill_value))
        if want_mask:
            pipeline.with_output_mask(mask_output)
        correction = pipeline.run(progress_callback=progress_callback)

        return WorkflowResult(
            correction=correction,
            offset=offset,
            residual=residual,
            fit=fit,
            slant_dem=aligned_dem,
            simulated=aligned_sim,
        )
