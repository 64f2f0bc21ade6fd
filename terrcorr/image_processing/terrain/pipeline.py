# -*- coding: utf-8 -*-
"""
Terrain Correction Pipeline - Line-streaming slant-to-ground deskew.

Orchestrates the DEM resampler, geometric and radiometric compensators,
and mask-and-fill stage over every line of a scene. Inputs are a
slant-range DEM (defining the scene geometry), an optional ground-range
DEM, an optional SAR image, and an optional user mask; outputs are a
ground-range image and an optional layover/shadow mask.

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
2026-02-24

Modified
--------
2026-03-02
"""

# Standard library
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.exceptions import PreconditionError, ValidationError
from terrcorr.geometry.scene import SceneGeometry
from terrcorr.image_processing.terrain.dem_resample import DEMResampler
from terrcorr.image_processing.terrain.geometric import (
    CorrectionCounts,
    GeometricCompensator,
)
from terrcorr.image_processing.terrain.masking import (
    apply_mask_and_fill,
    normalize_input_mask,
)
from terrcorr.image_processing.terrain.radiometric import (
    RadiometricCompensator,
    check_formula,
)
from terrcorr.IO import create_writer, open_raster
from terrcorr.IO.base import RasterReader, RasterWriter
from terrcorr.IO.models import SceneMetadata
from terrcorr.IO.numpy_io import ArrayRasterWriter
from terrcorr.vocabulary import (
    GroundDemSource,
    ImageType,
    MaskValue,
    RadiometricFormula,
)

logger = logging.getLogger(__name__)

RasterSource = Union[str, Path, RasterReader]

MASK_BAND_NAME = 'LAYOVER_MASK'


class TerrainCorrectionResult:
    """Summary of a terrain-correction run.

    Attributes
    ----------
    counts : CorrectionCounts
        Layover, shadow and user-masked pixel totals.
    total_pixels : int
        ``lines * samples`` of the output.
    ground_pixel_size : float
        Ground-range column spacing of the output, metres.
    metadata : SceneMetadata
        Metadata of the corrected image.
    mask_metadata : SceneMetadata or None
        Metadata of the mask, when one was produced.
    data : np.ndarray or None
        ``(bands, lines, samples)`` output when no output path was set.
    mask : np.ndarray or None
        ``(lines, samples)`` mask when requested without a path.
    output_path, mask_path : Path or None
        Files written.
    processor_versions : Dict[str, str]
        Version stamp of each processor used.
    """

    def __init__(
        self,
        counts: CorrectionCounts,
        total_pixels: int,
        ground_pixel_size: float,
        metadata: SceneMetadata,
        mask_metadata: Optional[SceneMetadata] = None,
        data: Optional[np.ndarray] = None,
        mask: Optional[np.ndarray] = None,
        output_path: Optional[Path] = None,
        mask_path: Optional[Path] = None,
        processor_versions: Optional[Dict[str, str]] = None,
    ) -> None:
        self.counts = counts
        self.total_pixels = total_pixels
        self.ground_pixel_size = ground_pixel_size
        self.metadata = metadata
        self.mask_metadata = mask_metadata
        self.data = data
        self.mask = mask
        self.output_path = output_path
        self.mask_path = mask_path
        self.processor_versions = processor_versions or {}

    @property
    def percentages(self) -> Dict[str, float]:
        """Counts as percentages of ``total_pixels``."""
        return self.counts.percentages(self.total_pixels)

    def summary(self) -> str:
        """Mask statistics formatted for display."""
        pct = self.percentages
        tot = self.total_pixels
        c = self.counts
        return (
            "Mask Statistics:\n"
            f"    Layover Pixels: {c.layover:9d}/{tot} ({pct['layover']:f}%)\n"
            f"     Shadow Pixels: {c.shadow:9d}/{tot} ({pct['shadow']:f}%)\n"
            f"User Masked Pixels: {c.user_masked:9d}/{tot} "
            f"({pct['user_masked']:f}%)"
        )


class TerrainCorrectionPipeline:
    """Terrain-correct a slant-range scene into ground range.

    Uses a builder pattern: call ``with_*()`` methods to configure, then
    ``run()``. Every input may be a path or an open ``RasterReader``.
    All preconditions are checked before any output is created.

    Examples
    --------
    Correct a SAR image and keep the mask::

        result = (TerrainCorrectionPipeline()
                  .with_slant_dem('slant_dem.npy')
                  .with_sar('sar.npy')
                  .with_output('corrected.npy')
                  .with_output_mask('mask.npy')
                  .run())
        print(result.summary())

    In-memory run (no output path)::

        result = (TerrainCorrectionPipeline()
                  .with_slant_dem(ArrayRasterReader(dem, meta))
                  .with_sar(ArrayRasterReader(sar, meta))
                  .run())
        corrected = result.data[0]
    """

    def __init__(self) -> None:
        self._slant_dem: Optional[RasterSource] = None
        self._ground_dem: Optional[RasterSource] = None
        self._sar: Optional[RasterSource] = None
        self._input_mask: Optional[RasterSource] = None
        self._output: Optional[Union[str, Path, RasterWriter]] = None
        self._output_format: Optional[str] = None
        self._want_mask = False
        self._mask_output: Optional[Union[str, Path]] = None
        self._radiometric = True
        self._formula = RadiometricFormula.KELLNDORFER
        self._fill_holes = True
        self._fill_value: Optional[float] = None
        self._ground_dem_source = GroundDemSource.BACKCONVERTED

    # ------------------------------------------------------------------
    # Builder methods
    # ------------------------------------------------------------------

    def with_slant_dem(self, source: RasterSource) -> 'TerrainCorrectionPipeline':
        """Set the slant-range DEM. Its metadata defines the scene geometry."""
        self._slant_dem = source
        return self

    def with_ground_dem(self, source: RasterSource) -> 'TerrainCorrectionPipeline':
        """Set an optional ground-range DEM of the same sample count."""
        self._ground_dem = source
        return self

    def with_sar(self, source: RasterSource) -> 'TerrainCorrectionPipeline':
        """Set the slant-range SAR image. Without it the DEM is corrected."""
        self._sar = source
        return self

    def with_input_mask(self, source: RasterSource) -> 'TerrainCorrectionPipeline':
        """Set a slant-range user mask the size of the SAR image."""
        self._input_mask = source
        return self

    def with_output(
        self,
        path: Optional[Union[str, Path, RasterWriter]],
        format: Optional[str] = None,
    ) -> 'TerrainCorrectionPipeline':
        """Set the output path or an open writer.

        ``None`` keeps the result in memory. An open writer must match the
        output metadata and is not closed by the pipeline.
        """
        self._output = path
        self._output_format = format
        return self

    def with_output_mask(
        self, path: Optional[Union[str, Path]] = None
    ) -> 'TerrainCorrectionPipeline':
        """Request the layover/shadow mask, written to *path* or kept in memory."""
        self._want_mask = True
        self._mask_output = path
        return self

    def with_radiometric(self, enabled: bool = True) -> 'TerrainCorrectionPipeline':
        """Enable or disable radiometric compensation (default on)."""
        self._radiometric = bool(enabled)
        return self

    def with_radiometric_formula(self, formula) -> 'TerrainCorrectionPipeline':
        """Select the radiometric formula.

        Raises
        ------
        ConfigurationError
            If a legacy formula is selected.
        """
        self._formula = check_formula(formula)
        return self

    def with_fill_holes(self, enabled: bool = True) -> 'TerrainCorrectionPipeline':
        """Keep resampled data in layover/shadow (``True``) or zero it."""
        self._fill_holes = bool(enabled)
        return self

    def with_fill_value(self, value: Optional[float]) -> 'TerrainCorrectionPipeline':
        """Value for user-masked pixels; ``None`` leaves them untouched."""
        self._fill_value = None if value is None else float(value)
        return self

    def with_ground_dem_source(self, source) -> 'TerrainCorrectionPipeline':
        """Choose the ground-range DEM used for geometric compensation."""
        try:
            self._ground_dem_source = GroundDemSource(source)
        except ValueError:
            raise ValidationError(
                f"Unknown ground DEM source {source!r}; expected one of "
                f"{[s.value for s in GroundDemSource]}") from None
        return self

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(
        self,
        progress_callback: Optional[Callable[[float], None]] = None,
    ) -> TerrainCorrectionResult:
        """Execute terrain correction over every line.

        Parameters
        ----------
        progress_callback : callable, optional
            Called with the completed fraction after each line.

        Returns
        -------
        TerrainCorrectionResult

        Raises
        ------
        PreconditionError
            If the inputs cannot be terrain corrected.
        GeometryError
            If the slant DEM metadata cannot support a range model.
        RasterIOError
            If reading or writing fails.
        """
        if self._slant_dem is None:
            raise ValidationError(
                "A slant-range DEM is required. "
                "Call .with_slant_dem() before .run()."
            )
        opened: List[RasterReader] = []
        writers: List[RasterWriter] = []
        try:
            slant_dem = self._open(self._slant_dem, opened)
            ground_dem = self._open(self._ground_dem, opened)
            sar = self._open(self._sar, opened)
            in_mask = self._open(self._input_mask, opened)
            self._check_preconditions(slant_dem, ground_dem, sar, in_mask)

            geometry = SceneGeometry.from_metadata(slant_dem.metadata)
            out_meta = self._output_metadata(slant_dem, sar, geometry)
            mask_meta = out_meta.copy(
                band_count=1,
                band_names=[MASK_BAND_NAME],
                radiometry='AMPLITUDE',
            )

            writer = self._create(self._output, out_meta, writers)
            mask_writer = (self._create(self._mask_output, mask_meta, writers)
                           if self._want_mask else None)

            self._log_mode(ground_dem, sar)
            counts = self._process(
                geometry, slant_dem, ground_dem, sar, in_mask,
                writer, mask_writer, progress_callback)
        finally:
            for w in writers:
                w.close()
            for r in opened:
                r.close()

        total = out_meta.line_count * out_meta.sample_count
        result = TerrainCorrectionResult(
            counts=counts,
            total_pixels=total,
            ground_pixel_size=geometry.ground_pixel_size,
            metadata=out_meta,
            mask_metadata=mask_meta if self._want_mask else None,
            data=writer.data if isinstance(writer, ArrayRasterWriter) else None,
            mask=(mask_writer.data[0]
                  if isinstance(mask_writer, ArrayRasterWriter) else None),
            output_path=writer.filepath,
            mask_path=mask_writer.filepath if mask_writer else None,
            processor_versions={
                cls.__name__: cls.__processor_version__
                for cls in (DEMResampler, GeometricCompensator,
                            RadiometricCompensator)
            },
        )
        if self._want_mask:
            logger.info(result.summary())
        logger.info("Terrain correction complete.")
        return result

    def _process(
        self,
        geometry: SceneGeometry,
        slant_dem: RasterReader,
        ground_dem: Optional[RasterReader],
        sar: Optional[RasterReader],
        in_mask: Optional[RasterReader],
        writer: RasterWriter,
        mask_writer: Optional[RasterWriter],
        progress_callback: Optional[Callable[[float], None]],
    ) -> CorrectionCounts:
        ns = geometry.num_samples
        nl = slant_dem.metadata.line_count
        band_count = sar.metadata.band_count if sar is not None else 1

        resampler = DEMResampler(geometry, fill_holes=True)
        geo = GeometricCompensator(geometry, interpolation='bilinear')
        mask_remap = GeometricCompensator(geometry, interpolation='nearest')
        radio = (RadiometricCompensator(geometry, formula=self._formula)
                 if self._radiometric and sar is not None else None)

        counts = CorrectionCounts()
        ground_line: Optional[np.ndarray] = None
        for y in range(nl):
            ground_prev = ground_line

            ground_conv = resampler.slant_to_ground(slant_dem.read_line(y))
            if ground_dem is not None:
                ground_line = resampler.shift_ground(ground_dem.read_line(y))
            else:
                ground_line = ground_conv
            if self._ground_dem_source is GroundDemSource.ORIGINAL:
                geo_dem = ground_line
            else:
                geo_dem = ground_conv

            if in_mask is not None:
                mask_line = mask_remap.apply(
                    normalize_input_mask(in_mask.read_line(y)),
                    ground_dem=geo_dem)
            else:
                mask_line = np.full(ns, float(MaskValue.NORMAL))

            for b in range(band_count):
                if sar is not None:
                    out = geo.apply(
                        sar.read_line(y, band=b),
                        ground_dem=geo_dem,
                        mask=mask_line,
                        counts=counts if b == 0 else None,
                    )
                    if radio is not None and ground_prev is not None:
                        radio.compensate(out, ground_line, ground_prev, mask_line)
                else:
                    out = ground_line.copy()

                n_user = apply_mask_and_fill(
                    out, mask_line, ground_conv,
                    fill_value=self._fill_value,
                    zero_layover_shadow=not self._fill_holes,
                )
                if b == 0:
                    counts.user_masked += n_user
                writer.write_line(y, out, band=b)

            if mask_writer is not None:
                mask_writer.write_line(y, mask_line)

            logger.debug("Line %d/%d done", y + 1, nl)
            if progress_callback is not None:
                progress_callback((y + 1) / nl)
        return counts

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _open(source: Optional[RasterSource],
              opened: List[RasterReader]) -> Optional[RasterReader]:
        if source is None or isinstance(source, RasterReader):
            return source
        reader = open_raster(source)
        opened.append(reader)
        return reader

    def _create(self, path, metadata: SceneMetadata,
                writers: List[RasterWriter]) -> RasterWriter:
        if isinstance(path, RasterWriter):
            # Caller-owned; left open.
            return path
        if path is None:
            writer = ArrayRasterWriter(metadata)
        else:
            writer = create_writer(path, metadata, format=self._output_format)
        writers.append(writer)
        return writer

    def _check_preconditions(self, slant_dem, ground_dem, sar, in_mask) -> None:
        sm = slant_dem.metadata
        if sm.is_map_projected:
            raise PreconditionError(
                "DEM cannot be map projected for terrain correction")
        if ground_dem is not None:
            gm = ground_dem.metadata
            if gm.sample_count != sm.sample_count:
                raise PreconditionError(
                    f"Slant/Ground DEM mismatch: {gm.sample_count} ground "
                    f"samples vs {sm.sample_count} slant samples")
            if gm.line_count < sm.line_count:
                raise PreconditionError(
                    f"Ground DEM has {gm.line_count} lines, slant DEM "
                    f"has {sm.line_count}")
        if sar is not None:
            am = sar.metadata
            if am.is_map_projected:
                raise PreconditionError(
                    "SAR image cannot be map projected for terrain correction")
            if (am.line_count, am.sample_count) != (sm.line_count, sm.sample_count):
                raise PreconditionError(
                    f"SAR image is {am.line_count}x{am.sample_count} LxS but "
                    f"the slant DEM is {sm.line_count}x{sm.sample_count}")
        if in_mask is not None or self._want_mask:
            if sar is None:
                raise PreconditionError("Cannot produce a mask without a SAR")
        if in_mask is not None:
            mm = in_mask.metadata
            am = sar.metadata
            if (mm.line_count, mm.sample_count) != (am.line_count, am.sample_count):
                raise PreconditionError(
                    f"The mask and the SAR image must be the same size: "
                    f"SAR {am.line_count}x{am.sample_count}, "
                    f"mask {mm.line_count}x{mm.sample_count} LxS")

    @staticmethod
    def _output_metadata(slant_dem, sar, geometry) -> SceneMetadata:
        changes: Dict[str, Any] = dict(
            image_type=ImageType.GROUND_RANGE,
            x_pixel_size=geometry.ground_pixel_size,
            no_data=0.0,
        )
        if sar is not None:
            changes.update(
                band_count=sar.metadata.band_count,
                band_names=list(sar.metadata.band_names),
                data_type=sar.metadata.data_type,
                radiometry=sar.metadata.radiometry,
            )
        return slant_dem.metadata.copy(**changes)

    def _log_mode(self, ground_dem, sar) -> None:
        if ground_dem is not None:
            logger.info("DEM is in ground range.")
        else:
            logger.info("DEM is in slant range, but will be corrected.")
        target = "image" if sar is not None else "DEM"
        how = ("geometrically and radiometrically"
               if self._radiometric and sar is not None else "geometrically")
        logger.info("Correcting %s %s.", target, how)
