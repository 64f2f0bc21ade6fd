# -*- coding: utf-8 -*-
"""
GeoTIFF IO - Line-oriented GeoTIFF reader and writer.

Scene metadata travels in a ``TERRCORR_METADATA`` dataset tag holding the
JSON form of ``SceneMetadata``. A GeoTIFF without that tag is described
from its own header; if it carries a coordinate reference system it is
treated as map-projected.

Dependencies
------------
rasterio

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
2026-02-09

Modified
--------
2026-03-02
"""

# Standard library
import json
from pathlib import Path
from typing import Union

# Third-party
import numpy as np

try:
    import rasterio
    from rasterio.windows import Window
    _HAS_RASTERIO = True
except ImportError:
    _HAS_RASTERIO = False

# terrcorr internal
from terrcorr.exceptions import DependencyError, RasterIOError, ValidationError
from terrcorr.IO.base import RasterReader, RasterWriter
from terrcorr.IO.models import SceneMetadata
from terrcorr.vocabulary import ImageType

METADATA_TAG = 'TERRCORR_METADATA'


def _require_rasterio(purpose: str) -> None:
    if not _HAS_RASTERIO:
        raise DependencyError(
            f"rasterio is required for GeoTIFF {purpose}. "
            "Install with: pip install rasterio"
        )


class GeoTIFFReader(RasterReader):
    """Read GeoTIFF rasters line by line.

    Parameters
    ----------
    filepath : str or Path
        Path to the GeoTIFF file.

    Raises
    ------
    DependencyError
        If rasterio is not installed.
    RasterIOError
        If the file does not exist or cannot be opened.

    Examples
    --------
    >>> with GeoTIFFReader('slant_dem.tif') as reader:
    ...     line = reader.read_line(0)
    """

    def __init__(self, filepath: Union[str, Path]) -> None:
        _require_rasterio('reading')
        self.dataset = None
        super().__init__(filepath)

    def _load_metadata(self) -> None:
        try:
            self.dataset = rasterio.open(str(self.filepath))
        except rasterio.errors.RasterioIOError as e:
            raise RasterIOError(
                f"Failed to open GeoTIFF {self.filepath}: {e}") from e

        ds = self.dataset
        tag = ds.tags().get(METADATA_TAG)
        if tag:
            try:
                self.metadata = SceneMetadata.from_dict(json.loads(tag))
            except (json.JSONDecodeError, ValidationError) as e:
                raise RasterIOError(
                    f"Bad {METADATA_TAG} tag in {self.filepath}: {e}") from e
            return

        self.metadata = SceneMetadata(
            line_count=ds.height,
            sample_count=ds.width,
            band_count=ds.count,
            band_names=[d or f"{i + 1:02d}" for i, d in enumerate(ds.descriptions)],
            image_type=(ImageType.MAP_PROJECTED if ds.crs
                        else ImageType.SLANT_RANGE),
            data_type=str(ds.dtypes[0]),
            x_pixel_size=float(ds.res[0]),
            y_pixel_size=float(ds.res[1]),
            no_data=ds.nodata,
        )

    def read_chip(
        self,
        row_start: int,
        row_end: int,
        col_start: int,
        col_end: int,
        band: int = 0,
    ) -> np.ndarray:
        if row_start < 0 or col_start < 0:
            raise ValidationError("Start indices must be non-negative")
        if (row_end > self.metadata.line_count
                or col_end > self.metadata.sample_count):
            raise ValidationError("End indices exceed image dimensions")
        window = Window(col_start, row_start,
                        col_end - col_start, row_end - row_start)
        return self.dataset.read(band + 1, window=window)

    def close(self) -> None:
        """Close the rasterio dataset."""
        if self.dataset is not None:
            self.dataset.close()
            self.dataset = None


class GeoTIFFWriter(RasterWriter):
    """Write float32 GeoTIFF rasters line by line.

    The file is created, with its metadata tag and band descriptions,
    when the writer is constructed.

    Parameters
    ----------
    filepath : str or Path
        Output path.
    metadata : SceneMetadata
        Output layout and metadata.
    """

    def __init__(self, filepath: Union[str, Path], metadata: SceneMetadata) -> None:
        _require_rasterio('writing')
        super().__init__(filepath, metadata)
        try:
            self.dataset = rasterio.open(
                str(self.filepath), 'w',
                driver='GTiff',
                height=metadata.line_count,
                width=metadata.sample_count,
                count=metadata.band_count,
                dtype='float32',
                nodata=metadata.no_data,
            )
        except rasterio.errors.RasterioIOError as e:
            raise RasterIOError(
                f"Failed to create GeoTIFF {self.filepath}: {e}") from e
        self.dataset.update_tags(
            **{METADATA_TAG: json.dumps(metadata.to_dict(), default=str)})
        for i, name in enumerate(metadata.band_names):
            self.dataset.set_band_description(i + 1, name)

    def write_line(self, line: int, data: np.ndarray, band: int = 0) -> None:
        data = self._check_line(line, data, band)
        window = Window(0, line, self.metadata.sample_count, 1)
        self.dataset.write(data[np.newaxis, :], band + 1, window=window)

    def close(self) -> None:
        if self.dataset is not None:
            self.dataset.close()
            self.dataset = None
