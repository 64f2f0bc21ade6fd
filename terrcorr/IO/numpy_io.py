# -*- coding: utf-8 -*-
"""
NumPy IO - Memory-mapped .npy rasters with JSON sidecar metadata.

Rasters are stored band-sequential as ``(bands, lines, samples)`` float32
``.npy`` files, opened memory-mapped so that line access never loads the
whole image. A JSON sidecar ``<file>.npy.json`` holds the shape, dtype and
``SceneMetadata``. In-memory counterparts (``ArrayRasterReader``,
``ArrayRasterWriter``) serve callers that already hold arrays.

Author
------
Steven Siebert

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-02-11

Modified
--------
2026-03-02
"""

# Standard library
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.exceptions import RasterIOError, ValidationError
from terrcorr.IO.base import RasterReader, RasterWriter
from terrcorr.IO.models import SceneMetadata

logger = logging.getLogger(__name__)


def sidecar_path(filepath: Union[str, Path]) -> Path:
    """JSON sidecar path for a ``.npy`` raster."""
    filepath = Path(filepath)
    return filepath.with_suffix(filepath.suffix + '.json')


def _as_cube(data: np.ndarray) -> np.ndarray:
    if data.ndim == 2:
        return data[np.newaxis]
    if data.ndim != 3:
        raise ValidationError(
            f"Raster must be 2-D or 3-D, got shape {data.shape}")
    return data


def _metadata_for(cube: np.ndarray, metadata: Optional[SceneMetadata]) -> SceneMetadata:
    bands, lines, samples = cube.shape
    if metadata is None:
        return SceneMetadata(line_count=lines, sample_count=samples,
                             band_count=bands, data_type=str(cube.dtype))
    if (metadata.band_count, metadata.line_count,
            metadata.sample_count) != (bands, lines, samples):
        raise ValidationError(
            f"Metadata size {metadata.band_count}x{metadata.line_count}x"
            f"{metadata.sample_count} does not match data {cube.shape}")
    return metadata


class NumpyRasterReader(RasterReader):
    """Read a ``.npy`` raster and its JSON sidecar.

    Without a sidecar the metadata is derived from the array shape alone.

    Parameters
    ----------
    filepath : str or Path
        Path to the ``.npy`` file.
    """

    def _load_metadata(self) -> None:
        try:
            self._cube = _as_cube(np.load(str(self.filepath), mmap_mode='r'))
        except (OSError, ValueError) as e:
            raise RasterIOError(
                f"Failed to open NumPy raster {self.filepath}: {e}") from e

        sidecar = sidecar_path(self.filepath)
        if sidecar.exists():
            try:
                with open(sidecar) as f:
                    content: Dict[str, Any] = json.load(f)
                content.pop('shape', None)
                content.pop('dtype', None)
                metadata = SceneMetadata.from_dict(content)
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                raise RasterIOError(
                    f"Failed to read metadata {sidecar}: {e}") from e
        else:
            logger.debug("No sidecar for %s, using array shape", self.filepath)
            metadata = None
        self.metadata = _metadata_for(self._cube, metadata)

    def read_chip(
        self,
        row_start: int,
        row_end: int,
        col_start: int,
        col_end: int,
        band: int = 0,
    ) -> np.ndarray:
        return np.array(self._cube[band, row_start:row_end, col_start:col_end])

    def close(self) -> None:
        self._cube = None


class NumpyRasterWriter(RasterWriter):
    """Write a ``.npy`` raster line by line through a memory map.

    The file and sidecar are created immediately; data is flushed on
    ``close``.

    Parameters
    ----------
    filepath : str or Path
        Output ``.npy`` path.
    metadata : SceneMetadata
        Output layout and metadata.

    Examples
    --------
    >>> with NumpyRasterWriter('out.npy', metadata) as writer:
    ...     writer.write_line(0, line)
    """

    def __init__(self, filepath: Union[str, Path], metadata: SceneMetadata) -> None:
        super().__init__(filepath, metadata)
        shape = (metadata.band_count, metadata.line_count, metadata.sample_count)
        try:
            self._cube = np.lib.format.open_memmap(
                str(self.filepath), mode='w+', dtype=np.float32, shape=shape)
        except OSError as e:
            raise RasterIOError(
                f"Failed to create NumPy raster {self.filepath}: {e}") from e
        self._write_sidecar()

    def write_line(self, line: int, data: np.ndarray, band: int = 0) -> None:
        self._cube[band, line, :] = self._check_line(line, data, band)

    def _write_sidecar(self) -> None:
        sidecar: Dict[str, Any] = {
            'shape': list(self._cube.shape),
            'dtype': str(self._cube.dtype),
        }
        sidecar.update(self.metadata.to_dict())
        path = sidecar_path(self.filepath)
        try:
            with open(path, 'w') as f:
                json.dump(sidecar, f, indent=2, default=str)
        except OSError as e:
            raise RasterIOError(f"Failed to write metadata {path}: {e}") from e

    def close(self) -> None:
        if self._cube is not None:
            self._cube.flush()
            self._cube = None


class ArrayRasterReader(RasterReader):
    """Serve an in-memory array through the reader interface.

    Parameters
    ----------
    data : np.ndarray
        ``(lines, samples)`` or ``(bands, lines, samples)`` array.
    metadata : SceneMetadata, optional
        Describes *data*; derived from its shape when omitted.
    """

    def __init__(
        self,
        data: np.ndarray,
        metadata: Optional[SceneMetadata] = None,
    ) -> None:
        self.filepath = None
        self._cube = _as_cube(np.asarray(data))
        self.metadata = _metadata_for(self._cube, metadata)

    def _load_metadata(self) -> None:
        pass

    def read_chip(
        self,
        row_start: int,
        row_end: int,
        col_start: int,
        col_end: int,
        band: int = 0,
    ) -> np.ndarray:
        return np.array(self._cube[band, row_start:row_end, col_start:col_end])


class ArrayRasterWriter(RasterWriter):
    """Collect written lines into an in-memory float32 array.

    Attributes
    ----------
    data : np.ndarray
        ``(bands, lines, samples)`` array, zero until written.
    """

    def __init__(self, metadata: SceneMetadata) -> None:
        super().__init__(None, metadata)
        self.data = np.zeros(
            (metadata.band_count, metadata.line_count, metadata.sample_count),
            dtype=np.float32)
        self.lines_written = 0

    def write_line(self, line: int, data: np.ndarray, band: int = 0) -> None:
        self.data[band, line, :] = self._check_line(line, data, band)
        self.lines_written += 1
