# -*- coding: utf-8 -*-
"""
IO Base Classes - Line-oriented raster reader and writer interfaces.

Terrain correction streams rasters one line at a time, so readers expose
``read_line`` on top of the generic ``read_chip`` and writers expose
``write_line``. Both carry a ``SceneMetadata`` and act as context
managers.

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
2026-01-30

Modified
--------
2026-03-02
"""

# Standard library
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple, Union

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.exceptions import RasterIOError, ValidationError
from terrcorr.IO.models import SceneMetadata


class RasterReader(ABC):
    """
    Abstract base class for raster readers.

    Attributes
    ----------
    filepath : Path or None
        Path to the raster, ``None`` for in-memory readers.
    metadata : SceneMetadata
        Metadata describing the raster.
    """

    def __init__(self, filepath: Union[str, Path]) -> None:
        """
        Open a raster on disk.

        Raises
        ------
        RasterIOError
            If *filepath* does not exist or its metadata cannot be read.
        """
        self.filepath: Optional[Path] = Path(filepath)
        if not self.filepath.exists():
            raise RasterIOError(f"File not found: {self.filepath}")
        self._load_metadata()

    @abstractmethod
    def _load_metadata(self) -> None:
        """Populate ``self.metadata``."""

    @abstractmethod
    def read_chip(
        self,
        row_start: int,
        row_end: int,
        col_start: int,
        col_end: int,
        band: int = 0,
    ) -> np.ndarray:
        """
        Read a window of one band.

        Parameters
        ----------
        row_start, row_end : int
            Line range, end exclusive.
        col_start, col_end : int
            Sample range, end exclusive.
        band : int
            Zero-based band index.

        Returns
        -------
        np.ndarray
            Shape ``(row_end - row_start, col_end - col_start)``.
        """

    def read_line(self, line: int, band: int = 0) -> np.ndarray:
        """Read one full line of *band* as float32."""
        self._check_index(line, band)
        chip = self.read_chip(line, line + 1, 0, self.metadata.sample_count,
                              band=band)
        return np.asarray(chip[0], dtype=np.float32)

    def read_full(self, band: int = 0) -> np.ndarray:
        """Read an entire band. Use with caution on large rasters."""
        rows, cols = self.get_shape()
        return self.read_chip(0, rows, 0, cols, band=band)

    def get_shape(self) -> Tuple[int, int]:
        """``(lines, samples)`` of the raster."""
        return self.metadata.line_count, self.metadata.sample_count

    def _check_index(self, line: int, band: int) -> None:
        if not 0 <= line < self.metadata.line_count:
            raise ValidationError(
                f"Line {line} outside 0..{self.metadata.line_count - 1} "
                f"of {self.filepath}")
        if not 0 <= band < self.metadata.band_count:
            raise ValidationError(
                f"Band {band} outside 0..{self.metadata.band_count - 1} "
                f"of {self.filepath}")

    def close(self) -> None:
        """Release resources. Default does nothing."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class RasterWriter(ABC):
    """
    Abstract base class for raster writers.

    The output size and band count are fixed by *metadata* when the
    writer is created.

    Attributes
    ----------
    filepath : Path or None
        Output path, ``None`` for in-memory writers.
    metadata : SceneMetadata
        Metadata written alongside the raster.
    """

    def __init__(
        self,
        filepath: Optional[Union[str, Path]],
        metadata: SceneMetadata,
    ) -> None:
        self.filepath = Path(filepath) if filepath is not None else None
        self.metadata = metadata

    @abstractmethod
    def write_line(self, line: int, data: np.ndarray, band: int = 0) -> None:
        """
        Write one line of *band*.

        Raises
        ------
        ValidationError
            If *data* does not match the sample count or the indices
            are out of range.
        RasterIOError
            If writing fails.
        """

    def write(self, data: np.ndarray) -> None:
        """Write a whole ``(lines, samples)`` or ``(bands, lines, samples)`` raster."""
        data = np.asarray(data)
        if data.ndim == 2:
            data = data[np.newaxis]
        for band in range(data.shape[0]):
            for line in range(data.shape[1]):
                self.write_line(line, data[band, line], band=band)

    def _check_line(self, line: int, data: np.ndarray, band: int) -> np.ndarray:
        data = np.asarray(data, dtype=np.float32).reshape(-1)
        if data.size != self.metadata.sample_count:
            raise ValidationError(
                f"Line has {data.size} samples, expected "
                f"{self.metadata.sample_count} for {self.filepath}")
        if not 0 <= line < self.metadata.line_count:
            raise ValidationError(
                f"Line {line} outside 0..{self.metadata.line_count - 1}")
        if not 0 <= band < self.metadata.band_count:
            raise ValidationError(
                f"Band {band} outside 0..{self.metadata.band_count - 1}")
        return data

    def close(self) -> None:
        """Flush and release resources. Default does nothing."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
