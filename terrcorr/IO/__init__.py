# -*- coding: utf-8 -*-
"""
IO Module - Raster metadata, line readers and writers.

``open_raster`` and ``create_writer`` choose a concrete reader or writer
from the file suffix. Writers are imported lazily so that optional
backends (rasterio) are only needed when their format is used.

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
import importlib
from pathlib import Path
from typing import Dict, Optional, Union

# terrcorr internal
from terrcorr.exceptions import ValidationError
from terrcorr.IO.base import RasterReader, RasterWriter
from terrcorr.IO.models import SceneMetadata
from terrcorr.IO.numpy_io import (
    ArrayRasterReader,
    ArrayRasterWriter,
    NumpyRasterReader,
    NumpyRasterWriter,
)

# Maps format names to (module_path, reader_class, writer_class).
_FORMAT_REGISTRY: Dict[str, tuple] = {
    'numpy': ('terrcorr.IO.numpy_io', 'NumpyRasterReader', 'NumpyRasterWriter'),
    'geotiff': ('terrcorr.IO.geotiff', 'GeoTIFFReader', 'GeoTIFFWriter'),
}

_SUFFIXES: Dict[str, str] = {
    '.npy': 'numpy',
    '.tif': 'geotiff',
    '.tiff': 'geotiff',
}


def _resolve_format(filepath: Path, format: Optional[str]) -> str:
    key = format.lower() if format else _SUFFIXES.get(filepath.suffix.lower())
    if key not in _FORMAT_REGISTRY:
        raise ValidationError(
            f"Cannot determine raster format of {filepath} "
            f"(format={format!r}). Supported formats: "
            f"{sorted(_FORMAT_REGISTRY)}; suffixes: {sorted(_SUFFIXES)}"
        )
    return key


def _load_class(key: str, index: int) -> type:
    entry = _FORMAT_REGISTRY[key]
    module = importlib.import_module(entry[0])
    return getattr(module, entry[index])


def open_raster(
    filepath: Union[str, Path],
    format: Optional[str] = None,
) -> RasterReader:
    """Open a raster for line reading.

    Parameters
    ----------
    filepath : str or Path
        Raster path.
    format : str, optional
        ``'numpy'`` or ``'geotiff'``; inferred from the suffix when omitted.

    Returns
    -------
    RasterReader

    Examples
    --------
    >>> with open_raster('slant_dem.npy') as dem:
    ...     print(dem.metadata.sample_count)
    """
    filepath = Path(filepath)
    reader_cls = _load_class(_resolve_format(filepath, format), 1)
    return reader_cls(filepath)


def create_writer(
    filepath: Union[str, Path],
    metadata: SceneMetadata,
    format: Optional[str] = None,
) -> RasterWriter:
    """Create a line writer for *filepath*.

    Parameters
    ----------
    filepath : str or Path
        Output path.
    metadata : SceneMetadata
        Output layout and metadata.
    format : str, optional
        ``'numpy'`` or ``'geotiff'``; inferred from the suffix when omitted.

    Returns
    -------
    RasterWriter
    """
    filepath = Path(filepath)
    writer_cls = _load_class(_resolve_format(filepath, format), 2)
    return writer_cls(filepath, metadata)


__all__ = [
    'RasterReader',
    'RasterWriter',
    'SceneMetadata',
    'NumpyRasterReader',
    'NumpyRasterWriter',
    'ArrayRasterReader',
    'ArrayRasterWriter',
    'open_raster',
    'create_writer',
]
