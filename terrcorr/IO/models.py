# -*- coding: utf-8 -*-
"""
IO Models - Typed metadata container for terrain-correction rasters.

Provides ``SceneMetadata``, a dataclass holding raster layout (lines,
samples, bands), projection state, and the SAR range block needed to
build a range model. Unknown keys read from disk are kept in ``extras``
so that a read/write cycle does not lose them. Supports dict-like access
(``metadata['sample_count']``, ``'earth_radius' in metadata``).

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
2026-02-10

Modified
--------
2026-03-02
"""

# Standard library
import dataclasses
from dataclasses import dataclass, field, fields as dc_fields
from typing import Any, Dict, List, Optional, Tuple

# terrcorr internal
from terrcorr.exceptions import ValidationError
from terrcorr.vocabulary import ImageType


@dataclass
class SceneMetadata:
    """Metadata for a slant-range, ground-range or map-projected raster.

    Parameters
    ----------
    line_count : int
        Number of lines (rows).
    sample_count : int
        Number of samples (columns).
    band_count : int
        Number of bands.
    band_names : List[str]
        One name per band; generated when empty.
    image_type : ImageType
        Projection state.
    data_type : str
        NumPy dtype string of the stored samples.
    x_pixel_size, y_pixel_size : float, optional
        Column and line spacing in metres.
    no_data : float, optional
        No-data value.
    radiometry : str
        Radiometric scale of the samples (e.g. ``'AMPLITUDE'``).
    slant_range_first : float, optional
        Slant range to the first full-resolution sample, metres.
    slant_range_per_pixel : float, optional
        Full-resolution slant-range sample spacing, metres.
    start_sample : int
        Offset of this raster's first column in full-resolution samples.
    sample_increment : int
        Full-resolution samples per column of this raster.
    earth_radius : float, optional
        Local Earth radius at scene centre, metres.
    satellite_height : float, optional
        Geocentric satellite distance at scene centre, metres.
    extras : Dict[str, Any]
        Any other keys carried through from disk.
    """

    line_count: int
    sample_count: int
    band_count: int = 1
    band_names: List[str] = field(default_factory=list)
    image_type: ImageType = ImageType.SLANT_RANGE
    data_type: str = 'float32'
    x_pixel_size: Optional[float] = None
    y_pixel_size: Optional[float] = None
    no_data: Optional[float] = None
    radiometry: str = 'AMPLITUDE'
    slant_range_first: Optional[float] = None
    slant_range_per_pixel: Optional[float] = None
    start_sample: int = 0
    sample_increment: int = 1
    earth_radius: Optional[float] = None
    satellite_height: Optional[float] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.image_type, ImageType):
            self.image_type = ImageType(self.image_type)
        if self.line_count < 0 or self.sample_count < 0 or self.band_count < 1:
            raise ValidationError(
                f"Invalid raster size {self.band_count}x"
                f"{self.line_count}x{self.sample_count}")
        if not self.band_names:
            self.band_names = [f"{i + 1:02d}" for i in range(self.band_count)]

    @property
    def is_map_projected(self) -> bool:
        return self.image_type is ImageType.MAP_PROJECTED

    def slant_geometry(self) -> Tuple[float, float]:
        """Slant range of this raster's first column and its column spacing.

        Raises
        ------
        ValidationError
            If the slant-range block is missing.
        """
        if self.slant_range_first is None or self.slant_range_per_pixel is None:
            raise ValidationError(
                "Metadata has no slant_range_first/slant_range_per_pixel")
        first = (self.slant_range_first
                 + self.slant_range_per_pixel * self.start_sample)
        spacing = self.slant_range_per_pixel * self.sample_increment
        return first, spacing

    def copy(self, **changes: Any) -> 'SceneMetadata':
        """Return a copy with *changes* applied."""
        if 'band_count' in changes and 'band_names' not in changes:
            changes['band_names'] = []
        result = dataclasses.replace(self, **changes)
        if 'band_names' not in changes:
            result.band_names = list(self.band_names)
        result.extras = dict(self.extras)
        return result

    def __getitem__(self, key: str) -> Any:
        for f in dc_fields(self):
            if f.name == key and f.name != 'extras':
                return getattr(self, key)
        if key in self.extras:
            return self.extras[key]
        raise KeyError(key)

    def __contains__(self, key: str) -> bool:
        names = {f.name for f in dc_fields(self) if f.name != 'extras'}
        return key in names or key in self.extras

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def to_dict(self) -> Dict[str, Any]:
        """Flatten to a JSON-serialisable dictionary."""
        result: Dict[str, Any] = {}
        for f in dc_fields(self):
            if f.name == 'extras':
                continue
            value = getattr(self, f.name)
            if isinstance(value, ImageType):
                value = value.value
            elif isinstance(value, list):
                value = list(value)
            result[f.name] = value
        result.update(self.extras)
        return result

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SceneMetadata':
        """Build from a dictionary; unknown keys go into ``extras``.

        Raises
        ------
        ValidationError
            If ``line_count`` or ``sample_count`` is missing.
        """
        names = {f.name for f in dc_fields(cls) if f.name != 'extras'}
        known: Dict[str, Any] = {}
        extras: Dict[str, Any] = dict(d.get('extras', {}))
        for key, value in d.items():
            if key == 'extras':
                continue
            if key in names:
                known[key] = value
            else:
                extras[key] = value
        missing = {'line_count', 'sample_count'} - set(known)
        if missing:
            raise ValidationError(
                f"Metadata is missing required keys: {sorted(missing)}")
        return cls(extras=extras, **known)
