# -*- coding: utf-8 -*-
"""
Vocabulary - Canonical enums for terrain correction.

Single source of truth for the controlled vocabularies shared by the IO
layer, the compensators, the pipeline and the command line: image
geometry types, output mask codes, the ground-range DEM source, and the
radiometric correction formulas.

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
2026-02-10

Modified
--------
2026-03-02
"""

from enum import Enum, IntEnum


class ImageType(Enum):
    """Projection state of a raster.

    Values are the single-letter codes stored in raster metadata.
    """

    SLANT_RANGE = "S"
    GROUND_RANGE = "G"
    MAP_PROJECTED = "P"


class MaskValue(IntEnum):
    """Per-pixel classification codes written to the layover/shadow mask.

    ``INVALID_DATA`` shares its code with the input-mask convention, so
    a written mask can be fed back in as a user mask.
    """

    NORMAL = 1
    INVALID_DATA = 2
    LAYOVER = 3
    SHADOW = 4
    USER_MASKED = 5


class GroundDemSource(Enum):
    """Which ground-range DEM drives geometric compensation."""

    BACKCONVERTED = "backconverted"
    ORIGINAL = "original"


class InterpolationMethod(Enum):
    """Slant-range sampling used by the geometric compensator."""

    NEAREST = "nearest"
    BILINEAR = "bilinear"


class RadiometricFormula(IntEnum):
    """Radiometric terrain-correction formulas.

    Only ``KELLNDORFER`` (Kellndorfer et al., IEEE TGRS 1998) is
    supported. The identifiers of the untested legacy formulas are kept
    so that a configuration naming one fails loudly instead of silently
    selecting a different correction.
    """

    FTCLI = 1
    FTCGO = 2
    FTCSQ = 3
    FTCVX = 4
    KELLNDORFER = 5
    DIFFUSE = 6

    @property
    def supported(self) -> bool:
        return self is RadiometricFormula.KELLNDORFER
