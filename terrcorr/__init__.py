# -*- coding: utf-8 -*-
"""
terrcorr - Terrain correction of side-looking SAR imagery.

Deskews slant-range SAR images into ground range using a DEM, removing
the terrain-induced displacement, classifying layover and shadow, and
optionally compensating the radiometric effect of local slope.

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
2026-02-10

Modified
--------
2026-03-02
"""

__version__ = "0.1.0"
__author__ = "Duane Smalley"

from terrcorr.exceptions import (
    TerrcorrError,
    ValidationError,
    PreconditionError,
    ConfigurationError,
    GeometryError,
    ProcessorError,
    RasterIOError,
    DependencyError,
)
from terrcorr.vocabulary import (
    GroundDemSource,
    ImageType,
    InterpolationMethod,
    MaskValue,
    RadiometricFormula,
)
from terrcorr.geometry import CoordinateMapper, SceneGeometry
from terrcorr.image_processing.terrain import (
    TerrainCorrectionPipeline,
    TerrainCorrectionResult,
    TerrainCorrectionWorkflow,
    WorkflowResult,
)

__all__ = [
    'TerrcorrError',
    'ValidationError',
    'PreconditionError',
    'ConfigurationError',
    'GeometryError',
    'ProcessorError',
    'RasterIOError',
    'DependencyError',
    'GroundDemSource',
    'ImageType',
    'InterpolationMethod',
    'MaskValue',
    'RadiometricFormula',
    'CoordinateMapper',
    'SceneGeometry',
    'TerrainCorrectionPipeline',
    'TerrainCorrectionResult',
    'TerrainCorrectionWorkflow',
    'WorkflowResult',
]
