# -*- coding: utf-8 -*-
"""
Terrain Sub-module - Slant-to-ground deskew with layover/shadow handling.

Key Classes
-----------
DEMResampler
    Moves DEM lines between slant and ground range.
GeometricCompensator
    Resamples a slant-range line into ground range and classifies
    layover, shadow and invalid pixels.
RadiometricCompensator
    Rescales ground-range pixels by the local-slope illumination.
TerrainCorrectionPipeline
    Builder-pattern orchestrator streaming a scene line by line.
DEMReskewer
    Slant-range DEM and simulated amplitude from a ground-range DEM.
TerrainCorrectionWorkflow
    DEM clipping, registration and correction in one call.

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
2026-02-19

Modified
--------
2026-03-02
"""

from terrcorr.image_processing.terrain.dem_resample import DEMResampler
from terrcorr.image_processing.terrain.geometric import (
    CorrectionCounts,
    GeometricCompensator,
)
from terrcorr.image_processing.terrain.masking import (
    apply_mask_and_fill,
    normalize_input_mask,
)
from terrcorr.image_processing.terrain.pipeline import (
    TerrainCorrectionPipeline,
    TerrainCorrectionResult,
)
from terrcorr.image_processing.terrain.radiometric import (
    RadiometricCompensator,
    check_formula,
)
from terrcorr.image_processing.terrain.reskew import DEMReskewer
from terrcorr.image_processing.terrain.workflow import (
    TerrainCorrectionWorkflow,
    WorkflowResult,
)

__all__ = [
    'CorrectionCounts',
    'DEMResampler',
    'DEMReskewer',
    'GeometricCompensator',
    'RadiometricCompensator',
    'TerrainCorrectionPipeline',
    'TerrainCorrectionResult',
    'TerrainCorrectionWorkflow',
    'WorkflowResult',
    'apply_mask_and_fill',
    'check_formula',
    'normalize_input_mask',
]
