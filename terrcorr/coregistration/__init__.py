# -*- coding: utf-8 -*-
"""
Co-registration Module - Translation estimation between SAR and DEM imagery.

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
2026-02-27

Modified
--------
2026-02-27
"""

from terrcorr.coregistration.offset import (
    OffsetEstimator,
    OffsetResult,
    round_half_up,
    shift_image,
)

__all__ = [
    'OffsetEstimator',
    'OffsetResult',
    'round_half_up',
    'shift_image',
]
