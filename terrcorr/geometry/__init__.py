# -*- coding: utf-8 -*-
"""
Geometry Module - Range geometry model and slant/ground coordinate mapping.

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
2026-02-18

Modified
--------
2026-02-18
"""

from terrcorr.geometry.scene import SceneGeometry
from terrcorr.geometry.mapper import CoordinateMapper

__all__ = [
    'SceneGeometry',
    'CoordinateMapper',
]
