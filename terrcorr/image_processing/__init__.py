# -*- coding: utf-8 -*-
"""
Image Processing Module - Processor base classes and terrain correction.

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
2026-10-17
"""

from terrcorr.image_processing.base import ImageProcessor, ImageTransform
from terrcorr.image_processing.params import Desc, Options, ParamSpec
from terrcorr.image_processing.versioning import processor_version

__all__ = [
    'ImageProcessor',
    'ImageTransform',
    'Desc',
    'Options',
    'ParamSpec',
    'processor_version',
]
