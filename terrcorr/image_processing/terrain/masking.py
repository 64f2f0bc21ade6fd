# -*- coding: utf-8 -*-
"""
Masking - Input-mask normalization and the final mask-and-fill stage.

An input mask uses ``1`` for usable pixels and ``2`` for invalid data;
any other value excludes the pixel as user-masked. After compensation,
``apply_mask_and_fill`` writes the fill value into user-masked pixels,
zeroes pixels outside DEM coverage, and optionally zeroes layover and
shadow.

Dependencies
------------
numpy

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
2026-02-21

Modified
--------
2026-03-02
"""

# Standard library
from typing import Optional

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.constants import NO_DEM_DATA, NO_DEM_DATA_TOLERANCE
from terrcorr.vocabulary import MaskValue


def normalize_input_mask(raw: np.ndarray) -> np.ndarray:
    """Translate a user mask line into mask codes.

    Parameters
    ----------
    raw : np.ndarray
        Mask line as read from disk.

    Returns
    -------
    np.ndarray
        float32 line holding NORMAL, INVALID_DATA or USER_MASKED.
    """
    raw = np.asarray(raw)
    out = np.full(raw.shape, float(MaskValue.USER_MASKED), dtype=np.float32)
    out[raw == 1] = float(MaskValue.NORMAL)
    out[raw == 2] = float(MaskValue.INVALID_DATA)
    return out


def apply_mask_and_fill(
    line: np.ndarray,
    mask: np.ndarray,
    ground_dem: np.ndarray,
    fill_value: Optional[float] = None,
    zero_layover_shadow: bool = False,
) -> int:
    """Apply the final masking rules to one output line, in place.

    Parameters
    ----------
    line : np.ndarray
        Compensated ground-range line.
    mask : np.ndarray
        Ground-range mask line.
    ground_dem : np.ndarray
        Backconverted ground-range DEM line; ``NO_DEM_DATA`` columns are
        zeroed.
    fill_value : float, optional
        Value written into USER_MASKED pixels. ``None`` leaves them.
    zero_layover_shadow : bool
        Zero LAYOVER and SHADOW pixels.

    Returns
    -------
    int
        Number of USER_MASKED pixels in the line.
    """
    mask = np.asarray(mask)
    user = mask == int(MaskValue.USER_MASKED)
    if fill_value is not None:
        line[user] = fill_value

    no_dem = np.abs(np.asarray(ground_dem) - NO_DEM_DATA) < NO_DEM_DATA_TOLERANCE
    line[no_dem] = 0.0

    if zero_layover_shadow:
        distorted = (mask == int(MaskValue.LAYOVER)) | (mask == int(MaskValue.SHADOW))
        line[distorted] = 0.0
    return int(np.count_nonzero(user))
