# -*- coding: utf-8 -*-
"""
Terrcorr Exception Hierarchy - Domain-specific exceptions for terrain correction.

Lets callers catch terrain-correction failures distinctly from Python
built-in exceptions. Every exception subclasses both ``TerrcorrError``
and the matching built-in exception so existing ``except ValueError``
handlers keep working.

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
2026-02-06

Modified
--------
2026-03-02
"""


class TerrcorrError(Exception):
    """Base exception for all terrcorr errors."""


class ValidationError(TerrcorrError, ValueError):
    """Invalid input data, parameters, or configuration.

    Raised for shape mismatches, out-of-range parameters, invalid
    method names, and other input validation failures.
    """


class PreconditionError(ValidationError):
    """Inputs that cannot be terrain corrected.

    Raised before any output is created when a DEM or SAR image is
    already map-projected, when the SAR image and its mask differ in
    size, when the slant and ground DEMs disagree in sample count, or
    when a mask is requested without a SAR image.
    """


class ConfigurationError(ValidationError):
    """Unsupported option selected, e.g. a legacy radiometric formula."""


class GeometryError(TerrcorrError, ValueError):
    """Scene geometry that cannot support a range model.

    Raised when the satellite is not above the Earth surface, the
    scene has fewer than two samples, or the slant ranges do not
    intersect the Earth sphere.
    """


class ProcessorError(TerrcorrError, RuntimeError):
    """Algorithm or processing failure during apply()/run().

    Raised when a processor encounters a non-recoverable error
    during execution (not an input validation issue).
    """


class RasterIOError(TerrcorrError, IOError):
    """Raster or metadata that cannot be read or written.

    The message always names the offending path.
    """


class DependencyError(TerrcorrError, ImportError):
    """Missing optional dependency required for a specific module.

    Raised when a module requires an optional package (rasterio) that
    is not installed.
    """
