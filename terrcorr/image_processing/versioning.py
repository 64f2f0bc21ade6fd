# -*- coding: utf-8 -*-
"""
Processor Versioning - Version stamps for terrain-correction processors.

Provides the ``@processor_version`` class decorator that stamps a semantic
version string on a processor class. The stamp is the single source of
truth for both the algorithm version and the output format version, and
is recorded in the results produced by the pipeline.

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

# Standard library
from typing import Optional, Type, TypeVar
import importlib.metadata

T = TypeVar('T')


def processor_version(version: Optional[str] = None):
    """Class decorator that stamps a processor version on a processor class.

    Sets ``__processor_version__`` as a class attribute. When *version*
    is omitted the installed ``terrcorr`` distribution version is used.

    Parameters
    ----------
    version : str, optional
        Semantic version string (e.g., ``'1.0.0'``).

    Returns
    -------
    Callable
        Class decorator that sets ``__processor_version__`` on the class.

    Examples
    --------
    >>> @processor_version('1.0.0')
    ... class Identity(ImageTransform):
    ...     def apply(self, source, **kwargs):
    ...         return source
    >>> Identity.__processor_version__
    '1.0.0'
    """
    def decorator(cls: Type[T]) -> Type[T]:
        if version:
            cls.__processor_version__ = version
        else:
            try:
                cls.__processor_version__ = importlib.metadata.version('terrcorr')
            except importlib.metadata.PackageNotFoundError:
                cls.__processor_version__ = "unknown"
        return cls
    return decorator
