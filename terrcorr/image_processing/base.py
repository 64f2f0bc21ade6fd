# -*- coding: utf-8 -*-
"""
Image Processing Base Classes - Abstract interfaces for line processors.

Defines the ``ImageProcessor`` common base class and the ``ImageTransform``
ABC used by the terrain compensators. ``ImageProcessor`` provides version
checking at first instantiation, ``typing.Annotated``-based tunable
parameters resolved through ``**kwargs``, and progress reporting.

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
2026-01-30

Modified
--------
2026-10-17
"""

# Standard library
import logging
import warnings
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

# Third-party
import numpy as np

# terrcorr internal
from terrcorr.image_processing.params import (
    ParamSpec,
    collect_param_specs,
    init_params,
)

logger = logging.getLogger(__name__)


class ImageProcessor(ABC):
    """
    Common base class for all terrain-correction processors.

    **Version checking**: concrete subclasses without a
    ``@processor_version('x.y.z')`` stamp trigger a ``UserWarning`` at
    first instantiation. The check runs in ``__new__`` so that class
    decorators have already been applied.

    **Tunable parameters**: subclasses declare options as ``Annotated``
    class-body fields with markers from
    :mod:`terrcorr.image_processing.params`. They are collected into
    ``__param_specs__``; ``_init_params`` binds constructor values and
    ``_resolve_params`` merges per-call overrides.
    """

    _version_warned_classes: set = set()

    __param_specs__: Tuple[ParamSpec, ...] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.__param_specs__ = collect_param_specs(cls)

    def __new__(cls, *args: Any, **kwargs: Any) -> 'ImageProcessor':
        if cls not in ImageProcessor._version_warned_classes:
            ImageProcessor._version_warned_classes.add(cls)
            if (
                not getattr(cls, '__processor_version__', None)
                and not getattr(cls, '__abstractmethods__', None)
            ):
                warnings.warn(
                    f"{cls.__qualname__} does not declare a processor version. "
                    f"Use @processor_version('x.y.z') to declare one.",
                    UserWarning,
                    stacklevel=2,
                )
        logger.debug("Instantiating %s", cls.__qualname__)
        return super().__new__(cls)

    def _init_params(self, kwargs: Dict[str, Any]) -> None:
        """Bind constructor keyword arguments to declared parameters."""
        init_params(self, type(self).__param_specs__, kwargs)

    def _resolve_params(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge instance defaults with runtime *kwargs* overrides.

        Non-parameter keys in *kwargs* are ignored. Every resolved value is
        validated.

        Returns
        -------
        Dict[str, Any]
            ``{param_name: resolved_value}`` for every declared param.
        """
        resolved: Dict[str, Any] = {}
        for spec in type(self).__param_specs__:
            value = kwargs[spec.name] if spec.name in kwargs else getattr(
                self, spec.name)
            spec.validate(value)
            resolved[spec.name] = value
        return resolved


class ImageTransform(ImageProcessor):
    """
    Abstract base class for line transforms.

    Subclasses implement ``apply`` on a single image line (1-D array of
    samples). Auxiliary inputs (DEM lines, masks, counters) travel
    through ``**kwargs``.
    """

    @abstractmethod
    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """
        Apply the transform to one line.

        Parameters
        ----------
        source : np.ndarray
            Input line, shape ``(samples,)``.

        Returns
        -------
        np.ndarray
            Transformed line.
        """
        ...
