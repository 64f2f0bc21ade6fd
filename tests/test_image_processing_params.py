# -*- coding: utf-8 -*-
"""
Tunable Parameter and Versioning Tests.

Tests for the parameter constraint markers, ``ParamSpec`` validation,
``Annotated`` field collection on processors and the
``@processor_version`` stamp.

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

import warnings
from typing import Annotated

import numpy as np
import pytest

from terrcorr.exceptions import ValidationError
from terrcorr.image_processing import (
    Desc,
    ImageTransform,
    Options,
    ParamSpec,
    processor_version,
)
from terrcorr.image_processing.terrain import (
    DEMResampler,
    GeometricCompensator,
)


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

class TestMarkers:

    def test_options(self):
        assert Options('a', 'b').choices == ('a', 'b')

    def test_options_empty_raises(self):
        with pytest.raises(ValueError):
            Options()

    def test_desc(self):
        assert Desc('hello').text == 'hello'


# ---------------------------------------------------------------------------
# ParamSpec
# ---------------------------------------------------------------------------

class TestParamSpec:

    def test_required(self):
        spec = ParamSpec('k', int, None, has_default=False)
        assert spec.required

    def test_int_accepted_as_float(self):
        ParamSpec('k', float, 1.0, True).validate(3)

    def test_bool_rejected_as_float(self):
        with pytest.raises(TypeError):
            ParamSpec('k', float, 1.0, True).validate(True)

    def test_choices(self):
        spec = ParamSpec('m', str, 'a', True, choices=('a', 'b'))
        with pytest.raises(ValidationError):
            spec.validate('c')


# ---------------------------------------------------------------------------
# Processor parameters
# ---------------------------------------------------------------------------

@processor_version('0.1.0')
class _Scale(ImageTransform):
    factor: Annotated[float, Desc('Multiplier')] = 1.0
    mode: Annotated[str, Options('mul', 'add')] = 'mul'
    note: str = 'ignored'

    def __init__(self, **kwargs):
        self._init_params(kwargs)

    def apply(self, source, **kwargs):
        p = self._resolve_params(kwargs)
        if p['mode'] == 'mul':
            return source * p['factor']
        return source + p['factor']


class TestProcessorParams:

    def test_specs_collected(self):
        names = [s.name for s in _Scale.__param_specs__]
        assert names == ['factor', 'mode']

    def test_defaults_and_overrides(self):
        s = _Scale(factor=2.0)
        line = np.ones(3)
        np.testing.assert_array_equal(s.apply(line), 2.0)
        np.testing.assert_array_equal(s.apply(line, mode='add'), 3.0)
        assert s.factor == 2.0

    def test_invalid_constructor_value(self):
        with pytest.raises(ValidationError):
            _Scale(mode='pow')

    def test_wrong_type_rejected(self):
        with pytest.raises(TypeError):
            _Scale(factor='2')

    def test_unexpected_kwarg(self):
        with pytest.raises(TypeError, match="unexpected"):
            _Scale(gain=2.0)

    def test_runtime_override_validated(self):
        with pytest.raises(ValidationError):
            _Scale().apply(np.ones(2), mode='pow')

    def test_terrain_processor_specs(self):
        assert [s.name for s in DEMResampler.__param_specs__] == ['fill_holes']
        assert 'interpolation' in [
            s.name for s in GeometricCompensator.__param_specs__]


# ---------------------------------------------------------------------------
# Versioning
# ---------------------------------------------------------------------------

class TestProcessorVersion:

    def test_stamp(self):
        assert _Scale.__processor_version__ == '0.1.0'

    def test_missing_version_warns(self):
        class _Unversioned(ImageTransform):
            def apply(self, source, **kwargs):
                return source

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            _Unversioned()
            _Unversioned()
        messages = [str(w.message) for w in caught]
        assert len(messages) == 1
        assert 'does not declare a processor version' in messages[0]

    def test_distribution_version_fallback(self):
        @processor_version()
        class _Default(ImageTransform):
            def apply(self, source, **kwargs):
                return source

        assert isinstance(_Default.__processor_version__, str)
        assert _Default.__processor_version__
