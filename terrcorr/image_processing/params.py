# -*- coding: utf-8 -*-
"""
Tunable Parameter Annotations - Declarative processor options via typing.Annotated.

Constraint markers (``Options``, ``Desc``) are placed inside
``typing.Annotated`` class-body annotations on ``ImageProcessor``
subclasses. ``collect_param_specs`` turns them into ``ParamSpec`` objects
at class-definition time, and ``init_params`` binds validated values onto
an instance.

Usage
-----
::

    from typing import Annotated
    from terrcorr.image_processing.params import Options, Desc

    class GeometricCompensator(ImageTransform):
        interpolation: Annotated[
            str, Options('bilinear', 'nearest'), Desc('Slant sampling')
        ] = 'bilinear'

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
2026-02-10

Modified
--------
2026-10-17
"""

# Standard library
from typing import (
    Annotated,
    Any,
    Dict,
    Optional,
    Tuple,
    get_origin,
    get_type_hints,
)

# terrcorr internal
from terrcorr.exceptions import ValidationError


class ParamMeta:
    """Base marker for tunable parameter metadata in ``Annotated`` types."""


class Options(ParamMeta):
    """Discrete choice constraint.

    Parameters
    ----------
    *choices
        Allowed values.  Must supply at least one.
    """

    __slots__ = ('choices',)

    def __init__(self, *choices: Any) -> None:
        if not choices:
            raise ValueError("Options requires at least one choice")
        self.choices = choices

    def __repr__(self) -> str:
        return f"Options{self.choices!r}"


class Desc(ParamMeta):
    """Human-readable parameter description."""

    __slots__ = ('text',)

    def __init__(self, text: str) -> None:
        self.text = text

    def __repr__(self) -> str:
        return f"Desc({self.text!r})"


_SENTINEL = object()


class ParamSpec:
    """Resolved specification for a single tunable parameter.

    Attributes
    ----------
    name : str
        Parameter name (keyword-argument key).
    param_type : type
        Expected Python type.
    default : Any
        Default value, or ``None`` when the parameter is required.
    description : str
        Human-readable description.
    choices : tuple or None
        Allowed values (from ``Options``).
    """

    __slots__ = (
        'name', 'param_type', 'default', '_has_default',
        'description', 'choices',
    )

    def __init__(
        self,
        name: str,
        param_type: type,
        default: Any,
        has_default: bool,
        description: str = '',
        choices: Optional[Tuple] = None,
    ) -> None:
        self.name = name
        self.param_type = param_type
        self.default = default
        self._has_default = has_default
        self.description = description
        self.choices = choices

    @property
    def required(self) -> bool:
        """Whether this parameter is required (has no default)."""
        return not self._has_default

    def validate(self, value: Any) -> None:
        """Validate *value* against this spec's type and constraints.

        ``int`` is accepted where ``float`` is declared, and the type check
        is skipped for ``object``.

        Raises
        ------
        TypeError
            If *value* has the wrong type.
        ValidationError
            If *value* is not among the allowed choices.
        """
        if self.param_type is float:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        elif self.param_type is object:
            ok = True
        else:
            ok = isinstance(value, self.param_type)
        if not ok:
            raise TypeError(
                f"Parameter '{self.name}' must be "
                f"{self.param_type.__name__}, got {type(value).__name__}"
            )

        if self.choices is not None and value not in self.choices:
            raise ValidationError(
                f"Parameter '{self.name}' value {value!r} "
                f"is not in allowed choices {self.choices!r}"
            )

    def __repr__(self) -> str:
        return (
            f"ParamSpec(name={self.name!r}, "
            f"param_type={self.param_type.__name__}, "
            f"required={self.required!r}, default={self.default!r})"
        )


def collect_param_specs(cls: type) -> Tuple[ParamSpec, ...]:
    """Parse ``Annotated`` type hints on *cls* into a tuple of ``ParamSpec``.

    Only fields whose metadata includes a ``ParamMeta`` instance are
    collected, parents first, in declaration order.
    """
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        return ()

    seen: set = set()
    ordered_names: list = []
    for klass in reversed(cls.__mro__):
        for name in getattr(klass, '__annotations__', {}):
            if name not in seen and name in hints:
                seen.add(name)
                ordered_names.append(name)

    specs = []
    for name in ordered_names:
        hint = hints[name]
        if get_origin(hint) is not Annotated:
            continue
        metas = [m for m in hint.__metadata__ if isinstance(m, ParamMeta)]
        if not metas:
            continue

        options_meta = next((m for m in metas if isinstance(m, Options)), None)
        desc_meta = next((m for m in metas if isinstance(m, Desc)), None)

        default = getattr(cls, name, _SENTINEL)
        has_default = default is not _SENTINEL
        specs.append(ParamSpec(
            name=name,
            param_type=hint.__args__[0],
            default=default if has_default else None,
            has_default=has_default,
            description=desc_meta.text if desc_meta else '',
            choices=options_meta.choices if options_meta else None,
        ))
    return tuple(specs)


def init_params(
    obj: Any,
    specs: Tuple[ParamSpec, ...],
    kwargs: Dict[str, Any],
) -> None:
    """Validate *kwargs* against *specs* and bind them onto *obj*.

    Absent parameters take their spec default.

    Raises
    ------
    TypeError
        If a required parameter is missing or an unknown one is given.
    """
    for spec in specs:
        if spec.name in kwargs:
            value = kwargs[spec.name]
        elif spec._has_default:
            value = spec.default
        else:
            raise TypeError(
                f"{type(obj).__name__}() missing required "
                f"keyword argument: '{spec.name}'"
            )
        spec.validate(value)
        object.__setattr__(obj, spec.name, value)

    unexpected = set(kwargs) - {s.name for s in specs}
    if unexpected:
        raise TypeError(
            f"{type(obj).__name__}() got unexpected "
            f"keyword arguments: {', '.join(sorted(unexpected))}"
        )
