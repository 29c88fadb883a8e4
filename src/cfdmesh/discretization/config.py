# -*- coding: utf-8 -*-
"""
Discretizer configuration.

A configuration selects one scheme from a closed set, one governing operator,
and scheme-specific options. Everything is validated when the configuration
is created, so an unknown identifier or a mistyped option fails before any
mesh is touched.

Example mapping accepted by `DiscretizerConfig.from_dict`::

    {
        "scheme": "finite_volume",
        "operator": "advection_diffusion",
        "options": {"diffusivity": 0.1, "velocity": [1.0, 0.0], "upwind": true},
    }

Classes:
    Scheme: The supported discretization schemes.
    Operator: The supported governing operators.
    DiscretizerConfig: Validated, immutable configuration.
"""

from __future__ import annotations

import json
import math
import numbers
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Tuple

from ..errors import ConfigurationError
from ..polymesh.cells import CellKind


class Scheme(Enum):
    FINITE_VOLUME = "finite_volume"
    FINITE_ELEMENT = "finite_element"


class Operator(Enum):
    DIFFUSION = "diffusion"
    ADVECTION = "advection"
    ADVECTION_DIFFUSION = "advection_diffusion"

    @property
    def has_diffusion(self) -> bool:
        return self in (Operator.DIFFUSION, Operator.ADVECTION_DIFFUSION)

    @property
    def has_advection(self) -> bool:
        return self in (Operator.ADVECTION, Operator.ADVECTION_DIFFUSION)


# =============================================================================
# Option validators
# =============================================================================


def _diffusivity(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"Option '{name}' must be a number, got {value!r}.")
    value = float(value)
    if not math.isfinite(value) or value < 0.0:
        raise ConfigurationError(f"Option '{name}' must be finite and non-negative, got {value}.")
    return value


def _velocity(name: str, value: Any) -> Tuple[float, float, float]:
    if isinstance(value, (str, bytes)) or not hasattr(value, "__len__") or len(value) not in (2, 3):
        raise ConfigurationError(f"Option '{name}' must be a 2- or 3-component vector, got {value!r}.")
    components = []
    for c in value:
        if isinstance(c, bool) or not isinstance(c, numbers.Real) or not math.isfinite(c):
            raise ConfigurationError(f"Option '{name}' has an invalid component {c!r}.")
        components.append(float(c))
    if len(components) == 2:
        components.append(0.0)
    return tuple(components)


def _flag(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"Option '{name}' must be a boolean, got {value!r}.")
    return value


def _cell_shapes(name: str, value: Any) -> Tuple[CellKind, ...]:
    if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        raise ConfigurationError(f"Option '{name}' must be a list of cell kinds, got {value!r}.")
    kinds = []
    for item in value:
        try:
            kinds.append(item if isinstance(item, CellKind) else CellKind(item))
        except ValueError as e:
            valid = ", ".join(k.value for k in CellKind)
            raise ConfigurationError(
                f"Unknown cell kind {item!r} in option '{name}'; expected one of: {valid}."
            ) from e
    if not kinds:
        raise ConfigurationError(f"Option '{name}' must name at least one cell kind.")
    return tuple(dict.fromkeys(kinds))


OptionSpec = Tuple[Callable[[str, Any], Any], Any]

SCHEME_OPTIONS: Dict[Scheme, Dict[str, OptionSpec]] = {
    Scheme.FINITE_VOLUME: {
        "diffusivity": (_diffusivity, 1.0),
        "velocity": (_velocity, (0.0, 0.0, 0.0)),
        "upwind": (_flag, True),
        "cell_shapes": (_cell_shapes, tuple(CellKind)),
    },
    Scheme.FINITE_ELEMENT: {
        "diffusivity": (_diffusivity, 1.0),
        "velocity": (_velocity, (0.0, 0.0, 0.0)),
    },
}


def _parse_enum(enum_cls, value: Any, what: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        valid = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(f"Unknown {what} {value!r}; expected one of: {valid}.") from e


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class DiscretizerConfig:
    """
    Validated discretizer configuration.

    `scheme` and `operator` may be given as enum members or their string
    identifiers. `options` is replaced by the full, resolved option set for
    the scheme, with defaults filled in.

    Attributes:
        scheme (Scheme): The discretization scheme.
        operator (Operator): The governing operator to assemble.
        options (Mapping[str, Any]): Resolved scheme options, read-only.

    Raises:
        ConfigurationError: For an unknown scheme, operator or option, or an
            option value of the wrong type.
    """

    scheme: Scheme
    operator: Operator = Operator.DIFFUSION
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        scheme = _parse_enum(Scheme, self.scheme, "scheme")
        operator = _parse_enum(Operator, self.operator, "operator")
        if not isinstance(self.options, Mapping):
            raise ConfigurationError(f"Options must be a mapping, got {type(self.options).__name__}.")

        allowed = SCHEME_OPTIONS[scheme]
        unknown = sorted(set(self.options) - set(allowed))
        if unknown:
            raise ConfigurationError(
                f"Unknown option(s) {unknown} for scheme '{scheme.value}'; "
                f"expected a subset of {sorted(allowed)}."
            )

        resolved = {}
        for name, (validate, default) in allowed.items():
            resolved[name] = validate(name, self.options[name]) if name in self.options else default

        object.__setattr__(self, "scheme", scheme)
        object.__setattr__(self, "operator", operator)
        object.__setattr__(self, "options", MappingProxyType(resolved))

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "DiscretizerConfig":
        """Creates a configuration from a ``{"scheme", "operator", "options"}`` mapping."""
        if not isinstance(config, Mapping):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(config).__name__}.")
        unknown = sorted(set(config) - {"scheme", "operator", "options"})
        if unknown:
            raise ConfigurationError(f"Unknown configuration key(s): {unknown}.")
        if "scheme" not in config:
            raise ConfigurationError("Configuration is missing the 'scheme' key.")
        return cls(
            scheme=config["scheme"],
            operator=config.get("operator", Operator.DIFFUSION),
            options=config.get("options") or {},
        )

    @classmethod
    def from_json(cls, filename: str) -> "DiscretizerConfig":
        """Reads a configuration mapping from a JSON file."""
        with open(filename, "r", encoding="utf-8") as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {filename}: {e}") from e
        return cls.from_dict(data)

    def option(self, name: str) -> Any:
        return self.options[name]
