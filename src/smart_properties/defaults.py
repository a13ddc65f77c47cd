"""Default-value sources: safe literals and generators."""

from __future__ import annotations

import numbers
import uuid
from dataclasses import is_dataclass
from datetime import date, time, timedelta
from enum import Enum
from pathlib import PurePath
from typing import Final

from smart_properties.absence import MISSING
from smart_properties.errors import ConfigurationError
from smart_properties.rules import WithInstance

_SAFE_SCALAR_TYPES: Final[tuple[type, ...]] = (
    bool,
    numbers.Number,
    str,
    bytes,
    range,
    Enum,
    date,
    time,
    timedelta,
    uuid.UUID,
    PurePath,
)


def is_generator(source: object) -> bool:
    return callable(source)


def is_safe_literal(value: object) -> bool:
    """Return whether ``value`` can be shared between instances as a default."""

    if value is None or value is MISSING:
        return True
    if isinstance(value, _SAFE_SCALAR_TYPES):
        return True
    if isinstance(value, (tuple, frozenset)):
        return all(is_safe_literal(item) for item in value)
    if is_dataclass(value) and not isinstance(value, type):
        return bool(value.__dataclass_params__.frozen)  # type: ignore[attr-defined]
    return False


def validate_default(property_name: str, source: object) -> object:
    """Return ``source`` unchanged or raise for mutable literal defaults."""

    if is_generator(source) or is_safe_literal(source):
        return source
    raise ConfigurationError(
        f"the default for property {property_name} is a mutable "
        f"{type(source).__name__} that would be shared by every instance; "
        "pass a callable that builds a fresh value instead (for example default=list)"
    )


def resolve_default(source: object, instance: object) -> object:
    """Evaluate a default source for one instance."""

    if source is MISSING:
        return MISSING
    if isinstance(source, WithInstance):
        return source.func(instance)
    if is_generator(source):
        return source()  # type: ignore[operator]
    return source


__all__ = ["is_generator", "is_safe_literal", "resolve_default", "validate_default"]
