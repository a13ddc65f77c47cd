"""Property definitions and the accessors generated for them."""

from __future__ import annotations

import keyword
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from smart_properties.absence import MISSING, is_absent
from smart_properties.constants import (
    OPTION_ACCEPTS,
    OPTION_CONVERTS,
    OPTION_DEFAULT,
    OPTION_READER,
    OPTION_REQUIRED,
    OPTION_WRITABLE,
    RESERVED_PROPERTY_NAMES,
    SUPPORTED_OPTIONS,
)
from smart_properties.defaults import resolve_default, validate_default
from smart_properties.errors import ConfigurationError
from smart_properties.rules import RequiredCheck, RuleStage, build_pipeline, describe_config


@dataclass(frozen=True, slots=True)
class PropertyDefinition:
    """Full configuration of one named attribute.

    Instances are immutable; re-declaring a name on the same class replaces
    the definition rather than mutating it.
    """

    name: str
    reader: str
    writable: bool
    storage_key: str
    default: object = MISSING
    required: object = None
    converts: object = None
    accepts: object = None
    pipeline: tuple[RuleStage, ...] = field(default=(), repr=False)

    @classmethod
    def build(cls, name: str, options: Mapping[str, object] | None = None) -> PropertyDefinition:
        """Validate declaration ``options`` and assemble the definition."""

        options = dict(options or {})
        unsupported = set(options) - SUPPORTED_OPTIONS
        if unsupported:
            raise ConfigurationError.unsupported_options(unsupported)

        _validate_name(name, "property name")
        reader = options.get(OPTION_READER)
        if reader is None:
            reader = name
        elif not isinstance(reader, str):
            raise ConfigurationError(f"reader for property {name} must be a string")
        else:
            _validate_name(reader, "reader name")

        writable = options.get(OPTION_WRITABLE, True)
        if not isinstance(writable, bool):
            raise ConfigurationError(f"writable for property {name} must be a boolean")

        default = options.get(OPTION_DEFAULT, MISSING)
        if default is None:
            default = MISSING
        default = validate_default(name, default)

        return cls(
            name=name,
            reader=reader,
            writable=writable,
            storage_key=name,
            default=default,
            required=options.get(OPTION_REQUIRED),
            converts=options.get(OPTION_CONVERTS),
            accepts=options.get(OPTION_ACCEPTS),
            pipeline=build_pipeline(options),
        )

    @property
    def required_check(self) -> RequiredCheck | None:
        for stage in self.pipeline:
            if isinstance(stage, RequiredCheck):
                return stage
        return None

    def is_required(self, instance: object) -> bool:
        check = self.required_check
        return check is not None and check.enabled(instance)

    def is_optional(self, instance: object) -> bool:
        return not self.is_required(instance)

    def is_present(self, instance: object) -> bool:
        return not is_absent(self.get(instance))

    def is_missing(self, instance: object) -> bool:
        return self.is_required(instance) and not self.is_present(instance)

    def prepare(self, instance: object, value: object) -> object:
        for stage in self.pipeline:
            value = stage(instance, self, value)
        return value

    def set(self, instance: object, value: object) -> object:
        prepared = self.prepare(instance, value)
        vars(instance)[self.storage_key] = prepared
        return prepared

    def get(self, instance: object) -> object:
        return vars(instance).get(self.storage_key, MISSING)

    def resolve_default(self, instance: object) -> object:
        return resolve_default(self.default, instance)

    def set_default(self, instance: object) -> bool:
        if self.is_present(instance):
            return False
        value = self.resolve_default(instance)
        if is_absent(value):
            return False
        self.set(instance, value)
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "reader": self.reader,
            "writable": self.writable,
            "storage_key": self.storage_key,
            "default": _describe(self.default),
            "required": _describe(self.required),
            "converts": _describe(self.converts),
            "accepts": _describe(self.accepts),
            "stages": [stage.describe() for stage in self.pipeline],
        }


class PropertyAccessor:
    """Data descriptor installed under the property name."""

    __slots__ = ("definition",)

    def __init__(self, definition: PropertyDefinition) -> None:
        self.definition = definition

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        value = self.definition.get(instance)
        return None if value is MISSING else value

    def __set__(self, instance: object, value: object) -> None:
        if not self.definition.writable:
            raise AttributeError(
                f"property {self.definition.name!r} of {type(instance).__name__!r} is read-only"
            )
        self.definition.set(instance, value)

    def __delete__(self, instance: object) -> None:
        raise AttributeError(
            f"property {self.definition.name!r} of {type(instance).__name__!r} cannot be deleted"
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.definition.name}>"


class ReaderAccessor(PropertyAccessor):
    """Read-only alias installed when ``reader`` differs from the name."""

    __slots__ = ()

    def __set__(self, instance: object, value: object) -> None:
        raise AttributeError(
            f"{self.definition.reader!r} is a reader for property {self.definition.name!r}; "
            f"assign to {self.definition.name!r} instead"
        )


def install_accessors(owner: type, definition: PropertyDefinition) -> None:
    previous = owner.__dict__.get(definition.name)
    if isinstance(previous, PropertyAccessor) and previous.definition.reader != definition.reader:
        alias = owner.__dict__.get(previous.definition.reader)
        if isinstance(alias, ReaderAccessor) and alias.definition is previous.definition:
            delattr(owner, previous.definition.reader)
    setattr(owner, definition.name, PropertyAccessor(definition))
    if definition.reader != definition.name:
        setattr(owner, definition.reader, ReaderAccessor(definition))


def _validate_name(name: object, label: str) -> None:
    if not isinstance(name, str) or not name.isidentifier():
        raise ConfigurationError(f"{label} must be a valid identifier, got {name!r}")
    if keyword.iskeyword(name):
        raise ConfigurationError(f"{label} cannot be the keyword {name!r}")
    if name in RESERVED_PROPERTY_NAMES:
        raise ConfigurationError(f"{label} {name!r} is reserved")


def _describe(value: object) -> object:
    if value is MISSING or value is None:
        return None
    if isinstance(value, (bool, int, float, str)):
        return value
    return describe_config(value)


__all__ = [
    "PropertyAccessor",
    "PropertyDefinition",
    "ReaderAccessor",
    "install_accessors",
]
