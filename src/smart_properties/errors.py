"""Structured error taxonomy for declaration, assignment and construction."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from smart_properties.constants import REASON_MUST_BE_SET, REASON_NOT_ACCEPTED

if TYPE_CHECKING:
    from smart_properties.property import PropertyDefinition


class SmartPropertiesError(ValueError):
    """Root of every error raised by the property runtime."""


class ConfigurationError(SmartPropertiesError):
    """Raised at declaration time for unsupported or unsafe options."""

    def __init__(self, message: str, *, unsupported: Iterable[str] = ()) -> None:
        self.unsupported = tuple(sorted(unsupported))
        super().__init__(message)

    @classmethod
    def unsupported_options(cls, keys: Iterable[str]) -> ConfigurationError:
        names = sorted(str(key) for key in keys)
        return cls(
            "SmartProperties do not support the following configuration options: "
            f"{', '.join(names)}.",
            unsupported=names,
        )


class AssignmentError(SmartPropertiesError):
    """A single value was rejected while being assigned to a property."""

    def __init__(self, sender: object, property: PropertyDefinition, message: str) -> None:
        self.sender = sender
        self.property = property
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        return {self.property.name: str(self)}


class MissingValueError(AssignmentError):
    def __init__(self, sender: object, property: PropertyDefinition) -> None:
        super().__init__(
            sender,
            property,
            f"{_type_name(sender)} requires the property {property.name} to be set",
        )

    def to_dict(self) -> dict[str, str]:
        return {self.property.name: REASON_MUST_BE_SET}


class InvalidValueError(AssignmentError):
    def __init__(self, sender: object, property: PropertyDefinition, value: object) -> None:
        self.value = value
        super().__init__(
            sender,
            property,
            f"{_type_name(sender)} does not accept {value!r} as value "
            f"for the property {property.name}",
        )

    def to_dict(self) -> dict[str, str]:
        return {self.property.name: REASON_NOT_ACCEPTED.format(value=repr(self.value))}


class InitializationError(SmartPropertiesError):
    """Construction finished with required properties still absent."""

    def __init__(self, sender: object, properties: Iterable[PropertyDefinition]) -> None:
        self.sender = sender
        self.properties = tuple(properties)
        names = sorted(item.name for item in self.properties)
        super().__init__(
            f"{_type_name(sender)} requires the following properties to be set: "
            f"{', '.join(names)}"
        )

    @property
    def property(self) -> tuple[PropertyDefinition, ...]:
        return self.properties

    def to_dict(self) -> dict[str, str]:
        return {item.name: REASON_MUST_BE_SET for item in self.properties}


class ConstructorArgumentForwardingError(SmartPropertiesError):
    """Unrecognized constructor arguments were refused by the base initializer."""

    def __init__(
        self,
        sender: object,
        positional: Iterable[object],
        keywords: Mapping[str, object],
    ) -> None:
        self.sender = sender
        self.positional = tuple(positional)
        self.keywords = dict(keywords)
        rendered: list[str] = []
        if self.positional:
            rendered.append(f"{len(self.positional)} positional argument(s)")
        if self.keywords:
            rendered.append(f"keyword argument(s) {', '.join(sorted(self.keywords))}")
        super().__init__(
            f"{_type_name(sender)} could not forward {' and '.join(rendered)} "
            "to its base initializer"
        )

    def to_dict(self) -> dict[str, str]:
        return {name: "is not a known property" for name in sorted(self.keywords)}


def _type_name(sender: object) -> str:
    return type(sender).__name__


__all__ = [
    "AssignmentError",
    "ConfigurationError",
    "ConstructorArgumentForwardingError",
    "InitializationError",
    "InvalidValueError",
    "MissingValueError",
    "SmartPropertiesError",
]
