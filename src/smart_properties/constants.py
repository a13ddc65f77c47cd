"""Stable constants shared across the property runtime and its tooling."""

from __future__ import annotations

from typing import Final

VERSION: Final[str] = "1.4.0"

# Declaration option keys.
OPTION_REQUIRED: Final[str] = "required"
OPTION_CONVERTS: Final[str] = "converts"
OPTION_ACCEPTS: Final[str] = "accepts"
OPTION_DEFAULT: Final[str] = "default"
OPTION_READER: Final[str] = "reader"
OPTION_WRITABLE: Final[str] = "writable"

SUPPORTED_OPTIONS: Final[frozenset[str]] = frozenset(
    {
        OPTION_REQUIRED,
        OPTION_CONVERTS,
        OPTION_ACCEPTS,
        OPTION_DEFAULT,
        OPTION_READER,
        OPTION_WRITABLE,
    }
)

# Names that would shadow the construction protocol or class-level API.
RESERVED_PROPERTY_NAMES: Final[frozenset[str]] = frozenset(
    {
        "configure",
        "properties",
        "declare_property",
        "declare_required_property",
    }
)

# Attribute under which a class owns its registry.
REGISTRY_ATTRIBUTE: Final[str] = "__smart_properties_registry__"

# Null-object protocol hook consulted by the absence check.
ABSENCE_PROTOCOL: Final[str] = "__absent__"

# Human-readable reasons used in structured error maps.
REASON_MUST_BE_SET: Final[str] = "must be set"
REASON_NOT_ACCEPTED: Final[str] = "does not accept {value} as value"

# Declaration calls recognised by the defaults lint.
DEFAULT_DECLARATION_CALLS: Final[tuple[str, ...]] = (
    "prop",
    "required_prop",
    "declare",
    "declare_property",
    "declare_required_property",
)
DEFAULT_IMMUTABLE_CALLS: Final[tuple[str, ...]] = (
    "frozenset",
    "tuple",
    "range",
    "bytes",
    "str",
    "int",
    "float",
    "complex",
    "bool",
    "Decimal",
    "Fraction",
    "UUID",
    "PurePath",
    "PurePosixPath",
    "PureWindowsPath",
    "with_instance",
)

__all__ = [
    "ABSENCE_PROTOCOL",
    "DEFAULT_DECLARATION_CALLS",
    "DEFAULT_IMMUTABLE_CALLS",
    "OPTION_ACCEPTS",
    "OPTION_CONVERTS",
    "OPTION_DEFAULT",
    "OPTION_READER",
    "OPTION_REQUIRED",
    "OPTION_WRITABLE",
    "REASON_MUST_BE_SET",
    "REASON_NOT_ACCEPTED",
    "REGISTRY_ATTRIBUTE",
    "RESERVED_PROPERTY_NAMES",
    "SUPPORTED_OPTIONS",
    "VERSION",
]
