"""Declarative, validated properties for Python classes.

Classes declare named properties with optional requiredness, conversion,
acceptance rules and defaults; instances are built from keyword arguments
and validated as a whole::

    from smart_properties import SmartProperties, prop

    class Article(SmartProperties):
        title = prop(accepts=str, converts="title", required=True)
        flag = prop(accepts=(True, False), default=False)
"""

from smart_properties.absence import MISSING, is_absent, is_present
from smart_properties.constants import VERSION
from smart_properties.errors import (
    AssignmentError,
    ConfigurationError,
    ConstructorArgumentForwardingError,
    InitializationError,
    InvalidValueError,
    MissingValueError,
    SmartPropertiesError,
)
from smart_properties.model import (
    PropertySpec,
    SmartProperties,
    construct,
    get_property,
    prop,
    required_prop,
    set_property,
)
from smart_properties.property import PropertyDefinition
from smart_properties.registry import PropertyRegistry, declare, lookup_registry, registry_for
from smart_properties.rules import StageKind, with_instance

__version__ = VERSION

__all__ = [
    "AssignmentError",
    "ConfigurationError",
    "ConstructorArgumentForwardingError",
    "InitializationError",
    "InvalidValueError",
    "MISSING",
    "MissingValueError",
    "PropertyDefinition",
    "PropertyRegistry",
    "PropertySpec",
    "SmartProperties",
    "SmartPropertiesError",
    "StageKind",
    "__version__",
    "construct",
    "declare",
    "get_property",
    "is_absent",
    "is_present",
    "lookup_registry",
    "prop",
    "registry_for",
    "required_prop",
    "set_property",
    "with_instance",
]
