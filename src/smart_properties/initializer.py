"""Keyword-driven construction protocol.

Construction is a single ordered pass with no rollback:

1. split keyword arguments into declared properties and everything else;
2. forward positional arguments and unrecognized keywords to the base
   initializer;
3. assign declared properties in registry order;
4. run the optional ``configure`` callback;
5. fill defaults for properties that are still absent, in registry order,
   so generators may read siblings that were already assigned or defaulted;
6. raise a single :class:`InitializationError` naming every required
   property that is still absent.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from smart_properties.errors import (
    AssignmentError,
    ConstructorArgumentForwardingError,
    InitializationError,
)
from smart_properties.observability.logging import get_logger
from smart_properties.registry import PropertyRegistry

ConfigureCallback = Callable[[object], object]
BaseInitializer = Callable[..., object]

_logger = get_logger(__name__)


def partition_attributes(
    registry: PropertyRegistry, attrs: Mapping[str, object]
) -> tuple[dict[str, object], dict[str, object]]:
    recognized: dict[str, object] = {}
    unrecognized: dict[str, object] = {}
    for key, value in attrs.items():
        if key in registry:
            recognized[key] = value
        else:
            unrecognized[key] = value
    return recognized, unrecognized


def initialize(
    instance: object,
    registry: PropertyRegistry,
    args: Sequence[object],
    attrs: Mapping[str, object],
    *,
    base_init: BaseInitializer,
    configure: ConfigureCallback | None = None,
) -> None:
    recognized, unrecognized = partition_attributes(registry, attrs)

    try:
        base_init(*args, **unrecognized)
    except TypeError as exc:
        if not args and not unrecognized:
            raise
        raise ConstructorArgumentForwardingError(instance, args, unrecognized) from exc

    definitions = tuple(registry.values())
    try:
        for definition in definitions:
            if definition.name in recognized:
                definition.set(instance, recognized[definition.name])
    except AssignmentError as exc:
        _logger.debug(
            "initialization_failed",
            owner=type(instance).__qualname__,
            stage="assign",
            errors=exc.to_dict(),
        )
        raise

    if configure is not None:
        configure(instance)

    for definition in definitions:
        if not definition.is_present(instance):
            definition.set_default(instance)

    missing = tuple(definition for definition in definitions if definition.is_missing(instance))
    if missing:
        error = InitializationError(instance, missing)
        _logger.debug(
            "initialization_failed",
            owner=type(instance).__qualname__,
            stage="validate",
            errors=error.to_dict(),
        )
        raise error


__all__ = ["BaseInitializer", "ConfigureCallback", "initialize", "partition_attributes"]
