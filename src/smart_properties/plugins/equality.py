"""Value equality over declared properties."""

from __future__ import annotations

from smart_properties.registry import registry_for


class Equality:
    """Mixin: two instances are equal when their types match and every property does.

    Each comparison evaluates ``self``'s value on the left, so values whose
    ``__eq__`` is custom decide the outcome. Instances become unhashable.
    """

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        registry = registry_for(type(self))
        return all(
            getattr(self, definition.reader) == getattr(other, definition.reader)
            for definition in registry.values()
        )

    __hash__ = None  # type: ignore[assignment]


__all__ = ["Equality"]
