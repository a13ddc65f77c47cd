"""Subscript access to declared properties: ``obj["title"]``."""

from __future__ import annotations

from typing import Any

from smart_properties.registry import registry_for


class IndexedAccess:
    """Mixin routing ``obj[name]`` to the property reader and writer.

    Names that are not declared properties are passed on to the next
    ``__getitem__``/``__setitem__`` in the MRO, or raise ``KeyError``.
    """

    __slots__ = ()

    def __getitem__(self, name: str) -> Any:
        definition = registry_for(type(self)).get(name) if isinstance(name, str) else None
        if definition is not None:
            return getattr(self, definition.reader)
        fallback = getattr(super(), "__getitem__", None)
        if fallback is None:
            raise KeyError(name)
        return fallback(name)

    def __setitem__(self, name: str, value: object) -> None:
        definition = registry_for(type(self)).get(name) if isinstance(name, str) else None
        if definition is not None:
            setattr(self, definition.name, value)
            return
        fallback = getattr(super(), "__setitem__", None)
        if fallback is None:
            raise KeyError(name)
        fallback(name, value)


__all__ = ["IndexedAccess"]
