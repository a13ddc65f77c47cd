"""Dictionary serialization for property-bearing objects."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, TypeVar

from smart_properties.registry import registry_for

TSerializable = TypeVar("TSerializable", bound="DictSerialization")


class DictSerialization:
    """Mixin adding ``to_dict``/``from_dict`` and a ``coerce`` converter.

    ``coerce`` is meant to be used as a ``converts`` callable so nested data
    can be assigned as plain mappings::

        class Person(SmartProperties, DictSerialization):
            employer = prop(converts=Employer.coerce)
    """

    __slots__ = ()

    include_absent: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for name, definition in registry_for(type(self)).items():
            value = getattr(self, definition.reader)
            if value is None and not self.include_absent:
                continue
            payload[name] = _serialize(value)
        return payload

    @classmethod
    def from_dict(cls: type[TSerializable], data: Mapping[str, object]) -> TSerializable:
        if not isinstance(data, Mapping):
            raise TypeError(f"{cls.__name__}.from_dict expects a mapping, got {type(data).__name__}")
        return cls(**{str(key): value for key, value in data.items()})

    @classmethod
    def coerce(cls: type[TSerializable], value: object) -> Any:
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.from_dict(value)
        if isinstance(value, (list, tuple)):
            return [cls.coerce(item) for item in value]
        raise TypeError(f"Unexpected type: {type(value).__name__}")


class CompactDictSerialization(DictSerialization):
    """Variant of :class:`DictSerialization` that omits absent properties."""

    __slots__ = ()

    include_absent = False


def _serialize(value: object) -> object:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, (list, tuple)) and value and all(
        callable(getattr(item, "to_dict", None)) for item in value
    ):
        return [item.to_dict() for item in value]
    return value


__all__ = ["CompactDictSerialization", "DictSerialization"]
