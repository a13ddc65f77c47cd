"""Absence sentinel and the safe absence check.

A value is *absent* when it is ``None``, the ``MISSING`` sentinel, or an
instance of a type that opts into the null-object protocol by defining
``__absent__``. The hook is resolved statically on the type so that
proxies, ``__getattr__`` hooks and types without a usable ``__eq__`` or
``__bool__`` are never consulted implicitly.
"""

from __future__ import annotations

import inspect
from enum import Enum
from typing import Final

from smart_properties.constants import ABSENCE_PROTOCOL


class _MissingType(Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _MissingType.MISSING

_NOT_DEFINED: Final = object()


def is_absent(value: object) -> bool:
    """Return ``True`` when ``value`` counts as "no value".

    Types that do not define ``__absent__`` are always present. A defined
    hook may be a boolean class attribute, a ``property`` or a method;
    exceptions raised by the hook propagate.
    """

    if value is None or value is MISSING:
        return True

    value_type = type(value)
    hook = inspect.getattr_static(value_type, ABSENCE_PROTOCOL, _NOT_DEFINED)
    if hook is _NOT_DEFINED:
        return False
    if isinstance(hook, bool):
        return hook

    binder = getattr(type(hook), "__get__", None)
    bound = binder(hook, value, value_type) if binder is not None else hook
    return bool(bound()) if callable(bound) else bool(bound)


def is_present(value: object) -> bool:
    return not is_absent(value)


__all__ = ["MISSING", "is_absent", "is_present"]
