"""
smart-properties: unit tests for the absence check

Purpose
- ``None`` and ``MISSING`` are absent, falsy values are present, and the
  null-object protocol is resolved on the type without implicit hooks.
"""

from __future__ import annotations

import pytest

from smart_properties.absence import MISSING, is_absent, is_present


class NullUser:
    __absent__ = True


class MaybeValue:
    def __init__(self, empty: bool) -> None:
        self.empty = empty

    def __absent__(self) -> bool:
        return self.empty


class LazyValue:
    def __init__(self, loaded: bool) -> None:
        self.loaded = loaded

    @property
    def __absent__(self) -> bool:
        return not self.loaded


class ExplodingEquality:
    def __eq__(self, other: object) -> bool:
        raise AssertionError("absence must not use ==")

    def __bool__(self) -> bool:
        raise AssertionError("absence must not use bool()")


class GetattrProxy:
    def __getattr__(self, name: str) -> object:
        raise AssertionError(f"absence must not consult __getattr__ for {name}")


class BrokenHook:
    def __absent__(self) -> bool:
        raise RuntimeError("hook failed")


def test_none_and_missing_are_absent() -> None:
    assert is_absent(None)
    assert is_absent(MISSING)
    assert not is_present(MISSING)


@pytest.mark.parametrize("value", [False, 0, 0.0, "", b"", [], {}, ()])
def test_falsy_values_are_present(value: object) -> None:
    assert is_present(value)


def test_missing_sentinel_repr_and_truthiness() -> None:
    assert repr(MISSING) == "MISSING"
    assert not MISSING


def test_null_object_protocol_attribute_and_method() -> None:
    assert is_absent(NullUser())
    assert is_absent(MaybeValue(empty=True))
    assert is_present(MaybeValue(empty=False))


def test_null_object_protocol_property() -> None:
    assert is_absent(LazyValue(loaded=False))
    assert is_present(LazyValue(loaded=True))


def test_hook_lookup_never_touches_equality_truthiness_or_getattr() -> None:
    assert is_present(ExplodingEquality())
    assert is_present(GetattrProxy())


def test_instance_attribute_does_not_opt_into_protocol() -> None:
    value = MaybeValue(empty=False)
    value.__absent__ = True  # type: ignore[method-assign]

    assert is_present(value)


def test_hook_failures_propagate() -> None:
    with pytest.raises(RuntimeError, match="hook failed"):
        is_absent(BrokenHook())
