"""
smart-properties: unit tests for property registries

Purpose
- Verify inheritance-aware lookup, push propagation to existing subclasses,
  override ordering and registry adoption for late schema-bearing bases.

What this test file should cover
- Merged enumeration order across a hierarchy.
- Late declarations on a base class reaching subclasses created earlier.
- Overrides keeping their original position and stopping propagation.
- Deterministic property coverage for arbitrary declaration sequences.
"""

from __future__ import annotations

import gc
import logging

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from smart_properties import SmartProperties, prop
from smart_properties.constants import REGISTRY_ATTRIBUTE
from smart_properties.registry import PropertyRegistry, declare, registry_for


def test_subclass_registry_links_to_parent_and_merges() -> None:
    class Base(SmartProperties):
        title = prop(accepts=str)

    class Child(Base):
        body = prop(accepts=str)

    base_registry = registry_for(Base)
    child_registry = registry_for(Child)

    assert child_registry.parent is base_registry
    assert child_registry in base_registry.children
    assert list(child_registry) == ["title", "body"]
    assert child_registry.own_names() == ("body",)
    assert list(base_registry) == ["title"]
    assert child_registry["title"] is base_registry["title"]
    assert child_registry.has("body") and "body" in child_registry
    assert len(child_registry) == 2


def test_registry_lives_in_owner_dict() -> None:
    class Owner(SmartProperties):
        pass

    registry = Owner.__dict__[REGISTRY_ATTRIBUTE]

    assert isinstance(registry, PropertyRegistry)
    assert Owner.properties() is registry
    assert registry.owner is Owner


def test_late_base_declaration_propagates_to_existing_subclasses() -> None:
    class Base(SmartProperties):
        pass

    class Middle(Base):
        pass

    class Leaf(Middle):
        pass

    Base.declare_property("severity", accepts=range(1, 6), default=3)

    assert "severity" in registry_for(Middle)
    assert "severity" in registry_for(Leaf)
    assert Leaf().severity == 3


def test_override_keeps_position_and_stops_propagation() -> None:
    class Base(SmartProperties):
        first = prop()
        second = prop()
        third = prop()

    class Child(Base):
        second = prop(default="child")

    class GrandChild(Child):
        pass

    Base.declare_property("second", default="base")

    assert list(registry_for(Child)) == ["first", "second", "third"]
    assert registry_for(Child)["second"].default == "child"
    assert registry_for(GrandChild)["second"].default == "child"
    assert registry_for(Base)["second"].default == "base"


def test_late_base_declaration_is_ordered_before_existing_child_names() -> None:
    class Base(SmartProperties):
        pass

    class Child(Base):
        own = prop()

    class GrandChild(Child):
        leaf = prop()

    Base.declare_property("late")

    class Fresh(Base):
        own = prop()

    assert list(registry_for(Child)) == ["late", "own"]
    assert list(registry_for(GrandChild)) == ["late", "own", "leaf"]
    assert list(registry_for(Fresh)) == list(registry_for(Child))


def test_late_base_declaration_moves_existing_override_to_parent_slot() -> None:
    class Base(SmartProperties):
        first = prop()

    class Child(Base):
        extra = prop()
        shared = prop(default="child")

    Base.declare_property("shared", default="base")
    Base.declare_property("last")

    assert list(registry_for(Child)) == ["first", "shared", "last", "extra"]
    assert registry_for(Child)["shared"].default == "child"
    assert Child().shared == "child"


def test_redeclaring_on_same_class_replaces_definition() -> None:
    class Item(SmartProperties):
        size = prop(default=1)

    Item.declare_property("size", default=2)

    assert list(registry_for(Item)) == ["size"]
    assert Item().size == 2


def test_plain_base_gaining_first_property_adopts_existing_subclass_registries() -> None:
    class Plain:
        pass

    class Model(Plain, SmartProperties):
        name = prop()

    model_registry = registry_for(Model)
    assert model_registry.parent is None

    declare(Plain, "origin", default="plain")

    assert model_registry.parent is registry_for(Plain)
    assert list(model_registry) == ["origin", "name"]
    assert Model().origin == "plain"


def test_registry_is_created_lazily_for_plain_classes() -> None:
    class Settings:
        pass

    assert REGISTRY_ATTRIBUTE not in Settings.__dict__
    registry = registry_for(Settings)

    assert Settings.__dict__[REGISTRY_ATTRIBUTE] is registry
    assert registry_for(Settings) is registry
    assert len(registry) == 0


def test_registries_compare_by_identity() -> None:
    class First(SmartProperties):
        pass

    class Second(SmartProperties):
        pass

    assert registry_for(First) != registry_for(Second)
    assert len({registry_for(First), registry_for(Second)}) == 2


def test_children_are_weakly_referenced() -> None:
    class Base(SmartProperties):
        pass

    def make_child() -> None:
        type("Temporary", (Base,), {})

    make_child()
    gc.collect()

    assert registry_for(Base).children == ()


def test_describe_lists_merged_definitions_in_order() -> None:
    class Base(SmartProperties):
        title = prop(accepts=str)

    class Child(Base):
        visible = prop(default=False, reader="is_visible")

    described = registry_for(Child).describe()

    assert [item["name"] for item in described] == ["title", "visible"]
    assert described[1]["reader"] == "is_visible"


def test_declaration_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    class Logged(SmartProperties):
        pass

    with caplog.at_level(logging.DEBUG, logger="smart_properties"):
        Logged.declare_property("title", accepts=str)

    records = [record for record in caplog.records if record.getMessage() == "property_declared"]
    assert len(records) == 1
    assert records[0].owner.endswith("Logged")
    assert records[0].property_name == "title"
    assert records[0].stages == ["accept"]


_NAMES = st.sampled_from(("alpha", "beta", "gamma", "delta"))


@settings(max_examples=40, derandomize=True, deadline=None)
@given(
    base_names=st.lists(_NAMES, max_size=6),
    child_names=st.lists(_NAMES, max_size=6),
    late_names=st.lists(_NAMES, max_size=6),
)
def test_merged_view_matches_mro_lookup(
    base_names: list[str], child_names: list[str], late_names: list[str]
) -> None:
    class Base(SmartProperties):
        pass

    for name in base_names:
        Base.declare_property(name, default=f"base-{name}")

    class Child(Base):
        pass

    for name in child_names:
        Child.declare_property(name, default=f"child-{name}")
    for name in late_names:
        Base.declare_property(name, default=f"late-{name}")

    expected_order: list[str] = []
    for name in [*base_names, *late_names, *child_names]:
        if name not in expected_order:
            expected_order.append(name)

    child_registry = registry_for(Child)
    assert list(child_registry) == expected_order
    assert list(child_registry) == list({**dict(registry_for(Base)), **dict.fromkeys(child_names)})
    for name in child_registry:
        owner = Child if name in child_names else Base
        assert child_registry[name] is registry_for(owner)[name]
