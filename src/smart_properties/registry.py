"""Per-class property registries with push-based propagation to subclasses.

Every schema-bearing class owns one :class:`PropertyRegistry` in its own
``__dict__``. A registry keeps two maps: ``own`` (declared on this class) and
``merged`` (inherited view, own entries win). When a definition is declared
the registry updates its maps and pushes the change depth-first into every
descendant registry, so lookups never walk the MRO.

Declarations for one class hierarchy must be serialized by the caller; they
normally happen while classes and modules are being imported.
"""

from __future__ import annotations

import weakref
from collections.abc import Iterator, Mapping
from typing import Any

from smart_properties.constants import REGISTRY_ATTRIBUTE
from smart_properties.observability.logging import get_logger
from smart_properties.property import PropertyDefinition, install_accessors

_logger = get_logger(__name__)


class PropertyRegistry(Mapping[str, PropertyDefinition]):
    """Ordered, inheritance-aware collection of property definitions."""

    __slots__ = ("owner", "parent", "_own", "_merged", "_children", "__weakref__")

    def __init__(self, owner: type, parent: PropertyRegistry | None = None) -> None:
        self.owner = owner
        self.parent: PropertyRegistry | None = None
        self._own: dict[str, PropertyDefinition] = {}
        self._merged: dict[str, PropertyDefinition] = {}
        self._children: weakref.WeakSet[PropertyRegistry] = weakref.WeakSet()
        if parent is not None:
            parent.register(self)

    # -- Mapping protocol over the merged view --------------------------------

    def __getitem__(self, name: str) -> PropertyDefinition:
        return self._merged[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._merged)

    def __len__(self) -> int:
        return len(self._merged)

    def __contains__(self, name: object) -> bool:
        return name in self._merged

    # Registries are identity objects; Mapping would compare them by content.
    def __eq__(self, other: object) -> bool:
        return self is other

    __hash__ = object.__hash__

    def has(self, name: str) -> bool:
        return name in self._merged

    def own_names(self) -> tuple[str, ...]:
        return tuple(self._own)

    @property
    def children(self) -> tuple[PropertyRegistry, ...]:
        return tuple(sorted(self._children, key=lambda item: item.owner.__qualname__))

    # -- Mutation --------------------------------------------------------------

    def declare(self, name: str, **options: object) -> PropertyDefinition:
        """Build a definition, install its accessors on the owner and record it."""

        definition = PropertyDefinition.build(name, options)
        install_accessors(self.owner, definition)
        updated = self.add(definition)
        _logger.debug(
            "property_declared",
            owner=self.owner.__qualname__,
            property_name=definition.name,
            stages=[stage.kind.value for stage in definition.pipeline],
            descendants_updated=updated,
        )
        return definition

    def add(self, definition: PropertyDefinition) -> int:
        """Record ``definition`` and return how many descendants were updated."""

        self._own[definition.name] = definition
        self._rebuild()
        updated = 0
        for child in list(self._children):
            updated += child._inherit(definition)
        return updated

    def register(self, child: PropertyRegistry) -> None:
        """Link ``child`` and seed its merged view from this registry."""

        if child.parent is not None and child.parent is not self:
            child.parent._children.discard(child)
        child.parent = self
        self._children.add(child)
        child._reseed()

    def _rebuild(self) -> None:
        # Parent names first in parent order; own entries overlay in place.
        merged = dict(self.parent._merged) if self.parent is not None else {}
        merged.update(self._own)
        self._merged = merged

    def _reseed(self) -> None:
        self._rebuild()
        for child in list(self._children):
            child._reseed()

    def _inherit(self, definition: PropertyDefinition) -> int:
        if definition.name in self._own:
            # The override keeps its definition but may move to the parent slot.
            self._reseed()
            return 0
        self._rebuild()
        updated = 1
        for child in list(self._children):
            updated += child._inherit(definition)
        return updated

    # -- Introspection ---------------------------------------------------------

    def describe(self) -> list[dict[str, Any]]:
        return [definition.to_dict() for definition in self._merged.values()]

    def __repr__(self) -> str:
        return f"<PropertyRegistry {self.owner.__qualname__} [{', '.join(self._merged)}]>"


def registry_for(cls: type) -> PropertyRegistry:
    """Return the registry owned by ``cls``, creating and linking it on demand."""

    registry = cls.__dict__.get(REGISTRY_ATTRIBUTE)
    if isinstance(registry, PropertyRegistry):
        return registry

    parent = _nearest_registry(cls)
    registry = PropertyRegistry(cls, parent)
    setattr(cls, REGISTRY_ATTRIBUTE, registry)
    adopted = _adopt_descendants(cls, registry)
    _logger.debug(
        "registry_created",
        owner=cls.__qualname__,
        parent_owner=parent.owner.__qualname__ if parent is not None else None,
        adopted=adopted,
    )
    return registry


def declare(cls: type, name: str, **options: object) -> PropertyDefinition:
    """Declare property ``name`` on ``cls`` and install its accessors."""

    return registry_for(cls).declare(name, **options)


def lookup_registry(cls: type) -> PropertyRegistry | None:
    """Return the registry that governs ``cls`` without creating or relinking any."""

    for ancestor in cls.__mro__:
        registry = ancestor.__dict__.get(REGISTRY_ATTRIBUTE)
        if isinstance(registry, PropertyRegistry):
            return registry
    return None


def _nearest_registry(cls: type) -> PropertyRegistry | None:
    for ancestor in cls.__mro__[1:]:
        registry = ancestor.__dict__.get(REGISTRY_ATTRIBUTE)
        if isinstance(registry, PropertyRegistry):
            return registry
    return None


def _adopt_descendants(cls: type, registry: PropertyRegistry) -> int:
    # Subclasses created before ``cls`` became schema-bearing are linked to a
    # registry further up the hierarchy (or to none); move them under ``cls``.
    adopted = 0
    pending = list(type.__subclasses__(cls))
    seen: set[int] = set()
    while pending:
        subclass = pending.pop()
        if id(subclass) in seen:
            continue
        seen.add(id(subclass))
        existing = subclass.__dict__.get(REGISTRY_ATTRIBUTE)
        if isinstance(existing, PropertyRegistry):
            if existing.parent is not registry and _nearest_registry(subclass) is registry:
                registry.register(existing)
                adopted += 1
            continue
        pending.extend(type.__subclasses__(subclass))
    return adopted


__all__ = ["PropertyRegistry", "declare", "lookup_registry", "registry_for"]
