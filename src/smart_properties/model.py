"""Public base class and declaration helpers.

Example::

    class Article(SmartProperties):
        title = prop(accepts=str, converts="title", required=True, default=lambda: "Untitled")
        visible = prop(accepts=bool, default=False, reader="is_visible")

    Article.declare_property("severity", accepts=range(1, 6), default=3)

    article = Article(title="hello world")
    article.title       # 'Hello World'
    article.is_visible  # False
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from smart_properties.constants import OPTION_REQUIRED
from smart_properties.initializer import ConfigureCallback, initialize
from smart_properties.property import PropertyDefinition
from smart_properties.registry import PropertyRegistry, declare, registry_for

T = TypeVar("T")


class PropertySpec:
    """Class-body placeholder that declares a property when the class is built."""

    __slots__ = ("options", "definition")

    def __init__(self, options: dict[str, object]) -> None:
        self.options = options
        self.definition: PropertyDefinition | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.definition = declare(owner, name, **self.options)

    def __repr__(self) -> str:
        rendered = ", ".join(f"{key}={value!r}" for key, value in sorted(self.options.items()))
        return f"prop({rendered})"


def prop(**options: object) -> Any:
    """Declare a property in a class body; see :func:`declare` for options."""

    return PropertySpec(options)


def required_prop(**options: object) -> Any:
    options[OPTION_REQUIRED] = True
    return PropertySpec(options)


class SmartProperties:
    """Base class providing keyword construction over declared properties.

    ``Cls(*args, configure=None, **attrs)`` assigns declared properties from
    ``attrs``, forwards everything else to the next initializer in the MRO,
    calls ``configure(instance)``, fills defaults and finally validates that
    every required property holds a value.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        registry_for(cls)

    def __init__(
        self,
        *args: object,
        configure: ConfigureCallback | None = None,
        **attrs: object,
    ) -> None:
        initialize(
            self,
            registry_for(type(self)),
            args,
            attrs,
            base_init=super().__init__,
            configure=configure,
        )

    @classmethod
    def properties(cls) -> PropertyRegistry:
        return registry_for(cls)

    @classmethod
    def declare_property(cls, name: str, **options: object) -> PropertyDefinition:
        return declare(cls, name, **options)

    @classmethod
    def declare_required_property(cls, name: str, **options: object) -> PropertyDefinition:
        options[OPTION_REQUIRED] = True
        return declare(cls, name, **options)

    def __repr__(self) -> str:
        registry = registry_for(type(self))
        rendered = ", ".join(
            f"{name}={definition.get(self)!r}"
            for name, definition in registry.items()
            if definition.is_present(self)
        )
        return f"{type(self).__name__}({rendered})"


def construct(
    cls: type[T],
    *args: object,
    configure: Callable[[T], object] | None = None,
    **attrs: object,
) -> T:
    """Build an instance of ``cls`` through the construction protocol.

    Classes that do not derive from :class:`SmartProperties` are allocated
    with ``__new__`` and their own ``__init__`` receives the forwarded
    arguments.
    """

    if issubclass(cls, SmartProperties):
        return cls(*args, configure=configure, **attrs)

    instance = cls.__new__(cls)
    initialize(
        instance,
        registry_for(cls),
        args,
        attrs,
        base_init=instance.__init__,  # type: ignore[misc]
        configure=configure,  # type: ignore[arg-type]
    )
    return instance


def get_property(instance: object, name: str) -> Any:
    """Read property ``name`` through its reader; unknown names raise ``KeyError``."""

    definition = registry_for(type(instance)).get(name)
    if definition is None:
        raise KeyError(name)
    return getattr(instance, definition.reader)


def set_property(instance: object, name: str, value: object) -> None:
    """Assign property ``name`` through its writer; unknown names raise ``KeyError``."""

    definition = registry_for(type(instance)).get(name)
    if definition is None:
        raise KeyError(name)
    setattr(instance, definition.name, value)


__all__ = [
    "PropertySpec",
    "SmartProperties",
    "construct",
    "get_property",
    "prop",
    "required_prop",
    "set_property",
]
