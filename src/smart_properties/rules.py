"""Rule stages: the atomic steps of a property's assignment pipeline.

Each stage is configured once at declaration time and is invoked as
``stage(instance, definition, value)``. A stage returns the (possibly
converted) value or raises. Callables that need the instance being
configured are wrapped with :func:`with_instance` and receive it as their
first argument.
"""

from __future__ import annotations

import numbers
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar, Final

from smart_properties.absence import is_absent
from smart_properties.constants import OPTION_ACCEPTS, OPTION_CONVERTS, OPTION_REQUIRED
from smart_properties.errors import ConfigurationError, InvalidValueError, MissingValueError

if TYPE_CHECKING:
    from smart_properties.property import PropertyDefinition

_ALTERNATIVE_TYPES: Final[tuple[type, ...]] = (list, tuple, set, frozenset)


class StageKind(StrEnum):
    REQUIRED = "required"
    CONVERT = "convert"
    ACCEPT = "accept"


@dataclass(frozen=True, slots=True)
class WithInstance:
    """Marks a callable that takes the configured instance as first argument."""

    func: Callable[..., object]

    def __call__(self, instance: object, *args: object) -> object:
        return self.func(instance, *args)


def with_instance(func: Callable[..., object]) -> WithInstance:
    """Wrap ``func`` so rule stages and default generators pass the instance.

    Usable as a decorator::

        @with_instance
        def slug_default(article):
            return article.title.lower()
    """

    if isinstance(func, WithInstance):
        return func
    if not callable(func):
        raise ConfigurationError(f"with_instance expects a callable, got {type(func).__name__}")
    return WithInstance(func)


def invoke(config: Callable[..., object], instance: object, *args: object) -> object:
    if isinstance(config, WithInstance):
        return config.func(instance, *args)
    return config(*args)


class RuleStage(ABC):
    """One configured pipeline step."""

    __slots__ = ("config",)

    kind: ClassVar[StageKind]
    option: ClassVar[str]

    def __init__(self, config: object) -> None:
        self.config = config

    @abstractmethod
    def __call__(self, instance: object, definition: PropertyDefinition, value: object) -> object:
        """Return the value to pass on to the next stage or raise."""

    def describe(self) -> str:
        return f"{self.kind.value}:{describe_config(self.config)}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config!r})"


class RequiredCheck(RuleStage):
    __slots__ = ()

    kind = StageKind.REQUIRED
    option = OPTION_REQUIRED

    def __init__(self, config: object) -> None:
        if not isinstance(config, bool) and not callable(config):
            raise ConfigurationError(
                f"required must be a boolean or a predicate, got {type(config).__name__}"
            )
        super().__init__(config)

    def enabled(self, instance: object) -> bool:
        if isinstance(self.config, bool):
            return self.config
        predicate = self.config
        if isinstance(predicate, WithInstance):
            predicate = predicate.func
        return bool(predicate(instance))

    def __call__(self, instance: object, definition: PropertyDefinition, value: object) -> object:
        if self.enabled(instance) and is_absent(value):
            raise MissingValueError(instance, definition)
        return value


class Conversion(RuleStage):
    __slots__ = ()

    kind = StageKind.CONVERT
    option = OPTION_CONVERTS

    def __init__(self, config: object) -> None:
        if isinstance(config, str):
            if not config.isidentifier():
                raise ConfigurationError(f"converts names an invalid method: {config!r}")
        elif not callable(config):
            raise ConfigurationError(
                f"converts must be a method name or a callable, got {type(config).__name__}"
            )
        super().__init__(config)

    def __call__(self, instance: object, definition: PropertyDefinition, value: object) -> object:
        if is_absent(value):
            return value
        if isinstance(self.config, str):
            # A missing method surfaces as the caller's AttributeError.
            return getattr(value, self.config)()
        return invoke(self.config, instance, value)


class AcceptanceCheck(RuleStage):
    __slots__ = ()

    kind = StageKind.ACCEPT
    option = OPTION_ACCEPTS

    def accepts(self, instance: object, value: object) -> bool:
        if is_absent(value):
            return True
        config = self.config
        if callable(config) and not isinstance(config, type):
            return bool(invoke(config, instance, value))
        if isinstance(config, _ALTERNATIVE_TYPES):
            return any(matches(matcher, value, instance) for matcher in config)
        return matches(config, value, instance)

    def __call__(self, instance: object, definition: PropertyDefinition, value: object) -> object:
        if not self.accepts(instance, value):
            raise InvalidValueError(instance, definition, value)
        return value


def matches(matcher: object, value: object, instance: object | None = None) -> bool:
    """Return whether ``value`` satisfies one acceptance matcher."""

    if isinstance(matcher, type):
        return isinstance(value, matcher)
    if isinstance(matcher, re.Pattern):
        if not isinstance(value, type(matcher.pattern)):
            return False
        return matcher.search(value) is not None
    if isinstance(matcher, range):
        return _in_range(matcher, value)
    if callable(matcher):
        return bool(invoke(matcher, instance, value))
    if isinstance(matcher, bool) or isinstance(value, bool):
        return matcher is value
    return bool(matcher == value)


def _in_range(matcher: range, value: object) -> bool:
    # Integral reals such as 2.0 count as members; fractional values never do.
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    if isinstance(value, int):
        return value in matcher
    if not float(value).is_integer():
        return False
    return int(value) in matcher


def build_pipeline(options: dict[str, object]) -> tuple[RuleStage, ...]:
    """Assemble the ordered stages for whichever options were configured."""

    required = options.get(OPTION_REQUIRED)
    converts = options.get(OPTION_CONVERTS)
    accepts = options.get(OPTION_ACCEPTS)

    stages: list[RuleStage] = []
    if required is not None:
        stages.append(RequiredCheck(required))
    if converts is not None:
        stages.append(Conversion(converts))
        # Conversion may turn a present value into an absent one.
        if required is not None:
            stages.append(RequiredCheck(required))
    if accepts is not None:
        stages.append(AcceptanceCheck(accepts))
    return tuple(stages)


def describe_config(config: object) -> str:
    if isinstance(config, WithInstance):
        return f"with_instance({describe_config(config.func)})"
    if isinstance(config, type):
        return config.__qualname__
    if isinstance(config, re.Pattern):
        return f"/{config.pattern!s}/"
    if isinstance(config, _ALTERNATIVE_TYPES):
        return "[" + ", ".join(describe_config(item) for item in config) + "]"
    if callable(config):
        return getattr(config, "__qualname__", None) or type(config).__name__
    return repr(config)


__all__ = [
    "AcceptanceCheck",
    "Conversion",
    "RequiredCheck",
    "RuleStage",
    "StageKind",
    "WithInstance",
    "build_pipeline",
    "describe_config",
    "invoke",
    "matches",
    "with_instance",
]
