"""
smart-properties: configuration schema and validation.

Purpose
- Define the built-in defaults for the lint and logging sections and strict
  validation rules for everything layered on top of them.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
- Reject unknown sections and keys.
- Provide a deterministic deep-merge helper used by the loader.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, TypedDict

from smart_properties.constants import DEFAULT_DECLARATION_CALLS, DEFAULT_IMMUTABLE_CALLS

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")
LINT_FORMATS: Final[tuple[str, ...]] = ("json", "text")

# Fields that hold lists of strings; environment variables supply them comma-separated.
LIST_FIELDS: Final[tuple[tuple[str, ...], ...]] = (
    ("lint", "roots"),
    ("lint", "exclude"),
    ("lint", "declaration_calls"),
    ("lint", "immutable_calls"),
)


class LintConfig(TypedDict):
    roots: list[str]
    exclude: list[str]
    declaration_calls: list[str]
    immutable_calls: list[str]
    format: str


class LoggingConfig(TypedDict):
    level: str
    format: str


class SmartPropertiesConfig(TypedDict):
    lint: LintConfig
    logging: LoggingConfig


DEFAULT_CONFIG: Final[SmartPropertiesConfig] = {
    "lint": {
        "roots": ["src"],
        "exclude": [],
        "declaration_calls": list(DEFAULT_DECLARATION_CALLS),
        "immutable_calls": list(DEFAULT_IMMUTABLE_CALLS),
        "format": "text",
    },
    "logging": {
        "level": "WARNING",
        "format": "text",
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> SmartPropertiesConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    _reject_unknown_keys(root, {"lint", "logging"}, "", issues)
    normalized: dict[str, Any] = {}
    _section(root, key="lint", issues=issues, validator=_validate_lint, out=normalized)
    _section(root, key="logging", issues=issues, validator=_validate_logging, out=normalized)

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _section(
    payload: Mapping[str, object],
    *,
    key: str,
    issues: _IssueCollector,
    validator: Callable[[dict[str, object], str, _IssueCollector], dict[str, Any]],
    out: dict[str, Any],
) -> None:
    raw = payload.get(key)
    if raw is None:
        return
    section_obj = _as_object(raw, key, issues)
    if section_obj is None:
        return
    out[key] = validator(section_obj, key, issues)


def _validate_lint(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"roots", "exclude", "declaration_calls", "immutable_calls", "format"}
    _reject_unknown_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    for key in ("roots", "exclude"):
        if key in payload:
            parsed_paths = _as_str_list(payload[key], _join(path, key), issues)
            if parsed_paths is not None:
                out[key] = parsed_paths

    for key in ("declaration_calls", "immutable_calls"):
        if key in payload:
            parsed_names = _as_identifier_list(payload[key], _join(path, key), issues)
            if parsed_names is not None:
                out[key] = parsed_names

    if "format" in payload:
        parsed_format = _as_enum(
            payload["format"], _join(path, "format"), issues, allowed_values=LINT_FORMATS
        )
        if parsed_format is not None:
            out["format"] = parsed_format

    return out


def _validate_logging(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"level", "format"}, path, issues)

    out: dict[str, Any] = {}
    if "level" in payload:
        raw_level = payload["level"]
        if isinstance(raw_level, str):
            raw_level = raw_level.strip().upper()
        parsed_level = _as_enum(raw_level, _join(path, "level"), issues, allowed_values=LOG_LEVELS)
        if parsed_level is not None:
            out["level"] = parsed_level

    if "format" in payload:
        parsed_format = _as_enum(
            payload["format"], _join(path, "format"), issues, allowed_values=LOG_FORMATS
        )
        if parsed_format is not None:
            out["format"] = parsed_format

    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_str_list(value: object, path: str, issues: _IssueCollector) -> list[str] | None:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        issues.add(path, f"expected list of strings, got {type(value).__name__}")
        return None
    out: list[str] = []
    for index, item in enumerate(value):
        parsed = _as_str(item, f"{path}[{index}]", issues)
        if parsed is not None and parsed not in out:
            out.append(parsed)
    return out


def _as_identifier_list(value: object, path: str, issues: _IssueCollector) -> list[str] | None:
    parsed = _as_str_list(value, path, issues)
    if parsed is None:
        return None
    invalid = [item for item in parsed if not item.isidentifier()]
    for item in invalid:
        issues.add(path, f"{item!r} is not a valid call name")
    return [item for item in parsed if item.isidentifier()]


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            else:
                nested: dict[str, Any] = {}
                _merge_into(nested, value)
                target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in sorted(value):
        item = value[key]
        out[key] = _deep_copy_mapping(item) if isinstance(item, Mapping) else copy.deepcopy(item)
    return out


__all__ = [
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "LINT_FORMATS",
    "LIST_FIELDS",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "LintConfig",
    "LoggingConfig",
    "SmartPropertiesConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
]
