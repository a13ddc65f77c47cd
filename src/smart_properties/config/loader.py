"""
smart-properties: runtime config loader.

Purpose
- Load the effective tooling config from defaults, a TOML file, environment
  variables and CLI overrides.

Precedence
- CLI > env (``SMART_PROPERTIES_``) > file > defaults.
- With no explicit path the loader reads ``[tool.smart_properties]`` from
  ``pyproject.toml`` in the working directory. An explicit ``pyproject.toml``
  is read the same way; any other file holds the sections at top level.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from smart_properties.config.schema import (
    LIST_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)

PYPROJECT_FILE: Final[str] = "pyproject.toml"
PYPROJECT_TABLE: Final[tuple[str, ...]] = ("tool", "smart_properties")
ENV_PREFIX: Final[str] = "SMART_PROPERTIES_"


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be applied."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> dict[str, Any]:
    """Load effective config with deterministic precedence: CLI > env > file > defaults."""

    explicit_path = config_path is not None
    resolved_path = _resolve_config_path(config_path, cwd=cwd)
    env_map = dict(os.environ if environ is None else environ)

    file_payload = _load_file_payload(resolved_path, required=explicit_path)

    merged = merge_config(default_config(), file_payload)
    merged = assert_valid_config(merged)

    merged = merge_config(merged, _collect_env_overrides(merged, env_map))
    merged = merge_config(merged, _materialize_cli_overrides(dict(cli_overrides or {})))
    return assert_valid_config(merged)


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Return deterministic JSON dump of the effective config."""

    return json.dumps(config, sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def _resolve_config_path(config_path: str | Path | None, *, cwd: Path | None) -> Path:
    if config_path is None:
        return ((cwd or Path.cwd()) / PYPROJECT_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_file_payload(path: Path, *, required: bool) -> dict[str, Any]:
    parsed = _load_toml_file(path, required=required)
    if path.name != PYPROJECT_FILE:
        return parsed

    cursor: object = parsed
    for part in PYPROJECT_TABLE:
        if not isinstance(cursor, Mapping) or part not in cursor:
            return {}
        cursor = cursor[part]
    if not isinstance(cursor, Mapping):
        raise ConfigLoadError(f"[{'.'.join(PYPROJECT_TABLE)}] must be a table in {path}")
    return dict(cursor)


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc

    return parsed


def _collect_env_overrides(
    config: Mapping[str, object], environ: Mapping[str, str]
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for path in _iter_leaf_paths(config):
        env_name = _env_name_for_path(path)
        raw = environ.get(env_name)
        if raw is None:
            continue
        if path in LIST_FIELDS:
            value: object = [item.strip() for item in raw.split(",") if item.strip()]
        else:
            value = raw.strip()
        _set_nested(overrides, path, value)
    return overrides


def _iter_leaf_paths(
    payload: Mapping[str, object],
    prefix: tuple[str, ...] = (),
) -> list[tuple[str, ...]]:
    paths: list[tuple[str, ...]] = []
    for key in sorted(payload):
        value = payload[key]
        path = (*prefix, key)
        if isinstance(value, Mapping):
            paths.extend(_iter_leaf_paths(value, path))
        else:
            paths.append(path)
    return paths


def _materialize_cli_overrides(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key in sorted(cli_overrides):
        value = cli_overrides[key]
        if value is None:
            continue
        path = tuple(part for part in key.split(".") if part)
        if not path:
            raise ConfigLoadError(f"invalid CLI override key {key!r}")
        _set_nested(payload, path, value)
    return payload


def _set_nested(target: dict[str, Any], path: tuple[str, ...], value: object) -> None:
    cursor = target
    for part in path[:-1]:
        next_node = cursor.get(part)
        if not isinstance(next_node, dict):
            next_node = {}
            cursor[part] = next_node
        cursor = next_node
    cursor[path[-1]] = value


def _env_name_for_path(path: tuple[str, ...]) -> str:
    return ENV_PREFIX + "_".join(part.upper() for part in path)


__all__ = [
    "ConfigLoadError",
    "ENV_PREFIX",
    "PYPROJECT_FILE",
    "dump_effective_config",
    "load_config",
]
