"""
smart-properties: unit tests for tooling configuration

Purpose
- Validate layered loading (CLI > env > file > defaults), pyproject table
  discovery and strict schema validation with structured issues.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from smart_properties.config import (
    DEFAULT_CONFIG,
    ConfigLoadError,
    ConfigValidationError,
    default_config,
    dump_effective_config,
    load_config,
    merge_config,
    validate_config,
)


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_defaults_without_any_file(tmp_path: Path) -> None:
    loaded = load_config(environ={}, cwd=tmp_path)

    assert loaded == validate_config(default_config()).config
    assert loaded["logging"]["level"] == "WARNING"
    assert "prop" in loaded["lint"]["declaration_calls"]


def test_default_config_is_a_copy() -> None:
    config = default_config()
    config["lint"]["roots"].append("other")

    assert DEFAULT_CONFIG["lint"]["roots"] == ["src"]


def test_pyproject_table_is_discovered(tmp_path: Path) -> None:
    _write_config(
        tmp_path / "pyproject.toml",
        """
[project]
name = "demo"

[tool.smart_properties.lint]
roots = ["lib"]
""".strip(),
    )

    loaded = load_config(environ={}, cwd=tmp_path)

    assert loaded["lint"]["roots"] == ["lib"]
    assert loaded["lint"]["format"] == "text"


def test_pyproject_without_table_uses_defaults(tmp_path: Path) -> None:
    _write_config(tmp_path / "pyproject.toml", '[project]\nname = "demo"\n')

    assert load_config(environ={}, cwd=tmp_path)["lint"]["roots"] == ["src"]


def test_precedence_default_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "smart.toml"
    _write_config(config_path, '[logging]\nlevel = "INFO"\n')

    file_loaded = load_config(config_path, environ={})
    env_loaded = load_config(config_path, environ={"SMART_PROPERTIES_LOGGING_LEVEL": "debug"})
    cli_loaded = load_config(
        config_path,
        environ={"SMART_PROPERTIES_LOGGING_LEVEL": "debug"},
        cli_overrides={"logging.level": "ERROR"},
    )

    assert file_loaded["logging"]["level"] == "INFO"
    assert env_loaded["logging"]["level"] == "DEBUG"
    assert cli_loaded["logging"]["level"] == "ERROR"


def test_env_lists_are_comma_separated(tmp_path: Path) -> None:
    loaded = load_config(
        environ={"SMART_PROPERTIES_LINT_EXCLUDE": "src/vendor, build ,"},
        cwd=tmp_path,
    )

    assert loaded["lint"]["exclude"] == ["src/vendor", "build"]


def test_cli_overrides_with_none_are_ignored(tmp_path: Path) -> None:
    loaded = load_config(environ={}, cwd=tmp_path, cli_overrides={"logging.level": None})

    assert loaded["logging"]["level"] == "WARNING"


def test_explicit_missing_file_fails(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="not found"):
        load_config(tmp_path / "absent.toml", environ={})


def test_invalid_toml_fails(tmp_path: Path) -> None:
    config_path = tmp_path / "broken.toml"
    _write_config(config_path, "[lint\n")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


def test_unknown_and_invalid_fields_are_reported_with_paths(tmp_path: Path) -> None:
    config_path = tmp_path / "smart.toml"
    _write_config(
        config_path,
        """
[lint]
roots = "src"
format = "xml"
colour = true

[cache]
enabled = true
""".strip(),
    )

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(config_path, environ={})

    paths = {issue.path for issue in excinfo.value.issues}
    assert paths == {"cache", "lint.roots", "lint.format", "lint.colour"}


def test_validate_config_rejects_bad_call_names() -> None:
    payload = merge_config(default_config(), {"lint": {"declaration_calls": ["prop", "not-a-name"]}})

    result = validate_config(payload)

    assert not result.is_valid
    assert [issue.path for issue in result.issues] == ["lint.declaration_calls"]


def test_dump_effective_config_is_deterministic(tmp_path: Path) -> None:
    loaded = load_config(environ={}, cwd=tmp_path)

    first = dump_effective_config(loaded)
    second = dump_effective_config(load_config(environ={}, cwd=tmp_path))

    assert first == second
    assert json.loads(first) == loaded
