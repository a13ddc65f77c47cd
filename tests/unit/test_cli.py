"""
smart-properties: unit tests for the command-line interface

Purpose
- Verify subcommand routing, output formats and exit codes for ``lint``,
  ``describe`` and ``config``.
"""

from __future__ import annotations

import importlib
import json
from pathlib import Path

import pytest
import yaml

from smart_properties.cli import build_parser, run_cli
from smart_properties.registry import lookup_registry, registry_for

MODELS_SOURCE = '''
from smart_properties import SmartProperties, prop


class Article(SmartProperties):
    title = prop(accepts=str, converts="title", required=True)
    visible = prop(accepts=(True, False), default=False, reader="is_visible")


class Outer:
    class Inner(Article):
        body = prop(accepts=str)
'''


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    for name in ("SMART_PROPERTIES_LOGGING_LEVEL", "SMART_PROPERTIES_LINT_ROOTS"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def _write(root: Path, rel_path: str, text: str) -> None:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_parser_requires_a_subcommand() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_lint_clean_and_dirty_exit_codes(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write(workspace, "src/models.py", "items = prop(default=list)\n")
    assert run_cli(["lint"]) == 0
    capsys.readouterr()

    _write(workspace, "src/models.py", "items = prop(default=[])\n")
    assert run_cli(["lint", "--format", "json"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["findings"][0]["path"] == "src/models.py"


def test_lint_uses_explicit_paths_and_configured_format(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write(workspace, "lib/models.py", "items = prop(default={})\n")
    _write(
        workspace,
        "pyproject.toml",
        '[tool.smart_properties.lint]\nformat = "json"\n',
    )

    assert run_cli(["lint", "lib"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["scanned_files"] == ["lib/models.py"]


def test_describe_json_and_yaml(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(workspace, "cli_describe_models.py", MODELS_SOURCE)

    assert run_cli(["describe", "cli_describe_models:Outer.Inner"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["class"] == "cli_describe_models:Outer.Inner"
    assert [item["name"] for item in payload["properties"]] == ["title", "visible", "body"]

    assert run_cli(["describe", "cli_describe_models:Article", "--format", "yaml"]) == 0
    document = yaml.safe_load(capsys.readouterr().out)
    assert document["properties"][1]["reader"] == "is_visible"
    assert document["properties"][0]["converts"] == "title"


PLAIN_MODELS_SOURCE = '''
from smart_properties import SmartProperties, prop


class Plain:
    pass


class Described(Plain, SmartProperties):
    label = prop(accepts=str)
'''


def test_describe_does_not_attach_a_registry(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write(workspace, "cli_describe_plain_models.py", PLAIN_MODELS_SOURCE)

    assert run_cli(["describe", "cli_describe_plain_models:Plain"]) == 0
    assert json.loads(capsys.readouterr().out)["properties"] == []

    module = importlib.import_module("cli_describe_plain_models")
    assert lookup_registry(module.Plain) is None
    assert registry_for(module.Described).parent is None

    assert run_cli(["describe", "cli_describe_plain_models:Described"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert [item["name"] for item in payload["properties"]] == ["label"]


@pytest.mark.parametrize(
    "target",
    ["no_colon", "missing_module_for_cli_tests:Thing", "cli_describe_models:Nope"],
)
def test_describe_failures_exit_with_config_error(
    workspace: Path, target: str, capsys: pytest.CaptureFixture[str]
) -> None:
    _write(workspace, "cli_describe_models.py", MODELS_SOURCE)

    assert run_cli(["describe", target]) == 2
    assert capsys.readouterr().err.startswith("error: ")


def test_config_json_envelope(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["--log-level", "debug", "config", "--json"]) == 0

    payload = json.loads(capsys.readouterr().out.splitlines()[-1])
    assert payload["command"] == "config"
    assert payload["config"]["logging"]["level"] == "DEBUG"


def test_invalid_config_file_exits_with_2(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write(workspace, "bad.toml", "[lint]\nunknown = 1\n")

    assert run_cli(["--config", "bad.toml", "config"]) == 2
    assert "lint.unknown" in capsys.readouterr().err
