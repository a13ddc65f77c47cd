"""Command-line interface for smart-properties tooling.

Common workflows::

    smart-properties lint src/              Find defaults shared between instances
    smart-properties describe app.models:Article --format yaml
    smart-properties config --json          Show the effective configuration
"""

from __future__ import annotations

import argparse
import importlib
import json
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

import yaml

from smart_properties.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from smart_properties.config.schema import LOG_LEVELS
from smart_properties.constants import VERSION
from smart_properties.observability.logging import get_logger, setup_logging
from smart_properties.quality.defaults_audit import (
    format_json,
    format_text,
    run_defaults_audit,
)
from smart_properties.registry import lookup_registry

DESCRIBE_FORMATS: Final[tuple[str, ...]] = ("json", "yaml")

_logger = get_logger(__name__)


class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported subcommands."""

    parser = argparse.ArgumentParser(
        prog="smart-properties",
        description=(
            "smart-properties: declarative, validated properties for Python classes.\n\n"
            "Common workflows:\n"
            "  smart-properties lint src/                 Lint property defaults\n"
            "  smart-properties describe pkg.mod:Class    Print a class schema\n"
            "  smart-properties config                    Show effective config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to a TOML config (default: [tool.smart_properties] in ./pyproject.toml).",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=LOG_LEVELS,
        type=str.upper,
        default=None,
        help="Override the configured log level.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # lint ----------------------------------------------------------------
    lint_parser = subparsers.add_parser(
        "lint",
        help="Find property defaults that would be shared between instances.",
    )
    lint_parser.add_argument(
        "paths",
        nargs="*",
        help="Files or directories to scan, relative to --repo-root (default: lint.roots).",
    )
    lint_parser.add_argument(
        "--repo-root",
        default=".",
        help="Repository root directory (default: current working directory).",
    )
    lint_parser.add_argument(
        "--exclude",
        nargs="+",
        default=None,
        help="Relative paths to exclude (default: lint.exclude).",
    )
    lint_parser.add_argument(
        "--format",
        dest="output_format",
        choices=("text", "json"),
        default=None,
        help="Output format (default: lint.format).",
    )
    lint_parser.set_defaults(handler=_cmd_lint)

    # describe ------------------------------------------------------------
    describe_parser = subparsers.add_parser(
        "describe",
        help="Print the merged property schema of a class.",
    )
    describe_parser.add_argument("target", help="Class to describe, as module:QualifiedName.")
    describe_parser.add_argument(
        "--format",
        dest="output_format",
        choices=DESCRIBE_FORMATS,
        default="json",
        help="Output format.",
    )
    describe_parser.add_argument(
        "--app-dir",
        default=".",
        help="Directory added to the import path before importing the module.",
    )
    describe_parser.set_defaults(handler=_cmd_describe)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        help="Show the effective configuration.",
    )
    config_parser.add_argument("--json", action="store_true", help="Emit a JSON envelope.")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        config = _load_effective_config(namespace)
        logging_config = config["logging"]
        setup_logging(logging_config["level"], logging_config["format"])
        result = handler(namespace, config)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


def cli_entrypoint() -> None:
    """Console-script entrypoint."""

    raise SystemExit(run_cli())


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_lint(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    lint_config = config["lint"]
    repo_root = Path(args.repo_root).expanduser().resolve()
    if not repo_root.is_dir():
        raise CLIError(f"repo root is not a directory: {repo_root}", exit_code=2)

    result = run_defaults_audit(
        repo_root=repo_root,
        roots=args.paths or lint_config["roots"],
        exclude=lint_config["exclude"] if args.exclude is None else args.exclude,
        declaration_calls=lint_config["declaration_calls"],
        immutable_calls=lint_config["immutable_calls"],
    )
    _logger.info(
        "lint_completed",
        repo_root=repo_root.as_posix(),
        scanned_files=len(result.scanned_files),
        findings=result.finding_count,
    )

    output_format = args.output_format or lint_config["format"]
    if output_format == "json":
        sys.stdout.write(format_json(result))
    else:
        sys.stdout.write(format_text(result))
    return 1 if result.findings else 0


def _cmd_describe(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    cls = _resolve_class(args.target, app_dir=Path(args.app_dir))
    registry = lookup_registry(cls)
    payload: dict[str, object] = {
        "class": f"{cls.__module__}:{cls.__qualname__}",
        "properties": registry.describe() if registry is not None else [],
    }
    _logger.debug("schema_described", target=args.target, properties=len(payload["properties"]))

    if args.output_format == "yaml":
        sys.stdout.write(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True))
    else:
        sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
    return 0


def _cmd_config(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    if getattr(args, "json", False):
        _emit_json({"command": "config", "config": dict(config)})
        return 0
    sys.stdout.write(dump_effective_config(config))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, object] = {"logging.level": args.log_level}
    try:
        return load_config(args.config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _resolve_class(target: str, *, app_dir: Path) -> type:
    module_name, separator, qualname = target.partition(":")
    if not separator or not module_name or not qualname:
        raise CLIError(f"target must look like module:ClassName, got {target!r}", exit_code=2)

    import_root = str(app_dir.expanduser().resolve())
    if import_root not in sys.path:
        sys.path.insert(0, import_root)

    try:
        resolved: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise CLIError(f"cannot import module {module_name!r}: {exc}", exit_code=2) from exc

    for part in qualname.split("."):
        try:
            resolved = getattr(resolved, part)
        except AttributeError as exc:
            raise CLIError(f"{module_name!r} has no attribute {qualname!r}", exit_code=2) from exc

    if not isinstance(resolved, type):
        raise CLIError(f"{target!r} is not a class", exit_code=2)
    return resolved


__all__ = ["CLIError", "build_parser", "cli_entrypoint", "main", "run_cli"]
