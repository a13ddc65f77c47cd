"""
smart-properties: lint for defaults shared between instances.

Purpose
- Find property declarations whose ``default=`` is a mutable literal that every
  instance would share, before the declaration ever runs.

What is flagged
- ``default=`` keywords on declaration calls (``prop``, ``required_prop``,
  ``declare``, ``declare_property``, ``declare_required_property`` unless
  configured otherwise) whose value is a list/dict/set display, a
  comprehension or generator expression, or a call to anything outside the
  immutable-call allowlist.
- Tuples are inspected element by element.
- Files that cannot be parsed produce a ``syntax_error`` finding.

Exit codes
- ``0`` when no findings exist.
- ``1`` when findings exist.
- ``2`` for internal scanner/runtime failures.
"""

from __future__ import annotations

import argparse
import ast
import json
import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Final

from smart_properties.constants import DEFAULT_DECLARATION_CALLS, DEFAULT_IMMUTABLE_CALLS

DEFAULT_ROOTS: Final[tuple[str, ...]] = ("src",)
DEFAULT_EXCLUDE: Final[tuple[str, ...]] = ()

KIND_MUTABLE_LITERAL: Final[str] = "mutable_literal"
KIND_MUTABLE_CALL: Final[str] = "mutable_call"
KIND_SYNTAX_ERROR: Final[str] = "syntax_error"

_ALWAYS_IGNORED_DIRS = frozenset(
    {
        ".git",
        ".venv",
        "__pycache__",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        ".hypothesis",
        ".tox",
        ".nox",
        "build",
        "dist",
    }
)

_MUTABLE_DISPLAYS: Final[dict[type[ast.AST], str]] = {
    ast.List: "list literal",
    ast.Dict: "dict literal",
    ast.Set: "set literal",
    ast.ListComp: "list comprehension",
    ast.DictComp: "dict comprehension",
    ast.SetComp: "set comprehension",
    ast.GeneratorExp: "generator expression",
}


@dataclass(frozen=True, slots=True)
class Finding:
    kind: str
    path: str
    line: int
    col: int
    call: str
    snippet: str
    reason: str

    def sort_key(self) -> tuple[str, int, int, str]:
        return (self.path, self.line, self.col, self.kind)

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "path": self.path,
            "line": self.line,
            "col": self.col,
            "call": self.call,
            "snippet": self.snippet,
            "reason": self.reason,
        }


@dataclass(frozen=True, slots=True)
class AuditResult:
    findings: tuple[Finding, ...]
    scanned_files: tuple[str, ...]
    roots: tuple[str, ...]
    exclude: tuple[str, ...]

    @property
    def finding_count(self) -> int:
        return len(self.findings)

    @property
    def syntax_error_count(self) -> int:
        return sum(1 for item in self.findings if item.kind == KIND_SYNTAX_ERROR)

    def summary(self) -> dict[str, object]:
        return {
            "total_findings": self.finding_count,
            "syntax_errors": self.syntax_error_count,
            "scanned_files": len(self.scanned_files),
            "roots": list(self.roots),
            "exclude": list(self.exclude),
        }

    def to_dict(self) -> dict[str, object]:
        return {
            "summary": self.summary(),
            "findings": [item.to_dict() for item in self.findings],
            "scanned_files": list(self.scanned_files),
        }


class _DeclarationVisitor(ast.NodeVisitor):
    def __init__(
        self,
        *,
        rel_path: str,
        lines: Sequence[str],
        declaration_calls: frozenset[str],
        immutable_calls: frozenset[str],
    ) -> None:
        self._rel_path = rel_path
        self._lines = lines
        self._declaration_calls = declaration_calls
        self._immutable_calls = immutable_calls
        self.findings: list[Finding] = []

    def visit_Call(self, node: ast.Call) -> None:
        call_name = _call_name(node.func)
        if call_name in self._declaration_calls:
            for keyword in node.keywords:
                if keyword.arg != "default":
                    continue
                verdict = _mutable_reason(keyword.value, self._immutable_calls)
                if verdict is None:
                    continue
                kind, reason = verdict
                self.findings.append(
                    Finding(
                        kind=kind,
                        path=self._rel_path,
                        line=keyword.value.lineno,
                        col=keyword.value.col_offset,
                        call=call_name,
                        snippet=_line_text(self._lines, keyword.value.lineno),
                        reason=reason,
                    )
                )
        self.generic_visit(node)


def run_defaults_audit(
    *,
    repo_root: Path | None = None,
    roots: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
    declaration_calls: Sequence[str] | None = None,
    immutable_calls: Sequence[str] | None = None,
) -> AuditResult:
    root = (repo_root or Path.cwd()).resolve()
    normalized_roots = _normalize_inputs(DEFAULT_ROOTS if roots is None else roots)
    normalized_exclude = _normalize_inputs(DEFAULT_EXCLUDE if exclude is None else exclude)
    calls = frozenset(DEFAULT_DECLARATION_CALLS if declaration_calls is None else declaration_calls)
    allowlist = frozenset(DEFAULT_IMMUTABLE_CALLS if immutable_calls is None else immutable_calls)

    findings: list[Finding] = []
    scanned: list[str] = []
    for rel_path in _collect_files(root, roots=normalized_roots, exclude=normalized_exclude):
        absolute_path = root / rel_path
        if not absolute_path.is_file():
            continue
        text = absolute_path.read_text(encoding="utf-8", errors="replace")
        scanned.append(rel_path)
        findings.extend(
            scan_source(
                text,
                rel_path=rel_path,
                declaration_calls=calls,
                immutable_calls=allowlist,
            )
        )

    ordered = tuple(sorted(set(findings), key=lambda item: item.sort_key()))
    return AuditResult(
        findings=ordered,
        scanned_files=tuple(sorted(scanned)),
        roots=normalized_roots,
        exclude=normalized_exclude,
    )


def scan_source(
    text: str,
    *,
    rel_path: str = "<string>",
    declaration_calls: frozenset[str] = frozenset(DEFAULT_DECLARATION_CALLS),
    immutable_calls: frozenset[str] = frozenset(DEFAULT_IMMUTABLE_CALLS),
) -> list[Finding]:
    """Scan one module's source text and return its findings in source order."""

    lines = text.splitlines()
    try:
        module = ast.parse(text, filename=rel_path)
    except SyntaxError as exc:
        line = exc.lineno or 1
        return [
            Finding(
                kind=KIND_SYNTAX_ERROR,
                path=rel_path,
                line=line,
                col=max((exc.offset or 1) - 1, 0),
                call="",
                snippet=_line_text(lines, line),
                reason=f"could not parse module: {exc.msg}",
            )
        ]

    visitor = _DeclarationVisitor(
        rel_path=rel_path,
        lines=lines,
        declaration_calls=declaration_calls,
        immutable_calls=immutable_calls,
    )
    visitor.visit(module)
    return sorted(visitor.findings, key=lambda item: item.sort_key())


def format_text(result: AuditResult) -> str:
    output_lines: list[str] = ["SHARED MUTABLE DEFAULTS"]
    if not result.findings:
        output_lines.append("  (none)")
    for finding in result.findings:
        label = f" in {finding.call}()" if finding.call else ""
        output_lines.append(
            f"  {finding.path}:{finding.line}:{finding.col + 1} [{finding.kind}]{label} "
            f"{finding.reason}"
        )
        if finding.snippet:
            output_lines.append(f"      {finding.snippet.strip()}")
    output_lines.append("")
    summary = result.summary()
    output_lines.append(
        "Summary: "
        f"findings={summary['total_findings']} "
        f"syntax_errors={summary['syntax_errors']} "
        f"scanned_files={summary['scanned_files']}"
    )
    return "\n".join(output_lines).rstrip() + "\n"


def format_json(result: AuditResult) -> str:
    return json.dumps(result.to_dict(), sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        result = run_defaults_audit(
            repo_root=Path(args.repo_root).resolve(),
            roots=args.roots,
            exclude=args.exclude,
            declaration_calls=args.declaration_calls,
            immutable_calls=args.immutable_calls,
        )
        if args.output_format == "json":
            sys.stdout.write(format_json(result))
        else:
            sys.stdout.write(format_text(result))
        return 1 if result.findings else 0
    except Exception as exc:  # pragma: no cover - CLI boundary
        sys.stderr.write(f"defaults audit crashed: {exc}\n")
        return 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Find property defaults that would be shared between instances."
    )
    parser.add_argument(
        "--repo-root",
        default=".",
        help="Repository/workspace root to scan (default: current working directory).",
    )
    parser.add_argument(
        "--roots",
        nargs="+",
        default=list(DEFAULT_ROOTS),
        help="Root paths to scan (default: src).",
    )
    parser.add_argument(
        "--exclude",
        nargs="+",
        default=list(DEFAULT_EXCLUDE),
        help="Relative paths to exclude.",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=("text", "json"),
        default="text",
        help="Output format.",
    )
    parser.add_argument(
        "--declaration-calls",
        nargs="+",
        default=None,
        help="Call names treated as property declarations.",
    )
    parser.add_argument(
        "--immutable-calls",
        nargs="+",
        default=None,
        help="Call names whose results are safe to share as defaults.",
    )
    return parser


def _mutable_reason(
    expression: ast.expr, immutable_calls: frozenset[str]
) -> tuple[str, str] | None:
    for node_type, label in _MUTABLE_DISPLAYS.items():
        if isinstance(expression, node_type):
            return (
                KIND_MUTABLE_LITERAL,
                f"default is a {label} shared by every instance; "
                "pass a callable such as default=list instead",
            )
    if isinstance(expression, ast.Tuple):
        for element in expression.elts:
            verdict = _mutable_reason(element, immutable_calls)
            if verdict is not None:
                return verdict
        return None
    if isinstance(expression, ast.Call):
        call_name = _call_name(expression.func)
        if call_name in immutable_calls:
            return None
        rendered = call_name or "expression"
        return (
            KIND_MUTABLE_CALL,
            f"default is the result of {rendered}(...), evaluated once and shared; "
            "pass the callable itself or wrap it with with_instance",
        )
    return None


def _call_name(expression: ast.expr) -> str:
    if isinstance(expression, ast.Name):
        return expression.id
    if isinstance(expression, ast.Attribute):
        return expression.attr
    return ""


def _collect_files(repo_root: Path, *, roots: Sequence[str], exclude: Sequence[str]) -> list[str]:
    discovered: set[str] = set()

    for root in roots:
        base = repo_root if root == "" else (repo_root / root)
        if not base.exists():
            continue

        if base.is_file():
            rel = _relative_posix(base, repo_root)
            if rel is None or not rel.endswith(".py") or _is_excluded(rel, exclude):
                continue
            discovered.add(rel)
            continue

        for dirpath, dirnames, filenames in os.walk(base):
            current_dir = Path(dirpath)
            rel_dir = _relative_posix(current_dir, repo_root)
            if rel_dir is None:
                continue

            kept_dirs: list[str] = []
            for dirname in sorted(dirnames):
                candidate = f"{rel_dir}/{dirname}" if rel_dir else dirname
                if dirname in _ALWAYS_IGNORED_DIRS or _is_excluded(candidate, exclude):
                    continue
                kept_dirs.append(dirname)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                if not filename.endswith(".py"):
                    continue
                rel_file = _relative_posix(current_dir / filename, repo_root)
                if rel_file is None or _is_excluded(rel_file, exclude):
                    continue
                discovered.add(rel_file)

    return sorted(discovered)


def _is_excluded(rel_path: str, exclude: Sequence[str]) -> bool:
    for excluded in exclude:
        if excluded == "":
            continue
        if rel_path == excluded or rel_path.startswith(f"{excluded}/"):
            return True
    return False


def _relative_posix(path: Path, repo_root: Path) -> str | None:
    try:
        relative = path.resolve(strict=False).relative_to(repo_root)
    except ValueError:
        return None
    return relative.as_posix()


def _normalize_inputs(values: Sequence[str]) -> tuple[str, ...]:
    normalized: list[str] = []
    for value in values:
        candidate = _normalize_path(value)
        if candidate in normalized:
            continue
        normalized.append(candidate)
    return tuple(normalized)


def _normalize_path(value: str) -> str:
    raw = value.strip().replace("\\", "/")
    if raw in {"", "."}:
        return ""
    parts = [part for part in PurePosixPath(raw).parts if part not in {"", ".", "/"}]
    return PurePosixPath(*parts).as_posix() if parts else ""


def _line_text(lines: Sequence[str], line: int) -> str:
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return ""


__all__ = [
    "DEFAULT_EXCLUDE",
    "DEFAULT_ROOTS",
    "KIND_MUTABLE_CALL",
    "KIND_MUTABLE_LITERAL",
    "KIND_SYNTAX_ERROR",
    "AuditResult",
    "Finding",
    "format_json",
    "format_text",
    "main",
    "run_defaults_audit",
    "scan_source",
]


if __name__ == "__main__":
    raise SystemExit(main())
