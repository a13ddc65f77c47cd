"""Static checks for property declarations."""

from smart_properties.quality.defaults_audit import (
    DEFAULT_EXCLUDE,
    DEFAULT_ROOTS,
    KIND_MUTABLE_CALL,
    KIND_MUTABLE_LITERAL,
    KIND_SYNTAX_ERROR,
    AuditResult,
    Finding,
    format_json,
    format_text,
    run_defaults_audit,
    scan_source,
)

__all__ = [
    "AuditResult",
    "DEFAULT_EXCLUDE",
    "DEFAULT_ROOTS",
    "Finding",
    "KIND_MUTABLE_CALL",
    "KIND_MUTABLE_LITERAL",
    "KIND_SYNTAX_ERROR",
    "format_json",
    "format_text",
    "run_defaults_audit",
    "scan_source",
]
