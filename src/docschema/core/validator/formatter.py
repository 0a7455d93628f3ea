"""Formatters for validation results: a terminal report and a compact agent report."""

from typing import Any

from docschema.core.models import Severity
from docschema.core.validator.validator import ValidationResult

SEVERITY_GLYPHS: dict[Severity, str] = {
    Severity.ERROR: "✗",
    Severity.WARNING: "⚠",
    Severity.INFO: "ℹ",
}


def format_validation_issues(result: ValidationResult) -> str:
    """
    Format a result for display in a terminal or log.

    The summary comes first, then one line per issue with its best
    suggestion indented below it.
    """
    lines = [result.summary, ""]

    for issue in result.issues:
        lines.append(f"{SEVERITY_GLYPHS[issue.severity]} {issue.path}: {issue.message}")
        if issue.suggestions:
            lines.append(f"  → {issue.suggestions[0]}")

    return "\n".join(lines)


def format_validation_for_agent(result: ValidationResult) -> dict[str, Any]:
    """Compact, errors-only report with one suggestion per error."""
    return {
        "valid": result.valid,
        "summary": result.summary,
        "errorCount": len(result.errors),
        "errors": [
            {
                "path": error.path,
                "message": error.message,
                "suggestion": error.suggestions[0] if error.suggestions else None,
                "expected": error.expected,
            }
            for error in result.errors
        ],
    }
