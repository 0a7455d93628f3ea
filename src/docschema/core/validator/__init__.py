"""Validator - Schema-driven document validation and issue formatting."""

from docschema.core.validator.formatter import (
    format_validation_for_agent,
    format_validation_issues,
)
from docschema.core.validator.validator import (
    DocumentValidator,
    FieldContext,
    TypeLookup,
    ValidateOptions,
    ValidationIssue,
    ValidationResult,
    build_type_lookup,
    validate_document,
    validate_field,
)

__all__ = [
    "DocumentValidator",
    "FieldContext",
    "TypeLookup",
    "ValidateOptions",
    "ValidationIssue",
    "ValidationResult",
    "build_type_lookup",
    "format_validation_for_agent",
    "format_validation_issues",
    "validate_document",
    "validate_field",
]
