"""docschema core - schema models, introspection helpers and the validator."""

from docschema.core.models import (
    DeploySchemaInput,
    Kind,
    ParsedWorkspaceSchema,
    SchemaParseError,
    SchemaType,
    Severity,
    StoredWorkspaceSchema,
    ValidationGroup,
    ValidationRule,
    Workspace,
    parse_schema_types,
)

__all__ = [
    "DeploySchemaInput",
    "Kind",
    "ParsedWorkspaceSchema",
    "SchemaParseError",
    "SchemaType",
    "Severity",
    "StoredWorkspaceSchema",
    "ValidationGroup",
    "ValidationRule",
    "Workspace",
    "parse_schema_types",
]
