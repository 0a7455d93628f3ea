"""Core schema models for docschema.

These models describe the deployed schema format consumed by the validator:
- Schema types and fields (document, object, primitive, array, reference, ...)
- Declarative validation rules and rule groups
- Workspace schema records as stored by the remote schema store
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError


# =============================================================================
# Enums
# =============================================================================


class Severity(str, Enum):
    """Severity of a validation issue. Only ERROR affects validity."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Kind(str, Enum):
    """Built-in schema kinds. Any other kind names a custom type."""

    DOCUMENT = "document"
    OBJECT = "object"
    STRING = "string"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    ARRAY = "array"
    REFERENCE = "reference"
    IMAGE = "image"
    FILE = "file"
    SLUG = "slug"
    URL = "url"
    BLOCK = "block"
    EMAIL = "email"


PRIMITIVE_KINDS = frozenset(
    {
        Kind.STRING.value,
        Kind.NUMBER.value,
        Kind.BOOLEAN.value,
        Kind.DATE.value,
        Kind.DATETIME.value,
        Kind.TEXT.value,
        Kind.URL.value,
        Kind.SLUG.value,
        Kind.EMAIL.value,
    }
)

BUILT_IN_KINDS = frozenset(kind.value for kind in Kind)


# =============================================================================
# Validation Rules
# =============================================================================


class ValidationRule(BaseModel):
    """A single declarative rule, e.g. {"flag": "max", "constraint": 100}."""

    flag: str
    constraint: Any = None


class ValidationGroup(BaseModel):
    """Rules declared together, with an optional message and level."""

    rules: list[ValidationRule] = Field(default_factory=list)
    message: str | None = None
    level: Severity | None = None


# =============================================================================
# Schema Types
# =============================================================================


class SchemaType(BaseModel):
    """
    A node in the type catalog: a whole document/object type or one field.

    `kind` is serialized as "type" to match the deployed schema format.
    `fields` is used by document/object (and image/file) kinds, `of` by
    arrays and `to` by references. Unknown keys such as fieldset, hidden or
    readOnly are kept as extras.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    kind: str = Field(alias="type")
    name: str | None = None  # optional for array members and reference targets
    title: str | None = None
    description: str | None = None

    fields: list["SchemaType"] | None = None
    of: list["SchemaType"] | None = None
    to: list["SchemaType"] | None = None

    validation: list[ValidationGroup] | None = None
    options: dict[str, Any] | None = None

    def extra(self, key: str, default: Any = None) -> Any:
        """Read an extra (non-modelled) property such as "fieldset"."""
        return (self.model_extra or {}).get(key, default)

    @property
    def label(self) -> str:
        """Human label: title if set, else name, else kind."""
        return self.title or self.name or self.kind


# =============================================================================
# Workspace Schema Records
# =============================================================================


class Workspace(BaseModel):
    """Workspace a schema is deployed to."""

    name: str
    title: str | None = None


class StoredWorkspaceSchema(BaseModel):
    """A schema record as returned by the store. `raw_schema` is a JSON string."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    doc_type: str = Field(default="system.schema", alias="_type")
    id: str = Field(alias="_id")
    created_at: datetime | None = Field(default=None, alias="_createdAt")
    updated_at: datetime | None = Field(default=None, alias="_updatedAt")
    rev: str | None = Field(default=None, alias="_rev")
    version: str | None = None
    tag: str | None = None
    workspace: Workspace
    raw_schema: str = Field(default="", alias="schema")


class ParsedWorkspaceSchema(BaseModel):
    """A stored schema record with its types already parsed."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    doc_type: str = Field(default="system.schema", alias="_type")
    id: str = Field(alias="_id")
    created_at: datetime | None = Field(default=None, alias="_createdAt")
    updated_at: datetime | None = Field(default=None, alias="_updatedAt")
    rev: str | None = Field(default=None, alias="_rev")
    version: str | None = None
    tag: str | None = None
    workspace: Workspace
    types: list[SchemaType] = Field(default_factory=list, alias="schema")

    @classmethod
    def from_stored(cls, stored: StoredWorkspaceSchema) -> "ParsedWorkspaceSchema":
        """Parse the schema string of a stored record."""
        return cls(
            _id=stored.id,
            _type=stored.doc_type,
            _createdAt=stored.created_at,
            _updatedAt=stored.updated_at,
            _rev=stored.rev,
            version=stored.version,
            tag=stored.tag,
            workspace=stored.workspace,
            schema=parse_schema_types(stored.raw_schema),
        )


class DeploySchemaInput(BaseModel):
    """Input for deploying a workspace schema."""

    model_config = ConfigDict(populate_by_name=True)

    version: str | None = None
    tag: str | None = None
    workspace: Workspace
    types: list[SchemaType] = Field(alias="schema")


# =============================================================================
# Parsing
# =============================================================================


class SchemaParseError(ValueError):
    """Raised when a stored schema payload cannot be parsed into types."""


_SCHEMA_TYPES_ADAPTER = TypeAdapter(list[SchemaType])


def parse_schema_types(raw: str) -> list[SchemaType]:
    """
    Parse the stringified schema of a stored record.

    An empty payload yields no types. Anything that is not a JSON array of
    type definitions raises SchemaParseError.
    """
    if not raw:
        return []

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SchemaParseError(f"Failed to parse schema JSON: {e}") from e

    if not isinstance(data, list):
        raise SchemaParseError("Schema is not an array")

    try:
        return _SCHEMA_TYPES_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise SchemaParseError(f"Invalid schema type definition: {e}") from e
