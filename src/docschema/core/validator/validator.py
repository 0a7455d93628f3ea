"""
Validator - Schema-driven document validation.

Walks an arbitrary document against a document/object SchemaType and
reports every violation as a ValidationIssue:
1. Document envelope - _type present and matching the root type
2. Structural checks - runtime shape per field kind (string, array, ...)
3. Constraint rules - min/max/length/regex/email/uri declared on fields

Invalid documents never raise. Malformed schema rules are skipped one at a
time. Issues carry a severity, a path such as "content[0].children[2].text"
and, where possible, concrete suggestions for fixing them.
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from docschema.core.helpers import (
    get_list_values,
    get_reference_target_types,
    get_validation_rules,
    is_field_required,
)
from docschema.core.models import Kind, SchemaType, Severity, ValidationRule

logger = logging.getLogger(__name__)


TypeLookup = dict[str, SchemaType]


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class FieldContext:
    """Which field an issue belongs to."""

    name: str
    kind: str
    title: str | None = None


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found in a document."""

    path: str
    message: str
    severity: Severity
    rule: ValidationRule | None = None
    value: Any = None
    expected: str | None = None
    field: FieldContext | None = None
    suggestions: tuple[str, ...] = ()  # most preferred first

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "path": self.path,
            "message": self.message,
            "severity": self.severity.value,
        }
        if self.rule is not None:
            data["rule"] = self.rule.model_dump()
        if self.value is not None:
            data["value"] = self.value
        if self.expected is not None:
            data["expected"] = self.expected
        if self.field is not None:
            data["field"] = {
                "name": self.field.name,
                "type": self.field.kind,
                "title": self.field.title,
            }
        if self.suggestions:
            data["suggestions"] = list(self.suggestions)
        return data


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating one document."""

    valid: bool
    issues: list[ValidationIssue]
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue]
    info: list[ValidationIssue]
    document_type: str
    summary: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "documentType": self.document_type,
            "summary": self.summary,
            "issues": [i.to_dict() for i in self.issues],
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
            "info": [i.to_dict() for i in self.info],
        }


@dataclass(frozen=True)
class ValidateOptions:
    """
    Options for document validation.

    resolve_reference is accepted so callers can pass a document-id to type
    lookup, but validation is synchronous and never calls it.
    """

    include_warnings: bool = True
    include_info: bool = False
    stop_on_first_error: bool = False
    resolve_reference: Callable[[str], Awaitable[str | None]] | None = None


# =============================================================================
# Value helpers
# =============================================================================


EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
SLUG_PATTERN = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")
SLUG_INVALID_RUN = re.compile(r"[^a-z0-9]+")
REGEX_LITERAL = re.compile(r"/(.*)/([gimsuy]*)", re.DOTALL)

# Accepted in addition to ISO 8601
DATE_FORMATS = ("%Y/%m/%d", "%B %d, %Y", "%b %d, %Y")

_URL_ADAPTER = TypeAdapter(AnyUrl)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_finite_number(value: Any) -> bool:
    """Number that is not NaN or infinite. Ints of any size count."""
    if not _is_number(value):
        return False
    return not isinstance(value, float) or math.isfinite(value)


def _describe(value: Any) -> str:
    """Name a runtime value the way a JSON document would."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if _is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _plural(count: int | float, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _is_valid_url(value: str) -> bool:
    """Absolute URL with a scheme, e.g. https://example.com/path."""
    if not value or value != value.strip():
        return False
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def _is_valid_date(value: str) -> bool:
    candidate = value.strip()
    if candidate[-1:] in ("Z", "z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        datetime.fromisoformat(candidate)
        return True
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            datetime.strptime(value.strip(), fmt)
            return True
        except ValueError:
            continue
    return False


def _compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a plain pattern or a /pattern/flags literal."""
    literal = REGEX_LITERAL.fullmatch(pattern)
    if not literal:
        return re.compile(pattern)

    flags = 0
    for flag in literal.group(2):
        flags |= {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}.get(flag, 0)
    return re.compile(literal.group(1), flags)


def slugify(value: str) -> str:
    """Lowercase, collapse invalid runs to one hyphen, trim hyphens."""
    return SLUG_INVALID_RUN.sub("-", value.lower()).strip("-")


# Runtime checks for bare array members, keyed by member kind
PRIMITIVE_MEMBER_CHECKS: dict[str, Callable[[Any], bool]] = {
    Kind.STRING.value: lambda v: isinstance(v, str),
    Kind.TEXT.value: lambda v: isinstance(v, str),
    Kind.DATE.value: lambda v: isinstance(v, str),
    Kind.DATETIME.value: lambda v: isinstance(v, str),
    Kind.URL.value: lambda v: isinstance(v, str),
    Kind.EMAIL.value: lambda v: isinstance(v, str),
    Kind.NUMBER.value: _is_number,
    Kind.BOOLEAN.value: lambda v: isinstance(v, bool),
}


KindCheck = Callable[
    [Any, SchemaType, str, list[ValidationRule], FieldContext], list[ValidationIssue]
]


# =============================================================================
# Validator
# =============================================================================


class DocumentValidator:
    """
    Validate documents against schema types.

    Holds the type lookup and options for one validation call and never
    mutates them, so a validator can be shared between callers.
    """

    def __init__(self, type_lookup: TypeLookup, options: ValidateOptions | None = None):
        self.type_lookup = type_lookup
        self.options = options or ValidateOptions()

        self._kind_checks: dict[str, KindCheck] = {
            Kind.STRING.value: self._check_string,
            Kind.TEXT.value: self._check_string,
            Kind.EMAIL.value: self._check_email,
            Kind.NUMBER.value: self._check_number,
            Kind.BOOLEAN.value: self._check_boolean,
            Kind.DATE.value: self._check_date,
            Kind.DATETIME.value: self._check_date,
            Kind.ARRAY.value: self._check_array,
            Kind.OBJECT.value: self._check_object,
            Kind.REFERENCE.value: self._check_reference,
            Kind.IMAGE.value: self._check_asset,
            Kind.FILE.value: self._check_asset,
            Kind.SLUG.value: self._check_slug,
            Kind.URL.value: self._check_url,
            Kind.BLOCK.value: self._check_block,
        }

    def validate(self, document: Any, root_type: SchemaType) -> ValidationResult:
        """
        Validate a document against its root type.

        Args:
            document: The document; any shape is accepted
            root_type: Document or object type the document should match

        Returns:
            ValidationResult with issues filtered per options
        """
        issues: list[ValidationIssue] = []
        type_name = root_type.name or root_type.kind

        if not isinstance(document, dict):
            issues.append(
                ValidationIssue(
                    path="",
                    message=f"Expected document object, got {_describe(document)}",
                    severity=Severity.ERROR,
                    value=document,
                    expected="object",
                    suggestions=(f'Use format: {{ "_type": "{type_name}" }}',),
                )
            )
            document = {}

        doc_type = document.get("_type")
        if not doc_type:
            issues.append(
                ValidationIssue(
                    path="_type",
                    message="Document is missing required _type field",
                    severity=Severity.ERROR,
                    expected=type_name,
                    suggestions=(f'Add "_type": "{type_name}" to the document',),
                )
            )
        elif doc_type != type_name:
            issues.append(
                ValidationIssue(
                    path="_type",
                    message=f'Document type "{doc_type}" does not match expected type "{type_name}"',
                    severity=Severity.ERROR,
                    value=doc_type,
                    expected=type_name,
                    suggestions=(
                        f'Change _type to "{type_name}" or use the correct schema type for validation',
                    ),
                )
            )

        for field in root_type.fields or []:
            if self.options.stop_on_first_error and any(
                i.severity == Severity.ERROR for i in issues
            ):
                break
            issues.extend(self.validate_field(document.get(field.name), field, field.name or ""))

        result = self._build_result(issues, type_name)
        logger.debug(f"Validated document against {type_name}: {result.summary}")
        return result

    def validate_field(self, value: Any, field: SchemaType, path: str) -> list[ValidationIssue]:
        """Validate one field value, recursing into nested values."""
        issues: list[ValidationIssue] = []
        ctx = FieldContext(name=field.name or "", kind=field.kind, title=field.title)
        rules = get_validation_rules(field)

        if value is None:
            if is_field_required(field):
                issues.append(
                    ValidationIssue(
                        path=path,
                        message=f"{field.title or field.name} is required",
                        severity=Severity.ERROR,
                        rule=ValidationRule(flag="presence", constraint="required"),
                        expected=field.kind,
                        field=ctx,
                        suggestions=(f"Provide a value for {field.name}",),
                    )
                )
            return issues

        check = self._kind_checks.get(field.kind)
        if check is not None:
            issues.extend(check(value, field, path, rules, ctx))
        else:
            custom_type = self.type_lookup.get(field.kind)
            if custom_type is not None and custom_type.kind == Kind.OBJECT.value:
                issues.extend(self._check_object(value, custom_type, path, rules, ctx))

        issues.extend(self._apply_rules(value, rules, path, ctx))
        return issues

    def _validate_members(
        self, obj: dict[str, Any], fields: list[SchemaType], path: str
    ) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for field in fields:
            issues.extend(self.validate_field(obj.get(field.name), field, f"{path}.{field.name}"))
        return issues

    # -------------------------------------------------------------------------
    # Structural checks
    # -------------------------------------------------------------------------

    def _check_string(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if not isinstance(value, str):
            return [
                ValidationIssue(
                    path=path,
                    message=f"Expected string, got {_describe(value)}",
                    severity=Severity.ERROR,
                    value=value,
                    expected="string",
                    field=ctx,
                    suggestions=("Convert the value to a string",),
                )
            ]

        allowed = get_list_values(field)
        if allowed is not None and value not in allowed:
            return [
                ValidationIssue(
                    path=path,
                    message=f'"{value}" is not a valid option',
                    severity=Severity.ERROR,
                    value=value,
                    expected=f"one of: {', '.join(str(v) for v in allowed)}",
                    field=ctx,
                    suggestions=tuple(f'Use "{v}"' for v in allowed),
                )
            ]
        return []

    def _check_email(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        issues = self._check_string(value, field, path, rules, ctx)
        if issues:
            return issues
        if not EMAIL_PATTERN.fullmatch(value):
            issues.append(
                ValidationIssue(
                    path=path,
                    message="Invalid email address",
                    severity=Severity.ERROR,
                    value=value,
                    expected="valid email address",
                    field=ctx,
                    suggestions=("Use format: user@example.com",),
                )
            )
        return issues

    def _check_number(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if not _is_number(value):
            return [
                ValidationIssue(
                    path=path,
                    message=f"Expected number, got {_describe(value)}",
                    severity=Severity.ERROR,
                    value=value,
                    expected="number",
                    field=ctx,
                    suggestions=("Convert the value to a number",),
                )
            ]
        if isinstance(value, float) and not math.isfinite(value):
            return [
                ValidationIssue(
                    path=path,
                    message=f"Expected a finite number, got {value}",
                    severity=Severity.ERROR,
                    value=value,
                    expected="number",
                    field=ctx,
                    suggestions=("Use a finite numeric value",),
                )
            ]

        issues: list[ValidationIssue] = []

        integer_rule = next((r for r in rules if r.flag == "integer"), None)
        if integer_rule and isinstance(value, float) and not value.is_integer():
            issues.append(
                ValidationIssue(
                    path=path,
                    message="Expected integer, got decimal",
                    severity=Severity.ERROR,
                    rule=integer_rule,
                    value=value,
                    expected="integer",
                    field=ctx,
                    suggestions=(f"Round to {math.floor(value + 0.5)}",),
                )
            )

        positive_rule = next((r for r in rules if r.flag == "positive"), None)
        if positive_rule and value <= 0:
            issues.append(
                ValidationIssue(
                    path=path,
                    message="Expected positive number",
                    severity=Severity.ERROR,
                    rule=positive_rule,
                    value=value,
                    expected="positive number",
                    field=ctx,
                    suggestions=("Use a positive value",),
                )
            )

        return issues

    def _check_boolean(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if isinstance(value, bool):
            return []
        return [
            ValidationIssue(
                path=path,
                message=f"Expected boolean, got {_describe(value)}",
                severity=Severity.ERROR,
                value=value,
                expected="boolean",
                field=ctx,
                suggestions=("Use true or false",),
            )
        ]

    def _check_date(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if field.kind == Kind.DATETIME.value:
            expected = "ISO 8601 datetime string"
            example = "Use format: 2024-01-15T10:30:00Z"
        else:
            expected = "YYYY-MM-DD date string"
            example = "Use format: 2024-01-15"

        if not isinstance(value, str):
            message = f"Expected date string, got {_describe(value)}"
        elif not _is_valid_date(value):
            message = f'Invalid date format: "{value}"'
        else:
            return []

        return [
            ValidationIssue(
                path=path,
                message=message,
                severity=Severity.ERROR,
                value=value,
                expected=expected,
                field=ctx,
                suggestions=(example,),
            )
        ]

    def _check_array(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if not isinstance(value, list):
            return [
                ValidationIssue(
                    path=path,
                    message=f"Expected array, got {_describe(value)}",
                    severity=Severity.ERROR,
                    value=value,
                    expected="array",
                    field=ctx,
                    suggestions=(
                        f"Wrap the value in an array: [{json.dumps(value, default=str)}]",
                    ),
                )
            ]

        issues: list[ValidationIssue] = []
        members = field.of or []

        for i, item in enumerate(value):
            item_path = f"{path}[{i}]"

            if isinstance(item, dict):
                if "_key" not in item:
                    issues.append(
                        ValidationIssue(
                            path=item_path,
                            message="Array item is missing _key property",
                            severity=Severity.WARNING,
                            value=item,
                            expected="object with _key",
                            field=ctx,
                            suggestions=('Add a unique "_key" property to this item',),
                        )
                    )
                if "_type" in item:
                    issues.extend(self._check_typed_member(item, members, item_path, ctx))
                    continue

            issues.extend(self._check_bare_member(item, members, item_path, ctx))

        return issues

    def _check_typed_member(
        self,
        item: dict[str, Any],
        members: list[SchemaType],
        item_path: str,
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        item_type = item["_type"]
        member = next((m for m in members if item_type in (m.kind, m.name)), None)

        if member is None:
            allowed = [m.kind or m.name for m in members if m.kind or m.name]
            return [
                ValidationIssue(
                    path=f"{item_path}._type",
                    message=f'Type "{item_type}" is not allowed in this array',
                    severity=Severity.ERROR,
                    value=item_type,
                    expected=f"one of: {', '.join(allowed)}",
                    field=ctx,
                    suggestions=tuple(f'Change _type to "{t}"' for t in allowed),
                )
            ]

        definition = self.type_lookup.get(item_type) or member
        return self._validate_members(item, definition.fields or [], item_path)

    def _check_bare_member(
        self,
        item: Any,
        members: list[SchemaType],
        item_path: str,
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if len(members) != 1:
            return []

        expected = members[0].kind
        matches = PRIMITIVE_MEMBER_CHECKS.get(expected)
        if matches is None or matches(item):
            return []

        return [
            ValidationIssue(
                path=item_path,
                message=f"Expected {expected}, got {_describe(item)}",
                severity=Severity.ERROR,
                value=item,
                expected=expected,
                field=ctx,
            )
        ]

    def _check_object(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if not isinstance(value, dict):
            return [
                ValidationIssue(
                    path=path,
                    message=f"Expected object, got {_describe(value)}",
                    severity=Severity.ERROR,
                    value=value,
                    expected="object",
                    field=ctx,
                )
            ]
        return self._validate_members(value, field.fields or [], path)

    def _check_reference(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if not isinstance(value, dict):
            return [
                ValidationIssue(
                    path=path,
                    message=f"Expected reference object, got {_describe(value)}",
                    severity=Severity.ERROR,
                    value=value,
                    expected="reference object with _ref",
                    field=ctx,
                    suggestions=('Use format: { "_type": "reference", "_ref": "document-id" }',),
                )
            ]

        issues: list[ValidationIssue] = []
        ref = value.get("_ref")
        ref_type = value.get("_type")

        if not ref or not isinstance(ref, str):
            issues.append(
                ValidationIssue(
                    path=f"{path}._ref",
                    message="Reference is missing _ref property",
                    severity=Severity.ERROR,
                    value=ref,
                    expected="string (document ID)",
                    field=ctx,
                    suggestions=('Add "_ref": "document-id" to the reference',),
                )
            )

        if ref_type and ref_type != Kind.REFERENCE.value:
            allowed = get_reference_target_types(field)
            if allowed and ref_type not in allowed:
                issues.append(
                    ValidationIssue(
                        path=f"{path}._type",
                        message=f'Reference to "{ref_type}" is not allowed',
                        severity=Severity.ERROR,
                        value=ref_type,
                        expected=f"reference to: {', '.join(allowed)}",
                        field=ctx,
                        suggestions=(f"Reference a document of type: {', '.join(allowed)}",),
                    )
                )

        return issues

    def _check_asset(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if not isinstance(value, dict):
            return [
                ValidationIssue(
                    path=path,
                    message=f"Expected {field.kind} object, got {_describe(value)}",
                    severity=Severity.ERROR,
                    value=value,
                    expected=f"{field.kind} object with asset reference",
                    field=ctx,
                    suggestions=(f'Use format: {{ "asset": {{ "_ref": "{field.kind}-..." }} }}',),
                )
            ]

        issues: list[ValidationIssue] = []
        asset = value.get("asset")
        label = "Image" if field.kind == Kind.IMAGE.value else "File"

        if asset is None or (not asset and not isinstance(asset, dict)):
            issues.append(
                ValidationIssue(
                    path=f"{path}.asset",
                    message=f"{label} is missing asset reference",
                    severity=Severity.ERROR,
                    expected="asset reference object",
                    field=ctx,
                    suggestions=(f'Add "asset": {{ "_ref": "{field.kind}-..." }}',),
                )
            )
        elif not isinstance(asset, dict):
            issues.append(
                ValidationIssue(
                    path=f"{path}.asset",
                    message=f"Expected asset reference object, got {_describe(asset)}",
                    severity=Severity.ERROR,
                    value=asset,
                    expected="asset reference object",
                    field=ctx,
                    suggestions=(f'Use format: {{ "_ref": "{field.kind}-..." }}',),
                )
            )
        else:
            asset_ref = asset.get("_ref")
            if not asset_ref or not isinstance(asset_ref, str):
                issues.append(
                    ValidationIssue(
                        path=f"{path}.asset._ref",
                        message="Asset is missing _ref property",
                        severity=Severity.ERROR,
                        value=asset_ref,
                        expected="asset ID string",
                        field=ctx,
                    )
                )

        # Nested fields such as alt text
        issues.extend(self._validate_members(value, field.fields or [], path))
        return issues

    def _check_slug(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if not isinstance(value, dict):
            return [
                ValidationIssue(
                    path=path,
                    message=f"Expected slug object, got {_describe(value)}",
                    severity=Severity.ERROR,
                    value=value,
                    expected="slug object with current property",
                    field=ctx,
                    suggestions=('Use format: { "current": "my-slug" }',),
                )
            ]

        current = value.get("current")
        if not current or not isinstance(current, str):
            return [
                ValidationIssue(
                    path=f"{path}.current",
                    message="Slug is missing current value",
                    severity=Severity.ERROR,
                    value=current,
                    expected="string",
                    field=ctx,
                    suggestions=('Add "current": "url-friendly-slug"',),
                )
            ]

        if not SLUG_PATTERN.fullmatch(current):
            return [
                ValidationIssue(
                    path=f"{path}.current",
                    message="Slug contains invalid characters",
                    severity=Severity.WARNING,
                    value=current,
                    expected="lowercase letters, numbers, and hyphens only",
                    field=ctx,
                    suggestions=(f'Use: "{slugify(current)}"',),
                )
            ]
        return []

    def _check_url(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if not isinstance(value, str):
            return [
                ValidationIssue(
                    path=path,
                    message=f"Expected URL string, got {_describe(value)}",
                    severity=Severity.ERROR,
                    value=value,
                    expected="URL string",
                    field=ctx,
                    suggestions=("Use format: https://example.com/path",),
                )
            ]
        if not _is_valid_url(value):
            return [
                ValidationIssue(
                    path=path,
                    message=f'Invalid URL: "{value}"',
                    severity=Severity.ERROR,
                    value=value,
                    expected="valid URL",
                    field=ctx,
                    suggestions=("Use format: https://example.com/path",),
                )
            ]
        return []

    def _check_block(
        self,
        value: Any,
        field: SchemaType,
        path: str,
        rules: list[ValidationRule],
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        if not isinstance(value, dict):
            return [
                ValidationIssue(
                    path=path,
                    message=f"Expected block object, got {_describe(value)}",
                    severity=Severity.ERROR,
                    value=value,
                    expected="portable text block",
                    field=ctx,
                )
            ]

        issues = self._check_block_envelope(value, path, "Block", "block type", ctx)

        children = value.get("children")
        if isinstance(children, list):
            for i, child in enumerate(children):
                child_path = f"{path}.children[{i}]"
                if not isinstance(child, dict):
                    issues.append(
                        ValidationIssue(
                            path=child_path,
                            message=f"Expected block child object, got {_describe(child)}",
                            severity=Severity.ERROR,
                            value=child,
                            expected="span or inline object",
                            field=ctx,
                        )
                    )
                    continue
                issues.extend(
                    self._check_block_envelope(
                        child, child_path, "Block child", "span or inline type", ctx
                    )
                )

        return issues

    def _check_block_envelope(
        self,
        node: dict[str, Any],
        path: str,
        label: str,
        expected_type: str,
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        """Missing _type is an error, missing _key only a warning."""
        issues: list[ValidationIssue] = []
        if not node.get("_type"):
            issues.append(
                ValidationIssue(
                    path=f"{path}._type",
                    message=f"{label} is missing _type",
                    severity=Severity.ERROR,
                    expected=expected_type,
                    field=ctx,
                )
            )
        if not node.get("_key"):
            issues.append(
                ValidationIssue(
                    path=f"{path}._key",
                    message=f"{label} is missing _key",
                    severity=Severity.WARNING,
                    expected="unique key",
                    field=ctx,
                    suggestions=('Add a unique "_key" property',),
                )
            )
        return issues

    # -------------------------------------------------------------------------
    # Constraint rules
    # -------------------------------------------------------------------------

    def _apply_rules(
        self,
        value: Any,
        rules: list[ValidationRule],
        path: str,
        ctx: FieldContext,
    ) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        for rule in rules:
            if rule.flag == "min":
                issues.extend(self._rule_min(value, rule, path, ctx))
            elif rule.flag == "max":
                issues.extend(self._rule_max(value, rule, path, ctx))
            elif rule.flag == "length":
                issues.extend(self._rule_length(value, rule, path, ctx))
            elif rule.flag == "regex":
                issues.extend(self._rule_regex(value, rule, path, ctx))
            elif rule.flag == "email":
                if isinstance(value, str) and not EMAIL_PATTERN.fullmatch(value):
                    issues.append(
                        ValidationIssue(
                            path=path,
                            message="Invalid email address",
                            severity=Severity.ERROR,
                            rule=rule,
                            value=value,
                            expected="valid email address",
                            field=ctx,
                            suggestions=("Use format: user@example.com",),
                        )
                    )
            elif rule.flag == "uri":
                if isinstance(value, str) and not _is_valid_url(value):
                    issues.append(
                        ValidationIssue(
                            path=path,
                            message="Invalid URL",
                            severity=Severity.ERROR,
                            rule=rule,
                            value=value,
                            expected="valid URL",
                            field=ctx,
                            suggestions=("Use format: https://example.com/path",),
                        )
                    )
            elif rule.flag == "unique":
                # Needs a dataset-wide index, not available here
                continue
            elif rule.flag == "custom":
                issues.append(
                    ValidationIssue(
                        path=path,
                        message="Has custom validation that cannot be evaluated",
                        severity=Severity.INFO,
                        rule=rule,
                        field=ctx,
                    )
                )

        return issues

    def _rule_min(
        self, value: Any, rule: ValidationRule, path: str, ctx: FieldContext
    ) -> list[ValidationIssue]:
        bound = rule.constraint
        if not _is_finite_number(bound):
            logger.debug(f"Skipping min rule at {path}: unusable constraint {bound!r}")
            return []

        if isinstance(value, str) and len(value) < bound:
            missing = math.ceil(bound - len(value))
            return [
                ValidationIssue(
                    path=path,
                    message=f"Must be at least {bound} characters",
                    severity=Severity.ERROR,
                    rule=rule,
                    value=value,
                    expected=f"string with length >= {bound}",
                    field=ctx,
                    suggestions=(f"Add {missing} more character{'' if missing == 1 else 's'}",),
                )
            ]
        if _is_number(value) and value < bound:
            return [
                ValidationIssue(
                    path=path,
                    message=f"Must be at least {bound}",
                    severity=Severity.ERROR,
                    rule=rule,
                    value=value,
                    expected=f"number >= {bound}",
                    field=ctx,
                    suggestions=(f"Use a value of at least {bound}",),
                )
            ]
        if isinstance(value, list) and len(value) < bound:
            missing = math.ceil(bound - len(value))
            return [
                ValidationIssue(
                    path=path,
                    message=f"Must have at least {_plural(bound, 'item')}",
                    severity=Severity.ERROR,
                    rule=rule,
                    value=len(value),
                    expected=f"array with length >= {bound}",
                    field=ctx,
                    suggestions=(f"Add {missing} more item{'' if missing == 1 else 's'}",),
                )
            ]
        return []

    def _rule_max(
        self, value: Any, rule: ValidationRule, path: str, ctx: FieldContext
    ) -> list[ValidationIssue]:
        bound = rule.constraint
        if not _is_finite_number(bound):
            logger.debug(f"Skipping max rule at {path}: unusable constraint {bound!r}")
            return []

        if isinstance(value, str) and len(value) > bound:
            excess = math.ceil(len(value) - bound)
            return [
                ValidationIssue(
                    path=path,
                    message=f"Must be at most {bound} characters (currently {len(value)})",
                    severity=Severity.ERROR,
                    rule=rule,
                    value=value,
                    expected=f"string with length <= {bound}",
                    field=ctx,
                    suggestions=(f"Remove {excess} character{'' if excess == 1 else 's'}",),
                )
            ]
        if _is_number(value) and value > bound:
            return [
                ValidationIssue(
                    path=path,
                    message=f"Must be at most {bound}",
                    severity=Severity.ERROR,
                    rule=rule,
                    value=value,
                    expected=f"number <= {bound}",
                    field=ctx,
                    suggestions=(f"Use a value of at most {bound}",),
                )
            ]
        if isinstance(value, list) and len(value) > bound:
            excess = math.ceil(len(value) - bound)
            return [
                ValidationIssue(
                    path=path,
                    message=f"Must have at most {_plural(bound, 'item')} (currently {len(value)})",
                    severity=Severity.ERROR,
                    rule=rule,
                    value=len(value),
                    expected=f"array with length <= {bound}",
                    field=ctx,
                    suggestions=(f"Remove {excess} item{'' if excess == 1 else 's'}",),
                )
            ]
        return []

    def _rule_length(
        self, value: Any, rule: ValidationRule, path: str, ctx: FieldContext
    ) -> list[ValidationIssue]:
        if not isinstance(value, str):
            return []

        constraint = rule.constraint
        if _is_number(constraint):
            min_length = max_length = constraint
        elif isinstance(constraint, dict):
            min_length = constraint.get("min")
            max_length = constraint.get("max")
        else:
            logger.debug(f"Skipping length rule at {path}: unsupported constraint {constraint!r}")
            return []

        if _is_number(min_length) and _is_number(max_length) and min_length == max_length:
            if len(value) != min_length:
                return [
                    ValidationIssue(
                        path=path,
                        message=f"Must be exactly {min_length} characters (currently {len(value)})",
                        severity=Severity.ERROR,
                        rule=rule,
                        value=value,
                        expected=f"string with length == {min_length}",
                        field=ctx,
                    )
                ]
            return []

        issues: list[ValidationIssue] = []
        if _is_number(min_length) and len(value) < min_length:
            issues.append(
                ValidationIssue(
                    path=path,
                    message=f"Must be at least {min_length} characters",
                    severity=Severity.ERROR,
                    rule=rule,
                    value=value,
                    expected=f"string with length >= {min_length}",
                    field=ctx,
                )
            )
        if _is_number(max_length) and len(value) > max_length:
            issues.append(
                ValidationIssue(
                    path=path,
                    message=f"Must be at most {max_length} characters",
                    severity=Severity.ERROR,
                    rule=rule,
                    value=value,
                    expected=f"string with length <= {max_length}",
                    field=ctx,
                )
            )
        return issues

    def _rule_regex(
        self, value: Any, rule: ValidationRule, path: str, ctx: FieldContext
    ) -> list[ValidationIssue]:
        if not isinstance(value, str):
            return []

        constraint = rule.constraint
        if isinstance(constraint, str):
            constraint = {"pattern": constraint}
        if not isinstance(constraint, dict) or not isinstance(constraint.get("pattern"), str):
            return []

        pattern = constraint["pattern"]
        name = constraint.get("name")
        invert = constraint.get("invert") is True

        try:
            compiled = _compile_pattern(pattern)
        except re.error as e:
            # Broken schema, not a document problem
            logger.debug(f"Skipping regex rule at {path}: {e}")
            return []

        matched = compiled.search(value) is not None
        if matched != invert:
            return []

        if invert:
            message = f"Must not match {name} format" if name else "Matches a disallowed pattern"
        else:
            message = f"Does not match {name} format" if name else "Does not match required pattern"

        return [
            ValidationIssue(
                path=path,
                message=message,
                severity=Severity.ERROR,
                rule=rule,
                value=value,
                expected=name or pattern,
                field=ctx,
            )
        ]

    # -------------------------------------------------------------------------
    # Result
    # -------------------------------------------------------------------------

    def _build_result(self, issues: list[ValidationIssue], type_name: str) -> ValidationResult:
        errors = [i for i in issues if i.severity == Severity.ERROR]
        warnings = (
            [i for i in issues if i.severity == Severity.WARNING]
            if self.options.include_warnings
            else []
        )
        info = (
            [i for i in issues if i.severity == Severity.INFO]
            if self.options.include_info
            else []
        )

        parts: list[str] = []
        if errors:
            parts.append(_plural(len(errors), "error"))
        if warnings:
            parts.append(_plural(len(warnings), "warning"))
        if info:
            parts.append(f"{len(info)} info")

        if errors:
            summary = f"Validation failed: {', '.join(parts)}"
        elif warnings:
            summary = f"Document is valid ({_plural(len(warnings), 'warning')})"
        else:
            summary = "Document is valid"

        return ValidationResult(
            valid=not errors,
            issues=[*errors, *warnings, *info],
            errors=errors,
            warnings=warnings,
            info=info,
            document_type=type_name,
            summary=summary,
        )


# =============================================================================
# Entry points
# =============================================================================


def build_type_lookup(all_types: list[SchemaType]) -> TypeLookup:
    """Index a type catalog by name. Later definitions win."""
    return {t.name: t for t in all_types if t.name}


def validate_document(
    document: Any,
    root_type: SchemaType,
    all_types: list[SchemaType],
    options: ValidateOptions | None = None,
) -> ValidationResult:
    """
    Validate a document against its schema type.

    Args:
        document: The document to validate
        root_type: The document/object type definition
        all_types: Full type catalog, used to resolve custom field kinds
        options: Validation options

    Returns:
        Detailed ValidationResult

    Example:
        result = validate_document(doc, article_type, all_types)
        if not result.valid:
            for error in result.errors:
                print(f"{error.path}: {error.message}")
    """
    return DocumentValidator(build_type_lookup(all_types), options).validate(document, root_type)


def validate_field(
    value: Any,
    field: SchemaType,
    path: str,
    type_lookup: TypeLookup,
    options: ValidateOptions | None = None,
) -> list[ValidationIssue]:
    """Validate a single field value at the given path. Never raises."""
    return DocumentValidator(type_lookup, options).validate_field(value, field, path)
