"""Schema introspection helpers.

Small pure accessors over SchemaType: type guards, field lookups, validation
rule queries, reference/array member kinds, options and schema traversal.
"""

from typing import Any, Callable

from docschema.core.models import (
    BUILT_IN_KINDS,
    PRIMITIVE_KINDS,
    Kind,
    SchemaType,
    ValidationRule,
)


# =============================================================================
# Type Guards
# =============================================================================


def is_document_type(type_: SchemaType) -> bool:
    return type_.kind == Kind.DOCUMENT.value


def is_object_type(type_: SchemaType) -> bool:
    return type_.kind == Kind.OBJECT.value


def is_array_type(type_: SchemaType) -> bool:
    return type_.kind == Kind.ARRAY.value


def is_reference_type(type_: SchemaType) -> bool:
    return type_.kind == Kind.REFERENCE.value


def is_block_type(type_: SchemaType) -> bool:
    """Portable text block."""
    return type_.kind == Kind.BLOCK.value


def is_image_type(type_: SchemaType) -> bool:
    return type_.kind == Kind.IMAGE.value


def is_file_type(type_: SchemaType) -> bool:
    return type_.kind == Kind.FILE.value


def is_primitive_type(type_: SchemaType) -> bool:
    """String, number, boolean, date, datetime, text, url, slug or email."""
    return type_.kind in PRIMITIVE_KINDS


# =============================================================================
# Field Helpers
# =============================================================================


def get_field_by_name(type_: SchemaType, field_name: str) -> SchemaType | None:
    """Get a field by name from a document or object type."""
    for field in type_.fields or []:
        if field.name == field_name:
            return field
    return None


def get_required_fields(type_: SchemaType) -> list[SchemaType]:
    """Get all fields with a presence: required rule."""
    return [f for f in type_.fields or [] if is_field_required(f)]


def get_fields_by_fieldset(type_: SchemaType, fieldset_name: str) -> list[SchemaType]:
    return [f for f in type_.fields or [] if f.extra("fieldset") == fieldset_name]


def get_fields_without_fieldset(type_: SchemaType) -> list[SchemaType]:
    return [f for f in type_.fields or [] if not f.extra("fieldset")]


def get_visible_fields(type_: SchemaType) -> list[SchemaType]:
    """Fields not hidden. Conditionally hidden fields count as visible."""
    return [f for f in type_.fields or [] if f.extra("hidden") is not True]


def get_editable_fields(type_: SchemaType) -> list[SchemaType]:
    """Fields not read-only. Conditionally read-only fields count as editable."""
    return [f for f in type_.fields or [] if f.extra("readOnly") is not True]


# =============================================================================
# Validation Helpers
# =============================================================================


_UNSET = object()


def get_validation_rules(field: SchemaType) -> list[ValidationRule]:
    """Flatten all rule groups of a field, in declaration order."""
    rules: list[ValidationRule] = []
    for group in field.validation or []:
        rules.extend(group.rules)
    return rules


def get_validation_rules_by_flag(field: SchemaType, flag: str) -> list[ValidationRule]:
    return [r for r in get_validation_rules(field) if r.flag == flag]


def has_validation_rule(
    field: SchemaType, flag: str, constraint: Any = _UNSET
) -> bool:
    """
    Check if a field declares a rule with the given flag.

    Args:
        field: The field to check
        flag: Validation flag, e.g. "presence" or "min"
        constraint: Optional constraint value that must also match
    """
    for rule in get_validation_rules(field):
        if rule.flag != flag:
            continue
        if constraint is not _UNSET and rule.constraint != constraint:
            continue
        return True
    return False


def is_field_required(field: SchemaType) -> bool:
    """Check for a presence: required rule."""
    return has_validation_rule(field, "presence", "required")


def _numeric_constraint(field: SchemaType, flag: str) -> int | float | None:
    for rule in get_validation_rules(field):
        if rule.flag != flag:
            continue
        if isinstance(rule.constraint, (int, float)) and not isinstance(rule.constraint, bool):
            return rule.constraint
        return None
    return None


def get_min_constraint(field: SchemaType) -> int | float | None:
    """Constraint of the first min rule, if numeric."""
    return _numeric_constraint(field, "min")


def get_max_constraint(field: SchemaType) -> int | float | None:
    """Constraint of the first max rule, if numeric."""
    return _numeric_constraint(field, "max")


# =============================================================================
# Reference / Array Helpers
# =============================================================================


def get_reference_target_types(field: SchemaType) -> list[str]:
    """Kinds a reference field may point at, e.g. ["author", "person"]."""
    return [target.kind for target in field.to or [] if target.kind]


def can_reference_type(field: SchemaType, type_name: str) -> bool:
    return type_name in get_reference_target_types(field)


def get_array_member_types(field: SchemaType) -> list[str]:
    """Member kinds of an array field, e.g. ["string"]."""
    return [member.kind for member in field.of or [] if member.kind]


def can_contain_type(field: SchemaType, type_name: str) -> bool:
    return type_name in get_array_member_types(field)


# =============================================================================
# Options Helpers
# =============================================================================


def get_list_options(field: SchemaType) -> list[Any] | None:
    """Raw dropdown entries from options.list, or None if not a list."""
    options = field.options or {}
    items = options.get("list")
    if not isinstance(items, list):
        return None
    return items


def get_list_values(field: SchemaType) -> list[Any] | None:
    """Allowed dropdown values. Entries may be {"title", "value"} or bare values."""
    items = get_list_options(field)
    if items is None:
        return None
    return [item.get("value") if isinstance(item, dict) else item for item in items]


def has_list_options(field: SchemaType) -> bool:
    return get_list_options(field) is not None


def get_slug_source(field: SchemaType) -> str | None:
    source = (field.options or {}).get("source")
    return source if isinstance(source, str) else None


def has_hotspot(field: SchemaType) -> bool:
    return (field.options or {}).get("hotspot") is True


# =============================================================================
# Schema Traversal
# =============================================================================


def walk_schema_types(
    types: list[SchemaType],
    visitor: Callable[[SchemaType, list[str]], None],
) -> None:
    """
    Visit every type, field, array member and reference target.

    The visitor receives the node and its path, e.g.
    ["article", "tags", "of[0]"].
    """

    def walk(type_: SchemaType, path: list[str]) -> None:
        visitor(type_, path)

        for field in type_.fields or []:
            walk(field, [*path, field.name or ""])

        for i, member in enumerate(type_.of or []):
            walk(member, [*path, f"of[{i}]"])

        for i, target in enumerate(type_.to or []):
            walk(target, [*path, f"to[{i}]"])

    for type_ in types:
        walk(type_, [type_.name or type_.kind])


def find_types(
    types: list[SchemaType], predicate: Callable[[SchemaType], bool]
) -> list[SchemaType]:
    return [t for t in types if predicate(t)]


def find_type_by_name(types: list[SchemaType], name: str) -> SchemaType | None:
    for type_ in types:
        if type_.name == name:
            return type_
    return None


def get_referenced_type_names(type_: SchemaType) -> list[str]:
    """
    Names of other types a type depends on.

    Collects reference targets, non built-in array members and non built-in
    field kinds, recursively. Order is first-seen.
    """
    names: dict[str, None] = {}

    def collect(node: SchemaType) -> None:
        for target in node.to or []:
            if target.kind:
                names.setdefault(target.kind, None)

        for member in node.of or []:
            if member.kind and member.kind not in BUILT_IN_KINDS:
                names.setdefault(member.kind, None)
            collect(member)

        for field in node.fields or []:
            if field.kind and field.kind not in BUILT_IN_KINDS:
                names.setdefault(field.kind, None)
            collect(field)

    collect(type_)
    return list(names)
