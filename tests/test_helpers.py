"""Tests for schema introspection helpers."""

import pytest

from docschema.core import helpers
from docschema.core.models import SchemaType


@pytest.fixture
def profile_type() -> SchemaType:
    return SchemaType.model_validate(
        {
            "type": "document",
            "name": "profile",
            "fields": [
                {"type": "string", "name": "handle", "fieldset": "account", "readOnly": True},
                {"type": "string", "name": "bio", "hidden": True},
                {"type": "string", "name": "notes", "hidden": "({parent}) => !parent.admin"},
                {
                    "type": "slug",
                    "name": "slug",
                    "options": {"source": "handle"},
                    "validation": [{"rules": [{"flag": "presence", "constraint": "required"}]}],
                },
            ],
        }
    )


class TestTypeGuards:
    """Test kind predicates."""

    def test_guards(self, article_type) -> None:
        fields = {f.name: f for f in article_type.fields or []}

        assert helpers.is_document_type(article_type)
        assert not helpers.is_object_type(article_type)
        assert helpers.is_array_type(fields["tags"])
        assert helpers.is_reference_type(fields["author"])
        assert helpers.is_block_type(fields["intro"])
        assert helpers.is_image_type(fields["mainImage"])
        assert not helpers.is_file_type(fields["mainImage"])

    @pytest.mark.parametrize("kind", ["string", "text", "number", "boolean", "date", "datetime", "url", "slug", "email"])
    def test_primitive_kinds(self, kind) -> None:
        assert helpers.is_primitive_type(SchemaType(type=kind))

    @pytest.mark.parametrize("kind", ["array", "object", "reference", "image", "block", "seo"])
    def test_non_primitive_kinds(self, kind) -> None:
        assert not helpers.is_primitive_type(SchemaType(type=kind))


class TestFieldHelpers:
    """Test field lookups."""

    def test_get_field_by_name(self, article_type) -> None:
        assert helpers.get_field_by_name(article_type, "rating").kind == "number"
        assert helpers.get_field_by_name(article_type, "missing") is None

    def test_get_required_fields(self, article_type) -> None:
        assert [f.name for f in helpers.get_required_fields(article_type)] == ["title", "slug"]

    def test_fieldsets(self, profile_type) -> None:
        assert [f.name for f in helpers.get_fields_by_fieldset(profile_type, "account")] == ["handle"]
        assert [f.name for f in helpers.get_fields_without_fieldset(profile_type)] == ["bio", "notes", "slug"]

    def test_conditional_hidden_counts_as_visible(self, profile_type) -> None:
        assert [f.name for f in helpers.get_visible_fields(profile_type)] == ["handle", "notes", "slug"]

    def test_editable_fields(self, profile_type) -> None:
        assert [f.name for f in helpers.get_editable_fields(profile_type)] == ["bio", "notes", "slug"]


class TestValidationHelpers:
    """Test rule queries."""

    def test_rules_flattened_in_order(self, article_type) -> None:
        title = helpers.get_field_by_name(article_type, "title")

        assert [r.flag for r in helpers.get_validation_rules(title)] == ["presence", "max"]
        assert helpers.get_validation_rules(SchemaType(type="string")) == []

    def test_rules_by_flag(self, article_type) -> None:
        count = helpers.get_field_by_name(article_type, "count")

        assert len(helpers.get_validation_rules_by_flag(count, "integer")) == 1
        assert helpers.get_validation_rules_by_flag(count, "max") == []

    def test_has_validation_rule_with_constraint(self, article_type) -> None:
        title = helpers.get_field_by_name(article_type, "title")

        assert helpers.has_validation_rule(title, "max")
        assert helpers.has_validation_rule(title, "max", 100)
        assert not helpers.has_validation_rule(title, "max", 50)
        assert not helpers.has_validation_rule(title, "min")

    def test_has_validation_rule_with_none_constraint(self, article_type) -> None:
        """An explicit None constraint is compared, not treated as absent."""
        count = helpers.get_field_by_name(article_type, "count")

        assert helpers.has_validation_rule(count, "integer", None)

    def test_is_field_required(self, article_type) -> None:
        assert helpers.is_field_required(helpers.get_field_by_name(article_type, "title"))
        assert not helpers.is_field_required(helpers.get_field_by_name(article_type, "rating"))

    def test_min_max_constraints(self, article_type) -> None:
        rating = helpers.get_field_by_name(article_type, "rating")

        assert helpers.get_min_constraint(rating) == 1
        assert helpers.get_max_constraint(rating) == 5
        assert helpers.get_min_constraint(helpers.get_field_by_name(article_type, "title")) is None

    def test_non_numeric_constraint_is_none(self) -> None:
        field = SchemaType.model_validate(
            {"type": "datetime", "name": "at", "validation": [{"rules": [{"flag": "min", "constraint": "2024-01-01"}]}]}
        )

        assert helpers.get_min_constraint(field) is None


class TestReferenceAndArrayHelpers:
    """Test reference targets and array members."""

    def test_reference_targets(self, article_type) -> None:
        author = helpers.get_field_by_name(article_type, "author")

        assert helpers.get_reference_target_types(author) == ["author"]
        assert helpers.can_reference_type(author, "author")
        assert not helpers.can_reference_type(author, "category")

    def test_array_members(self, article_type) -> None:
        body = helpers.get_field_by_name(article_type, "body")

        assert helpers.get_array_member_types(body) == ["block", "image"]
        assert helpers.can_contain_type(body, "image")
        assert not helpers.can_contain_type(body, "video")

    def test_non_array_has_no_members(self, article_type) -> None:
        assert helpers.get_array_member_types(helpers.get_field_by_name(article_type, "title")) == []


class TestOptionsHelpers:
    """Test options accessors."""

    def test_list_options(self, article_type) -> None:
        status = helpers.get_field_by_name(article_type, "status")

        assert helpers.has_list_options(status)
        assert helpers.get_list_values(status) == ["draft", "published"]
        assert helpers.get_list_options(status)[0] == {"title": "Draft", "value": "draft"}

    def test_bare_list_values(self) -> None:
        field = SchemaType.model_validate({"type": "string", "name": "size", "options": {"list": ["s", "m", "l"]}})

        assert helpers.get_list_values(field) == ["s", "m", "l"]

    def test_no_list_options(self, article_type) -> None:
        title = helpers.get_field_by_name(article_type, "title")

        assert not helpers.has_list_options(title)
        assert helpers.get_list_values(title) is None

    def test_slug_source_and_hotspot(self, article_type, profile_type) -> None:
        assert helpers.get_slug_source(helpers.get_field_by_name(profile_type, "slug")) == "handle"
        assert helpers.get_slug_source(helpers.get_field_by_name(article_type, "slug")) is None
        assert helpers.has_hotspot(helpers.get_field_by_name(article_type, "mainImage"))
        assert not helpers.has_hotspot(helpers.get_field_by_name(article_type, "title"))


class TestSchemaTraversal:
    """Test walking and searching the type catalog."""

    def test_walk_visits_members_and_targets(self, article_type) -> None:
        visited: list[str] = []

        helpers.walk_schema_types([article_type], lambda node, path: visited.append("/".join(path)))

        assert visited[0] == "article"
        assert "article/title" in visited
        assert "article/tags/of[0]" in visited
        assert "article/author/to[0]" in visited
        assert "article/mainImage/alt" in visited
        assert "article/body/of[1]" in visited

    def test_find_types(self, all_types) -> None:
        documents = helpers.find_types(all_types, helpers.is_document_type)

        assert [t.name for t in documents] == ["article", "author"]

    def test_find_type_by_name(self, all_types) -> None:
        assert helpers.find_type_by_name(all_types, "seo").kind == "object"
        assert helpers.find_type_by_name(all_types, "missing") is None

    def test_referenced_type_names(self, article_type) -> None:
        """Built-in kinds are excluded, order is first-seen."""
        assert helpers.get_referenced_type_names(article_type) == ["author", "callout", "seo"]
