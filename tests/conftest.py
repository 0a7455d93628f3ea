"""Shared schema fixtures."""

import pytest

from docschema.core.models import SchemaType


def required() -> list[dict]:
    return [{"rules": [{"flag": "presence", "constraint": "required"}]}]


def make_article_type() -> SchemaType:
    return SchemaType.model_validate(
        {
            "type": "document",
            "name": "article",
            "title": "Article",
            "fields": [
                {
                    "type": "string",
                    "name": "title",
                    "title": "Title",
                    "validation": [
                        {
                            "rules": [
                                {"flag": "presence", "constraint": "required"},
                                {"flag": "max", "constraint": 100},
                            ]
                        }
                    ],
                },
                {
                    "type": "text",
                    "name": "description",
                    "validation": [
                        {"rules": [{"flag": "min", "constraint": 10}, {"flag": "max", "constraint": 500}]}
                    ],
                },
                {"type": "slug", "name": "slug", "title": "Slug", "validation": required()},
                {
                    "type": "number",
                    "name": "rating",
                    "validation": [
                        {"rules": [{"flag": "min", "constraint": 1}, {"flag": "max", "constraint": 5}]}
                    ],
                },
                {
                    "type": "number",
                    "name": "count",
                    "validation": [{"rules": [{"flag": "integer"}, {"flag": "positive"}]}],
                },
                {
                    "type": "string",
                    "name": "status",
                    "options": {
                        "list": [
                            {"title": "Draft", "value": "draft"},
                            {"title": "Published", "value": "published"},
                        ]
                    },
                },
                {"type": "string", "name": "email", "validation": [{"rules": [{"flag": "email"}]}]},
                {"type": "url", "name": "website"},
                {"type": "datetime", "name": "publishedAt"},
                {"type": "date", "name": "eventDate"},
                {"type": "boolean", "name": "featured"},
                {
                    "type": "array",
                    "name": "tags",
                    "of": [{"type": "string"}],
                    "validation": [{"rules": [{"flag": "min", "constraint": 1}]}],
                },
                {"type": "reference", "name": "author", "to": [{"type": "author"}]},
                {
                    "type": "image",
                    "name": "mainImage",
                    "options": {"hotspot": True},
                    "fields": [
                        {"type": "string", "name": "alt", "title": "Alt text", "validation": required()}
                    ],
                },
                {"type": "array", "name": "body", "of": [{"type": "block"}, {"type": "image"}]},
                {"type": "array", "name": "sections", "of": [{"type": "callout"}]},
                {"type": "seo", "name": "seo"},
                {"type": "block", "name": "intro"},
            ],
        }
    )


def make_all_types(article: SchemaType) -> list[SchemaType]:
    return [
        article,
        SchemaType.model_validate(
            {
                "type": "document",
                "name": "author",
                "fields": [{"type": "string", "name": "name", "validation": required()}],
            }
        ),
        SchemaType.model_validate(
            {
                "type": "object",
                "name": "seo",
                "fields": [
                    {
                        "type": "string",
                        "name": "metaTitle",
                        "validation": [{"rules": [{"flag": "max", "constraint": 60}]}],
                    }
                ],
            }
        ),
        SchemaType.model_validate(
            {
                "type": "object",
                "name": "callout",
                "fields": [{"type": "string", "name": "text", "validation": required()}],
            }
        ),
    ]


@pytest.fixture
def article_type() -> SchemaType:
    return make_article_type()


@pytest.fixture
def all_types(article_type: SchemaType) -> list[SchemaType]:
    return make_all_types(article_type)


@pytest.fixture
def valid_article() -> dict:
    return {
        "_type": "article",
        "_id": "article-1",
        "title": "Hello World",
        "slug": {"_type": "slug", "current": "hello-world"},
    }
