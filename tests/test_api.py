"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from docschema import __version__
from docschema.client import SchemaClientError
from docschema.config import Settings, get_settings
from docschema.main import app, get_schema_client


class FakeSchemaClient:
    """Stands in for SchemaClient; serves a fixed catalog."""

    def __init__(self, types=None, error: Exception | None = None):
        self.types = types or []
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    async def get_types(self, workspace: str = "default", tag: str | None = None):
        self.calls.append((workspace, tag))
        if self.error:
            raise self.error
        return self.types


@pytest.fixture
def settings() -> Settings:
    return Settings(api_token=None)


@pytest.fixture
def store(all_types) -> FakeSchemaClient:
    return FakeSchemaClient(all_types)


@pytest.fixture
def client(settings, store):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_schema_client] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def catalog_payload(all_types) -> list[dict]:
    return [t.model_dump(by_alias=True, exclude_none=True) for t in all_types]


class TestHealth:
    """Test /health."""

    def test_health(self, client) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": __version__}

    def test_app_reflects_settings(self) -> None:
        settings = get_settings()

        assert app.title == f"{settings.app_name} API"
        assert app.debug is settings.debug


class TestTypes:
    """Test /v1/types."""

    def test_list_types(self, client, store) -> None:
        response = client.get("/v1/types")

        assert response.status_code == 200
        data = response.json()
        assert data["workspace"] == "default"
        assert [t["name"] for t in data["types"]] == ["article", "author", "seo", "callout"]
        assert store.calls == [("default", None)]

    def test_filter_by_kind(self, client) -> None:
        response = client.get("/v1/types", params={"kind": "document"})

        assert [t["name"] for t in response.json()["types"]] == ["article", "author"]

    def test_workspace_and_tag_forwarded(self, client, store) -> None:
        client.get("/v1/types", params={"workspace": "staging", "tag": "preview"})

        assert store.calls == [("staging", "preview")]

    def test_get_type(self, client) -> None:
        response = client.get("/v1/types/article")

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "document"
        assert data["name"] == "article"
        assert data["fields"][0]["name"] == "title"

    def test_get_unknown_type(self, client) -> None:
        response = client.get("/v1/types/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Type not found: missing"

    def test_store_not_configured(self, client) -> None:
        app.dependency_overrides[get_schema_client] = lambda: None

        response = client.get("/v1/types")

        assert response.status_code == 503

    def test_store_failure(self, client) -> None:
        failing = FakeSchemaClient(error=SchemaClientError("Failed to get schema: HTTP 500", status_code=500))
        app.dependency_overrides[get_schema_client] = lambda: failing

        response = client.get("/v1/types")

        assert response.status_code == 502
        assert "HTTP 500" in response.json()["detail"]


class TestValidate:
    """Test /v1/validate."""

    def test_full_result(self, client) -> None:
        response = client.post("/v1/validate", json={"document": {"_type": "article"}, "type_name": "article"})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["documentType"] == "article"
        assert [e["path"] for e in data["errors"]] == ["title", "slug"]
        assert data["errors"][0]["field"]["name"] == "title"

    def test_valid_document(self, client, valid_article) -> None:
        response = client.post("/v1/validate", json={"document": valid_article, "type_name": "article"})

        assert response.json()["valid"] is True
        assert response.json()["summary"] == "Document is valid"

    def test_inline_types_skip_store(self, client, store, all_types) -> None:
        app.dependency_overrides[get_schema_client] = lambda: None

        response = client.post(
            "/v1/validate",
            json={"document": {"_type": "article"}, "type_name": "article", "types": catalog_payload(all_types)},
        )

        assert response.status_code == 200
        assert response.json()["valid"] is False
        assert store.calls == []

    def test_agent_format(self, client) -> None:
        response = client.post(
            "/v1/validate",
            json={"document": {"_type": "article"}, "type_name": "article", "format": "agent"},
        )

        data = response.json()
        assert data["errorCount"] == 2
        assert data["errors"][0] == {
            "path": "title",
            "message": "Title is required",
            "suggestion": "Provide a value for title",
            "expected": "string",
        }

    def test_text_format(self, client) -> None:
        response = client.post(
            "/v1/validate",
            json={"document": {"_type": "article"}, "type_name": "article", "format": "text"},
        )

        assert response.headers["content-type"].startswith("text/plain")
        assert response.text.startswith("Validation failed: 2 errors")
        assert "✗ title: Title is required" in response.text

    def test_options_forwarded(self, client) -> None:
        response = client.post(
            "/v1/validate",
            json={"document": {}, "type_name": "article", "stop_on_first_error": True},
        )

        assert [e["path"] for e in response.json()["errors"]] == ["_type"]

    def test_unknown_type(self, client) -> None:
        response = client.post("/v1/validate", json={"document": {}, "type_name": "missing"})

        assert response.status_code == 404

    def test_root_must_be_document_or_object(self, client) -> None:
        response = client.post(
            "/v1/validate",
            json={"document": {}, "type_name": "label", "types": [{"type": "string", "name": "label"}]},
        )

        assert response.status_code == 422

    def test_object_root_allowed(self, client) -> None:
        response = client.post("/v1/validate", json={"document": {"_type": "callout"}, "type_name": "callout"})

        assert response.status_code == 200
        assert [e["path"] for e in response.json()["errors"]] == ["text"]


class TestApiToken:
    """Test bearer token enforcement on /v1 routes."""

    @pytest.fixture
    def settings(self) -> Settings:
        return Settings(api_token="test-token")

    def test_missing_header(self, client) -> None:
        response = client.get("/v1/types")

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing Authorization header"

    def test_wrong_scheme(self, client) -> None:
        response = client.get("/v1/types", headers={"Authorization": "Token test-token"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid Authorization format. Use: Bearer <token>"

    def test_wrong_token(self, client) -> None:
        response = client.get("/v1/types", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid API token"

    def test_valid_token(self, client) -> None:
        response = client.get("/v1/types", headers={"Authorization": "Bearer test-token"})

        assert response.status_code == 200

    def test_health_is_open(self, client) -> None:
        assert client.get("/health").status_code == 200
