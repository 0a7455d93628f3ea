"""
Schema store client - HTTP client for deployed workspace schemas.

Lists, fetches, deploys and deletes workspace schemas for one
project/dataset. The validator never calls this module; it only supplies
parsed SchemaType definitions to it.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from docschema.config import Settings, get_settings
from docschema.core.models import (
    DeploySchemaInput,
    Kind,
    ParsedWorkspaceSchema,
    SchemaParseError,
    SchemaType,
    StoredWorkspaceSchema,
    parse_schema_types,
)

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2025-03-01"
DEFAULT_API_HOST = "api.sanity.io"
DEFAULT_SCHEMA_VERSION = "2025-05-01"


class SchemaClientError(Exception):
    """Raised when a schema store operation fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: Any | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class SchemaClient:
    """
    Async client for a project's deployed schemas.

    Example:
        async with SchemaClient("my-project", "production", token="...") as client:
            types = await client.get_types()
            article = await client.get_type("article")
    """

    def __init__(
        self,
        project_id: str,
        dataset: str,
        token: str | None = None,
        api_version: str = DEFAULT_API_VERSION,
        api_host: str = DEFAULT_API_HOST,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not project_id:
            raise SchemaClientError("project_id is required in client configuration")
        if not dataset:
            raise SchemaClientError("dataset is required in client configuration")

        self.project_id = project_id
        self.dataset = dataset
        self.base_url = f"https://{api_host.rstrip('/')}/v{api_version.lstrip('v')}"

        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @property
    def schemas_path(self) -> str:
        return f"/projects/{self.project_id}/datasets/{self.dataset}/schemas"

    async def __aenter__(self) -> "SchemaClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP connections."""
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list(self) -> list[StoredWorkspaceSchema]:
        """List all deployed schemas for this project/dataset."""
        data = await self._request("GET", self.schemas_path, "Failed to list schemas")
        return [self._parse_stored(item) for item in data or []]

    async def get(
        self, workspace: str = "default", tag: str | None = None
    ) -> StoredWorkspaceSchema | None:
        """
        Get a schema by workspace name and optional tag.

        Args:
            workspace: Workspace name
            tag: Optional deployment tag

        Returns:
            The stored schema, or None if not found
        """
        schema_id = f"_.schemas.{workspace}.{tag}" if tag else f"_.schemas.{workspace}"

        try:
            data = await self._request(
                "GET",
                f"{self.schemas_path}/{schema_id}",
                f"Failed to get schema '{schema_id}'",
            )
        except SchemaClientError as e:
            if e.status_code == 404:
                return None
            raise

        if not data:
            return None

        # The API may answer with a single record or a list of them
        if isinstance(data, list):
            records = [self._parse_stored(item) for item in data]
            for record in records:
                if record.workspace.name == workspace:
                    return record
            return records[0] if records else None

        return self._parse_stored(data)

    async def get_parsed(
        self, workspace: str = "default", tag: str | None = None
    ) -> ParsedWorkspaceSchema | None:
        """Get a schema with its types already parsed."""
        stored = await self.get(workspace, tag)
        if stored is None:
            return None
        try:
            return ParsedWorkspaceSchema.from_stored(stored)
        except SchemaParseError as e:
            raise SchemaClientError(str(e)) from e

    async def get_types(
        self, workspace: str = "default", tag: str | None = None
    ) -> list[SchemaType]:
        """Get all schema types of a workspace. Missing schemas yield []."""
        stored = await self.get(workspace, tag)
        if stored is None:
            return []
        try:
            return parse_schema_types(stored.raw_schema)
        except SchemaParseError as e:
            raise SchemaClientError(str(e)) from e

    async def get_document_types(
        self, workspace: str = "default", tag: str | None = None
    ) -> list[SchemaType]:
        types = await self.get_types(workspace, tag)
        return [t for t in types if t.kind == Kind.DOCUMENT.value]

    async def get_object_types(
        self, workspace: str = "default", tag: str | None = None
    ) -> list[SchemaType]:
        types = await self.get_types(workspace, tag)
        return [t for t in types if t.kind == Kind.OBJECT.value]

    async def get_type(
        self, type_name: str, workspace: str = "default", tag: str | None = None
    ) -> SchemaType | None:
        """Get a single type definition by name."""
        types = await self.get_types(workspace, tag)
        return next((t for t in types if t.name == type_name), None)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def deploy(self, schemas: list[DeploySchemaInput]) -> list[StoredWorkspaceSchema]:
        """
        Deploy workspace schemas.

        Requires a token with deploy permission on the project.
        """
        payload = {
            "schemas": [
                {
                    "version": s.version or DEFAULT_SCHEMA_VERSION,
                    **({"tag": s.tag} if s.tag else {}),
                    "workspace": s.workspace.model_dump(exclude_none=True),
                    "schema": [t.model_dump(by_alias=True, exclude_none=True) for t in s.types],
                }
                for s in schemas
            ]
        }
        data = await self._request("PUT", self.schemas_path, "Failed to deploy schemas", payload)
        logger.info(f"Deployed {len(schemas)} schema(s) to {self.project_id}/{self.dataset}")
        return [self._parse_stored(item) for item in data or []]

    async def delete(self, schema_ids: list[str]) -> None:
        """Delete schemas by ID, e.g. ["_.schemas.default"]."""
        await self._request(
            "DELETE", self.schemas_path, "Failed to delete schemas", {"ids": schema_ids}
        )
        logger.info(f"Deleted schemas {schema_ids} from {self.project_id}/{self.dataset}")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        error_message: str,
        json: Any | None = None,
    ) -> Any:
        """Send a request and decode the JSON body. All failures become SchemaClientError."""
        logger.debug(f"{method} {self.base_url}{path}")

        try:
            response = await self._client.request(method, path, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status != 404:
                logger.warning(f"{error_message}: HTTP {status}")
            raise SchemaClientError(
                f"{error_message}: HTTP {status}",
                status_code=status,
                response=self._safe_body(e.response),
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"{error_message}: {e}")
            raise SchemaClientError(f"{error_message}: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise SchemaClientError(
                f"{error_message}: invalid JSON response",
                status_code=response.status_code,
                response=response.text,
            ) from e

    @staticmethod
    def _safe_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _parse_stored(item: Any) -> StoredWorkspaceSchema:
        try:
            return StoredWorkspaceSchema.model_validate(item)
        except PydanticValidationError as e:
            raise SchemaClientError(f"Unexpected schema record: {e}", response=item) from e


def create_schema_client(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SchemaClient:
    """Build a SchemaClient from application settings."""
    settings = settings or get_settings()
    return SchemaClient(
        project_id=settings.project_id or "",
        dataset=settings.dataset or "",
        token=settings.store_token,
        api_version=settings.store_api_version,
        api_host=settings.store_api_host,
        timeout=settings.store_timeout,
        transport=transport,
    )
