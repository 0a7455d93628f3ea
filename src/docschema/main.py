"""
docschema API - Main FastAPI application.

Serves the document validator over HTTP, with schema types either posted
inline or fetched from the configured schema store.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Literal

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from docschema import __version__
from docschema.client import SchemaClient, SchemaClientError, create_schema_client
from docschema.config import Settings, get_settings
from docschema.core.models import Kind, SchemaType
from docschema.core.validator import (
    ValidateOptions,
    format_validation_for_agent,
    format_validation_issues,
    validate_document,
)

logger = logging.getLogger(__name__)


# Global instances
schema_client: SchemaClient | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - setup and teardown."""
    global schema_client

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    if settings.is_store_configured:
        schema_client = create_schema_client(settings)
        logger.info(f"Schema store: {settings.project_id}/{settings.dataset}")
    else:
        logger.warning("No schema store configured; validation requires inline types")

    yield

    if schema_client:
        await schema_client.close()
        schema_client = None


app = FastAPI(
    title=f"{get_settings().app_name} API",
    description="Schema-driven document validation",
    version=__version__,
    debug=get_settings().debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Dependencies
# =============================================================================


def get_schema_client() -> SchemaClient | None:
    """The store client, or None when no store is configured."""
    return schema_client


async def require_api_token(
    request: Request, settings: Settings = Depends(get_settings)
) -> None:
    """Enforce Authorization: Bearer <api_token> when a token is configured."""
    if not settings.api_token:
        return

    path = request.url.path
    auth_header = request.headers.get("Authorization")

    if not auth_header:
        logger.warning(f"Missing Authorization header for {path}")
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    if not auth_header.startswith("Bearer "):
        logger.warning(f"Invalid Authorization format for {path}")
        raise HTTPException(
            status_code=401, detail="Invalid Authorization format. Use: Bearer <token>"
        )

    if auth_header.removeprefix("Bearer ") != settings.api_token:
        logger.warning(f"Invalid API token for {path}")
        raise HTTPException(status_code=401, detail="Invalid API token")


async def load_types(
    client: SchemaClient | None, workspace: str, tag: str | None
) -> list[SchemaType]:
    """Fetch the type catalog, mapping store failures to HTTP errors."""
    if client is None:
        raise HTTPException(status_code=503, detail="Schema store not configured")

    try:
        return await client.get_types(workspace=workspace, tag=tag)
    except SchemaClientError as e:
        logger.warning(f"Schema store request failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))


# =============================================================================
# Request/Response Models
# =============================================================================


class TypeSummary(BaseModel):
    """Name and kind of one schema type."""
    name: str | None
    kind: str
    title: str | None = None


class TypesResponse(BaseModel):
    """Response for listing types."""
    workspace: str
    tag: str | None
    types: list[TypeSummary]


class ValidateRequest(BaseModel):
    """Request body for /v1/validate."""
    document: Any
    type_name: str
    types: list[SchemaType] | None = None  # inline catalog; skips the store
    workspace: str | None = None
    tag: str | None = None
    include_warnings: bool = True
    include_info: bool = False
    stop_on_first_error: bool = False
    format: Literal["full", "agent", "text"] = "full"


# =============================================================================
# Health Endpoint
# =============================================================================


@app.get("/health")
async def health() -> dict[str, str]:
    """Basic health check."""
    return {"status": "healthy", "version": __version__}


# =============================================================================
# Schema Endpoints (v1)
# =============================================================================


v1 = APIRouter(prefix="/v1", dependencies=[Depends(require_api_token)])


@v1.get("/types", response_model=TypesResponse)
async def list_types(
    workspace: str | None = Query(default=None),
    tag: str | None = Query(default=None),
    kind: str | None = Query(default=None),
    client: SchemaClient | None = Depends(get_schema_client),
    settings: Settings = Depends(get_settings),
) -> TypesResponse:
    """
    List schema types from the store.

    Args:
        workspace: Workspace name (defaults to the configured workspace)
        tag: Optional deployment tag
        kind: Optional filter, e.g. "document"
    """
    workspace = workspace or settings.default_workspace
    types = await load_types(client, workspace, tag)
    if kind:
        types = [t for t in types if t.kind == kind]

    return TypesResponse(
        workspace=workspace,
        tag=tag,
        types=[TypeSummary(name=t.name, kind=t.kind, title=t.title) for t in types],
    )


@v1.get("/types/{name}")
async def get_type(
    name: str,
    workspace: str | None = Query(default=None),
    tag: str | None = Query(default=None),
    client: SchemaClient | None = Depends(get_schema_client),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Get one type definition in its deployed format."""
    types = await load_types(client, workspace or settings.default_workspace, tag)
    match = next((t for t in types if t.name == name), None)
    if match is None:
        raise HTTPException(status_code=404, detail=f"Type not found: {name}")
    return match.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# Validate Endpoint (v1)
# =============================================================================


@v1.post("/validate", response_model=None)
async def validate(
    body: ValidateRequest,
    client: SchemaClient | None = Depends(get_schema_client),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any] | PlainTextResponse:
    """
    Validate a document against a named type.

    Invalid documents still answer 200; the verdict is in the body.
    """
    if body.types is not None:
        all_types = body.types
    else:
        all_types = await load_types(
            client, body.workspace or settings.default_workspace, body.tag
        )

    root_type = next((t for t in all_types if t.name == body.type_name), None)
    if root_type is None:
        raise HTTPException(status_code=404, detail=f"Type not found: {body.type_name}")
    if root_type.kind not in (Kind.DOCUMENT.value, Kind.OBJECT.value):
        raise HTTPException(
            status_code=422,
            detail=f"Type {body.type_name} is a {root_type.kind}, not a document or object type",
        )

    result = validate_document(
        body.document,
        root_type,
        all_types,
        ValidateOptions(
            include_warnings=body.include_warnings,
            include_info=body.include_info,
            stop_on_first_error=body.stop_on_first_error,
        ),
    )

    if body.format == "text":
        return PlainTextResponse(format_validation_issues(result))
    if body.format == "agent":
        return format_validation_for_agent(result)
    return result.to_dict()


app.include_router(v1)
