from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_setup import setup_logging
from .repositories import Repository, build_repository
from .routers import todos as todos_router
from .schemas import HealthOut
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service and database connectivity status."},
    {"name": "todos", "description": "Create, list, toggle and delete Todo items."},
]

# Field-specific messages for request validation failures, checked in order.
_VALIDATION_MESSAGES = (
    ("todo_id", "Invalid todo ID"),
    ("title", "Title is required"),
    ("completed", "Completed must be a boolean"),
)


def _validation_message(errors: Sequence[Dict[str, Any]]) -> str:
    if any(e.get("type") == "json_invalid" for e in errors):
        return "Invalid JSON body"
    for field, message in _VALIDATION_MESSAGES:
        for e in errors:
            if field not in tuple(e.get("loc", ())):
                continue
            # Messages raised by our own validators are already user-facing.
            if e.get("type") == "value_error" and "error" in e.get("ctx", {}):
                return str(e["ctx"]["error"])
            return message
    return "Invalid request body"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report request validation errors as 400 with a single message naming the
    violated input.

    Response format:
        {"error": "Invalid todo ID"}
    """
    return JSONResponse(status_code=400, content={"error": _validation_message(exc.errors())})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException details in the same {"error": ...} shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _cors_origins(origins: List[str]) -> List[str]:
    allow_all = origins == ["*"] or len(origins) == 0
    return ["*"] if allow_all else origins


# PUBLIC_INTERFACE
async def health_check(repo: Repository = Depends(todos_router.get_repository)):
    """
    Health check endpoint.

    Returns:
        {status, database, timestamp} when a trivial query succeeds, otherwise
        the same fields plus `error` with status code 500.
    """
    try:
        await repo.ping()
    except Exception as exc:
        logger.exception("Health check failed")
        body = HealthOut(
            status="unhealthy",
            database="disconnected",
            timestamp=datetime.now(timezone.utc),
            error=str(exc) or exc.__class__.__name__,
        )
        return JSONResponse(status_code=500, content=body.model_dump(mode="json"))
    return HealthOut(status="healthy", database="connected", timestamp=datetime.now(timezone.utc))


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[Repository] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    The repository is started (pool opened, schema ensured) before the app
    accepts requests and shut down when it stops. Pass `repository` to
    substitute the storage backend, e.g. InMemoryRepository in tests.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    repo = repository if repository is not None else build_repository(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await repo.startup()
        try:
            yield
        finally:
            await repo.shutdown()

    app = FastAPI(
        title="Todo Backend",
        description="Backend API service for a minimal todo list stored in PostgreSQL.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repo

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(settings.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.add_api_route(
        "/api/health",
        health_check,
        methods=["GET"],
        response_model=HealthOut,
        response_model_exclude_none=True,
        summary="Health Check",
        tags=["health"],
        responses={500: {"model": HealthOut, "description": "Database unreachable"}},
    )
    app.include_router(todos_router.router)
    return app


app = create_app()
