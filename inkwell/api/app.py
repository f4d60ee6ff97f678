"""
FastAPI application for the inkwell backend.

This is the HTTP API clients talk to: users under /api/user, content
under /api/content. Every response uses the success/failure envelope.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from inkwell.api.deps import get_content_service
from inkwell.api.responses import failure, ok, paginated
from inkwell.auth.context import AuthContext
from inkwell.auth.policies import require_content_access
from inkwell.auth.routes import router as user_router
from inkwell.config import Settings, get_settings
from inkwell.core.errors import AppError, describe_errors
from inkwell.core.models import ContentStatus
from inkwell.integrations.sentry import capture_exception, init_sentry
from inkwell.services.content import ContentService
from inkwell.services.users import UserService
from inkwell.storage import StorageProvider, create_storage

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect storage, declare unique indexes, seed the admin."""
    settings: Settings = app.state.settings
    storage: StorageProvider = app.state.storage

    await storage.metadata.initialize()
    await app.state.user_service.initialize()
    await app.state.content_service.initialize()

    if settings.admin_email and settings.admin_password:
        await app.state.user_service.ensure_admin(
            settings.admin_name, settings.admin_email, settings.admin_password
        )

    logger.info(f"Inkwell API starting in {settings.environment} mode")

    yield

    await storage.metadata.close()
    logger.info("Inkwell API shutting down")


# =============================================================================
# Content Routes
# =============================================================================


content_router = APIRouter(prefix="/api/content", tags=["content"])


class CreateContentRequest(BaseModel):
    title: str | None = None
    body: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    slug: str | None = None
    status: ContentStatus | None = None


class UpdateContentRequest(BaseModel):
    title: str | None = None
    slug: str | None = None
    body: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    status: ContentStatus | None = None


@content_router.get("")
async def list_content(
    category: str | None = None,
    status: ContentStatus | None = None,
    tags: str | None = Query(None, description="Comma-separated; matches any"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    content: ContentService = Depends(get_content_service),
):
    """Newest first, filterable by category, status and tags."""
    result = await content.list_content(
        category=category, status=status, tags=tags, page=page, limit=limit
    )
    return paginated(result)


@content_router.get("/slug/{slug}")
async def get_content_by_slug(
    slug: str,
    content: ContentService = Depends(get_content_service),
):
    return ok(data=await content.get_by_slug(slug))


@content_router.get("/{content_id}")
async def get_content_by_id(
    content_id: str,
    content: ContentService = Depends(get_content_service),
):
    return ok(data=await content.get_by_id(content_id))


@content_router.post("", status_code=status.HTTP_201_CREATED)
async def create_content(
    data: CreateContentRequest,
    ctx: AuthContext = Depends(require_content_access),
    content: ContentService = Depends(get_content_service),
):
    """Create content authored by the caller."""
    created = await content.create(
        ctx.user,
        title=data.title,
        body=data.body,
        category=data.category,
        tags=data.tags,
        slug=data.slug,
        status=data.status,
    )
    return ok("Content created successfully", data=created)


@content_router.put("/{content_id}")
async def update_content(
    content_id: str,
    data: UpdateContentRequest,
    ctx: AuthContext = Depends(require_content_access),
    content: ContentService = Depends(get_content_service),
):
    """Author or admin only; only the fields sent are changed."""
    updated = await content.update(content_id, data.model_dump(exclude_unset=True), ctx.user)
    return ok("Content updated successfully", data=updated)


@content_router.delete("/{content_id}")
async def delete_content(
    content_id: str,
    ctx: AuthContext = Depends(require_content_access),
    content: ContentService = Depends(get_content_service),
):
    """Author or admin only."""
    await content.delete(content_id, ctx.user)
    return ok("Content deleted successfully")


# =============================================================================
# Error Handlers
# =============================================================================


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=failure(exc.message, exc.error))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=failure("Invalid request", describe_errors(exc.errors())),
    )


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=failure(message),
        headers=getattr(exc, "headers", None),
    )


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    storage: StorageProvider | None = None,
) -> FastAPI:
    """
    Build the application.

    Settings, storage and services are created here, once, and handed to
    routes through ``app.state``. Tests pass their own settings/storage.
    """
    settings = settings or get_settings()
    storage = storage or create_storage(settings)

    init_sentry(settings)

    app = FastAPI(
        title="Inkwell API",
        description="Users, authentication and role-gated content management",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.user_service = UserService(storage, settings)
    app.state.content_service = ContentService(storage, app.state.user_service)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every request and turn anything unhandled into a 500 envelope."""
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            capture_exception(exc, path=request.url.path)
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=failure("Something went wrong!", str(exc)),
            )
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response

    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)

    @app.get("/")
    async def root():
        return ok("API is running")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "inkwell-api"}

    app.include_router(user_router)
    app.include_router(content_router)

    return app
