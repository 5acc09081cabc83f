"""
FastAPI application factory.

Creates and configures the FastAPI application.
"""
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse
import logging

from .lifespan import lifespan
from .logging_config import setup_logging
from .logging_middleware import RequestLoggingMiddleware
from app.utils.exceptions import (
    AuthenticationError,
    CategoryNotFoundError,
    UpstreamError,
    ValidationError
)
from app.utils.messages import Messages

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    # ── Initialize logging first ──
    from app.config.settings import get_settings
    settings = get_settings()
    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        log_json=settings.log_json,
    )

    app = FastAPI(
        title="Catalog API",
        description="""
        Product catalog category service

        Features:
        - Category listing with resolved subcategories and companies
        - Category detail aggregated from subcategories, products and companies
        - Logo upload, replacement and cleanup through a pluggable asset host
        """,
        version="1.0.0",
        lifespan=lifespan
    )

    # ── Request logging middleware (must be added before CORS) ──
    app.add_middleware(RequestLoggingMiddleware)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Register exception handlers
    _register_exception_handlers(app)

    # Include routers
    _include_routers(app)

    # Root and health endpoints
    _register_root_endpoints(app)

    # Serve logos written by the local asset host
    if settings.asset_host.lower() == "local" and settings.upload_dir.exists():
        app.mount(settings.uploads_url_prefix, StaticFiles(directory=str(settings.upload_dir)), name="uploads")

    return app


def _error_body(message: str, error: str = None) -> dict:
    body = {"message": message}
    if error:
        body["error"] = error
    return body


def _register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers with logging."""

    @app.exception_handler(CategoryNotFoundError)
    async def category_not_found_handler(request, exc):
        logger.warning(f"Category not found: {exc.category_id} — {request.method} {request.url.path}")
        return JSONResponse(status_code=404, content=_error_body(Messages.CATEGORY_NOT_FOUND))

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request, exc):
        logger.warning(f"Validation error: {exc} — {request.method} {request.url.path}")
        return JSONResponse(status_code=400, content=_error_body(str(exc)))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request, exc):
        errors = exc.errors()
        detail = errors[0].get("msg") if errors else None
        logger.warning(f"Request validation error: {detail} — {request.method} {request.url.path}")
        return JSONResponse(status_code=400, content=_error_body(Messages.INVALID_REQUEST, detail))

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request, exc):
        logger.warning(f"Unauthorized: {exc} — {request.method} {request.url.path}")
        return JSONResponse(
            status_code=401,
            content=_error_body(str(exc)),
            headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request, exc):
        logger.error(f"Upstream failure: {exc.detail} — {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=_error_body(exc.message, exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request, exc):
        logger.exception(f"Unhandled error: {exc} — {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=_error_body(Messages.INTERNAL_ERROR, str(exc)))


def _include_routers(app: FastAPI) -> None:
    """Include all API routers."""
    from app.routers import category_router

    app.include_router(category_router.router)


def _register_root_endpoints(app: FastAPI) -> None:
    """Register root and health endpoints."""
    from .dependencies import container

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Catalog API",
            "version": "1.0.0",
            "description": "Product catalog category service",
            "endpoints": {
                "categories": "/api/categories",
                "docs": "/docs"
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "services": {
                "mongodb": "connected" if container.base_repo.is_connected else "disconnected",
                "asset_host": container.asset_host.kind if container.asset_host else "not initialized",
                "auth": "enabled" if container.auth_gate.enabled else "disabled"
            }
        }
