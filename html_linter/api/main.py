"""
FastAPI Application
==================

HTTP surface for the lint engine: lint endpoints, rule catalogue and
health check, with request IDs and structured error responses.
"""

from contextlib import asynccontextmanager
import uuid
from typing import AsyncGenerator, Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from html_linter import __version__
from html_linter.config.settings import get_settings, Settings
from html_linter.config.logging import get_logger
from html_linter.core.errors import LintConfigError, SourceTooLargeError
from html_linter.core.rules import registry
from html_linter.api.routes import health, lint, rules
from html_linter.models.schemas import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting FastAPI application", rules_loaded=len(registry))
    try:
        yield
    finally:
        logger.info("Shutting down FastAPI application")


def _error_response(
    request: Request,
    status_code: int,
    error: Any,
    error_code: str,
    details: Any = None,
    headers: Any = None,
) -> JSONResponse:
    error_response = ErrorResponse(
        error=error,
        error_code=error_code,
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=status_code, content=error_response.model_dump(mode="json"), headers=headers
    )


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def custom_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Custom HTTP exception handler with structured error response."""
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            request_id=getattr(request.state, "request_id", None),
        )
        return _error_response(
            request, exc.status_code, exc.detail, str(exc.status_code), headers=exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            request,
            422,
            "Request validation failed",
            "VALIDATION_ERROR",
            details={"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(LintConfigError)
    async def lint_config_exception_handler(request: Request, exc: LintConfigError) -> JSONResponse:
        """Invalid lint configuration in a request body."""
        logger.warning("Invalid lint configuration", errors=exc.errors)
        return _error_response(
            request, 422, "Invalid lint configuration", "CONFIG_INVALID", details={"errors": exc.errors}
        )

    @app.exception_handler(SourceTooLargeError)
    async def source_too_large_handler(request: Request, exc: SourceTooLargeError) -> JSONResponse:
        logger.warning("Source too large", size=exc.size, limit=exc.limit)
        return _error_response(
            request,
            413,
            str(exc),
            "SOURCE_TOO_LARGE",
            details={"size": exc.size, "limit": exc.limit},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """General exception handler for unexpected errors."""
        logger.error(
            "Unhandled exception",
            exception=str(exc),
            request_id=getattr(request.state, "request_id", None),
            exc_info=True,
        )
        return _error_response(
            request,
            500,
            "Internal server error",
            "INTERNAL_ERROR",
            details={"exception": str(exc)} if settings.debug else None,
        )


def create_app() -> FastAPI:
    """
    Application factory function for creating FastAPI app instance.
    Reads settings at call time, so tests can reload settings first.

    Returns:
        FastAPI application instance
    """
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Lint HTML documents and html blocks in Markdown notes",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url="/redoc" if settings.enable_redoc else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_hosts,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def add_request_id(request: Request, call_next) -> Any:  # type: ignore
        """Add request ID to all requests."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    _register_exception_handlers(app, settings)

    app.include_router(health.router)
    app.include_router(lint.router)
    app.include_router(rules.router)

    @app.get("/", tags=["General"])
    async def root() -> dict[str, Any]:
        """Root endpoint with basic API information."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "description": "Lint HTML documents and html blocks in Markdown notes",
            "docs_url": "/docs" if settings.enable_docs else None,
            "health_check": "/health",
            "endpoints": {
                "lint": "POST /api/v1/lint",
                "lint_report": "POST /api/v1/lint/report?format=text|json|html|github",
                "rules": "GET /api/v1/rules",
                "rule": "GET /api/v1/rules/{rule_id}",
            },
        }

    return app


app = create_app()


def run_development_server() -> None:
    """Run development server with auto-reload."""
    settings = get_settings()
    uvicorn.run(
        "html_linter.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run_development_server()
