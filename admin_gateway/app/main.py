"""
FastAPI Admin Gateway Application Factory
==========================================

This is the main entry point for the gateway that sits between the RINSR
admin dashboard and the upstream RINSR API.

Architecture:
    Dashboard pages → Admin gateway (this service) → RINSR API

Routers:
    - /api/*        : Proxied resource routes (session cookie required)
    - /health       : Health check endpoint

Environment Variables:
    - RINSR_API_BASE: Upstream API base URL (e.g., "https://api.example.com")
    - RINSR_PUBLIC_API_BASE: Public fallback base URL (vendor detail only)
    - LOCATIONIQ_KEY: LocationIQ key for the vendor location autocomplete
    - SESSION_COOKIE_NAME: Cookie carrying the bearer token (default: rinsr_token)
    - UPSTREAM_TIMEOUT_SECONDS: Upstream call timeout (default: 30)
    - ALLOWED_ORIGINS: Comma-separated CORS origins
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn admin_gateway.app.main:app --reload --host 0.0.0.0 --port 8080

    Production:
        uvicorn admin_gateway.app.main:app --host 0.0.0.0 --port 8080 --workers 4
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Dict, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from admin_gateway.app.config import Settings, get_settings, validate_configuration
from admin_gateway.app.models import Envelope, HealthResponse
from admin_gateway.app.proxy.routes import proxy_router

SERVICE_NAME = "admin-gateway"
SERVICE_VERSION = "1.0.0"

logger = logging.getLogger("admin_gateway.main")


# Configure structured JSON logging
def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
        - Configure logging
        - Report configuration problems
        - Create the shared upstream HTTP client

    Shutdown:
        - Close the upstream HTTP client
    """
    settings: Settings = app.state.settings

    setup_logging(settings.LOG_LEVEL)

    report = validate_configuration(settings)
    for error in report["errors"]:
        logger.error(f"Configuration error: {error}")
    for warning in report["warnings"]:
        logger.warning(f"Configuration warning: {warning}")

    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.UPSTREAM_TIMEOUT_SECONDS),
        follow_redirects=True,
    )

    logger.info(
        "Admin gateway started",
        extra={
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "upstream_configured": bool(settings.RINSR_API_BASE),
        }
    )

    yield

    logger.info("Shutting down admin gateway")
    await app.state.http_client.aclose()
    app.state.http_client = None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application instance with:
        - Lifespan management
        - CORS middleware
        - Proxy routes under /api
        - Envelope-shaped exception handlers

    Args:
        settings: Settings to use; loaded from the environment when omitted

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="RINSR Admin Gateway",
        description="Proxy between the RINSR admin dashboard and the RINSR API",
        version=SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = settings
    app.state.http_client = None

    if settings.allowed_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins_list,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
            allow_headers=["*"],
        )

    app.include_router(proxy_router, prefix="/api", tags=["Upstream Proxy"])

    @app.get("/health", tags=["System"], response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Service status and whether the upstream URL is configured."""
        return HealthResponse(
            status="ok",
            service=SERVICE_NAME,
            version=SERVICE_VERSION,
            upstream_configured=bool(settings.RINSR_API_BASE),
        )

    @app.get("/", tags=["System"])
    async def root() -> Dict[str, object]:
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "endpoints": {
                "health": "/health",
                "docs": "/docs",
                "api": "/api",
            }
        }

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=Envelope.fail(str(exc.detail)).to_dict(),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=Envelope.fail("Invalid request", error=jsonable_encoder(exc.errors())).to_dict(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler for unhandled errors.

        Logs the error and returns a failure envelope.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__
            },
            exc_info=True
        )

        content = Envelope.fail("Internal server error")
        if settings.LOG_LEVEL == "DEBUG":
            content = Envelope.fail("Internal server error", error=str(exc))

        return JSONResponse(status_code=500, content=content.to_dict())

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "admin_gateway.app.main:app",
        host=settings.GATEWAY_HOST,
        port=settings.GATEWAY_PORT,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )
