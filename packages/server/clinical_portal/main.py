"""
Clinical Client Portal API Server

Entry point for the FastAPI application.
"""

import time
from datetime import datetime, timezone

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinical_portal import __version__
from clinical_portal.api.routes import router as api_router
from clinical_portal.core.config import get_settings
from clinical_portal.core.errors import install_exception_handlers
from clinical_portal.core.logging import configure_logging
from clinical_portal.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from clinical_portal.core.database import dispose_engine
from clinical_portal.core.redis import close_redis

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, "json" if settings.is_production else settings.log_format)
    started = time.monotonic()

    app = FastAPI(
        title="Client Portal",
        description="Multi-tenant client portal API for clinical trial sites.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware (last added is outermost)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    if not settings.is_production:
        app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    install_exception_handlers(app)

    app.include_router(api_router, prefix="/api")

    @app.get("/", tags=["System"])
    async def root():
        return {"message": "Client Portal Backend API", "version": __version__, "status": "running"}

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - started, 3),
        }

    @app.on_event("startup")
    async def on_startup():
        log.info(
            "portal.starting",
            environment=settings.environment,
            data_source=settings.data_source,
            revocation=bool(settings.redis_url),
        )

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("portal.stopping")
        await close_redis()
        await dispose_engine()

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "clinical_portal.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
