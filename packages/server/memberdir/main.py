"""
Member Directory API Server

Entry point for the FastAPI application. Run with
``uvicorn memberdir.main:create_app --factory`` or the ``memberdir-server``
script.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from memberdir.api.v1 import router as api_v1_router
from memberdir.core.config import Settings, get_settings
from memberdir.core.database import Database
from memberdir.core.errors import StoreFailure
from memberdir.core.log_config import configure_logging
from memberdir.core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware

log = structlog.get_logger()


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    A ``database`` may be passed in (tests); otherwise one is built from
    ``settings.database_url``.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)
    database = database or Database(settings.database_url, echo=settings.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("memberdir.starting", database=database.engine.url.render_as_string(hide_password=True))
        if settings.create_tables_on_startup:
            await database.create_all()
        yield
        log.info("memberdir.shutting_down")
        await database.dispose()

    app = FastAPI(
        title="Member Directory",
        description="Organization membership directory with admin moderation.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.settings = settings

    # Middleware: the last one added is outermost
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(SQLAlchemyError)
    async def store_failure_handler(request: Request, exc: SQLAlchemyError):
        log.error("store.failure", error_type=type(exc).__name__, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={
                "detail": StoreFailure().detail,
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check: the database answers a trivial query."""
        await database.ping()
        return {"status": "ready"}

    return app


def run() -> None:
    """CLI entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "memberdir.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    run()
