# glacier/main.py
from __future__ import annotations

"""
# Glacier API • Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the Glacier secured content
delivery service (film exports and thumbnails).

## Design Goals
- Deterministic, testable **app factory** (`create_app`) with explicit lifespan.
- Middleware: request id only. No GZip; binary bodies keep their
  `Content-Length`.
- Centralized problem+json exception handling.

## Probes
- `/healthz`: liveness (process up).
- `/readyz`: readiness (DB + glacier storage/secret).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator
import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

# -- Logging bootstrap (Loguru + stdlib intercept) ----------------------------
from glacier.core import logger as _logsetup  # noqa: F401

from glacier.api.v1.routers import router as api_v1_router
from glacier.core.config import settings
from glacier.core.exception_handlers import (
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from glacier.middleware.request_id import RequestIDMiddleware
from glacier.services.stream_service import check_requirements

logger = logging.getLogger("glacier")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifecycle manager.

    Startup:
        - Log a startup banner.
        - Report unmet glacier requirements once (routes answer 503 meanwhile).

    Shutdown:
        - Dispose the DB async engine.
    """
    logger.info("✅ Glacier API starting up (env=%s)", settings.ENV)
    for problem in check_requirements(settings.GLACIER_PATH, settings.download_secret):
        logger.warning("Glacier routes disabled: %s", problem)

    try:
        yield
    finally:
        from glacier.db.session import async_engine

        try:
            await async_engine.dispose()
            logger.info("🛑 Database engine disposed")
        except Exception:
            logger.exception("Error disposing DB engine")
        logger.info("🛑 Glacier API shutting down")


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app() -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Returns:
        FastAPI: application with middleware, exception handlers, the glacier
        routes under `API_PREFIX`, and health/readiness endpoints.
    """
    enable_docs = settings.ENABLE_DOCS and not settings.is_production
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs" if enable_docs else None,
        redoc_url="/redoc" if enable_docs else None,
        openapi_url="/openapi.json" if enable_docs else None,
        lifespan=lifespan,
    )

    # ── Middlewares ─────────────────────────────────────────────────────────
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers (problem+json) ───────────────────────────────────
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)           # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)             # type: ignore[arg-type]

    # ── Routers ─────────────────────────────────────────────────────────────
    app.include_router(api_v1_router, prefix=settings.API_PREFIX)

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        """Liveness probe. No external checks."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> dict[str, object]:
        """
        Readiness probe.

        Returns:
            dict with per-dependency booleans and aggregated `ready` flag.
        """
        from glacier.db.session import db_healthcheck

        db_ok = await db_healthcheck()
        storage_ok = not check_requirements(settings.GLACIER_PATH, settings.download_secret)
        return {
            "ready": bool(db_ok and storage_ok),
            "checks": {"db": db_ok, "storage": storage_ok},
        }

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Service index: name, version, docs and the content endpoints."""
        prefix = settings.API_PREFIX
        body = {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": app.docs_url or "",
            "endpoints": {
                "export": f"{prefix}/film/{{film}}/export/{{export}}?authorisation={{token}}",
                "thumbnail": f"{prefix}/film/{{film}}/thumbnail/{{thumbnail}}",
            },
        }
        return JSONResponse(body)

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn/Gunicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn glacier.main:app --reload`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "glacier.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        workers=int(os.getenv("WORKERS", "1")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
