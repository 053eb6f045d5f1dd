"""
REST API Layer for Kairos.

Provides:
- App factory with CORS for the X-User-Id header
- Exception handlers mapping domain errors to the error envelope
- API v1 router under /api/v1
- Root-level health check for container probes
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kairos.api.dependencies import get_engine
from kairos.api.routes import router
from kairos.api.schemas import error_response
from kairos.config.settings import Settings, get_settings
from kairos.lib.errors import (
    AUTH_REQUIRED,
    INTERNAL_ERROR,
    NOT_FOUND,
    VALIDATION_ERROR,
    classify_exception,
)
from kairos.lib.exceptions import KairosException
from kairos.models import Base

logger = logging.getLogger(__name__)

_ALLOWED_HEADERS: list[str] = [
    "Content-Type",
    "Accept",
    "Accept-Language",
    "X-Request-ID",
    "X-User-Id",
]

_HTTP_STATUS_CODES: dict[int, str] = {
    401: AUTH_REQUIRED,
    404: NOT_FOUND,
    422: VALIDATION_ERROR,
}


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    Base.metadata.create_all(bind=get_engine())
    yield


def create_app(settings: Settings | None = None, create_tables: bool = True) -> FastAPI:
    """
    Build the Kairos application.

    Args:
        settings: Settings to use; read from the environment when omitted.
        create_tables: Create missing tables on startup.

    Returns:
        The app with handlers, CORS and the v1 router installed.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Kairos",
        description="Urgency-ranked tasks, habits and recurring chores",
        version="0.1.0",
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=_lifespan if create_tables else None,
    )

    # -------------------------------------------------------------------------
    # Exception handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(KairosException)
    async def domain_exception_handler(request: Request, exc: KairosException) -> JSONResponse:
        code, status_code = classify_exception(exc)
        if status_code >= 500:
            logger.error(
                "Domain error on %s %s: %s", request.method, request.url.path, exc,
            )
            return JSONResponse(status_code=status_code, content=error_response(code))
        return JSONResponse(status_code=status_code, content=error_response(code, str(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = _HTTP_STATUS_CODES.get(exc.status_code, INTERNAL_ERROR)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(code, str(exc.detail)),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=error_response(
                VALIDATION_ERROR,
                details={"errors": [
                    {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
                    for error in exc.errors()
                ]},
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception on %s %s", request.method, request.url.path,
        )
        return JSONResponse(status_code=500, content=error_response(INTERNAL_ERROR))

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    cors_origins = list(settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=_ALLOWED_HEADERS,
    )

    logger.info("CORS origins: %s", cors_origins or "none")

    app.include_router(router)

    @app.get("/health")
    async def root_health_check() -> dict[str, str]:
        """Root health check for infrastructure probes."""
        return {"status": "ok"}

    return app


__all__ = ["create_app", "router"]
