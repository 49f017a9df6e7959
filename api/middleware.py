"""
Access logging and the mapping of domain errors onto HTTP responses.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from auth.errors import PermissionDenied
from database.errors import DuplicateUsername, StoreUnavailable

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI) -> None:
    """One access-log line per request, tagged with the authenticated user."""

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.1f}"

        # set by get_current_user on guarded routes only
        user = getattr(request.state, "user", None)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s %d user=%s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            user.username if user else "-",
            elapsed_ms,
        )
        return response


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors raised below the routes onto HTTP responses."""

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable(request: Request, exc: StoreUnavailable):
        logger.error("%s %s: store unavailable: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"Error: {exc}"},
        )

    @app.exception_handler(DuplicateUsername)
    async def duplicate_username(request: Request, exc: DuplicateUsername):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(PermissionDenied)
    async def permission_denied(request: Request, exc: PermissionDenied):
        logger.info("%s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": "Permission denied"},
        )
