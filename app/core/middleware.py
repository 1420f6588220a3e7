"""HTTP middleware for the gateway.

Every request carries a correlation id (taken from ``X-Request-ID`` or
generated) that is bound into the structlog context for the lifetime of
the request, so cabinet calls made on its behalf log under the same id.
Responses echo the id and report their handling time.
"""

import re
import time
import uuid
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(incoming: Optional[str]) -> str:
    """Reuse a caller's id when it is a plain token, otherwise mint one."""
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return uuid.uuid4().hex


def setup_cors_middleware(app: FastAPI) -> None:
    """Allow the configured front-end origins to call the gateway."""
    cors_origins = settings.resolved_cors_origins

    logger.info(
        "CORS configuration",
        origins=cors_origins,
        methods=settings.CORS_METHODS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
        expose_headers=[REQUEST_ID_HEADER, PROCESS_TIME_HEADER],
    )


def setup_request_context_middleware(app: FastAPI) -> None:
    """Bind a correlation id and time each request.

    Args:
        app: FastAPI application instance
    """

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = f"{time.perf_counter() - start:.4f}"
        return response


def setup_all_middleware(app: FastAPI) -> None:
    """Install CORS outermost so preflight requests skip the request context."""
    setup_request_context_middleware(app)
    setup_cors_middleware(app)
