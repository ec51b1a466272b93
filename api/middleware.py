"""
Global middleware.

Every response carries an ``X-Request-ID`` (the caller's, if it sent one)
and an ``X-Process-Time``.  The request id is the handle for finding the
logged cause of a generic 500 body.
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def register_middleware(app: FastAPI) -> None:
    """Attach app-level middleware."""

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        if response.status_code >= 500:
            logger.warning(
                "[%s] %s %s failed with %d",
                request_id,
                request.method,
                request.url.path,
                response.status_code,
            )
        else:
            logger.debug(
                "[%s] %s %s -> %d in %.3fs",
                request_id,
                request.method,
                request.url.path,
                response.status_code,
                elapsed,
            )
        return response
