"""Request middleware for tracking, CORS, and other cross-cutting concerns."""

import logging
import os
import uuid
import time
from typing import Callable
from fastapi import Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from connector_hub.infra.config import config
from connector_hub.infra.metrics import request_count, request_duration


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID to all requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log request/response details and record request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        logger = logging.getLogger("connector_hub.request")
        request_id = getattr(request.state, "request_id", "unknown")
        path = request.url.path

        start_time = time.time()
        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": path,
                "client": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(
                "Request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": path,
                    "error": str(e),
                    "duration_ms": duration_ms,
                },
                exc_info=True,
            )
            raise

        elapsed = time.time() - start_time
        duration_ms = int(elapsed * 1000)
        logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            }
        )
        request_count.labels(method=request.method, endpoint=path, status=str(response.status_code)).inc()
        request_duration.labels(method=request.method, endpoint=path).observe(elapsed)

        response.headers["X-Response-Time-Ms"] = str(duration_ms)
        return response


def setup_cors(app):
    """Setup CORS middleware."""
    cors_origins_env = os.getenv("CORS_ORIGINS", "")
    if cors_origins_env:
        # Wildcards are only honoured in development
        allowed_origins = [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
        if config.APP_ENV != "development":
            allowed_origins = [origin for origin in allowed_origins if origin != "*"]
    elif config.APP_ENV == "development":
        allowed_origins = ["*"]
    else:
        allowed_origins = []

    # The browser client sends these headers to every function
    allowed_headers = ["authorization", "x-client-info", "apikey", "content-type", "x-request-id"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=allowed_headers,
        expose_headers=["X-Request-ID", "X-Response-Time-Ms"],
    )
