"""
RANZ Wage Survey - HTTP Middleware

Request tracing, response headers and body size limits. Registered in
app.main; the last one added runs first.
"""

import time
from typing import Callable, FrozenSet
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette.types import ASGIApp

from app.core.logging_config import (
    logger,
    set_request_id,
    set_staff_email,
    generate_request_id,
)


# Probes and API docs are not worth a log line per hit
QUIET_PATHS: FrozenSet[str] = frozenset({
    "/health",
    "/api/health/live",
    "/api/health/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
})

# Responses on these prefixes carry tokens or member data
NO_STORE_PREFIXES = ("/api/admin/", "/api/auth/")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id and logs its outcome.

    The id comes from an incoming X-Request-ID header when the proxy sets
    one. It is echoed back along with X-Response-Time.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)

        path = request.url.path
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.log_error_with_context(
                exc,
                context=f"{request.method} {path}",
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise
        finally:
            set_staff_email("")

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if path not in QUIET_PATHS:
            logger.log_request(
                request.method,
                path,
                response.status_code,
                duration_ms,
                client_ip=request.client.host if request.client else "unknown",
            )

        set_request_id("")
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Browser hardening headers; no caching of auth and admin responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.url.path.startswith(NO_STORE_PREFIXES):
            response.headers["Cache-Control"] = "no-store"

        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose declared Content-Length exceeds MAX_REQUEST_SIZE"""

    def __init__(self, app: ASGIApp, max_size: int = 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")

        if declared.isdigit() and int(declared) > self.max_size:
            logger.warning(
                f"[Request] {request.url.path} body of {declared} bytes refused (max {self.max_size})",
                extra={"event_type": "request_too_large", "http_path": request.url.path},
            )
            return JSONResponse(
                status_code=413,
                content={
                    "error": f"Request body too large. Maximum size is {self.max_size} bytes",
                    "code": "REQUEST_TOO_LARGE",
                }
            )

        return await call_next(request)
