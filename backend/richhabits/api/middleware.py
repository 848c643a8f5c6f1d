"""Middleware for request logging and security headers."""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from richhabits.core.config import get_settings
from richhabits.core.metrics import observe_http_request
from richhabits.core.request_context import new_request_id, request_id_context
from richhabits.core.structured_logging import log_json

logger = logging.getLogger(__name__)

REQUEST_ID_HEADERS = ("X-Request-ID", "X-Correlation-ID")


def _incoming_request_id(request: Request) -> str | None:
    for header in REQUEST_ID_HEADERS:
        candidate = (request.headers.get(header) or "").strip()
        if candidate and len(candidate) <= 128 and "\n" not in candidate and "\r" not in candidate:
            return candidate
    return None


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add basic security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")

        if get_settings().environment == "production":
            scheme = request.headers.get("x-forwarded-proto") or request.url.scheme
            if scheme == "https":
                response.headers.setdefault(
                    "Strict-Transport-Security",
                    "max-age=63072000; includeSubDomains",
                )

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One structured log line and one metrics observation per request.

    The request ID is taken from ``X-Request-ID``/``X-Correlation-ID`` when
    sane, generated otherwise, and echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = _incoming_request_id(request) or new_request_id()
        request.state.request_id = request_id

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        with request_id_context(request_id):
            try:
                response = await call_next(request)
            except Exception as exc:
                log_json(
                    logger,
                    logging.ERROR,
                    "request_error",
                    method=method,
                    path=path,
                    status_code=500,
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                    client_ip=client_ip,
                    error=str(exc),
                    exception=exc.__class__.__name__,
                )
                raise

            response.headers.setdefault("X-Request-ID", request_id)
            duration_ms = (time.perf_counter() - start_time) * 1000

            route_obj = request.scope.get("route")
            route_template = getattr(route_obj, "path", None) or "unmatched"
            observe_http_request(
                method=method,
                route=route_template,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

            if response.status_code >= 500:
                level = logging.ERROR
            elif response.status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO

            log_json(
                logger,
                level,
                "request",
                method=method,
                path=path,
                route=route_template,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
                client_ip=client_ip,
            )
            return response
