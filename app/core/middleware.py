"""Custom Middleware"""

import re
import time
import uuid
from typing import Callable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import get_logger, request_id_var

logger = get_logger(__name__)

# Incoming ids are echoed back into headers and logs, so keep them short and printable
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(header_value: Optional[str]) -> str:
    """Reuse a well-formed caller X-Request-ID, otherwise mint one"""
    if header_value and _REQUEST_ID_PATTERN.match(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Correlate every log line of a request under one id"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get("X-Request-ID"))
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Access log: route, outcome, elapsed time and the acting principal"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers["X-Process-Time"] = f"{elapsed_ms}ms"

        extra = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": elapsed_ms,
            "correlation_id": getattr(request.state, "request_id", None),
        }
        # Set by the auth dependency once a bearer token resolves
        principal_id = getattr(request.state, "principal_id", None)
        if principal_id is not None:
            extra["principal_id"] = principal_id

        if response.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}", extra=extra)
        elif response.status_code in (401, 403):
            logger.warning(f"{request.method} {request.url.path}", extra=extra)
        else:
            logger.info(f"{request.method} {request.url.path}", extra=extra)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """API-only responses: no sniffing, no framing, no caching of personal data"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "no-referrer"
        if request.url.path.startswith("/api/"):
            response.headers.setdefault("Cache-Control", "no-store")

        return response
