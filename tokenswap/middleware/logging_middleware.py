"""
HTTP request logging middleware.

Binds the request id (and the swap session id for session routes) into the
structlog context, so price and swap log lines emitted while serving the
request carry them, then logs one ``http_request`` line with the outcome and
the price feed state the response was built from.
"""

import re
import time
import uuid
from typing import Any, Dict, Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("http")

# Path params are not resolved before routing
SESSION_PATH = re.compile(r"^/swap/sessions/(?P<session_id>[^/]+)")

# Logged at debug
QUIET_PATHS = frozenset({"/healthz"})


def session_id_from_path(path: str) -> Optional[str]:
    match = SESSION_PATH.match(path)
    return match.group("session_id") if match else None


def price_feed_context(request: Request) -> Dict[str, Any]:
    feed = getattr(request.app.state, "price_feed", None)
    if feed is None:
        return {}
    return {"price_feed": feed.status, "prices_stale": feed.warning is not None}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log swap API requests with session, price feed and timing info."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid.uuid4())[:8])
        context: Dict[str, Any] = {"request_id": request_id}
        session_id = session_id_from_path(request.url.path)
        if session_id:
            context["session_id"] = session_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(**context)

        start = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 1)

            if status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            elif request.url.path in QUIET_PATHS:
                log = logger.debug
            else:
                log = logger.info

            log(
                "http_request",
                **context,
                **price_feed_context(request),
                method=request.method,
                path=request.url.path,
                status=status_code,
                duration_ms=duration_ms,
            )
