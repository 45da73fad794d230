# backend/app/middleware/structured_logging.py
from __future__ import annotations

import json
import logging
import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("facility_finance.request")


def _json_log(payload: dict) -> None:
    # One JSON line per request.
    log.info(json.dumps(payload, default=str))


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Emits one structured log line per request with:
      request_id, org_slug, user_email, method, path, status_code, latency_ms

    Must be added after RequestIDMiddleware (so it runs inside it and sees
    request.state.request_id).
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        t0 = time.time()

        # Headers are enough for the request line; the principal is resolved
        # inside handlers.
        org_slug = request.headers.get("X-Org-Slug")
        user_email = request.headers.get("X-User-Email")

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            latency_ms = int((time.time() - t0) * 1000)
            request_id: Optional[str] = getattr(request.state, "request_id", None)

            _json_log(
                {
                    "event": "http_request",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "query": str(request.url.query) if request.url.query else "",
                    "status_code": status_code,
                    "latency_ms": latency_ms,
                    "org_slug": org_slug,
                    "user_email": user_email,
                }
            )
