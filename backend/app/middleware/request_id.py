# backend/app/middleware/request_id.py
from __future__ import annotations

import re
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Caller-supplied ids end up verbatim in log lines.
_VALID_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def get_request_id() -> str | None:
    return request_id_ctx.get()


def clean_request_id(raw: Optional[str]) -> str:
    """Keeps a well-formed incoming id, otherwise mints a fresh uuid4."""
    rid = (raw or "").strip()
    return rid if _VALID_ID.match(rid) else str(uuid.uuid4())


@contextmanager
def bind_request_id(rid: Optional[str]) -> Iterator[str]:
    """
    Correlation id for work outside an HTTP request (Celery tasks, CLI runs),
    so their log lines carry an id the same way request handlers do.
    """
    value = clean_request_id(rid)
    token = request_id_ctx.set(value)
    try:
        yield value
    finally:
        request_id_ctx.reset(token)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Reads X-Request-ID (header lookup is case-insensitive), or mints one,
    and exposes it on request.state and the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with bind_request_id(request.headers.get(REQUEST_ID_HEADER)) as rid:
            request.state.request_id = rid
            resp = await call_next(request)
            resp.headers[REQUEST_ID_HEADER] = rid
            return resp
