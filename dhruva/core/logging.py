from __future__ import annotations

import contextvars
import logging
import sys
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

# Context vars carry correlation ids across awaits inside one request/run
_request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")
_case_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("case_id", default="-")


def get_request_id() -> str:
    return _request_id_ctx.get()


def get_case_id() -> str:
    return _case_id_ctx.get()


@contextmanager
def case_context(case_id: str) -> Iterator[None]:
    """Tag every log record emitted inside the block with ``case_id``."""
    token = _case_id_ctx.set(case_id)
    try:
        yield
    finally:
        _case_id_ctx.reset(token)


class CorrelationFilter(logging.Filter):
    """Inject request_id and case_id from contextvars into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 (shadow builtins)
        record.request_id = get_request_id()
        record.case_id = get_case_id()
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a consistent, structured-ish format.

    Called once on application import/startup. Safe to call repeatedly.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Remove existing handlers to avoid duplicate logs in reload
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level.upper())
    handler.addFilter(CorrelationFilter())
    formatter = logging.Formatter(
        fmt=(
            "%(asctime)s | %(levelname)s | %(name)s | request_id=%(request_id)s"
            " | case_id=%(case_id)s | %(message)s"
        ),
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # httpx logs every request at INFO; health probes would flood the output
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to attach a request ID to each request/response.

    - Reads X-Request-ID header if provided; otherwise generates a UUID.
    - Stores value in request.state.request_id and a contextvar for logging.
    - Echoes header back in the response.
    """

    async def dispatch(self, request: Request, call_next):
        incoming: Optional[str] = request.headers.get("X-Request-ID")
        rid = incoming or uuid.uuid4().hex
        request.state.request_id = rid
        token = _request_id_ctx.set(rid)
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = rid
            return response
        finally:
            _request_id_ctx.reset(token)
