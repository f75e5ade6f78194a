"""FastAPI dependencies resolving the session and backend monitor from app state."""

from __future__ import annotations

from fastapi import Request

from dhruva.application.backend_monitor import BackendMonitor
from dhruva.application.session import GrievanceSession
from dhruva.observability.errors import to_http_error


async def get_session(request: Request) -> GrievanceSession:
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise to_http_error("SERVICE_NOT_READY")
    return session


async def get_monitor(request: Request) -> BackendMonitor:
    monitor = getattr(request.app.state, "backend_monitor", None)
    if monitor is None:
        raise to_http_error("SERVICE_NOT_READY", message="Backend monitor is not initialised")
    return monitor
