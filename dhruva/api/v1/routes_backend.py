from __future__ import annotations

from fastapi import APIRouter, Depends

from dhruva.api.deps import get_monitor, get_session
from dhruva.application.backend_monitor import BackendMonitor
from dhruva.application.session import GrievanceSession
from dhruva.core.logging import get_logger
from dhruva.models.schemas import BackendOverrideRequest, BackendStatusResponse
from dhruva.observability.errors import to_http_error

router = APIRouter(prefix="/v1", tags=["backend"])


def _status(session: GrievanceSession, monitor: BackendMonitor) -> BackendStatusResponse:
    resolver = monitor.resolver
    health = resolver.last_health
    return BackendStatusResponse(
        available=session.backend.available,
        endpoint=session.backend.endpoint,
        error=session.backend.error,
        checked_at=session.backend.checked_at,
        candidates=resolver.candidates,
        last_errors=dict(resolver.last_errors),
        models_loaded=health.models_loaded if health else None,
    )


@router.get("/backend", response_model=BackendStatusResponse)
async def backend_status(
    session: GrievanceSession = Depends(get_session),
    monitor: BackendMonitor = Depends(get_monitor),
) -> BackendStatusResponse:
    return _status(session, monitor)


@router.post("/backend/refresh", response_model=BackendStatusResponse)
async def refresh_backend(
    session: GrievanceSession = Depends(get_session),
    monitor: BackendMonitor = Depends(get_monitor),
) -> BackendStatusResponse:
    await monitor.refresh()
    return _status(session, monitor)


@router.post("/backend/override", response_model=BackendStatusResponse)
async def override_backend(
    body: BackendOverrideRequest,
    session: GrievanceSession = Depends(get_session),
    monitor: BackendMonitor = Depends(get_monitor),
) -> BackendStatusResponse:
    url = body.url.strip()
    if not url.startswith(("http://", "https://")):
        raise to_http_error("INVALID_BACKEND_URL")
    monitor.resolver.override(url)
    session.set_backend_status(True, endpoint=monitor.resolver.working_url)
    get_logger(__name__).info("backend_override_applied", extra={"url": url})
    return _status(session, monitor)
