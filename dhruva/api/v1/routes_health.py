from fastapi import APIRouter, Request

from dhruva.core.config import get_settings
from dhruva.core.logging import get_logger

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    """Liveness check: process is up."""
    settings = get_settings()
    logger = get_logger(__name__)
    logger.info("health", extra={"path": str(request.url.path)})
    return {"status": "ok", "service": settings.APP_NAME}


@router.get("/ready")
async def ready(request: Request):
    """Readiness check.

    The service is ready even without a backend: simulation mode is a valid
    steady state, so backend availability is reported, not required.
    """
    settings = get_settings()
    logger = get_logger(__name__)
    logger.info("ready", extra={"path": str(request.url.path)})
    session = getattr(request.app.state, "session", None)
    backend = session.backend if session is not None else None
    return {
        "status": "ok" if session is not None else "starting",
        "service": settings.APP_NAME,
        "backend_available": backend.available if backend else None,
        "backend_url": backend.endpoint if backend else None,
        "mode": "api" if backend and backend.available else "simulation",
    }
