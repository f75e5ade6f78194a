from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from dhruva.api.v1.routes_backend import router as backend_router
from dhruva.api.v1.routes_cases import router as cases_router
from dhruva.api.v1.routes_grievances import router as grievances_router
from dhruva.api.v1.routes_health import router as health_router
from dhruva.application.services.factories import build_session
from dhruva.core.config import get_settings
from dhruva.core.logging import RequestIdMiddleware, configure_logging, get_logger
from dhruva.observability.metrics import MetricsMiddleware
from dhruva.observability.metrics import router as metrics_router

# Initialize settings and logging
settings = get_settings()
configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = get_logger(__name__)
    monitor = app.state.backend_monitor
    monitor.start()
    logger.info(
        "service_startup",
        extra={
            "env": settings.ENV,
            "log_level": settings.LOG_LEVEL,
            "candidates": len(monitor.resolver.candidates),
        },
    )
    try:
        yield
    finally:
        await monitor.stop()
        logger.info("service_shutdown")


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.state.session, app.state.backend_monitor = build_session(settings)

# Middlewares
app.add_middleware(RequestIdMiddleware)
app.add_middleware(MetricsMiddleware)

# Routers
app.include_router(health_router)
app.include_router(grievances_router)
app.include_router(cases_router)
app.include_router(backend_router)
app.include_router(metrics_router)
