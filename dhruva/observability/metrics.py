from __future__ import annotations

import time
from typing import Awaitable, Callable

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    labelnames=("endpoint", "method", "status"),
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=("endpoint", "method"),
    buckets=(0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0),
)
pipeline_duration_seconds = Histogram(
    "pipeline_duration_seconds",
    "End-to-end grievance pipeline duration in seconds",
    buckets=(0.1, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0, 20.0, 60.0),
)
grievance_runs_total = Counter(
    "grievance_runs_total",
    "Grievance pipeline runs by result source",
    labelnames=("source",),
)
remote_fallbacks_total = Counter(
    "remote_fallbacks_total",
    "Runs that abandoned the remote backend and finished in simulation",
)
endpoint_probes_total = Counter(
    "endpoint_probes_total",
    "Backend health probes by outcome",
    labelnames=("outcome",),
)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]):
        start = time.perf_counter()
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            endpoint = _endpoint_label(request)
            http_requests_total.labels(endpoint=endpoint, method=method, status="500").inc()
            http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(time.perf_counter() - start)
            raise
        endpoint = _endpoint_label(request)
        http_requests_total.labels(endpoint=endpoint, method=method, status=str(response.status_code)).inc()
        http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(time.perf_counter() - start)
        return response


def _endpoint_label(request: Request) -> str:
    # Route template keeps case ids out of label values
    route = request.scope.get("route")
    path = getattr(route, "path", None) or getattr(route, "path_format", None)
    if isinstance(path, str) and path:
        return path
    return request.url.path


def record_run(source: str, seconds: float, *, fell_back: bool = False) -> None:
    grievance_runs_total.labels(source=source).inc()
    pipeline_duration_seconds.observe(seconds)
    if fell_back:
        remote_fallbacks_total.inc()


def record_probe(healthy: bool) -> None:
    endpoint_probes_total.labels(outcome="healthy" if healthy else "unhealthy").inc()


# Router to expose /metrics
router = APIRouter()


@router.get("/metrics")
async def metrics_endpoint():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
