from __future__ import annotations

from dhruva.application.backend_monitor import BackendMonitor
from dhruva.application.session import GrievanceSession
from dhruva.core.config import Settings, get_settings
from dhruva.domain.pipeline.orchestrator import GrievanceOrchestrator
from dhruva.infrastructure.clients.analysis_http import AnalysisHttpClient
from dhruva.infrastructure.clock import SystemClock
from dhruva.infrastructure.endpoint_resolver import EndpointResolver


def build_analysis_client(settings: Settings | None = None) -> AnalysisHttpClient:
    s = settings or get_settings()
    return AnalysisHttpClient(verify_ssl=s.VERIFY_SSL)


def build_resolver(client: AnalysisHttpClient, settings: Settings | None = None) -> EndpointResolver:
    s = settings or get_settings()
    return EndpointResolver(
        client,
        s.candidate_urls(),
        cached_timeout=s.HEALTH_CACHED_TIMEOUT,
        probe_timeout=s.HEALTH_PROBE_TIMEOUT,
    )


def build_clock(settings: Settings | None = None) -> SystemClock:
    s = settings or get_settings()
    return SystemClock(pacing_scale=s.PACING_SCALE)


def build_session(settings: Settings | None = None) -> tuple[GrievanceSession, BackendMonitor]:
    """Wire client, resolver, clock and orchestrator into a session plus its monitor."""
    s = settings or get_settings()
    client = build_analysis_client(s)
    resolver = build_resolver(client, s)
    clock = build_clock(s)
    orchestrator = GrievanceOrchestrator(
        analysis=client,
        locator=resolver,
        clock=clock,
        analyze_timeout=s.ANALYZE_TIMEOUT,
        case_id_prefix=s.CASE_ID_PREFIX,
        default_location=s.DEFAULT_LOCATION,
    )
    session = GrievanceSession(
        orchestrator,
        clock=clock,
        clarification_threshold=s.CLARIFICATION_THRESHOLD,
        citizen_location=s.DEFAULT_LOCATION,
    )
    monitor = BackendMonitor(resolver, session, interval=s.HEALTH_RECHECK_SECONDS)
    return session, monitor
