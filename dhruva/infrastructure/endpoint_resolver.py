"""Backend endpoint discovery.

Chooses the first healthy analysis backend from an ordered candidate list and
caches it. A cached URL is re-checked with a short timeout on every resolve;
only when that check fails are the candidates probed again, in order, with a
longer timeout. "No backend" is a normal answer, never an exception.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from dhruva.core.logging import get_logger
from dhruva.domain.pipeline.errors import RemoteAnalysisError
from dhruva.domain.pipeline.remote import HealthReport
from dhruva.domain.ports.analysis_port import AnalysisPort, BackendLocator
from dhruva.observability.metrics import record_probe

logger = get_logger(__name__)


class EndpointResolver(BackendLocator):
    def __init__(
        self,
        client: AnalysisPort,
        candidates: Sequence[str],
        *,
        cached_timeout: float = 3.0,
        probe_timeout: float = 5.0,
    ) -> None:
        urls = [url.rstrip("/") for url in candidates if url and url.strip()]
        if not urls:
            raise ValueError("at least one candidate backend URL is required")
        self._client = client
        self._candidates = urls
        self._cached_timeout = cached_timeout
        self._probe_timeout = probe_timeout
        self._working_url: str | None = None
        self._lock = asyncio.Lock()
        self.last_errors: dict[str, str] = {}
        self.last_health: HealthReport | None = None

    @property
    def candidates(self) -> list[str]:
        return list(self._candidates)

    @property
    def working_url(self) -> str | None:
        return self._working_url

    def override(self, url: str) -> None:
        """Pin ``url`` as the working backend until a re-check fails."""
        self._working_url = url.rstrip("/")
        logger.info("endpoint_overridden", extra={"url": self._working_url})

    async def probe(self, url: str, timeout: float) -> bool:
        try:
            report = await asyncio.wait_for(self._client.health(url, timeout), timeout=timeout)
        except asyncio.TimeoutError:
            return self._unhealthy(url, f"timeout after {timeout}s")
        except RemoteAnalysisError as exc:
            return self._unhealthy(url, str(exc))

        if not report.is_healthy:
            return self._unhealthy(url, f"status {report.status!r}")

        self.last_errors.pop(url, None)
        self.last_health = report
        record_probe(True)
        return True

    def _unhealthy(self, url: str, reason: str) -> bool:
        self.last_errors[url] = reason
        record_probe(False)
        logger.info("endpoint_probe_failed", extra={"url": url, "reason": reason})
        return False

    async def resolve(self) -> str | None:
        async with self._lock:
            cached = self._working_url
            if cached is not None:
                if await self.probe(cached, self._cached_timeout):
                    return cached
                self._working_url = None
                logger.warning("cached_endpoint_lost", extra={"url": cached})

            for url in self._candidates:
                if await self.probe(url, self._probe_timeout):
                    self._working_url = url
                    logger.info("endpoint_resolved", extra={"url": url})
                    return url

            logger.warning("no_backend_available", extra={"candidates": len(self._candidates)})
            return None
