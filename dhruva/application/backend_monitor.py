from __future__ import annotations

import asyncio

from dhruva.application.session import GrievanceSession
from dhruva.core.logging import get_logger
from dhruva.domain.pipeline.orchestrator import BACKEND_UNAVAILABLE
from dhruva.infrastructure.endpoint_resolver import EndpointResolver

logger = get_logger(__name__)


class BackendMonitor:
    """Periodically re-resolves the analysis backend and records the answer
    in the session."""

    def __init__(self, resolver: EndpointResolver, session: GrievanceSession, *, interval: float = 30.0) -> None:
        self.resolver = resolver
        self._session = session
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self) -> str | None:
        url = await self.resolver.resolve()
        self._session.set_backend_status(
            url is not None,
            endpoint=url,
            error=None if url else BACKEND_UNAVAILABLE,
        )
        logger.info("backend_status_refreshed", extra={"available": url is not None, "url": url or "-"})
        return url

    async def _loop(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception as e:  # next tick retries
                logger.error("backend_refresh_failed", extra={"error": str(e)})
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="backend-monitor")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
