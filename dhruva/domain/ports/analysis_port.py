"""AnalysisPort protocol for the remote ML backend.

Contract only; ``dhruva.infrastructure.clients.analysis_http`` implements it.
"""

from __future__ import annotations

from typing import Protocol

from dhruva.domain.pipeline.remote import AnalyzeResponse, HealthReport


class AnalysisPort(Protocol):
    """Abstraction over the grievance analysis backend used by the pipeline."""

    async def health(self, base_url: str, timeout: float) -> HealthReport: ...

    async def analyze(
        self,
        base_url: str,
        text: str,
        *,
        citizen_id: str | None = None,
        location: str | None = None,
        timeout: float = 15.0,
    ) -> AnalyzeResponse: ...


class BackendLocator(Protocol):
    """Decides which backend base URL, if any, is usable right now."""

    async def resolve(self) -> str | None: ...
