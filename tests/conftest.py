from __future__ import annotations

import asyncio
import copy
from datetime import datetime, timezone
from typing import Any

import pytest

from dhruva.domain.pipeline.errors import RemoteAnalysisError
from dhruva.domain.pipeline.remote import AnalyzeResponse, HealthReport
from dhruva.domain.ports.analysis_port import AnalysisPort, BackendLocator

FIXED_NOW = datetime(2025, 11, 26, 4, 30, tzinfo=timezone.utc)

ANALYZE_PAYLOAD: dict[str, Any] = {
    "timestamp": "2025-11-26T04:30:00Z",
    "classification": {
        "department": "Social Welfare",
        "confidence": 0.91,
        "method": "primary_classifier",
        "top_3": [
            {"department": "Social Welfare", "confidence": 0.91},
            {"department": "Revenue (CCLA)", "confidence": 0.05},
            {"department": "Civil Supplies", "confidence": 0.02},
        ],
        "needs_manual_review": False,
    },
    "sentiment": {
        "distress_level": "HIGH",
        "confidence": 0.88,
        "signals": [{"keyword": "not received", "level": "HIGH"}],
    },
    "lapse_prediction": {
        "risk_score": 0.64,
        "risk_level": "MEDIUM",
        "likely_lapses": [{"lapse": "No Direct Contact", "probability": 0.41}],
    },
    "sla": {"hours": 72, "deadline": "2025-11-29T04:30:00+00:00", "priority": "HIGH"},
    "duplicate_check": {"is_duplicate": False, "existing_case_id": None, "similarity": 0.12},
    "similar_cases": [
        {"case_id": "PGRS-2025-GTR-101", "similarity": 0.83, "resolution": "Aadhaar seeding corrected"},
    ],
    "proactive_alerts": [],
    "recommended_actions": [
        {"action": "SIMILAR_CASE_REVIEW", "priority": "MEDIUM", "reason": "Similar resolved case"},
    ],
    "response_template": {
        "telugu": "మీ ఫిర్యాదు నమోదు చేయబడింది.",
        "english": "Your grievance has been registered.",
        "category": "pension",
    },
}


def analyze_payload(**overrides: Any) -> dict[str, Any]:
    """Backend /analyze body; top-level keys set to ``None`` are dropped."""
    payload = copy.deepcopy(ANALYZE_PAYLOAD)
    for key, value in overrides.items():
        if value is None:
            payload.pop(key, None)
        else:
            payload[key] = value
    return payload


class FakeClock:
    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self._now = now
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self._now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        await asyncio.sleep(0)


class FakeAnalysis(AnalysisPort):
    def __init__(
        self,
        payload: dict[str, Any] | None = None,
        *,
        error: Exception | None = None,
        delay: float = 0.0,
        gate: asyncio.Event | None = None,
        healthy: bool = True,
    ) -> None:
        self.payload = payload if payload is not None else analyze_payload()
        self.error = error
        self.delay = delay
        self.gate = gate
        self.healthy = healthy
        self.analyze_calls: list[dict[str, Any]] = []
        self.health_calls: list[str] = []
        self.started = asyncio.Event()

    async def health(self, base_url: str, timeout: float) -> HealthReport:
        self.health_calls.append(base_url)
        if not self.healthy:
            raise RemoteAnalysisError("Connection failed: ConnectError")
        return HealthReport(status="healthy", models_loaded=True)

    async def analyze(
        self,
        base_url: str,
        text: str,
        *,
        citizen_id: str | None = None,
        location: str | None = None,
        timeout: float = 15.0,
    ) -> AnalyzeResponse:
        self.analyze_calls.append({"base_url": base_url, "text": text, "location": location})
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return AnalyzeResponse.model_validate(self.payload)


class FakeLocator(BackendLocator):
    def __init__(self, url: str | None = "https://ml.example.test") -> None:
        self.url = url
        self.calls = 0

    async def resolve(self) -> str | None:
        self.calls += 1
        return self.url


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def payload_factory():
    return analyze_payload


@pytest.fixture
def fakes():
    """Fake port classes, for tests that need several configured instances."""

    class _Fakes:
        Clock = FakeClock
        Analysis = FakeAnalysis
        Locator = FakeLocator

    return _Fakes
