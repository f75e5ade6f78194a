"""Wire DTOs of the remote analysis backend and their mapping to domain results.

The backend contract:
- GET  /api/v1/ml/health   -> HealthReport
- POST /api/v1/ml/analyze  -> AnalyzeResponse
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dhruva.domain.pipeline.constants import SLA_HOURS
from dhruva.domain.pipeline.models import (
    Classification,
    ClassificationMethod,
    DepartmentScore,
    DistressLevel,
    DuplicateCheck,
    LapseRisk,
    PipelineResult,
    ProactiveAlert,
    ResponseTemplate,
    ResultSource,
    RiskLevel,
    Sentiment,
    SimilarCase,
    Sla,
)
from dhruva.domain.pipeline.stages.actions import derive_actions
from dhruva.domain.reference import DEFAULT_RESPONSE_TEMPLATE

HEALTHY_STATUSES = frozenset({"healthy", "degraded"})

_METHODS = {
    "primary_classifier": ClassificationMethod.PRIMARY,
    "fallback_classifier": ClassificationMethod.FALLBACK,
}


class _Wire(BaseModel):
    model_config = ConfigDict(extra="ignore")


class HealthReport(_Wire):
    status: str
    models_loaded: bool = False
    models: dict[str, Any] = {}
    knowledge_base_loaded: bool = False

    @property
    def is_healthy(self) -> bool:
        return self.status in HEALTHY_STATUSES


class WireDepartmentScore(_Wire):
    department: str
    confidence: float = Field(ge=0.0, le=1.0)


class WireClassification(_Wire):
    department: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    method: str | None = None
    top_3: list[WireDepartmentScore] = []
    needs_manual_review: bool = False


class WireSignal(_Wire):
    keyword: str
    level: str


class WireSentiment(_Wire):
    distress_level: DistressLevel
    confidence: float = Field(ge=0.0, le=1.0)
    signals: list[WireSignal] = []


class WireLapse(_Wire):
    lapse: str
    probability: float = 0.0


class WireLapsePrediction(_Wire):
    risk_score: float = Field(ge=0.0, le=1.0)
    risk_level: RiskLevel
    likely_lapses: list[WireLapse] = []


class WireSla(_Wire):
    hours: int
    deadline: str
    priority: str


class WireDuplicateCheck(_Wire):
    is_duplicate: bool = False
    existing_case_id: str | None = None
    similarity: float = 0.0


class WireSimilarCase(_Wire):
    case_id: str
    similarity: float
    resolution: str


class WireAlert(_Wire):
    type: str
    location: str
    department: str
    count: int


class WireAction(_Wire):
    action: str
    priority: str | None = None
    reason: str | None = None


class WireTemplate(_Wire):
    telugu: str
    english: str
    category: str | None = None


class AnalyzeResponse(_Wire):
    timestamp: str | None = None
    classification: WireClassification
    sentiment: WireSentiment
    lapse_prediction: WireLapsePrediction
    sla: WireSla
    duplicate_check: WireDuplicateCheck | None = None
    similar_cases: list[WireSimilarCase] | None = None
    proactive_alerts: list[WireAlert] | None = None
    recommended_actions: list[WireAction] | None = None
    response_template: WireTemplate | None = None


def _parse_deadline(raw: str) -> datetime | None:
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def map_sla(response: AnalyzeResponse, now: datetime) -> Sla:
    """SLA hours always follow the distress level; the backend deadline is
    kept only when its hours agree with that policy."""
    level = response.sentiment.distress_level
    hours = SLA_HOURS[level.value]
    deadline = _parse_deadline(response.sla.deadline) if response.sla.hours == hours else None
    if deadline is None or deadline.tzinfo is None:
        deadline = now + timedelta(hours=hours)
    return Sla(hours=hours, deadline=deadline, priority=response.sla.priority or level.value)


def to_pipeline_result(response: AnalyzeResponse, *, case_id: str, now: datetime) -> PipelineResult:
    wc = response.classification
    classification = Classification(
        department=wc.department or "Unknown",
        confidence=wc.confidence,
        method=_METHODS.get(wc.method or "", ClassificationMethod.MANUAL),
        top3=tuple(DepartmentScore(department=t.department, confidence=t.confidence) for t in wc.top_3[:3]),
    )
    ws = response.sentiment
    sentiment = Sentiment(
        distress_level=ws.distress_level,
        confidence=ws.confidence,
        signals=tuple(f"{s.keyword} ({s.level})" for s in ws.signals),
    )
    wl = response.lapse_prediction
    lapse = LapseRisk(
        score=wl.risk_score,
        level=wl.risk_level,
        likely_lapses=tuple(item.lapse for item in wl.likely_lapses),
    )
    similar = tuple(
        SimilarCase(id=c.case_id, similarity=c.similarity, resolution=c.resolution)
        for c in (response.similar_cases or [])
    )
    actions = [a.action for a in (response.recommended_actions or []) if a.action]
    if not actions:
        actions = derive_actions(
            distress_level=sentiment.distress_level,
            confidence=classification.confidence,
            lapse_score=lapse.score,
            similar_count=len(similar),
        )
    template = response.response_template
    dup = response.duplicate_check
    return PipelineResult(
        case_id=case_id,
        classification=classification,
        sentiment=sentiment,
        sla=map_sla(response, now),
        lapse_risk=lapse,
        similar_cases=similar,
        recommended_actions=tuple(actions),
        response_template=(
            ResponseTemplate(english=template.english, telugu=template.telugu)
            if template is not None
            else ResponseTemplate(**DEFAULT_RESPONSE_TEMPLATE)
        ),
        duplicate=(
            DuplicateCheck(
                is_duplicate=dup.is_duplicate,
                existing_case_id=dup.existing_case_id,
                similarity=dup.similarity,
            )
            if dup is not None
            else DuplicateCheck()
        ),
        alerts=tuple(
            ProactiveAlert(type=a.type, location=a.location, department=a.department, count=a.count)
            for a in (response.proactive_alerts or [])
        ),
        source=ResultSource.API,
    )


def step_payloads(response: AnalyzeResponse) -> dict[int, dict[str, Any]]:
    """Per-step result payloads derived from a backend response, keyed by step index."""
    return {
        0: response.duplicate_check.model_dump() if response.duplicate_check else {"is_duplicate": False},
        1: {
            "department": response.classification.department,
            "confidence": response.classification.confidence,
            "method": response.classification.method,
        },
        2: {"level": response.sentiment.distress_level.value, "signals": len(response.sentiment.signals)},
        3: {"hours": SLA_HOURS[response.sentiment.distress_level.value]},
        4: {"score": response.lapse_prediction.risk_score, "level": response.lapse_prediction.risk_level.value},
        5: {"matches": len(response.similar_cases or [])},
        6: {"alerts": [a.model_dump() for a in (response.proactive_alerts or [])]},
        7: {"templateType": response.response_template.category if response.response_template else "default"},
        8: {"actions": [a.action for a in (response.recommended_actions or [])]},
    }
