"""Domain models for the grievance pipeline.

Steps, the normalized run result, case-queue records and audit entries.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StepStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class DistressLevel(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    NORMAL = "NORMAL"


class RiskLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ClassificationMethod(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    MANUAL = "manual"


class ResultSource(str, Enum):
    API = "api"
    SIMULATION = "simulation"


class CaseStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REOPENED = "reopened"


class PipelineStep(BaseModel):
    """One stage of the nine-stage pipeline as seen by observers."""

    id: str
    name: str
    status: StepStatus = StepStatus.PENDING
    duration: float | None = None
    result: dict[str, Any] | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)

    @property
    def is_terminal(self) -> bool:
        return self.status in (StepStatus.COMPLETED, StepStatus.SKIPPED)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class DepartmentScore(_Frozen):
    department: str
    confidence: float


class Classification(_Frozen):
    department: str
    confidence: float = Field(ge=0.0, le=1.0)
    method: ClassificationMethod
    top3: tuple[DepartmentScore, ...] = ()


class Sentiment(_Frozen):
    distress_level: DistressLevel
    confidence: float = Field(ge=0.0, le=1.0)
    signals: tuple[str, ...] = ()


class Sla(_Frozen):
    hours: int
    deadline: datetime
    priority: str


class LapseRisk(_Frozen):
    score: float = Field(ge=0.0, le=1.0)
    level: RiskLevel
    likely_lapses: tuple[str, ...] = ()


class SimilarCase(_Frozen):
    id: str
    similarity: float
    resolution: str


class DuplicateCheck(_Frozen):
    is_duplicate: bool = False
    existing_case_id: str | None = None
    similarity: float = 0.0


class ProactiveAlert(_Frozen):
    type: str
    location: str
    department: str
    count: int


class ResponseTemplate(_Frozen):
    english: str
    telugu: str


class PipelineResult(_Frozen):
    """Canonical output of one orchestration run.

    Immutable; the only sanctioned change after creation is a department
    reassignment by a reviewer, which goes through ``with_department``.
    """

    case_id: str
    classification: Classification
    sentiment: Sentiment
    sla: Sla
    lapse_risk: LapseRisk
    similar_cases: tuple[SimilarCase, ...] = ()
    recommended_actions: tuple[str, ...] = ()
    response_template: ResponseTemplate
    duplicate: DuplicateCheck = DuplicateCheck()
    alerts: tuple[ProactiveAlert, ...] = ()
    source: ResultSource

    def with_department(self, department: str) -> "PipelineResult":
        classification = self.classification.model_copy(update={"department": department})
        return self.model_copy(update={"classification": classification})


class CaseRecord(BaseModel):
    """Case-queue entry shared across citizen, officer and policymaker views."""

    id: str
    text: str
    text_telugu: str | None = None
    citizen_name: str
    district: str
    mandal: str
    department: str
    distress_level: DistressLevel
    confidence: float
    lapse_risk: float
    sla_hours: int
    status: CaseStatus = CaseStatus.PENDING
    submitted_at: datetime
    distress_signals: list[str] = []
    similar_cases: list[SimilarCase] = []
    pipeline_result: PipelineResult | None = None


class AuditEntry(BaseModel):
    timestamp: datetime
    action: str
    actor: str
    details: str
    pipeline_step: str | None = None
