from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from dhruva.application.session import WorkflowStage
from dhruva.domain.clarification import ClarifyingQuestion
from dhruva.domain.pipeline.models import CaseStatus, PipelineResult, PipelineStep, ResultSource


class GrievanceSubmitRequest(BaseModel):
    text: str
    citizen_name: str = "Demo User"
    district: str = "Guntur"
    mandal: str = "Tenali"
    citizen_id: Optional[str] = None
    location: Optional[str] = None


class GrievanceSubmitResponse(BaseModel):
    case_id: str
    source: ResultSource
    result: PipelineResult
    steps: list[PipelineStep]
    endpoint: Optional[str] = None
    advisory: Optional[str] = None
    needs_clarification: bool
    stage: WorkflowStage


class PipelineStateResponse(BaseModel):
    grievance_text: str
    steps: list[PipelineStep]
    result: Optional[PipelineResult] = None
    is_processing: bool
    case_id: Optional[str] = None
    tracked_case_id: Optional[str] = None
    needs_clarification: bool
    clarification_answered: bool
    stage: WorkflowStage
    backend_available: Optional[bool] = None
    backend_error: Optional[str] = None
    generation: int


class ClarificationResponse(BaseModel):
    questions: list[ClarifyingQuestion]


class ClarificationAnswer(BaseModel):
    department: Optional[str] = None


class AcceptRequest(BaseModel):
    feedback: str = ""


class ReassignRequest(BaseModel):
    department: str
    feedback: str = ""


class ResolveRequest(BaseModel):
    resolution: str = Field(min_length=1)


class StatusUpdateRequest(BaseModel):
    status: CaseStatus


class BackendStatusResponse(BaseModel):
    available: Optional[bool] = None
    endpoint: Optional[str] = None
    error: Optional[str] = None
    checked_at: Optional[datetime] = None
    candidates: list[str]
    last_errors: dict[str, str] = {}
    models_loaded: Optional[bool] = None


class BackendOverrideRequest(BaseModel):
    url: str
