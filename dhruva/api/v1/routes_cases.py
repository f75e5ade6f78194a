from __future__ import annotations

from fastapi import APIRouter, Depends

from dhruva.api.deps import get_session
from dhruva.application.session import GrievanceSession
from dhruva.domain.pipeline.errors import PipelineError
from dhruva.domain.pipeline.models import CaseRecord
from dhruva.models.schemas import ResolveRequest, StatusUpdateRequest
from dhruva.observability.errors import from_domain_error

router = APIRouter(prefix="/v1", tags=["cases"])


@router.get("/cases", response_model=list[CaseRecord])
async def list_cases(session: GrievanceSession = Depends(get_session)) -> list[CaseRecord]:
    return session.queue()


@router.get("/cases/submitted", response_model=list[CaseRecord])
async def list_submitted(session: GrievanceSession = Depends(get_session)) -> list[CaseRecord]:
    return session.submitted()


@router.get("/cases/{case_id}", response_model=CaseRecord)
async def get_case(case_id: str, session: GrievanceSession = Depends(get_session)) -> CaseRecord:
    try:
        return session.get_case(case_id)
    except PipelineError as e:
        raise from_domain_error(e)


@router.post("/cases/{case_id}/resolve", response_model=CaseRecord)
async def resolve_case(
    case_id: str,
    body: ResolveRequest,
    session: GrievanceSession = Depends(get_session),
) -> CaseRecord:
    try:
        return session.resolve_case(case_id, body.resolution)
    except PipelineError as e:
        raise from_domain_error(e)


@router.put("/cases/{case_id}/status", response_model=CaseRecord)
async def update_status(
    case_id: str,
    body: StatusUpdateRequest,
    session: GrievanceSession = Depends(get_session),
) -> CaseRecord:
    try:
        return session.set_case_status(case_id, body.status)
    except PipelineError as e:
        raise from_domain_error(e)
