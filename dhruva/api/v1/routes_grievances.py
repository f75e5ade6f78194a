from __future__ import annotations

from fastapi import APIRouter, Depends

from dhruva.api.deps import get_session
from dhruva.application.session import GrievanceSession
from dhruva.core.logging import get_logger
from dhruva.domain.pipeline.errors import PipelineError
from dhruva.domain.pipeline.models import AuditEntry, PipelineResult
from dhruva.models.schemas import (
    AcceptRequest,
    ClarificationAnswer,
    ClarificationResponse,
    GrievanceSubmitRequest,
    GrievanceSubmitResponse,
    PipelineStateResponse,
    ReassignRequest,
)
from dhruva.observability.errors import from_domain_error, to_http_error

router = APIRouter(prefix="/v1", tags=["grievances"])


@router.post("/grievances", response_model=GrievanceSubmitResponse)
async def submit_grievance(
    body: GrievanceSubmitRequest,
    session: GrievanceSession = Depends(get_session),
) -> GrievanceSubmitResponse:
    logger = get_logger(__name__)
    logger.info(
        "grievance_request_received",
        extra={"text_length": len(body.text), "district": body.district},
    )
    try:
        outcome = await session.submit(
            body.text,
            citizen_name=body.citizen_name,
            district=body.district,
            mandal=body.mandal,
            citizen_id=body.citizen_id,
            location=body.location,
        )
    except PipelineError as e:
        raise from_domain_error(e)
    if outcome is None:
        raise to_http_error("RUN_SUPERSEDED")
    return GrievanceSubmitResponse(
        case_id=outcome.result.case_id,
        source=outcome.source,
        result=outcome.result,
        steps=outcome.steps,
        endpoint=outcome.endpoint,
        advisory=outcome.advisory,
        needs_clarification=session.needs_clarification,
        stage=session.stage,
    )


@router.get("/pipeline", response_model=PipelineStateResponse)
async def pipeline_state(session: GrievanceSession = Depends(get_session)) -> PipelineStateResponse:
    return PipelineStateResponse(**session.snapshot())


@router.post("/pipeline/reset", response_model=PipelineStateResponse)
async def reset_pipeline(
    clear_queue: bool = False,
    session: GrievanceSession = Depends(get_session),
) -> PipelineStateResponse:
    """Reset the current run; ``clear_queue=true`` also restores the seed case queue."""
    if clear_queue:
        session.clear_all()
    else:
        session.reset()
    return PipelineStateResponse(**session.snapshot())


@router.get("/pipeline/clarification", response_model=ClarificationResponse)
async def get_clarification(session: GrievanceSession = Depends(get_session)) -> ClarificationResponse:
    try:
        return ClarificationResponse(questions=session.clarification_questions())
    except PipelineError as e:
        raise from_domain_error(e)


@router.post("/pipeline/clarification", response_model=PipelineResult)
async def answer_clarification(
    body: ClarificationAnswer,
    session: GrievanceSession = Depends(get_session),
) -> PipelineResult:
    try:
        return session.answer_clarification(body.department)
    except PipelineError as e:
        raise from_domain_error(e)


@router.post("/pipeline/accept", response_model=PipelineResult)
async def accept_case(
    body: AcceptRequest,
    session: GrievanceSession = Depends(get_session),
) -> PipelineResult:
    try:
        return session.accept(body.feedback)
    except PipelineError as e:
        raise from_domain_error(e)


@router.post("/pipeline/reassign", response_model=PipelineResult)
async def reassign_case(
    body: ReassignRequest,
    session: GrievanceSession = Depends(get_session),
) -> PipelineResult:
    try:
        return session.reassign(body.department, body.feedback)
    except PipelineError as e:
        raise from_domain_error(e)


@router.get("/audit", response_model=list[AuditEntry])
async def audit_trail(session: GrievanceSession = Depends(get_session)) -> list[AuditEntry]:
    return session.audit_trail()
