from __future__ import annotations

import asyncio
import random

import pytest

from dhruva.application.session import GrievanceSession, WorkflowStage
from dhruva.domain.pipeline.errors import (
    CaseNotFoundError,
    ClarificationPendingError,
    InvalidInputError,
    InvalidStatusTransitionError,
    NoActiveCaseError,
    UnknownDepartmentError,
)
from dhruva.domain.pipeline.models import CaseStatus, ResultSource, StepStatus
from dhruva.domain.pipeline.orchestrator import GrievanceOrchestrator

from conftest import FakeAnalysis, FakeClock, FakeLocator, analyze_payload

PENSION = "My pension has not been received for 6 months"
SEED_ID = "PGRS-2025-KKD-004"


def _session(analysis: FakeAnalysis, locator: FakeLocator) -> GrievanceSession:
    clock = FakeClock()
    orchestrator = GrievanceOrchestrator(analysis=analysis, locator=locator, clock=clock, rng=random.Random(5))
    return GrievanceSession(orchestrator, clock=clock)


def _low_confidence_payload() -> dict:
    classification = dict(analyze_payload()["classification"], confidence=0.5, method="fallback_classifier")
    return analyze_payload(classification=classification)


def _actions(session: GrievanceSession) -> list[str]:
    return [entry.action for entry in session.audit_trail()]


def test_fresh_session_has_seed_queue() -> None:
    session = _session(FakeAnalysis(), FakeLocator(None))
    assert len(session.queue()) == 8
    assert session.submitted() == []
    assert session.stage is WorkflowStage.SUBMIT
    assert session.result is None


@pytest.mark.asyncio
async def test_confident_remote_run_is_auto_routed() -> None:
    session = _session(FakeAnalysis(), FakeLocator())

    outcome = await session.submit(PENSION, citizen_name="Lakshmi")

    assert outcome is not None and outcome.source is ResultSource.API
    assert session.result == outcome.result
    assert session.case_id == outcome.result.case_id == session.tracked_case_id
    assert session.is_processing is False
    assert session.needs_clarification is False
    assert session.clarification_answered is True
    assert session.stage is WorkflowStage.REVIEW
    assert _actions(session) == ["SUBMITTED", "AI_ANALYZED", "AUTO_ROUTED"]
    assert session.audit_trail()[1].details.startswith("[REAL ML] Classified: Social Welfare (91.0%)")

    queue = session.queue()
    assert len(queue) == 9 and queue[0].id == session.case_id
    assert queue[0].citizen_name == "Lakshmi"
    assert queue[0].pipeline_result is None
    submitted = session.submitted()
    assert submitted[0].pipeline_result == outcome.result
    assert session.backend.available is True


@pytest.mark.asyncio
async def test_low_confidence_requests_clarification() -> None:
    session = _session(FakeAnalysis(_low_confidence_payload()), FakeLocator())

    await session.submit(PENSION)

    assert session.needs_clarification is True
    assert session.stage is WorkflowStage.CLARIFY
    assert "CLARIFICATION_REQUESTED" in _actions(session)
    assert "AUTO_ROUTED" not in _actions(session)
    assert session.clarification_questions()


@pytest.mark.asyncio
async def test_routing_waits_for_clarification() -> None:
    session = _session(FakeAnalysis(_low_confidence_payload()), FakeLocator())
    await session.submit(PENSION)

    with pytest.raises(ClarificationPendingError):
        session.accept("looks fine")
    with pytest.raises(ClarificationPendingError):
        session.reassign("Police", "wrong dept")
    assert session.stage is WorkflowStage.CLARIFY
    assert _actions(session)[-1] == "CLARIFICATION_REQUESTED"

    session.answer_clarification()
    session.accept("looks fine")
    assert session.stage is WorkflowStage.DONE
    assert _actions(session)[-2:] == ["CLARIFIED", "ACCEPTED"]


@pytest.mark.asyncio
async def test_answer_clarification_reroutes() -> None:
    session = _session(FakeAnalysis(_low_confidence_payload()), FakeLocator())
    await session.submit(PENSION)

    result = session.answer_clarification("Civil Supplies")

    assert result.classification.department == "Civil Supplies"
    assert session.needs_clarification is False
    assert session.stage is WorkflowStage.REVIEW
    assert session.queue()[0].department == "Civil Supplies"
    assert _actions(session)[-1] == "CLARIFIED"


@pytest.mark.asyncio
async def test_fallback_is_audited() -> None:
    from dhruva.domain.pipeline.errors import RemoteAnalysisError

    session = _session(FakeAnalysis(error=RemoteAnalysisError("boom")), FakeLocator())
    outcome = await session.submit(PENSION)

    assert outcome is not None and outcome.source is ResultSource.SIMULATION
    actions = _actions(session)
    assert actions[:3] == ["SUBMITTED", "AI_ANALYZED", "BACKEND_FALLBACK"]
    assert session.audit_trail()[1].details.startswith("[SIMULATION]")
    assert session.backend.error == "API error: boom - using simulation"


@pytest.mark.asyncio
async def test_invalid_text_has_no_side_effects() -> None:
    session = _session(FakeAnalysis(), FakeLocator())
    with pytest.raises(InvalidInputError):
        await session.submit("short")
    assert session.audit_trail() == []
    assert session.case_id is None


@pytest.mark.asyncio
async def test_reset_discards_in_flight_run() -> None:
    gate = asyncio.Event()
    analysis = FakeAnalysis(gate=gate)
    session = _session(analysis, FakeLocator())

    task = asyncio.create_task(session.submit(PENSION))
    await analysis.started.wait()
    assert session.is_processing is True

    session.reset()
    gate.set()

    assert await task is None
    assert session.result is None
    assert session.case_id is None
    assert session.audit_trail() == []
    assert len(session.queue()) == 8
    assert all(s.status is StepStatus.PENDING for s in session.steps)

    # the session is usable again after the stale run drained
    analysis.gate = None
    assert await session.submit(PENSION) is not None
    assert len(session.queue()) == 9


@pytest.mark.asyncio
async def test_reset_keeps_queue_and_clear_all_restores_seed() -> None:
    session = _session(FakeAnalysis(), FakeLocator(None))
    await session.submit(PENSION)

    session.reset()
    assert len(session.queue()) == 9
    assert len(session.submitted()) == 1
    assert session.stage is WorkflowStage.SUBMIT

    session.clear_all()
    assert len(session.queue()) == 8
    assert session.submitted() == []


def test_reviewer_actions_need_a_result() -> None:
    session = _session(FakeAnalysis(), FakeLocator(None))
    with pytest.raises(NoActiveCaseError):
        session.accept("ok")
    with pytest.raises(NoActiveCaseError):
        session.reassign("Police", "wrong dept")
    with pytest.raises(NoActiveCaseError):
        session.clarification_questions()


@pytest.mark.asyncio
async def test_accept_and_reassign() -> None:
    session = _session(FakeAnalysis(), FakeLocator())
    await session.submit(PENSION)

    with pytest.raises(UnknownDepartmentError):
        session.reassign("Ministry of Magic", "nope")

    before = session.result
    updated = session.reassign("Finance", "salary issue")
    assert updated.classification.department == "Finance"
    assert before.classification.department == "Social Welfare"
    assert session.submitted()[0].pipeline_result.classification.department == "Finance"
    assert session.stage is WorkflowStage.DONE

    session.accept("looks right")
    assert _actions(session)[-2:] == ["REASSIGNED", "ACCEPTED"]
    assert 'Feedback: "looks right"' in session.audit_trail()[-1].details


def test_case_status_transitions() -> None:
    session = _session(FakeAnalysis(), FakeLocator(None))

    resolved = session.resolve_case(SEED_ID, "Card updated at MRO office")
    assert resolved.status is CaseStatus.RESOLVED
    with pytest.raises(InvalidStatusTransitionError):
        session.resolve_case(SEED_ID, "again")

    reopened = session.set_case_status(SEED_ID, CaseStatus.REOPENED)
    assert reopened.status is CaseStatus.REOPENED
    assert session.set_case_status(SEED_ID, CaseStatus.IN_PROGRESS).status is CaseStatus.IN_PROGRESS
    with pytest.raises(InvalidStatusTransitionError):
        session.set_case_status(SEED_ID, CaseStatus.PENDING)

    assert _actions(session) == ["RESOLVED", "STATUS_CHANGED", "STATUS_CHANGED"]


def test_unknown_case() -> None:
    session = _session(FakeAnalysis(), FakeLocator(None))
    with pytest.raises(CaseNotFoundError):
        session.get_case("PGRS-0000")
    with pytest.raises(CaseNotFoundError):
        session.resolve_case("PGRS-0000", "n/a")
