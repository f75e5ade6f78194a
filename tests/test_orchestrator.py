from __future__ import annotations

import random

import pytest

from dhruva.domain.pipeline.board import StepBoard
from dhruva.domain.pipeline.case_ids import case_id_pattern
from dhruva.domain.pipeline.constants import REMOTE_TAIL_DELAY, REMOTE_WAIT_DELAYS, SIMULATION_DELAYS, SLA_HOURS
from dhruva.domain.pipeline.errors import InvalidInputError, MalformedResponseError, RemoteAnalysisError
from dhruva.domain.pipeline.models import DistressLevel, ResultSource, StepStatus
from dhruva.domain.pipeline.orchestrator import BACKEND_UNAVAILABLE, GrievanceOrchestrator

from conftest import FakeAnalysis, FakeClock, FakeLocator, analyze_payload

PENSION = "My pension has not been received for 6 months"

_RANK = {StepStatus.PENDING: 0, StepStatus.PROCESSING: 1, StepStatus.COMPLETED: 2, StepStatus.SKIPPED: 2}


def _orchestrator(analysis: FakeAnalysis, locator: FakeLocator, clock: FakeClock, **kwargs) -> GrievanceOrchestrator:
    return GrievanceOrchestrator(
        analysis=analysis,
        locator=locator,
        clock=clock,
        rng=random.Random(11),
        **kwargs,
    )


def _assert_forward_only(history: list[list]) -> None:
    for earlier, later in zip(history, history[1:]):
        for a, b in zip(earlier, later):
            assert _RANK[b.status] >= _RANK[a.status], f"{a.id} moved {a.status} -> {b.status}"


@pytest.mark.asyncio
async def test_no_backend_runs_simulation_without_remote_call(clock: FakeClock) -> None:
    analysis = FakeAnalysis()
    orchestrator = _orchestrator(analysis, FakeLocator(None), clock)

    outcome = await orchestrator.run(PENSION)

    assert analysis.analyze_calls == []
    assert outcome.source is ResultSource.SIMULATION
    assert outcome.advisory == BACKEND_UNAVAILABLE
    assert outcome.fell_back is False
    assert [s.status for s in outcome.steps] == [StepStatus.COMPLETED] * 9
    assert clock.sleeps == list(SIMULATION_DELAYS)
    assert outcome.result.classification.department == "Social Welfare"
    assert outcome.result.classification.confidence > 0


@pytest.mark.asyncio
async def test_remote_success(clock: FakeClock) -> None:
    analysis = FakeAnalysis()
    orchestrator = _orchestrator(analysis, FakeLocator(), clock)
    history: list[list] = []

    outcome = await orchestrator.run(PENSION, board=StepBoard(listener=history.append), location="Guntur")

    assert outcome.source is ResultSource.API
    assert outcome.advisory is None
    assert outcome.endpoint == "https://ml.example.test"
    assert analysis.analyze_calls[0]["location"] == "Guntur"
    assert all(s.status is StepStatus.COMPLETED for s in outcome.steps)
    assert outcome.steps[4].confidence == pytest.approx(0.64)
    assert outcome.steps[1].result["department"] == "Social Welfare"
    assert clock.sleeps == [*REMOTE_WAIT_DELAYS, REMOTE_TAIL_DELAY, REMOTE_TAIL_DELAY]
    assert outcome.result.sla.hours == SLA_HOURS[outcome.result.sentiment.distress_level.value]
    _assert_forward_only(history)


@pytest.mark.asyncio
async def test_remote_without_optional_sections_skips_steps(clock: FakeClock) -> None:
    analysis = FakeAnalysis(analyze_payload(similar_cases=None, proactive_alerts=None))
    outcome = await _orchestrator(analysis, FakeLocator(), clock).run(PENSION)

    assert outcome.source is ResultSource.API
    assert outcome.steps[5].status is StepStatus.SKIPPED
    assert outcome.steps[6].status is StepStatus.SKIPPED
    assert all(s.is_terminal for s in outcome.steps)


@pytest.mark.asyncio
async def test_remote_failure_falls_back_to_simulation(clock: FakeClock) -> None:
    analysis = FakeAnalysis(error=RemoteAnalysisError("Model server crashed", status_code=500))
    history: list[list] = []

    outcome = await _orchestrator(analysis, FakeLocator(), clock).run(
        PENSION, board=StepBoard(listener=history.append)
    )

    assert len(analysis.analyze_calls) == 1
    assert outcome.source is ResultSource.SIMULATION
    assert outcome.fell_back is True
    assert outcome.advisory == "API error: Model server crashed - using simulation"
    assert [s.status for s in outcome.steps] == [StepStatus.COMPLETED] * 9
    _assert_forward_only(history)


@pytest.mark.asyncio
async def test_remote_timeout_falls_back(clock: FakeClock) -> None:
    analysis = FakeAnalysis(delay=1.0)
    orchestrator = _orchestrator(analysis, FakeLocator(), clock, analyze_timeout=0.05)

    outcome = await orchestrator.run(PENSION)

    assert outcome.source is ResultSource.SIMULATION
    assert "Request timeout" in (outcome.advisory or "")
    assert all(s.is_terminal for s in outcome.steps)


@pytest.mark.asyncio
async def test_malformed_remote_result_falls_back(clock: FakeClock) -> None:
    analysis = FakeAnalysis(error=MalformedResponseError("Unexpected AnalyzeResponse shape: 2 invalid field(s)"))

    outcome = await _orchestrator(analysis, FakeLocator(), clock).run(PENSION)
    assert outcome.source is ResultSource.SIMULATION
    assert outcome.fell_back is True


@pytest.mark.asyncio
async def test_short_text_is_rejected_before_side_effects(clock: FakeClock) -> None:
    locator = FakeLocator()
    board = StepBoard()
    with pytest.raises(InvalidInputError):
        await _orchestrator(FakeAnalysis(), locator, clock).run("  too short ", board=board)
    assert locator.calls == 0
    assert all(s.status is StepStatus.PENDING for s in board.steps)


@pytest.mark.asyncio
async def test_critical_text_gets_24_hour_sla(clock: FakeClock) -> None:
    outcome = await _orchestrator(FakeAnalysis(), FakeLocator(None), clock).run(
        "No food for days, we are facing starvation in our village"
    )
    assert outcome.result.sentiment.distress_level is DistressLevel.CRITICAL
    assert outcome.result.sla.hours == 24
    assert "IMMEDIATE_ATTENTION" in outcome.result.recommended_actions


@pytest.mark.asyncio
async def test_template_carries_case_id(clock: FakeClock) -> None:
    outcome = await _orchestrator(FakeAnalysis(), FakeLocator(None), clock).run(PENSION, case_id="PGRS-20251126-ZZ99")
    assert outcome.result.case_id == "PGRS-20251126-ZZ99"
    assert "PGRS-20251126-ZZ99" in outcome.result.response_template.english


def test_case_ids_follow_format_and_differ(clock: FakeClock) -> None:
    orchestrator = _orchestrator(FakeAnalysis(), FakeLocator(None), clock)
    first, second = orchestrator.new_case_id(), orchestrator.new_case_id()
    pattern = case_id_pattern("PGRS")
    assert pattern.match(first) and pattern.match(second)
    assert first.startswith("PGRS-20251126-")
    assert first != second
