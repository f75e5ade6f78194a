"""Grievance orchestrator.

Runs the nine-stage pipeline for one grievance, either against the remote
analysis backend or through the local simulation stages. The step board is
advanced in order on both paths; a remote failure falls back to simulation
on the same board without rewinding completed steps.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Any, Iterable, Union

from pydantic import ValidationError

from dhruva.core.logging import case_context, get_logger
from dhruva.domain.pipeline.board import StepBoard
from dhruva.domain.pipeline.case_ids import new_case_id
from dhruva.domain.pipeline.constants import (
    LAPSE_PREDICTOR_ACCURACY,
    MIN_GRIEVANCE_LENGTH,
    REMOTE_TAIL_DELAY,
    REMOTE_WAIT_DELAYS,
    SIMULATION_DELAYS,
    STEP_ACTIONS,
    STEP_ALERTS,
    STEP_CLASSIFY,
    STEP_COUNT,
    STEP_DURATIONS,
    STEP_DUPLICATE,
    STEP_LAPSE,
    STEP_SENTIMENT,
    STEP_SIMILAR,
    STEP_SLA,
    STEP_TEMPLATE,
)
from dhruva.domain.pipeline.errors import InvalidInputError, RemoteAnalysisError
from dhruva.domain.pipeline.models import CaseRecord, PipelineResult, PipelineStep, ResultSource
from dhruva.domain.pipeline.remote import AnalyzeResponse, step_payloads, to_pipeline_result
from dhruva.domain.pipeline.stages.actions import derive_actions
from dhruva.domain.pipeline.stages.alerts import detect_alerts
from dhruva.domain.pipeline.stages.classify import classify
from dhruva.domain.pipeline.stages.duplicate import check_duplicate
from dhruva.domain.pipeline.stages.lapse import predict_lapse
from dhruva.domain.pipeline.stages.sentiment import detect_distress
from dhruva.domain.pipeline.stages.similar import match_similar
from dhruva.domain.pipeline.stages.sla import compute_sla
from dhruva.domain.pipeline.stages.template import render_template
from dhruva.domain.ports.analysis_port import AnalysisPort, BackendLocator
from dhruva.domain.ports.clock_port import ClockPort

logger = get_logger(__name__)

BACKEND_UNAVAILABLE = "Backend not available - using simulation mode"
TIMEOUT_REASON = "Request timeout - backend may be starting up"


@dataclass(frozen=True)
class RemoteOutcome:
    result: PipelineResult


@dataclass(frozen=True)
class RemoteFailure:
    reason: str


RemoteAttempt = Union[RemoteOutcome, RemoteFailure]


@dataclass
class RunOutcome:
    result: PipelineResult
    steps: list[PipelineStep]
    endpoint: str | None = None
    advisory: str | None = None
    fell_back: bool = False
    elapsed: float = 0.0

    @property
    def source(self) -> ResultSource:
        return self.result.source


def validate_text(text: str) -> str:
    cleaned = (text or "").strip()
    if len(cleaned) < MIN_GRIEVANCE_LENGTH:
        raise InvalidInputError(
            f"Grievance text must be at least {MIN_GRIEVANCE_LENGTH} characters"
        )
    return cleaned


class GrievanceOrchestrator:
    def __init__(
        self,
        *,
        analysis: AnalysisPort,
        locator: BackendLocator,
        clock: ClockPort,
        rng: random.Random | None = None,
        analyze_timeout: float = 15.0,
        case_id_prefix: str = "PGRS",
        default_location: str = "Guntur",
    ) -> None:
        self._analysis = analysis
        self._locator = locator
        self._clock = clock
        self._rng = rng or random.Random()
        self._analyze_timeout = analyze_timeout
        self._prefix = case_id_prefix
        self._default_location = default_location

    def new_case_id(self) -> str:
        return new_case_id(self._prefix, self._clock.now(), self._rng)

    async def run(
        self,
        text: str,
        *,
        board: StepBoard | None = None,
        case_id: str | None = None,
        existing_cases: Iterable[CaseRecord] = (),
        citizen_id: str | None = None,
        location: str | None = None,
        district: str | None = None,
    ) -> RunOutcome:
        """Process one grievance end to end.

        Raises ``InvalidInputError`` before touching the board or the backend
        when the text is too short. Every other failure is absorbed: the run
        always ends with a result and all nine steps terminal.
        """
        cleaned = validate_text(text)
        board = board or StepBoard()
        case_id = case_id or self.new_case_id()
        cases = list(existing_cases)
        location = location or self._default_location
        district = district or self._default_location

        with case_context(case_id):
            started = time.perf_counter()
            endpoint = await self._locator.resolve()
            logger.info(
                "grievance_run_started",
                extra={"endpoint": endpoint or "-", "text_length": len(cleaned)},
            )

            advisory: str | None = None
            fell_back = False
            if endpoint is None:
                advisory = BACKEND_UNAVAILABLE
                result = await self._run_simulation(cleaned, board, case_id, cases, district)
            else:
                attempt = await self._run_remote(endpoint, cleaned, board, case_id, citizen_id, location)
                if isinstance(attempt, RemoteOutcome):
                    result = attempt.result
                else:
                    fell_back = True
                    advisory = f"API error: {attempt.reason} - using simulation"
                    logger.warning(
                        "remote_path_failed",
                        extra={"endpoint": endpoint, "reason": attempt.reason},
                    )
                    result = await self._run_simulation(cleaned, board, case_id, cases, district)

            elapsed = time.perf_counter() - started
            logger.info(
                "grievance_run_completed",
                extra={
                    "source": result.source.value,
                    "department": result.classification.department,
                    "distress_level": result.sentiment.distress_level.value,
                    "elapsed": round(elapsed, 3),
                },
            )
            return RunOutcome(
                result=result,
                steps=board.snapshot(),
                endpoint=endpoint,
                advisory=advisory,
                fell_back=fell_back,
                elapsed=elapsed,
            )

    async def _run_remote(
        self,
        endpoint: str,
        text: str,
        board: StepBoard,
        case_id: str,
        citizen_id: str | None,
        location: str,
    ) -> RemoteAttempt:
        board.start(STEP_DUPLICATE)
        call = asyncio.create_task(
            asyncio.wait_for(
                self._analysis.analyze(
                    endpoint,
                    text,
                    citizen_id=citizen_id,
                    location=location,
                    timeout=self._analyze_timeout,
                ),
                timeout=self._analyze_timeout,
            )
        )
        try:
            # Early steps advance on a fixed cadence while the call is in flight
            for index, delay in enumerate(REMOTE_WAIT_DELAYS):
                await self._clock.sleep(delay)
                board.complete(index, duration=STEP_DURATIONS[index])
                board.start(index + 1)

            try:
                response = await call
            except asyncio.TimeoutError:
                return RemoteFailure(TIMEOUT_REASON)
            except RemoteAnalysisError as exc:
                return RemoteFailure(str(exc))

            try:
                result = to_pipeline_result(response, case_id=case_id, now=self._clock.now())
            except ValidationError as exc:
                return RemoteFailure(f"Malformed response: {exc.error_count()} invalid field(s)")
        finally:
            if not call.done():
                call.cancel()

        await self._finish_remote_steps(response, result, board)
        return RemoteOutcome(result)

    async def _finish_remote_steps(
        self, response: AnalyzeResponse, result: PipelineResult, board: StepBoard
    ) -> None:
        payloads = step_payloads(response)
        confidences: dict[int, float] = {
            STEP_CLASSIFY: result.classification.confidence,
            STEP_SENTIMENT: result.sentiment.confidence,
            STEP_LAPSE: result.lapse_risk.score,
        }
        # Attach payloads to the steps completed while waiting
        for index in range(STEP_SLA):
            board.complete(index, result=payloads[index], confidence=confidences.get(index))
        board.complete(STEP_SLA, duration=STEP_DURATIONS[STEP_SLA], result=payloads[STEP_SLA])

        for index in range(STEP_LAPSE, STEP_COUNT):
            if index == STEP_SIMILAR and response.similar_cases is None:
                board.skip(index, reason="similar_cases not provided")
                continue
            if index == STEP_ALERTS and response.proactive_alerts is None:
                board.skip(index, reason="proactive_alerts not provided")
                continue
            board.start(index)
            if index in (STEP_LAPSE, STEP_SIMILAR):
                await self._clock.sleep(REMOTE_TAIL_DELAY)
            board.complete(
                index,
                duration=STEP_DURATIONS[index],
                result=payloads[index],
                confidence=confidences.get(index),
            )

    async def _run_simulation(
        self,
        text: str,
        board: StepBoard,
        case_id: str,
        existing_cases: list[CaseRecord],
        district: str,
    ) -> PipelineResult:
        async def advance(index: int, payload: dict[str, Any], confidence: float | None = None) -> None:
            board.start(index)
            await self._clock.sleep(SIMULATION_DELAYS[index])
            board.complete(index, duration=STEP_DURATIONS[index], result=payload, confidence=confidence)

        duplicate = check_duplicate(text, existing_cases)
        await advance(STEP_DUPLICATE, duplicate.model_dump())

        classification = classify(text, self._rng)
        await advance(STEP_CLASSIFY, classification.model_dump(mode="json"), classification.confidence)

        sentiment = detect_distress(text)
        await advance(STEP_SENTIMENT, sentiment.model_dump(mode="json"), sentiment.confidence)

        sla = compute_sla(sentiment.distress_level, self._clock.now())
        await advance(STEP_SLA, {"hours": sla.hours, "deadline": sla.deadline.isoformat()})

        lapse = predict_lapse(self._rng)
        await advance(STEP_LAPSE, {"score": lapse.score, "level": lapse.level.value}, LAPSE_PREDICTOR_ACCURACY)

        similar = match_similar(self._rng, self._prefix)
        await advance(STEP_SIMILAR, {"matches": len(similar)})

        alerts = detect_alerts(classification.department, district, existing_cases)
        await advance(STEP_ALERTS, {"alerts": [alert.model_dump() for alert in alerts]})

        template = render_template(sentiment.distress_level, case_id)
        await advance(STEP_TEMPLATE, {"templateType": sentiment.distress_level.value})

        actions = derive_actions(
            distress_level=sentiment.distress_level,
            confidence=classification.confidence,
            lapse_score=lapse.score,
            similar_count=len(similar),
        )
        await advance(STEP_ACTIONS, {"actions": actions})

        return PipelineResult(
            case_id=case_id,
            classification=classification,
            sentiment=sentiment,
            sla=sla,
            lapse_risk=lapse,
            similar_cases=similar,
            recommended_actions=tuple(actions),
            response_template=template,
            duplicate=duplicate,
            alerts=alerts,
            source=ResultSource.SIMULATION,
        )
