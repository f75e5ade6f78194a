"""Single-writer session store for the grievance demo.

Owns everything the presentation layer reads: the live step list, the
current result, workflow flags, the case queue, the cross-role submitted
list, the audit trail and the backend status. All writes go through the
methods below; readers get copies.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from dhruva.core.logging import get_logger
from dhruva.domain.clarification import ClarifyingQuestion, clarifying_questions
from dhruva.domain.pipeline.board import StepBoard, initial_steps
from dhruva.domain.pipeline.constants import CLARIFICATION_THRESHOLD
from dhruva.domain.pipeline.errors import (
    CaseNotFoundError,
    ClarificationPendingError,
    InvalidStatusTransitionError,
    NoActiveCaseError,
    UnknownDepartmentError,
)
from dhruva.domain.pipeline.models import (
    AuditEntry,
    CaseRecord,
    CaseStatus,
    PipelineResult,
    PipelineStep,
    ResultSource,
)
from dhruva.domain.pipeline.orchestrator import GrievanceOrchestrator, RunOutcome, validate_text
from dhruva.domain.ports.clock_port import ClockPort
from dhruva.domain.reference import KNOWN_DEPARTMENTS, SEED_CASES
from dhruva.observability.metrics import record_run

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: dict[CaseStatus, frozenset[CaseStatus]] = {
    CaseStatus.PENDING: frozenset({CaseStatus.IN_PROGRESS, CaseStatus.RESOLVED}),
    CaseStatus.IN_PROGRESS: frozenset({CaseStatus.RESOLVED}),
    CaseStatus.RESOLVED: frozenset({CaseStatus.REOPENED}),
    CaseStatus.REOPENED: frozenset({CaseStatus.IN_PROGRESS, CaseStatus.RESOLVED}),
}

ACTOR_CITIZEN = "Citizen"
ACTOR_SYSTEM = "System"
ACTOR_OFFICER = "Officer"
ACTOR_AI = "AI"


class WorkflowStage(str, Enum):
    SUBMIT = "submit"
    CLARIFY = "clarify"
    REVIEW = "review"
    DONE = "done"


@dataclass
class BackendStatus:
    available: bool | None = None
    endpoint: str | None = None
    error: str | None = None
    checked_at: datetime | None = None


def _excerpt(text: str, limit: int = 50) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def _percent(value: float) -> str:
    return f"{value * 100:.1f}%"


class GrievanceSession:
    def __init__(
        self,
        orchestrator: GrievanceOrchestrator,
        *,
        clock: ClockPort,
        clarification_threshold: float = CLARIFICATION_THRESHOLD,
        citizen_location: str = "Guntur",
    ) -> None:
        self._orchestrator = orchestrator
        self._clock = clock
        self._threshold = clarification_threshold
        self._citizen_location = citizen_location
        self._lock = asyncio.Lock()
        self._generation = 0

        self._steps: list[PipelineStep] = initial_steps()
        self._current_text = ""
        self._result: PipelineResult | None = None
        self._is_processing = False
        self._case_id: str | None = None
        self._tracked_case_id: str | None = None
        self._needs_clarification = False
        self._clarification_answered = False
        self._stage = WorkflowStage.SUBMIT
        self._audit: list[AuditEntry] = []
        self._queue: list[CaseRecord] = [CaseRecord(**seed) for seed in SEED_CASES]
        self._submitted: list[CaseRecord] = []
        self.backend = BackendStatus()

    # -- readers -----------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def result(self) -> PipelineResult | None:
        return self._result

    @property
    def steps(self) -> list[PipelineStep]:
        return [step.model_copy(deep=True) for step in self._steps]

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def case_id(self) -> str | None:
        return self._case_id

    @property
    def tracked_case_id(self) -> str | None:
        return self._tracked_case_id

    @property
    def needs_clarification(self) -> bool:
        return self._needs_clarification

    @property
    def clarification_answered(self) -> bool:
        return self._clarification_answered

    @property
    def stage(self) -> WorkflowStage:
        return self._stage

    def queue(self) -> list[CaseRecord]:
        return [case.model_copy(deep=True) for case in self._queue]

    def submitted(self) -> list[CaseRecord]:
        return [case.model_copy(deep=True) for case in self._submitted]

    def audit_trail(self) -> list[AuditEntry]:
        return list(self._audit)

    def get_case(self, case_id: str) -> CaseRecord:
        # Submitted entries carry the full pipeline result, so prefer them
        for case in (*self._submitted, *self._queue):
            if case.id == case_id:
                return case.model_copy(deep=True)
        raise CaseNotFoundError(case_id)

    def snapshot(self) -> dict[str, Any]:
        return {
            "grievance_text": self._current_text,
            "steps": self.steps,
            "result": self._result,
            "is_processing": self._is_processing,
            "case_id": self._case_id,
            "tracked_case_id": self._tracked_case_id,
            "needs_clarification": self._needs_clarification,
            "clarification_answered": self._clarification_answered,
            "stage": self._stage,
            "backend_available": self.backend.available,
            "backend_error": self.backend.error,
            "generation": self._generation,
        }

    # -- writers -----------------------------------------------------------

    def add_audit_entry(
        self,
        action: str,
        actor: str,
        details: str,
        pipeline_step: str | None = None,
    ) -> AuditEntry:
        entry = AuditEntry(
            timestamp=self._clock.now(),
            action=action,
            actor=actor,
            details=details,
            pipeline_step=pipeline_step,
        )
        self._audit.append(entry)
        return entry

    def set_backend_status(
        self,
        available: bool,
        *,
        endpoint: str | None = None,
        error: str | None = None,
    ) -> None:
        self.backend = BackendStatus(
            available=available,
            endpoint=endpoint,
            error=error,
            checked_at=self._clock.now(),
        )

    async def submit(
        self,
        text: str,
        citizen_name: str = "Demo User",
        district: str = "Guntur",
        mandal: str = "Tenali",
        citizen_id: str | None = None,
        location: str | None = None,
    ) -> RunOutcome | None:
        """Run one grievance through the pipeline and publish the outcome.

        Returns ``None`` when a reset happened while the run was in flight;
        the stale outcome is dropped and nothing is published.
        """
        cleaned = validate_text(text)
        async with self._lock:
            self._generation += 1
            generation = self._generation

            def on_steps(steps: list[PipelineStep]) -> None:
                if generation == self._generation:
                    self._steps = steps

            board = StepBoard(listener=on_steps)
            case_id = self._orchestrator.new_case_id()
            self._steps = board.snapshot()
            self._current_text = cleaned
            self._result = None
            self._is_processing = True
            self._case_id = case_id
            self._tracked_case_id = case_id
            self._needs_clarification = False
            self._clarification_answered = False
            self._stage = WorkflowStage.SUBMIT
            self.add_audit_entry(
                "SUBMITTED", ACTOR_CITIZEN, f'Grievance submitted: "{_excerpt(cleaned)}"'
            )

            try:
                outcome = await self._orchestrator.run(
                    cleaned,
                    board=board,
                    case_id=case_id,
                    existing_cases=list(self._queue),
                    citizen_id=citizen_id,
                    location=location or self._citizen_location,
                    district=district,
                )
            finally:
                if generation == self._generation:
                    self._is_processing = False

            record_run(outcome.source.value, outcome.elapsed, fell_back=outcome.fell_back)
            if generation != self._generation:
                logger.info("stale_run_discarded", extra={"run_case_id": case_id})
                return None

            self._publish(outcome, cleaned, citizen_name=citizen_name, district=district, mandal=mandal)
            return outcome

    def _publish(
        self,
        outcome: RunOutcome,
        text: str,
        *,
        citizen_name: str,
        district: str,
        mandal: str,
    ) -> None:
        result = outcome.result
        self._result = result
        self._steps = outcome.steps
        self.set_backend_status(
            outcome.endpoint is not None,
            endpoint=outcome.endpoint,
            error=outcome.advisory,
        )

        record = CaseRecord(
            id=result.case_id,
            text=text,
            text_telugu=text,
            citizen_name=citizen_name,
            district=district,
            mandal=mandal,
            department=result.classification.department,
            distress_level=result.sentiment.distress_level,
            confidence=result.classification.confidence,
            lapse_risk=result.lapse_risk.score,
            sla_hours=result.sla.hours,
            status=CaseStatus.PENDING,
            submitted_at=self._clock.now(),
            distress_signals=list(result.sentiment.signals),
            similar_cases=list(result.similar_cases),
        )
        self._submitted.insert(0, record.model_copy(update={"pipeline_result": result}))
        self._queue.insert(0, record)

        tag = "[REAL ML]" if result.source is ResultSource.API else "[SIMULATION]"
        classification = result.classification
        self.add_audit_entry(
            "AI_ANALYZED",
            ACTOR_AI,
            f"{tag} Classified: {classification.department} ({_percent(classification.confidence)}), "
            f"Distress: {result.sentiment.distress_level.value}",
            pipeline_step="classify",
        )
        if outcome.fell_back:
            self.add_audit_entry("BACKEND_FALLBACK", ACTOR_SYSTEM, outcome.advisory or "Remote analysis failed")

        if classification.confidence < self._threshold:
            self._needs_clarification = True
            self._clarification_answered = False
            self._stage = WorkflowStage.CLARIFY
            self.add_audit_entry(
                "CLARIFICATION_REQUESTED",
                ACTOR_SYSTEM,
                f"Low confidence ({_percent(classification.confidence)}) - asking citizen to clarify",
            )
        else:
            self._needs_clarification = False
            self._clarification_answered = True
            self._stage = WorkflowStage.REVIEW
            self.add_audit_entry(
                "AUTO_ROUTED",
                ACTOR_SYSTEM,
                f"Auto-routed to {classification.department} ({_percent(classification.confidence)} confidence)",
            )

    def reset(self) -> None:
        """Return to a fresh submission without touching the queues.

        An in-flight run is not aborted; bumping the generation makes its
        outcome stale so it is dropped when it arrives.
        """
        self._generation += 1
        self._steps = initial_steps()
        self._current_text = ""
        self._result = None
        self._is_processing = False
        self._case_id = None
        self._needs_clarification = False
        self._clarification_answered = False
        self._stage = WorkflowStage.SUBMIT
        self._audit = []
        logger.info("session_reset", extra={"generation": self._generation})

    def clear_all(self) -> None:
        self.reset()
        self._queue = [CaseRecord(**seed) for seed in SEED_CASES]
        self._submitted = []
        self._tracked_case_id = None

    def _require_result(self) -> PipelineResult:
        if self._result is None:
            raise NoActiveCaseError("No grievance has been processed in this session")
        return self._result

    def _require_clarified(self) -> None:
        if self._needs_clarification:
            raise ClarificationPendingError(
                f"Case {self._case_id} is waiting for citizen clarification"
            )

    def _update_cases(self, case_id: str, **changes: Any) -> bool:
        found = False
        for cases in (self._queue, self._submitted):
            for i, case in enumerate(cases):
                if case.id == case_id:
                    cases[i] = case.model_copy(update=changes)
                    found = True
        return found

    def _set_department(self, department: str) -> tuple[str, PipelineResult]:
        if department not in KNOWN_DEPARTMENTS:
            raise UnknownDepartmentError(department)
        current = self._require_result()
        previous = current.classification.department
        updated = current.with_department(department)
        self._result = updated
        self._update_cases(updated.case_id, department=department)
        for i, case in enumerate(self._submitted):
            if case.id == updated.case_id:
                self._submitted[i] = case.model_copy(update={"pipeline_result": updated})
        return previous, updated

    def clarification_questions(self) -> list[ClarifyingQuestion]:
        result = self._require_result()
        return clarifying_questions(self._current_text, result.classification.top3)

    def answer_clarification(self, department: str | None = None) -> PipelineResult:
        result = self._require_result()
        if department and department != result.classification.department:
            _, result = self._set_department(department)
        self._needs_clarification = False
        self._clarification_answered = True
        self._stage = WorkflowStage.REVIEW
        self.add_audit_entry(
            "CLARIFIED",
            ACTOR_CITIZEN,
            f"Citizen clarified the grievance; routing to {result.classification.department}",
        )
        return result

    def accept(self, feedback: str = "") -> PipelineResult:
        result = self._require_result()
        self._require_clarified()
        self.add_audit_entry(
            "ACCEPTED",
            ACTOR_OFFICER,
            f'Case assigned to {result.classification.department}. Feedback: "{feedback}"',
        )
        self._stage = WorkflowStage.DONE
        return result

    def reassign(self, department: str, feedback: str = "") -> PipelineResult:
        self._require_result()
        self._require_clarified()
        previous, updated = self._set_department(department)
        self.add_audit_entry(
            "REASSIGNED",
            ACTOR_OFFICER,
            f'Reassigned from {previous} to {department}. Feedback: "{feedback}"',
        )
        self._stage = WorkflowStage.DONE
        return updated

    def _transition(self, case_id: str, target: CaseStatus) -> CaseStatus:
        current = self.get_case(case_id).status
        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStatusTransitionError(
                f"Case {case_id} cannot move from {current.value} to {target.value}"
            )
        self._update_cases(case_id, status=target)
        return current

    def resolve_case(self, case_id: str, resolution: str) -> CaseRecord:
        self._transition(case_id, CaseStatus.RESOLVED)
        self.add_audit_entry("RESOLVED", ACTOR_OFFICER, f'Case {case_id} resolved: "{resolution}"')
        return self.get_case(case_id)

    def set_case_status(self, case_id: str, status: CaseStatus) -> CaseRecord:
        previous = self._transition(case_id, status)
        self.add_audit_entry(
            "STATUS_CHANGED",
            ACTOR_OFFICER,
            f"Case {case_id} status changed from {previous.value} to {status.value}",
        )
        return self.get_case(case_id)
