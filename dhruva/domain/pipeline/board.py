"""Live step list for one orchestration run.

The board owns the nine ``PipelineStep`` records of a run and enforces the
forward-only lifecycle. An optional listener receives a snapshot after
every mutation.
"""

from __future__ import annotations

from typing import Any, Callable

from dhruva.domain.pipeline.constants import PIPELINE_STEPS
from dhruva.domain.pipeline.errors import StepTransitionError
from dhruva.domain.pipeline.models import PipelineStep, StepStatus

StepListener = Callable[[list[PipelineStep]], None]


def initial_steps() -> list[PipelineStep]:
    return [PipelineStep(id=step_id, name=name) for step_id, name in PIPELINE_STEPS]


class StepBoard:
    def __init__(self, listener: StepListener | None = None) -> None:
        self._steps = initial_steps()
        self._listener = listener

    @property
    def steps(self) -> list[PipelineStep]:
        return self.snapshot()

    def snapshot(self) -> list[PipelineStep]:
        return [step.model_copy(deep=True) for step in self._steps]

    def status(self, index: int) -> StepStatus:
        return self._steps[index].status

    def all_terminal(self) -> bool:
        return all(step.is_terminal for step in self._steps)

    def start(self, index: int) -> None:
        """Move a pending step to processing.

        Idempotent for steps that already left ``pending`` so a fallback run
        can replay the step sequence without rewinding anything.
        """
        step = self._steps[index]
        if step.status is not StepStatus.PENDING:
            return
        self._check_order(index)
        step.status = StepStatus.PROCESSING
        self._publish()

    def complete(
        self,
        index: int,
        *,
        duration: float | None = None,
        result: dict[str, Any] | None = None,
        confidence: float | None = None,
    ) -> None:
        step = self._steps[index]
        if step.status is StepStatus.SKIPPED:
            raise StepTransitionError(f"step {step.id} was skipped and cannot complete")
        if step.status is StepStatus.PENDING:
            raise StepTransitionError(f"step {step.id} must be processing before it completes")
        self._check_order(index)
        step.status = StepStatus.COMPLETED
        if duration is not None:
            step.duration = duration
        if result is not None:
            step.result = result
        if confidence is not None:
            step.confidence = confidence
        self._publish()

    def skip(self, index: int, *, reason: str | None = None) -> None:
        step = self._steps[index]
        if step.status is StepStatus.SKIPPED:
            return
        if step.status is not StepStatus.PENDING:
            raise StepTransitionError(f"step {step.id} is {step.status.value}; only pending steps can be skipped")
        step.status = StepStatus.SKIPPED
        if reason:
            step.result = {"reason": reason}
        self._publish()

    def _check_order(self, index: int) -> None:
        for lower in self._steps[:index]:
            if lower.status is StepStatus.PENDING:
                raise StepTransitionError(
                    f"step {self._steps[index].id} cannot advance while {lower.id} is pending"
                )

    def _publish(self) -> None:
        if self._listener is not None:
            self._listener(self.snapshot())
