"""Domain-level errors for the grievance pipeline.

Mapping to HTTP is handled in ``dhruva.observability.errors``.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base error for domain pipeline failures."""


class InvalidInputError(PipelineError):
    """Raised when grievance text is empty or too short to analyse."""


class RemoteAnalysisError(PipelineError):
    """Raised when the remote analysis backend fails, times out or answers non-2xx."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(RemoteAnalysisError):
    """Raised when the backend answers 2xx with a body of unexpected shape."""


class StepTransitionError(PipelineError):
    """Raised when a pipeline step would move backwards or out of order."""


class NoActiveCaseError(PipelineError):
    """Raised when a reviewer acts before any grievance has been processed."""


class CaseNotFoundError(PipelineError):
    """Raised when a case id is not present in the case queue."""

    def __init__(self, case_id: str) -> None:
        super().__init__(f"Case not found: {case_id}")
        self.case_id = case_id


class UnknownDepartmentError(PipelineError):
    """Raised when a reassignment targets a department outside the reference list."""

    def __init__(self, department: str) -> None:
        super().__init__(f"Unknown department: {department}")
        self.department = department


class InvalidStatusTransitionError(PipelineError):
    """Raised when a case status change is not an allowed transition."""


class ClarificationPendingError(PipelineError):
    """Raised when a reviewer routes a case that still awaits citizen clarification."""
