from __future__ import annotations

from typing import Any

from fastapi import HTTPException

from dhruva.domain.pipeline.errors import (
    CaseNotFoundError,
    ClarificationPendingError,
    InvalidInputError,
    InvalidStatusTransitionError,
    NoActiveCaseError,
    PipelineError,
    UnknownDepartmentError,
)

ERROR_REGISTRY: dict[str, dict[str, Any]] = {
    "INVALID_GRIEVANCE_TEXT": {
        "status": 400,
        "message": "Grievance text must be at least 10 characters",
    },
    "UNKNOWN_DEPARTMENT": {
        "status": 400,
        "message": "Department is not in the reassignment list",
    },
    "INVALID_BACKEND_URL": {
        "status": 400,
        "message": "Backend URL must start with http:// or https://",
    },
    "CASE_NOT_FOUND": {
        "status": 404,
        "message": "Case not found",
    },
    "NO_ACTIVE_CASE": {
        "status": 409,
        "message": "No grievance has been processed in this session",
    },
    "INVALID_STATUS_TRANSITION": {
        "status": 409,
        "message": "Case status change is not allowed",
    },
    "CLARIFICATION_PENDING": {
        "status": 409,
        "message": "Case is waiting for citizen clarification",
    },
    "RUN_SUPERSEDED": {
        "status": 409,
        "message": "The session was reset while this grievance was processing",
    },
    "SERVICE_NOT_READY": {
        "status": 503,
        "message": "Grievance session is not initialised",
    },
    "INTERNAL_PROCESSING_ERROR": {
        "status": 500,
        "message": "Internal processing error",
    },
}

_DOMAIN_CODES: tuple[tuple[type[PipelineError], str], ...] = (
    (InvalidInputError, "INVALID_GRIEVANCE_TEXT"),
    (UnknownDepartmentError, "UNKNOWN_DEPARTMENT"),
    (CaseNotFoundError, "CASE_NOT_FOUND"),
    (NoActiveCaseError, "NO_ACTIVE_CASE"),
    (InvalidStatusTransitionError, "INVALID_STATUS_TRANSITION"),
    (ClarificationPendingError, "CLARIFICATION_PENDING"),
)


def to_http_error(code: str, *, message: str | None = None, status: int | None = None) -> HTTPException:
    meta = ERROR_REGISTRY.get(code, {"status": 500, "message": code})
    status_code = int(status or meta.get("status", 500))
    detail_msg = message or str(meta.get("message", code))
    return HTTPException(status_code=status_code, detail={"code": code, "message": detail_msg})


def from_domain_error(exc: PipelineError) -> HTTPException:
    for exc_type, code in _DOMAIN_CODES:
        if isinstance(exc, exc_type):
            return to_http_error(code, message=str(exc) or None)
    return to_http_error("INTERNAL_PROCESSING_ERROR")
