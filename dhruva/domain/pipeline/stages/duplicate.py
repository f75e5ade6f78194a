from __future__ import annotations

from typing import Iterable

from dhruva.domain.pipeline.models import CaseRecord, DuplicateCheck


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def check_duplicate(text: str, existing_cases: Iterable[CaseRecord]) -> DuplicateCheck:
    """Exact match on normalized text against the current case queue."""
    needle = _normalize(text)
    for case in existing_cases:
        if _normalize(case.text) == needle:
            return DuplicateCheck(is_duplicate=True, existing_case_id=case.id, similarity=1.0)
    return DuplicateCheck()
