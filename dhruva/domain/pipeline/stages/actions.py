from __future__ import annotations

from dhruva.domain.pipeline.constants import (
    ACTION_IMMEDIATE_ATTENTION,
    ACTION_MANUAL_CLASSIFICATION,
    ACTION_SIMILAR_CASE_REVIEW,
    ACTION_SUPERVISOR_REVIEW,
    CLARIFICATION_THRESHOLD,
    SUPERVISOR_REVIEW_THRESHOLD,
)
from dhruva.domain.pipeline.models import DistressLevel


def derive_actions(
    *,
    distress_level: DistressLevel,
    confidence: float,
    lapse_score: float,
    similar_count: int,
) -> list[str]:
    actions: list[str] = []
    if distress_level is DistressLevel.CRITICAL:
        actions.append(ACTION_IMMEDIATE_ATTENTION)
    if confidence < CLARIFICATION_THRESHOLD:
        actions.append(ACTION_MANUAL_CLASSIFICATION)
    if lapse_score > SUPERVISOR_REVIEW_THRESHOLD:
        actions.append(ACTION_SUPERVISOR_REVIEW)
    if similar_count > 0:
        actions.append(ACTION_SIMILAR_CASE_REVIEW)
    return actions
