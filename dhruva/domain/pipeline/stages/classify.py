"""Keyword classifier used when no backend is reachable.

Each keyword hit adds 0.25 to its department (capped at 0.95). The winning
score is lifted by a random bonus so the simulated confidence looks like a
model's output; the runner-ups decay from it in steps of 0.15.
"""

from __future__ import annotations

import random

from dhruva.domain.pipeline.constants import FALLBACK_METHOD_THRESHOLD, PRIMARY_METHOD_THRESHOLD
from dhruva.domain.pipeline.models import Classification, ClassificationMethod, DepartmentScore
from dhruva.domain.reference import DEPARTMENT_KEYWORDS, UNMATCHED_TOP3

KEYWORD_WEIGHT = 0.25
MAX_SCORE = 0.95
BASE_LIFT = 0.4
MAX_BONUS = 0.2
RANK_DECAY = 0.15
MAX_JITTER = 0.1
MIN_RUNNER_UP = 0.15


def method_for(confidence: float) -> ClassificationMethod:
    if confidence >= PRIMARY_METHOD_THRESHOLD:
        return ClassificationMethod.PRIMARY
    if confidence >= FALLBACK_METHOD_THRESHOLD:
        return ClassificationMethod.FALLBACK
    return ClassificationMethod.MANUAL


def keyword_scores(text: str) -> list[tuple[str, float]]:
    lowered = text.lower()
    scores = []
    for department, keywords in DEPARTMENT_KEYWORDS.items():
        hits = sum(1 for keyword in keywords if keyword in lowered)
        scores.append((department, min(hits * KEYWORD_WEIGHT, MAX_SCORE)))
    # stable sort keeps table order on ties
    scores.sort(key=lambda item: item[1], reverse=True)
    return scores


def classify(text: str, rng: random.Random) -> Classification:
    scores = keyword_scores(text)
    if scores[0][1] == 0:
        department, confidence = UNMATCHED_TOP3[0]
        return Classification(
            department=department,
            confidence=confidence,
            method=method_for(confidence),
            top3=tuple(DepartmentScore(department=d, confidence=c) for d, c in UNMATCHED_TOP3),
        )

    confidence = min(MAX_SCORE, scores[0][1] + rng.uniform(0, MAX_BONUS) + BASE_LIFT)
    top3 = tuple(
        DepartmentScore(
            department=department,
            confidence=max(MIN_RUNNER_UP, confidence - i * RANK_DECAY - rng.uniform(0, MAX_JITTER)),
        )
        for i, (department, _) in enumerate(scores[:3])
    )
    return Classification(
        department=scores[0][0],
        confidence=confidence,
        method=method_for(confidence),
        top3=top3,
    )
