from __future__ import annotations

import random

from dhruva.domain.pipeline.constants import (
    LAPSE_HIGH_THRESHOLD,
    LAPSE_LIKELY_THRESHOLD,
    LAPSE_MEDIUM_THRESHOLD,
)
from dhruva.domain.pipeline.models import LapseRisk, RiskLevel
from dhruva.domain.reference import LIKELY_LAPSES


def risk_level(score: float) -> RiskLevel:
    if score > LAPSE_HIGH_THRESHOLD:
        return RiskLevel.HIGH
    if score > LAPSE_MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def predict_lapse(rng: random.Random) -> LapseRisk:
    score = rng.uniform(0.2, 0.8)
    return LapseRisk(
        score=score,
        level=risk_level(score),
        likely_lapses=LIKELY_LAPSES if score > LAPSE_LIKELY_THRESHOLD else (),
    )
