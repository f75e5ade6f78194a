from __future__ import annotations

from dhruva.domain.pipeline.constants import DISTRESS_CONFIDENCE
from dhruva.domain.pipeline.models import DistressLevel, Sentiment
from dhruva.domain.reference import DISTRESS_KEYWORDS


def detect_distress(text: str) -> Sentiment:
    """Tiered keyword scan.

    The critical tier always runs. The high tier runs only if nothing
    critical was found, and the medium tier only if the level is still
    NORMAL after that.
    """
    signals: list[str] = []
    level = DistressLevel.NORMAL

    for tier in (DistressLevel.CRITICAL, DistressLevel.HIGH, DistressLevel.MEDIUM):
        if level is not DistressLevel.NORMAL:
            break
        for keyword in DISTRESS_KEYWORDS[tier.value]:
            if keyword.found_in(text):
                signals.append(keyword.label)
                level = tier

    return Sentiment(
        distress_level=level,
        confidence=DISTRESS_CONFIDENCE[level.value],
        signals=tuple(signals),
    )
