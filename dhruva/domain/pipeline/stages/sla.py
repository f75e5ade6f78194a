from __future__ import annotations

from datetime import datetime, timedelta

from dhruva.domain.pipeline.constants import SLA_HOURS
from dhruva.domain.pipeline.models import DistressLevel, Sla


def compute_sla(level: DistressLevel, now: datetime) -> Sla:
    hours = SLA_HOURS[level.value]
    return Sla(hours=hours, deadline=now + timedelta(hours=hours), priority=level.value)
