from __future__ import annotations

from typing import Iterable

from dhruva.domain.pipeline.constants import ALERT_CLUSTER_SIZE
from dhruva.domain.pipeline.models import CaseRecord, ProactiveAlert

CLUSTER_ALERT = "CLUSTER"


def detect_alerts(department: str, district: str, existing_cases: Iterable[CaseRecord]) -> tuple[ProactiveAlert, ...]:
    """Raise a cluster alert once a district holds three or more open cases
    for the same department, the new one included."""
    count = 1 + sum(
        1 for case in existing_cases if case.department == department and case.district == district
    )
    if count < ALERT_CLUSTER_SIZE:
        return ()
    return (ProactiveAlert(type=CLUSTER_ALERT, location=district, department=department, count=count),)
