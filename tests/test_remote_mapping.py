from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from dhruva.domain.pipeline.models import ClassificationMethod, DistressLevel, ResultSource
from dhruva.domain.pipeline.remote import AnalyzeResponse, to_pipeline_result
from dhruva.domain.reference import DEFAULT_RESPONSE_TEMPLATE

from conftest import FIXED_NOW, analyze_payload


def _map(payload: dict):
    return to_pipeline_result(AnalyzeResponse.model_validate(payload), case_id="PGRS-20251126-TEST", now=FIXED_NOW)


def test_full_response_maps_to_api_result() -> None:
    result = _map(analyze_payload())

    assert result.source is ResultSource.API
    assert result.case_id == "PGRS-20251126-TEST"
    assert result.classification.department == "Social Welfare"
    assert result.classification.method is ClassificationMethod.PRIMARY
    assert len(result.classification.top3) == 3
    assert result.sentiment.distress_level is DistressLevel.HIGH
    assert result.sentiment.signals == ("not received (HIGH)",)
    assert result.lapse_risk.likely_lapses == ("No Direct Contact",)
    assert result.similar_cases[0].id == "PGRS-2025-GTR-101"
    assert result.recommended_actions == ("SIMILAR_CASE_REVIEW",)
    assert result.response_template.english == "Your grievance has been registered."


def test_agreeing_backend_deadline_is_kept() -> None:
    result = _map(analyze_payload())
    assert result.sla.hours == 72
    assert result.sla.deadline == datetime(2025, 11, 29, 4, 30, tzinfo=timezone.utc)


def test_sla_hours_forced_to_distress_policy() -> None:
    payload = analyze_payload(sla={"hours": 48, "deadline": "2025-11-28T04:30:00Z", "priority": "HIGH"})
    result = _map(payload)
    assert result.sla.hours == 72
    assert result.sla.deadline == FIXED_NOW + timedelta(hours=72)


def test_missing_department_and_unknown_method() -> None:
    classification = dict(analyze_payload()["classification"], department=None, method="rules")
    result = _map(analyze_payload(classification=classification))
    assert result.classification.department == "Unknown"
    assert result.classification.method is ClassificationMethod.MANUAL


def test_fallback_classifier_method() -> None:
    classification = dict(analyze_payload()["classification"], method="fallback_classifier")
    assert _map(analyze_payload(classification=classification)).classification.method is ClassificationMethod.FALLBACK


def test_empty_actions_are_derived_and_missing_template_defaults() -> None:
    payload = analyze_payload(recommended_actions=[], response_template=None)
    result = _map(payload)
    # lapse 0.64 > 0.6 and one similar case
    assert result.recommended_actions == ("SUPERVISOR_REVIEW", "SIMILAR_CASE_REVIEW")
    assert result.response_template.english == DEFAULT_RESPONSE_TEMPLATE["english"]


def test_optional_sections_may_be_absent() -> None:
    result = _map(analyze_payload(similar_cases=None, proactive_alerts=None, duplicate_check=None))
    assert result.similar_cases == ()
    assert result.alerts == ()
    assert result.duplicate.is_duplicate is False


def test_missing_required_section_is_rejected() -> None:
    with pytest.raises(ValidationError):
        AnalyzeResponse.model_validate(analyze_payload(sentiment=None))


def test_out_of_range_confidence_is_rejected() -> None:
    classification = dict(analyze_payload()["classification"], confidence=1.7)
    with pytest.raises(ValidationError):
        AnalyzeResponse.model_validate(analyze_payload(classification=classification))
