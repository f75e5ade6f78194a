from __future__ import annotations

from dhruva.domain.pipeline.models import DistressLevel, ResponseTemplate
from dhruva.domain.reference import CASE_ID_PLACEHOLDER, DEFAULT_RESPONSE_TEMPLATE, RESPONSE_TEMPLATES


def render_template(level: DistressLevel, case_id: str) -> ResponseTemplate:
    template = RESPONSE_TEMPLATES.get(level.value, DEFAULT_RESPONSE_TEMPLATE)
    return ResponseTemplate(
        english=template["english"].replace(CASE_ID_PLACEHOLDER, case_id),
        telugu=template["telugu"].replace(CASE_ID_PLACEHOLDER, case_id),
    )
