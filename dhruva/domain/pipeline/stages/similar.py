from __future__ import annotations

import random

from dhruva.domain.pipeline.case_ids import random_suffix
from dhruva.domain.pipeline.models import SimilarCase
from dhruva.domain.reference import SIMILAR_CASE_RESOLUTIONS


def match_similar(rng: random.Random, prefix: str = "PGRS") -> tuple[SimilarCase, ...]:
    return tuple(
        SimilarCase(id=f"{prefix}-{random_suffix(rng)}", similarity=similarity, resolution=resolution)
        for similarity, resolution in SIMILAR_CASE_RESOLUTIONS
    )
