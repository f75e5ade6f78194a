"""Case identifiers: ``<PREFIX>-YYYYMMDD-XXXX``."""

from __future__ import annotations

import random
import re
import string
from datetime import datetime

_ALPHABET = string.ascii_uppercase + string.digits
SUFFIX_LENGTH = 4


def random_suffix(rng: random.Random, length: int = SUFFIX_LENGTH) -> str:
    return "".join(rng.choice(_ALPHABET) for _ in range(length))


def new_case_id(prefix: str, now: datetime, rng: random.Random) -> str:
    # Collisions with queued ids are not checked.
    return f"{prefix}-{now:%Y%m%d}-{random_suffix(rng)}"


def case_id_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(prefix)}-\d{{8}}-[A-Z0-9]{{{SUFFIX_LENGTH}}}$")
