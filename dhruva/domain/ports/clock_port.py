"""ClockPort protocol: wall-clock reads and cosmetic pacing delays."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ClockPort(Protocol):
    def now(self) -> datetime: ...

    async def sleep(self, seconds: float) -> None: ...
