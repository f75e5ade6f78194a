from __future__ import annotations

import asyncio
from datetime import datetime, timezone


class SystemClock:
    """Real clock with scalable pacing.

    ``pacing_scale`` multiplies every cosmetic delay; ``0`` turns pacing off
    while still yielding to the event loop at each suspension point.
    """

    def __init__(self, pacing_scale: float = 1.0) -> None:
        if pacing_scale < 0:
            raise ValueError("pacing_scale must be >= 0")
        self._scale = pacing_scale

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(seconds, 0.0) * self._scale)
