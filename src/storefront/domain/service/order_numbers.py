"""Domain service: order number generation.

Numbers are generated client-side with no central sequence: a
millisecond timestamp that never goes backwards within one generator,
followed by a random suffix.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable

ORDER_PREFIX = "ORD"


class OrderNumberGenerator:

    def __init__(
        self,
        clock_ms: Callable[[], int] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._rng = rng or random.SystemRandom()
        self._last_ms = 0

    def next(self) -> str:
        """Return a fresh number like ``ORD1718000000123042``."""
        now = self._clock_ms()
        # strictly increasing, even if the clock stalls or steps back
        stamp = now if now > self._last_ms else self._last_ms + 1
        self._last_ms = stamp
        suffix = self._rng.randrange(1000)
        return f"{ORDER_PREFIX}{stamp:013d}{suffix:03d}"
