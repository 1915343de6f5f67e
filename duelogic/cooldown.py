"""Per-chair interrupt cooldowns as a pure function of last timestamp, duration and now."""

import logging
import math
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class CooldownTracker:
    """Remembers when each chair last interrupted.

    ``clock`` returns seconds and defaults to ``time.monotonic``; tests pass
    their own to move time without sleeping.
    """

    def __init__(self, cooldown_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last_interrupt: dict[str, float] = {}

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown_seconds

    def start(self, chair_position: str) -> None:
        self._last_interrupt[chair_position] = self._clock()

    def remaining(self, chair_position: str) -> float:
        last = self._last_interrupt.get(chair_position)
        if last is None:
            return 0.0
        return max(0.0, self._cooldown_seconds - (self._clock() - last))

    def is_ready(self, chair_position: str) -> bool:
        return self.remaining(chair_position) <= 0

    def remaining_whole_seconds(self, chair_position: str) -> int:
        return math.ceil(self.remaining(chair_position))

    def reset(self) -> None:
        self._last_interrupt.clear()
        logger.debug("Cooldowns reset")
