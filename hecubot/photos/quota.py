"""Per-day counter for the image search API quota."""
from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class QuotaState:
    count: int
    day: date


class DailyQuotaCounter:
    """Counts search requests per calendar day and refuses once ``maximum`` is reached.

    The state is an immutable value swapped under a lock, so a check and its
    increment (including the daily rollover) happen as one step.
    """

    def __init__(
        self,
        maximum: int,
        clock: Callable[[], date] = date.today,
        initial: Optional[QuotaState] = None,
    ):
        if maximum < 1:
            raise ValueError("maximum must be positive")
        self.maximum = maximum
        self._clock = clock
        self._lock = threading.Lock()
        self._state = initial or QuotaState(0, clock())

    def try_consume(self) -> bool:
        with self._lock:
            today = self._clock()
            state = self._state
            if state.day != today:
                state = QuotaState(0, today)
            if state.count >= self.maximum:
                self._state = state
                allowed = False
            else:
                self._state = QuotaState(state.count + 1, today)
                allowed = True
            count = self._state.count

        if allowed:
            logger.debug(
                f"Photo request {count}/{self.maximum} for {today.isoformat()}",
                extra={"subsys": "photos", "event": "quota.consume"},
            )
        else:
            logger.warning(
                f"⚠ Daily photo request limit reached ({self.maximum})",
                extra={"subsys": "photos", "event": "quota.exceeded"},
            )
        return allowed

    def remaining(self) -> int:
        with self._lock:
            if self._state.day != self._clock():
                return self.maximum
            return self.maximum - self._state.count

    @property
    def state(self) -> QuotaState:
        with self._lock:
            return self._state
