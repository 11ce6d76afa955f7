"""Escalating delay applied before a credential check."""
from __future__ import annotations

import time
from typing import Callable, Optional


def login_delay(attempts: int, step: float = 5.0, cap: Optional[float] = 60.0) -> float:
    """Seconds to wait before checking credentials after `attempts` failures.

    >>> login_delay(0)
    0.0
    >>> login_delay(3)
    15.0
    >>> login_delay(100)
    60.0
    """
    if attempts <= 0:
        return 0.0
    delay = float(step) * attempts
    if cap is not None:
        delay = min(delay, float(cap))
    return delay


class LinearDelay:
    """Sleeps `step` seconds per failed attempt, up to `cap` (None: unbounded)."""

    def __init__(self, step: float = 5.0, cap: Optional[float] = 60.0, sleep: Callable[[float], None] = time.sleep):
        self.step = step
        self.cap = cap
        self.sleep = sleep

    def seconds(self, attempts: int) -> float:
        return login_delay(attempts, self.step, self.cap)

    def wait(self, attempts: int) -> float:
        seconds = self.seconds(attempts)
        if seconds > 0:
            self.sleep(seconds)
        return seconds
