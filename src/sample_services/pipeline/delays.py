"""Injectable simulated work.

Pipeline steps stand in for real I/O with short pauses. Each pause comes from
a per-step delay function, so tests can replace them with zero delays and a
recording ``sleep``.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Callable, Mapping

DelayFn = Callable[[], float]


def no_delay() -> float:
    return 0.0


def fixed_delay(seconds: float) -> DelayFn:
    return lambda: seconds


def uniform_ms(low: int, high: int, rng: random.Random | None = None) -> DelayFn:
    """Whole milliseconds drawn from ``[low, high)``, returned in seconds."""
    source = rng or random.Random()
    return lambda: source.randrange(low, high) / 1000.0


@dataclass
class SimulatedWork:
    """Per-step delay functions plus the sleep used to apply them."""

    delays: Mapping[str, DelayFn] = field(default_factory=dict)
    sleep: Callable[[float], None] = time.sleep

    def pause(self, step: str) -> float:
        """Sleep for the step's delay and return the seconds slept."""
        seconds = self.delays.get(step, no_delay)()
        if seconds > 0:
            self.sleep(seconds)
        return seconds

    @classmethod
    def instant(cls) -> SimulatedWork:
        return cls(delays={}, sleep=lambda _seconds: None)


__all__ = ["DelayFn", "no_delay", "fixed_delay", "uniform_ms", "SimulatedWork"]
