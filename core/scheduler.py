"""
Timers and the Blink Effect

PeriodicSchedule answers "is this periodic job due?" for code that is
woken up by someone else (a Streamlit rerun, an asyncio loop tick).
BlinkEffect derives marker visibility from the tier and the clock, so
it needs no timer state of its own.
"""

import math
from typing import Dict, Mapping, Optional

from .classifier import SeverityTier


class PeriodicSchedule:
    """Tracks the last run of a fixed-interval job."""

    def __init__(self, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self.last_run: Optional[float] = None

    def due(self, now: float) -> bool:
        """True if the job has never run or its interval has elapsed."""
        return self.last_run is None or now - self.last_run >= self.interval_seconds

    def mark(self, now: float) -> None:
        self.last_run = now

    def seconds_until_due(self, now: float) -> float:
        if self.last_run is None:
            return 0.0
        return max(0.0, self.last_run + self.interval_seconds - now)

    def reset(self) -> None:
        self.last_run = None


class BlinkEffect:
    """
    Toggle alerting markers on a fixed period.

    Normal markers are always visible. Warning and Critical markers are
    visible during even phases and hidden during odd ones, where the
    phase is floor(now / period).
    """

    def __init__(self, period_seconds: float = 0.5):
        if period_seconds <= 0:
            raise ValueError("period_seconds must be positive")
        self.period_seconds = period_seconds

    def phase(self, now: float) -> int:
        return int(math.floor(now / self.period_seconds))

    def is_visible(self, tier: SeverityTier, now: float) -> bool:
        if not tier.alerting:
            return True
        return self.phase(now) % 2 == 0

    def visibility(self, tiers: Mapping[str, SeverityTier], now: float) -> Dict[str, bool]:
        """Visibility flag for every identifier."""
        return {name: self.is_visible(tier, now) for name, tier in tiers.items()}
