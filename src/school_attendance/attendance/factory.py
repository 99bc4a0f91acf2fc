from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, late_cutoff: datetime) -> AttendanceStrategy:
        # A check-in exactly at the cutoff is still on time.
        if now > late_cutoff:
            return LateStrategy()
        return PresentStrategy()
