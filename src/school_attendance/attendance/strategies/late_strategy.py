from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, late_cutoff: datetime) -> StatusDecision:
        minutes = int((now - late_cutoff).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"{minutes} min after cutoff")
