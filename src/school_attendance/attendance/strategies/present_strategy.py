from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Check-in at or before the late cutoff."""

    def decide_checkin(self, *, now: datetime, late_cutoff: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
