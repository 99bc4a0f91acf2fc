from datetime import datetime
from zoneinfo import ZoneInfo

from school_attendance.attendance.factory import AttendanceStrategyFactory
from school_attendance.attendance.strategies.late_strategy import LateStrategy
from school_attendance.attendance.strategies.present_strategy import PresentStrategy
from school_attendance.core.enums import AttendanceStatus

ACCRA = ZoneInfo("Africa/Accra")
CUTOFF = datetime(2025, 3, 3, 8, 0, tzinfo=ACCRA)


def test_factory_checkin_before_cutoff_is_present():
    now = datetime(2025, 3, 3, 7, 58, tzinfo=ACCRA)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, late_cutoff=CUTOFF)

    assert isinstance(strategy, PresentStrategy)
    assert strategy.decide_checkin(now=now, late_cutoff=CUTOFF).status == AttendanceStatus.PRESENT


def test_factory_checkin_exactly_at_cutoff_is_present():
    strategy = AttendanceStrategyFactory().for_checkin(now=CUTOFF, late_cutoff=CUTOFF)

    assert isinstance(strategy, PresentStrategy)


def test_factory_checkin_after_cutoff_is_late():
    now = datetime(2025, 3, 3, 8, 5, tzinfo=ACCRA)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, late_cutoff=CUTOFF)
    decision = strategy.decide_checkin(now=now, late_cutoff=CUTOFF)

    assert isinstance(strategy, LateStrategy)
    assert decision.status == AttendanceStatus.LATE
    assert decision.note == "5 min after cutoff"
