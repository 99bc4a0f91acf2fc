from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, SubjectType


@dataclass(frozen=True)
class AttendanceSummary:
    present_count: int
    late_count: int
    absent_count: int
    total_sessions: int
    percentage_present: float

    @property
    def attended_sessions(self) -> int:
        return self.present_count + self.late_count

    def to_dict(self) -> dict:
        data = asdict(self)
        data["attended_sessions"] = self.attended_sessions
        return data


@dataclass(frozen=True)
class SubjectSummary:
    """Read-model row for class/department/staff reports."""

    subject_type: SubjectType
    subject_id: str
    group_id: Optional[str]
    full_name: Optional[str]
    summary: AttendanceSummary

    def to_dict(self) -> dict:
        return {
            "subject_type": self.subject_type.value,
            "subject_id": self.subject_id,
            "group_id": self.group_id,
            "full_name": self.full_name,
            **self.summary.to_dict(),
        }


@dataclass(frozen=True)
class DailyLogRow:
    subject_id: str
    group_id: Optional[str]
    full_name: Optional[str]
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    auto_marked: bool

    def to_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "group_id": self.group_id,
            "full_name": self.full_name,
            "date": self.work_date.isoformat(),
            "check_in": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out": self.check_out_time.isoformat() if self.check_out_time else None,
            "status": self.status.value,
            "auto_marked": self.auto_marked,
        }
