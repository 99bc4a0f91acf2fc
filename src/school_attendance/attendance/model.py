from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional, Union

from ..core.enums import AttendanceMethod, AttendanceStatus, RecordState, SubjectType


@dataclass(frozen=True)
class SubjectDay:
    """Uniqueness key of the ledger. Group is intentionally not part of it."""

    subject_type: SubjectType
    subject_id: str
    work_date: date


class _LedgerEntry:
    subject_type: SubjectType
    subject_id: str
    work_date: date

    @property
    def key(self) -> SubjectDay:
        return SubjectDay(self.subject_type, self.subject_id, self.work_date)


@dataclass(frozen=True)
class CheckedIn(_LedgerEntry):
    """Subject has arrived and not yet left."""

    subject_type: SubjectType
    subject_id: str
    work_date: date
    group_id: Optional[str]
    check_in_time: datetime
    status: AttendanceStatus
    method: AttendanceMethod
    verified: bool
    record_id: Optional[int] = None

    state = RecordState.CHECKED_IN

    @property
    def check_out_time(self) -> None:
        return None

    @property
    def auto_marked(self) -> bool:
        return False


@dataclass(frozen=True)
class Completed(_LedgerEntry):
    """Checked in and out. Terminal for the day."""

    subject_type: SubjectType
    subject_id: str
    work_date: date
    group_id: Optional[str]
    check_in_time: datetime
    check_out_time: datetime
    status: AttendanceStatus
    method: AttendanceMethod
    verified: bool
    record_id: Optional[int] = None

    state = RecordState.COMPLETED

    @property
    def auto_marked(self) -> bool:
        return False


@dataclass(frozen=True)
class Absent(_LedgerEntry):
    """No check-in by the close of the day."""

    subject_type: SubjectType
    subject_id: str
    work_date: date
    group_id: Optional[str]
    auto_marked: bool = True
    record_id: Optional[int] = None

    state = RecordState.ABSENT

    @property
    def status(self) -> AttendanceStatus:
        return AttendanceStatus.ABSENT

    @property
    def check_in_time(self) -> None:
        return None

    @property
    def check_out_time(self) -> None:
        return None

    @property
    def method(self) -> None:
        return None

    @property
    def verified(self) -> bool:
        return False


AttendanceRecord = Union[CheckedIn, Completed, Absent]


def record_from_row(r: Mapping[str, Any]) -> AttendanceRecord:
    """Map a storage row onto its state variant.

    This is the only place that looks at nullable timestamp columns to decide
    the state; everything downstream dispatches on the variant.
    """

    subject_type = SubjectType(r["subject_type"])
    subject_id = str(r["subject_id"])
    work_date = r["work_date"]
    group_id = r.get("group_id")
    record_id = int(r["record_id"]) if r.get("record_id") is not None else None
    status = AttendanceStatus(r["status"])

    if status == AttendanceStatus.ABSENT or r.get("check_in_time") is None:
        return Absent(
            subject_type=subject_type,
            subject_id=subject_id,
            work_date=work_date,
            group_id=group_id,
            auto_marked=bool(r.get("auto_marked", True)),
            record_id=record_id,
        )

    common = dict(
        subject_type=subject_type,
        subject_id=subject_id,
        work_date=work_date,
        group_id=group_id,
        check_in_time=r["check_in_time"],
        status=status,
        method=AttendanceMethod(r.get("method") or AttendanceMethod.MANUAL.value),
        verified=bool(r.get("verified", False)),
        record_id=record_id,
    )
    if r.get("check_out_time") is not None:
        return Completed(check_out_time=r["check_out_time"], **common)
    return CheckedIn(**common)


def record_to_row(record: AttendanceRecord) -> dict:
    return {
        "record_id": record.record_id,
        "subject_type": record.subject_type.value,
        "subject_id": record.subject_id,
        "group_id": record.group_id,
        "work_date": record.work_date,
        "check_in_time": record.check_in_time,
        "check_out_time": record.check_out_time,
        "status": record.status.value,
        "method": record.method.value if record.method else None,
        "verified": bool(record.verified),
        "auto_marked": bool(record.auto_marked),
    }
