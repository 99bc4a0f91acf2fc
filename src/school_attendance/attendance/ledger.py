from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..core.enums import AttendanceMethod, AttendanceStatus, SubjectType
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    DayClosed,
    DuplicateRecord,
    InvalidTransition,
    MustCheckInFirst,
)
from .model import Absent, AttendanceRecord, CheckedIn, Completed
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


# ----- state machine ---------------------------------------------------------
#
#  [no record] --check in-->  CheckedIn{present|late}
#  [no record] --sweep-->     Absent
#  CheckedIn   --check out--> Completed
#  anything else is rejected; Completed is terminal.


def apply_check_in(
    existing: Optional[AttendanceRecord],
    *,
    subject_type: SubjectType,
    subject_id: str,
    work_date: date,
    group_id: Optional[str],
    at: datetime,
    status: AttendanceStatus,
    method: AttendanceMethod,
    verified: bool,
) -> CheckedIn:
    if isinstance(existing, Absent):
        raise DayClosed("Attendance for today is closed: already marked absent")
    if existing is not None:
        raise AlreadyCheckedIn("Already checked in today. Please check out instead.")
    if status not in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
        raise InvalidTransition(f"Check-in cannot set status {status.value!r}")

    return CheckedIn(
        subject_type=subject_type,
        subject_id=subject_id,
        work_date=work_date,
        group_id=group_id,
        check_in_time=at,
        status=status,
        method=method,
        verified=bool(verified),
    )


def apply_check_out(existing: Optional[AttendanceRecord], *, at: datetime) -> Completed:
    if existing is None:
        raise MustCheckInFirst("Must check in before checking out.")
    if isinstance(existing, Absent):
        raise DayClosed("Attendance for today is closed: already marked absent")
    if isinstance(existing, Completed):
        raise AlreadyCheckedOut("Already checked out today.")
    if at < existing.check_in_time:
        raise InvalidTransition("Check-out time cannot be earlier than check-in time")

    # Method and status stay those of the check-in.
    return Completed(
        subject_type=existing.subject_type,
        subject_id=existing.subject_id,
        work_date=existing.work_date,
        group_id=existing.group_id,
        check_in_time=existing.check_in_time,
        check_out_time=at,
        status=existing.status,
        method=existing.method,
        verified=existing.verified,
        record_id=existing.record_id,
    )


def mark_absent(*, subject_type: SubjectType, subject_id: str, work_date: date, group_id: Optional[str]) -> Absent:
    return Absent(subject_type=subject_type, subject_id=subject_id, work_date=work_date, group_id=group_id)


# ----- moves accepted by AttendanceLedger.transition -------------------------


@dataclass(frozen=True)
class CheckIn:
    status: AttendanceStatus
    method: AttendanceMethod
    verified: bool


@dataclass(frozen=True)
class CheckOut:
    pass


Move = Union[CheckIn, CheckOut]


class AttendanceLedger:
    """Persistence contract around the state machine.

    Concurrency safety comes from the storage uniqueness key: when two
    writers race for the same subject/day, the loser's ``DuplicateRecord``
    is turned into the conflict its caller would have seen had it arrived
    second.
    """

    def __init__(self, records: AttendanceRepository):
        self._records = records

    def find(self, subject_type: SubjectType, subject_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._records.get_for_subject_and_date(subject_type, subject_id, work_date)

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert a new record; raises ``DuplicateRecord`` if the key is taken."""
        if record.record_id is not None:
            raise InvalidTransition("Record already persisted")
        return self._records.insert(record)

    def check_in(
        self,
        existing: Optional[AttendanceRecord],
        *,
        subject_type: SubjectType,
        subject_id: str,
        work_date: date,
        group_id: Optional[str],
        at: datetime,
        status: AttendanceStatus,
        method: AttendanceMethod,
        verified: bool,
    ) -> CheckedIn:
        record = apply_check_in(
            existing,
            subject_type=subject_type,
            subject_id=subject_id,
            work_date=work_date,
            group_id=group_id,
            at=at,
            status=status,
            method=method,
            verified=verified,
        )
        try:
            return self.create(record)
        except DuplicateRecord:
            winner = self.find(subject_type, subject_id, work_date)
            logger.info("Concurrent check-in lost for %s/%s on %s", subject_type.value, subject_id, work_date)
            if isinstance(winner, Absent):
                raise DayClosed("Attendance for today is closed: already marked absent")
            raise AlreadyCheckedIn("Already checked in today. Please check out instead.")

    def check_out(self, existing: Optional[AttendanceRecord], *, at: datetime) -> Completed:
        completed = apply_check_out(existing, at=at)
        if not self._records.mark_checked_out(record_id=int(completed.record_id), check_out_time=at):
            # Someone else moved the row since we read it; report what they left.
            current = self._records.get_by_id(int(completed.record_id))
            apply_check_out(current, at=at)
            raise AlreadyCheckedOut("Already checked out today.")
        return completed

    def transition(self, record_id: int, move: Move, *, at: datetime) -> AttendanceRecord:
        existing = self._records.get_by_id(int(record_id))
        if existing is None:
            raise InvalidTransition(f"Unknown attendance record {record_id}")
        if isinstance(move, CheckIn):
            raise InvalidTransition("Check-in is only legal when no record exists for the day")
        if isinstance(move, CheckOut):
            return self.check_out(existing, at=at)
        raise InvalidTransition(f"Unsupported move: {move!r}")
