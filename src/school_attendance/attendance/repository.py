from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import SubjectType
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Storage collaborator for the ledger.

    Implementations must enforce uniqueness of (subject_type, subject_id,
    work_date) themselves and raise ``DuplicateRecord`` from ``insert`` when
    the key is taken.
    """

    def get_for_subject_and_date(
        self, subject_type: SubjectType, subject_id: str, work_date: date
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        """Persist a new record and return it with ``record_id`` set."""

        raise NotImplementedError

    def mark_checked_out(self, *, record_id: int, check_out_time: datetime) -> bool:
        """Set check-out only if the row is checked in and not yet checked out."""

        raise NotImplementedError

    def list_for_date(
        self, subject_type: SubjectType, work_date: date, *, group_id: Optional[str] = None
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_in_range(
        self,
        *,
        start_date: date,
        end_date: date,
        subject_type: Optional[SubjectType] = None,
        subject_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
