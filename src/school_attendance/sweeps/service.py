from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..attendance.ledger import AttendanceLedger, mark_absent
from ..attendance.repository import AttendanceRepository
from ..common.validators import optional_str, require_enum
from ..core.enums import SubjectType
from ..core.exceptions import DuplicateRecord, InfrastructureError, ValidationError
from ..roster.repository import RosterRepository
from ..settings.service import AttendanceSettingsProvider
from .model import SweepLock, SweepOutcome
from .repository import SweepLockRepository

logger = logging.getLogger(__name__)


class AbsenceSweeper:
    """Marks everyone without a record for the day as absent.

    Writes are per subject and independent, so a sweep that dies halfway is
    finished by simply running it again. The lock is a hint, not a
    guarantee: a locked day is only skipped after a read confirms every
    roster member really has a record.
    """

    def __init__(
        self,
        ledger: AttendanceLedger,
        records: AttendanceRepository,
        roster: RosterRepository,
        locks: SweepLockRepository,
        settings: AttendanceSettingsProvider,
    ):
        self._ledger = ledger
        self._records = records
        self._roster = roster
        self._locks = locks
        self._settings = settings

    def sweep(
        self,
        scope,
        work_date: Optional[date] = None,
        *,
        force: bool = False,
        group_id: Optional[str] = None,
        run_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Return the number of absent records created."""
        return self.run(scope, work_date, force=force, group_id=group_id, run_by=run_by, now=now).created

    def sweep_all(self, work_date: Optional[date] = None, **kwargs) -> dict[SubjectType, int]:
        return {scope: self.sweep(scope, work_date, **kwargs) for scope in SubjectType}

    def run(
        self,
        scope,
        work_date: Optional[date] = None,
        *,
        force: bool = False,
        group_id: Optional[str] = None,
        run_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SweepOutcome:
        scope = require_enum(SubjectType, scope, "scope")
        group_id = optional_str(group_id)
        settings = self._settings.get_attendance_settings()
        now = self._settings.localize(now, settings) if now else self._settings.now(settings)
        today = now.date()
        work_date = work_date or today

        if work_date > today:
            raise ValidationError("Cannot mark absences for a future date")

        if not force and work_date == today and now < self._settings.close_cutoff(today, settings):
            logger.warning("Absence sweep skipped for %s/%s: close cutoff not reached", scope.value, work_date)
            return SweepOutcome(scope, work_date, skipped_reason="before_close")

        roster = self._roster.list_subjects(scope, group_id)
        recorded = {r.subject_id for r in self._records.list_for_date(scope, work_date)}
        missing = [entry for entry in roster if entry.subject_id not in recorded]

        lock = self._locks.get(work_date, scope)
        if lock is not None and not missing:
            logger.info("Absence sweep already completed for %s/%s at %s", scope.value, work_date, lock.completed_at)
            return SweepOutcome(scope, work_date, skipped_reason="already_completed")
        if lock is not None:
            logger.warning(
                "Sweep lock for %s/%s exists but %d subject(s) have no record; resuming",
                scope.value,
                work_date,
                len(missing),
            )

        created = 0
        failed = 0
        for entry in missing:
            absent = mark_absent(
                subject_type=scope,
                subject_id=entry.subject_id,
                work_date=work_date,
                group_id=entry.group_id,
            )
            try:
                self._ledger.create(absent)
                created += 1
            except DuplicateRecord:
                # A live check-in (or a parallel sweep) got there first.
                continue
            except InfrastructureError as e:
                failed += 1
                logger.error("Could not mark %s/%s absent for %s: %s", scope.value, entry.subject_id, work_date, e)

        # Group-limited runs do not cover the whole scope, so they never lock it.
        if failed == 0 and group_id is None:
            self._locks.upsert(SweepLock(work_date=work_date, scope=scope, completed_at=now, run_by=run_by))

        logger.info(
            "Absence sweep %s/%s%s: %d marked absent, %d failed",
            scope.value,
            work_date,
            f" group={group_id}" if group_id else "",
            created,
            failed,
        )
        return SweepOutcome(scope, work_date, created=created, failed=failed)
