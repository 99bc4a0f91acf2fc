from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import last_n_school_days, month_to_date, school_week_range
from ..common.validators import optional_str, require_enum
from ..core.constants import DEFAULT_SUMMARY_SCHOOL_DAYS
from ..core.enums import AttendanceStatus, ReportScope, SubjectType
from ..core.exceptions import ValidationError
from ..roster.repository import RosterRepository
from ..settings.service import AttendanceSettingsProvider
from .model import AttendanceSummary, DailyLogRow, SubjectSummary


def attendance_percentage(attended: int, total: int) -> float:
    """Attended (present + late) over all sessions, one decimal, half-up."""
    if total <= 0:
        return 0.0
    value = Decimal(attended) * 100 / Decimal(total)
    return float(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def summarize_records(records: Iterable[AttendanceRecord]) -> AttendanceSummary:
    counts = {status: 0 for status in AttendanceStatus}
    for r in records:
        counts[r.status] += 1

    present = counts[AttendanceStatus.PRESENT]
    late = counts[AttendanceStatus.LATE]
    absent = counts[AttendanceStatus.ABSENT]
    total = present + late + absent
    return AttendanceSummary(
        present_count=present,
        late_count=late,
        absent_count=absent,
        total_sessions=total,
        percentage_present=attendance_percentage(present + late, total),
    )


class SummaryAggregator:
    """Read side of the ledger. Never writes."""

    def __init__(
        self,
        records: AttendanceRepository,
        roster: RosterRepository,
        settings: AttendanceSettingsProvider,
    ):
        self._records = records
        self._roster = roster
        self._settings = settings

    @staticmethod
    def _check_range(start: date, end: date) -> None:
        if start > end:
            raise ValidationError("Start date must not be after end date")

    def default_range(self, days: int = DEFAULT_SUMMARY_SCHOOL_DAYS) -> tuple[date, date]:
        school_days = last_n_school_days(days, self._settings.today())
        return school_days[0], school_days[-1]

    def scope_range(
        self, scope, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> tuple[date, date]:
        """Window for a parent report scope, relative to today at school.

        Terms are not modelled here, so a termly report needs explicit dates.
        """
        scope = require_enum(ReportScope, scope, "scope")
        today = self._settings.today()
        if scope == ReportScope.DAILY:
            return today, today
        if scope == ReportScope.WEEKLY:
            return school_week_range(today)
        if scope == ReportScope.MONTHLY:
            return month_to_date(today)
        if start is None or end is None:
            raise ValidationError("A termly report needs the term start and end dates")
        self._check_range(start, end)
        return start, end

    def summarize(
        self,
        *,
        start: date,
        end: date,
        subject_id: Optional[str] = None,
        group_id: Optional[str] = None,
        subject_type=None,
    ) -> AttendanceSummary:
        """Counts for one subject, one group, or everyone (no filter)."""
        self._check_range(start, end)
        if subject_type is not None:
            subject_type = require_enum(SubjectType, subject_type, "subject_type")
        elif optional_str(subject_id) is not None:
            # Student and staff ids come from different tables and may collide.
            raise ValidationError("subject_type is required when filtering by subject_id")

        records = self._records.list_in_range(
            start_date=start,
            end_date=end,
            subject_type=subject_type,
            subject_id=optional_str(subject_id),
            group_id=optional_str(group_id),
        )
        return summarize_records(records)

    def summarize_by_subject(
        self,
        subject_type,
        *,
        start: date,
        end: date,
        group_id: Optional[str] = None,
    ) -> list[SubjectSummary]:
        """One row per roster member, best attendance first.

        Subjects with no records in range still get a row with zero sessions.
        """
        self._check_range(start, end)
        subject_type = require_enum(SubjectType, subject_type, "subject_type")
        group_id = optional_str(group_id)

        roster = self._roster.list_subjects(subject_type, group_id)
        by_subject: dict[str, list[AttendanceRecord]] = defaultdict(list)
        for r in self._records.list_in_range(start_date=start, end_date=end, subject_type=subject_type):
            by_subject[r.subject_id].append(r)

        rows = [
            SubjectSummary(
                subject_type=subject_type,
                subject_id=entry.subject_id,
                group_id=entry.group_id,
                full_name=entry.full_name,
                summary=summarize_records(by_subject.get(entry.subject_id, ())),
            )
            for entry in roster
        ]
        rows.sort(key=lambda s: (-s.summary.percentage_present, s.subject_id))
        return rows

    def daily_log(self, subject_type, work_date: date, *, group_id: Optional[str] = None) -> list[DailyLogRow]:
        """Every roster member for the day; no record reads as absent."""
        subject_type = require_enum(SubjectType, subject_type, "subject_type")
        group_id = optional_str(group_id)

        records = {r.subject_id: r for r in self._records.list_for_date(subject_type, work_date)}
        rows: list[DailyLogRow] = []
        for entry in self._roster.list_subjects(subject_type, group_id):
            rec = records.get(entry.subject_id)
            rows.append(
                DailyLogRow(
                    subject_id=entry.subject_id,
                    group_id=entry.group_id,
                    full_name=entry.full_name,
                    work_date=work_date,
                    check_in_time=rec.check_in_time if rec else None,
                    check_out_time=rec.check_out_time if rec else None,
                    status=rec.status if rec else AttendanceStatus.ABSENT,
                    auto_marked=rec.auto_marked if rec else False,
                )
            )
        return rows

    def summarize_for_subjects(
        self,
        subject_type,
        subject_ids: Sequence[str],
        *,
        start: date,
        end: date,
    ) -> list[SubjectSummary]:
        """Summaries for a hand-picked set of subjects, e.g. a parent's wards.

        Rows keep the order of ``subject_ids``; ids not on the roster are
        skipped.
        """
        self._check_range(start, end)
        subject_type = require_enum(SubjectType, subject_type, "subject_type")
        wanted = list(dict.fromkeys(i for i in (optional_str(s) for s in subject_ids) if i))
        if not wanted:
            raise ValidationError("At least one subject_id is required")

        roster = {e.subject_id: e for e in self._roster.list_subjects(subject_type)}
        rows: list[SubjectSummary] = []
        for subject_id in wanted:
            entry = roster.get(subject_id)
            if entry is None:
                continue
            records = self._records.list_in_range(
                start_date=start, end_date=end, subject_type=subject_type, subject_id=subject_id
            )
            rows.append(
                SubjectSummary(
                    subject_type=subject_type,
                    subject_id=subject_id,
                    group_id=entry.group_id,
                    full_name=entry.full_name,
                    summary=summarize_records(records),
                )
            )
        return rows
