from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from school_attendance.attendance.ledger import (
    AttendanceLedger,
    CheckIn,
    CheckOut,
    apply_check_in,
    apply_check_out,
    mark_absent,
)
from school_attendance.attendance.model import Absent, CheckedIn, Completed, record_from_row, record_to_row
from school_attendance.core.enums import AttendanceMethod, AttendanceStatus, RecordState, SubjectType
from school_attendance.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    DayClosed,
    DuplicateRecord,
    InvalidTransition,
    MustCheckInFirst,
)

DAY = date(2025, 3, 3)
AT = datetime(2025, 3, 3, 7, 45, tzinfo=timezone.utc)


def _check_in(existing=None, *, status=AttendanceStatus.PRESENT):
    return apply_check_in(
        existing,
        subject_type=SubjectType.STUDENT,
        subject_id="S1",
        work_date=DAY,
        group_id="JSS1A",
        at=AT,
        status=status,
        method=AttendanceMethod.QR_TOKEN,
        verified=True,
    )


def test_check_in_from_nothing_creates_checked_in_record():
    record = _check_in()

    assert isinstance(record, CheckedIn)
    assert record.state == RecordState.CHECKED_IN
    assert record.check_out_time is None
    assert record.record_id is None


def test_check_in_rejects_absent_status():
    with pytest.raises(InvalidTransition):
        _check_in(status=AttendanceStatus.ABSENT)


def test_second_check_in_is_rejected():
    with pytest.raises(AlreadyCheckedIn):
        _check_in(_check_in())


def test_check_in_over_absent_is_day_closed():
    absent = mark_absent(subject_type=SubjectType.STUDENT, subject_id="S1", work_date=DAY, group_id="JSS1A")

    with pytest.raises(DayClosed):
        _check_in(absent)


def test_check_out_keeps_status_and_method():
    first = _check_in(status=AttendanceStatus.LATE)
    done = apply_check_out(first, at=AT + timedelta(hours=8))

    assert isinstance(done, Completed)
    assert done.status == AttendanceStatus.LATE
    assert done.method == AttendanceMethod.QR_TOKEN
    assert done.check_in_time == AT


@pytest.mark.parametrize(
    "existing, error",
    [
        (None, MustCheckInFirst),
        (Absent(SubjectType.STUDENT, "S1", DAY, "JSS1A"), DayClosed),
    ],
)
def test_check_out_rejections(existing, error):
    with pytest.raises(error):
        apply_check_out(existing, at=AT)


def test_check_out_twice_is_rejected():
    done = apply_check_out(_check_in(), at=AT + timedelta(hours=1))

    with pytest.raises(AlreadyCheckedOut):
        apply_check_out(done, at=AT + timedelta(hours=2))


def test_check_out_before_check_in_time_is_rejected():
    with pytest.raises(InvalidTransition):
        apply_check_out(_check_in(), at=AT - timedelta(minutes=1))


def test_absent_record_reads_as_absent_everywhere():
    absent = mark_absent(subject_type=SubjectType.STAFF, subject_id="T1", work_date=DAY, group_id=None)

    assert absent.status == AttendanceStatus.ABSENT
    assert absent.check_in_time is None
    assert absent.method is None
    assert absent.verified is False
    assert absent.auto_marked is True


def test_row_mapping_picks_the_state_variant():
    done = apply_check_out(_check_in(), at=AT + timedelta(hours=8))
    row = record_to_row(done)

    assert row["status"] == "present"
    assert isinstance(record_from_row(row), Completed)
    assert isinstance(record_from_row({**row, "check_out_time": None}), CheckedIn)
    assert isinstance(record_from_row({**row, "status": "absent", "check_in_time": None}), Absent)


def test_ledger_create_twice_raises_duplicate(attendance_repo):
    ledger = AttendanceLedger(attendance_repo)
    saved = ledger.create(_check_in())

    assert saved.record_id is not None
    with pytest.raises(DuplicateRecord):
        ledger.create(_check_in())
    with pytest.raises(InvalidTransition):
        ledger.create(saved)


def test_ledger_lost_check_in_race_against_sweep_is_day_closed(attendance_repo):
    ledger = AttendanceLedger(attendance_repo)
    ledger.create(mark_absent(subject_type=SubjectType.STUDENT, subject_id="S1", work_date=DAY, group_id="JSS1A"))

    # The caller read "no record" before the sweep wrote.
    with pytest.raises(DayClosed):
        ledger.check_in(
            None,
            subject_type=SubjectType.STUDENT,
            subject_id="S1",
            work_date=DAY,
            group_id="JSS1A",
            at=AT,
            status=AttendanceStatus.PRESENT,
            method=AttendanceMethod.MANUAL,
            verified=False,
        )


def test_ledger_stale_check_out_reports_already_checked_out(attendance_repo):
    ledger = AttendanceLedger(attendance_repo)
    stale = ledger.create(_check_in())
    ledger.check_out(stale, at=AT + timedelta(hours=8))

    with pytest.raises(AlreadyCheckedOut):
        ledger.check_out(stale, at=AT + timedelta(hours=9))


def test_transition_by_id(attendance_repo):
    ledger = AttendanceLedger(attendance_repo)
    saved = ledger.create(_check_in())

    with pytest.raises(InvalidTransition):
        ledger.transition(saved.record_id, CheckIn(AttendanceStatus.PRESENT, AttendanceMethod.MANUAL, False), at=AT)

    done = ledger.transition(saved.record_id, CheckOut(), at=AT + timedelta(hours=8))
    assert isinstance(done, Completed)

    with pytest.raises(InvalidTransition):
        ledger.transition(999, CheckOut(), at=AT)
