from __future__ import annotations

from enum import Enum


class SubjectType(str, Enum):
    """Who an attendance record belongs to. Also used as the sweep scope."""

    STUDENT = "student"
    STAFF = "staff"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class AttendanceMethod(str, Enum):
    QR_TOKEN = "qr_token"
    BIOMETRIC = "biometric"
    MANUAL = "manual"


class AttendanceMode(str, Enum):
    IN = "in"
    OUT = "out"


class RecordState(str, Enum):
    """Position of a record in the per-subject, per-day state machine."""

    CHECKED_IN = "checked_in"
    COMPLETED = "completed"
    ABSENT = "absent"


# Token roles as printed on QR cards, mapped onto the subject they identify.
ROLE_SUBJECT_TYPES = {
    "student": SubjectType.STUDENT,
    "staff": SubjectType.STAFF,
    "teacher": SubjectType.STAFF,
    "admin": SubjectType.STAFF,
}


class ReportScope(str, Enum):
    """Preset windows for parent-facing reports."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    TERMLY = "termly"
