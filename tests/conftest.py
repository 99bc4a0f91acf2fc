from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from school_attendance.attendance.model import AttendanceRecord, CheckedIn, Completed, SubjectDay
from school_attendance.attendance.service import AttendanceProof, Coordinates
from school_attendance.common.deadline import check_deadline
from school_attendance.container import wire_services
from school_attendance.core.enums import SubjectType
from school_attendance.core.exceptions import DuplicateRecord
from school_attendance.roster.model import RosterEntry
from school_attendance.settings.model import AttendanceSettings, GeofenceReference
from school_attendance.sweeps.model import SweepLock

SCHOOL = Coordinates(latitude=5.6037, longitude=-0.1870)


class InMemoryAttendanceRepository:
    """Thread-safe stand-in for the MySQL table, including its unique key."""

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[SubjectDay, AttendanceRecord] = {}
        self._next_id = 1

    def get_for_subject_and_date(self, subject_type, subject_id, work_date) -> Optional[AttendanceRecord]:
        return self._rows.get(SubjectDay(subject_type, subject_id, work_date))

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        for r in self._rows.values():
            if r.record_id == record_id:
                return r
        return None

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._lock:
            check_deadline("commit")
            if record.key in self._rows:
                raise DuplicateRecord("Duplicate entry for subject and date")
            saved = replace(record, record_id=self._next_id)
            self._next_id += 1
            self._rows[record.key] = saved
            return saved

    def mark_checked_out(self, *, record_id: int, check_out_time: datetime) -> bool:
        with self._lock:
            check_deadline("commit")
            current = self.get_by_id(record_id)
            if not isinstance(current, CheckedIn):
                return False
            self._rows[current.key] = Completed(
                subject_type=current.subject_type,
                subject_id=current.subject_id,
                work_date=current.work_date,
                group_id=current.group_id,
                check_in_time=current.check_in_time,
                check_out_time=check_out_time,
                status=current.status,
                method=current.method,
                verified=current.verified,
                record_id=current.record_id,
            )
            return True

    def list_for_date(self, subject_type, work_date: date, *, group_id=None):
        return [
            r
            for r in self._rows.values()
            if r.subject_type == subject_type
            and r.work_date == work_date
            and (group_id is None or r.group_id == group_id)
        ]

    def list_in_range(self, *, start_date, end_date, subject_type=None, subject_id=None, group_id=None):
        items = [
            r
            for r in self._rows.values()
            if start_date <= r.work_date <= end_date
            and (subject_type is None or r.subject_type == subject_type)
            and (subject_id is None or r.subject_id == subject_id)
            and (group_id is None or r.group_id == group_id)
        ]
        items.sort(key=lambda r: (r.work_date, r.subject_id))
        return items

    def all(self) -> list[AttendanceRecord]:
        return list(self._rows.values())


class InMemoryRoster:
    def __init__(self):
        self._entries: dict[SubjectType, list[RosterEntry]] = {s: [] for s in SubjectType}
        self._enrolled: set[tuple[SubjectType, str]] = set()
        self._embeddings: dict[tuple[SubjectType, str], list[float]] = {}

    def add(self, subject_type, subject_id, group_id=None, *, full_name=None, enrolled=False, embedding=None):
        self._entries[subject_type].append(RosterEntry(subject_id=subject_id, group_id=group_id, full_name=full_name))
        if enrolled or embedding is not None:
            self._enrolled.add((subject_type, subject_id))
        if embedding is not None:
            self._embeddings[(subject_type, subject_id)] = list(embedding)

    def list_subjects(self, scope, group_id=None):
        return [e for e in self._entries[scope] if group_id is None or e.group_id == group_id]

    def has_biometric_enrollment(self, subject_type, subject_id) -> bool:
        return (subject_type, subject_id) in self._enrolled

    def get_face_embedding(self, subject_type, subject_id):
        return self._embeddings.get((subject_type, subject_id))


class InMemorySettingsRepository:
    def __init__(self, geofence: Optional[GeofenceReference] = None):
        self.attendance: Optional[AttendanceSettings] = None
        self.geofence = geofence

    def get_attendance_settings(self):
        return self.attendance

    def save_attendance_settings(self, settings):
        self.attendance = settings

    def get_geofence_reference(self):
        return self.geofence

    def save_geofence_reference(self, reference):
        self.geofence = reference


class InMemorySweepLocks:
    def __init__(self):
        self.locks: dict[tuple[date, SubjectType], SweepLock] = {}

    def get(self, work_date, scope):
        return self.locks.get((work_date, scope))

    def upsert(self, lock):
        self.locks[(lock.work_date, lock.scope)] = lock


@pytest.fixture
def attendance_repo():
    return InMemoryAttendanceRepository()


@pytest.fixture
def roster():
    r = InMemoryRoster()
    r.add(SubjectType.STUDENT, "S1", "JSS1A", full_name="Ama Mensah")
    r.add(SubjectType.STUDENT, "S2", "JSS1A", full_name="Kofi Boateng")
    r.add(SubjectType.STUDENT, "S3", "JSS2B", full_name="Esi Owusu")
    r.add(SubjectType.STAFF, "T1", "SCIENCE", full_name="Mr. Asante", enrolled=True)
    return r


@pytest.fixture
def settings_repo():
    return InMemorySettingsRepository(
        GeofenceReference(latitude=SCHOOL.latitude, longitude=SCHOOL.longitude, radius_meters=100.0)
    )


@pytest.fixture
def sweep_locks():
    return InMemorySweepLocks()


@pytest.fixture
def make_container(attendance_repo, roster, settings_repo, sweep_locks):
    def _make(settings=None):
        return wire_services(
            attendance_repo=attendance_repo,
            roster_repo=roster,
            settings_repo=settings_repo,
            sweep_locks_repo=sweep_locks,
            settings=settings,
        )

    return _make


@pytest.fixture
def container(make_container):
    return make_container()


@pytest.fixture
def on_campus():
    return AttendanceProof(location=SCHOOL)


@pytest.fixture
def school():
    return SCHOOL
