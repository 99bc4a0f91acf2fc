from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional

from .attendance.ledger import AttendanceLedger
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceRecorder
from .biometrics.matcher import FaceMatcher
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .geofence.validator import GeofenceValidator
from .reports.service import SummaryAggregator
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import AttendanceSettingsProvider
from .sweeps.mysql_sweep_lock_repository import MySQLSweepLockRepository
from .sweeps.repository import SweepLockRepository
from .sweeps.service import AbsenceSweeper
from .tokens.service import SignedTokenService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    attendance_repo: AttendanceRepository
    roster_repo: RosterRepository
    settings_repo: SettingsRepository
    sweep_locks_repo: SweepLockRepository

    settings_provider: AttendanceSettingsProvider
    token_service: SignedTokenService
    geofence_validator: GeofenceValidator
    ledger: AttendanceLedger
    recorder: AttendanceRecorder
    absence_sweeper: AbsenceSweeper
    summary_aggregator: SummaryAggregator


def wire_services(
    *,
    attendance_repo: AttendanceRepository,
    roster_repo: RosterRepository,
    settings_repo: SettingsRepository,
    sweep_locks_repo: SweepLockRepository,
    settings: Any = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the service graph on top of any repository implementations.

    ``settings`` is a settings module (see ``config``); missing keys fall
    back to the package defaults.
    """

    def opt(name: str, default):
        return getattr(settings, name, default) if settings is not None else default

    max_age = int(opt("QR_TOKEN_MAX_AGE_SECONDS", 0) or 0)

    settings_provider = AttendanceSettingsProvider(
        settings_repo,
        default_late_after=opt("DEFAULT_LATE_AFTER", constants.DEFAULT_LATE_AFTER),
        default_close_after=opt("DEFAULT_CLOSE_AFTER", constants.DEFAULT_CLOSE_AFTER),
        default_timezone=opt("DEFAULT_TIMEZONE", constants.DEFAULT_TIMEZONE),
    )
    token_service = SignedTokenService()
    geofence_validator = GeofenceValidator(settings_provider)
    ledger = AttendanceLedger(attendance_repo)
    recorder = AttendanceRecorder(
        ledger,
        token_service,
        geofence_validator,
        settings_provider,
        roster_repo,
        face_matcher=FaceMatcher(float(opt("FACE_MATCH_THRESHOLD", constants.DEFAULT_FACE_MATCH_THRESHOLD))),
        token_max_age=timedelta(seconds=max_age) if max_age > 0 else None,
        allow_manual=bool(opt("ALLOW_MANUAL_ATTENDANCE", True)),
        default_timeout=float(opt("RECORD_TIMEOUT_SECONDS", constants.DEFAULT_RECORD_TIMEOUT_SECONDS)),
    )
    absence_sweeper = AbsenceSweeper(ledger, attendance_repo, roster_repo, sweep_locks_repo, settings_provider)
    summary_aggregator = SummaryAggregator(attendance_repo, roster_repo, settings_provider)

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        roster_repo=roster_repo,
        settings_repo=settings_repo,
        sweep_locks_repo=sweep_locks_repo,
        settings_provider=settings_provider,
        token_service=token_service,
        geofence_validator=geofence_validator,
        ledger=ledger,
        recorder=recorder,
        absence_sweeper=absence_sweeper,
        summary_aggregator=summary_aggregator,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_services(
        attendance_repo=MySQLAttendanceRepository(conn),
        roster_repo=MySQLRosterRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        sweep_locks_repo=MySQLSweepLockRepository(conn),
        settings=settings,
        conn=conn,
    )
