from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import AttendanceSettings, GeofenceReference
from .repository import SettingsRepository

_SINGLETON_ID = 1


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_attendance_settings(self) -> Optional[AttendanceSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT late_after, close_after, timezone FROM attendance_settings WHERE settings_id=%s",
                (_SINGLETON_ID,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendanceSettings(
                late_after=normalize_mysql_time(r["late_after"]),
                close_after=normalize_mysql_time(r["close_after"]),
                timezone=r["timezone"],
            )

    def save_attendance_settings(self, settings: AttendanceSettings) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_settings(settings_id, late_after, close_after, timezone)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    late_after=VALUES(late_after),
                    close_after=VALUES(close_after),
                    timezone=VALUES(timezone)
                """,
                (_SINGLETON_ID, settings.late_after, settings.close_after, settings.timezone),
            )

    def get_geofence_reference(self) -> Optional[GeofenceReference]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT latitude, longitude, radius_meters FROM school_location WHERE location_id=%s",
                (_SINGLETON_ID,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return GeofenceReference(
                latitude=float(r["latitude"]),
                longitude=float(r["longitude"]),
                radius_meters=float(r["radius_meters"]),
            )

    def save_geofence_reference(self, reference: GeofenceReference) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO school_location(location_id, latitude, longitude, radius_meters)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    latitude=VALUES(latitude),
                    longitude=VALUES(longitude),
                    radius_meters=VALUES(radius_meters)
                """,
                (_SINGLETON_ID, reference.latitude, reference.longitude, reference.radius_meters),
            )
