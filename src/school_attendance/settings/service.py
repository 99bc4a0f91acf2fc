from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..common.datetime_utils import parse_hhmm
from ..common.validators import require_coordinate
from ..core.constants import DEFAULT_CLOSE_AFTER, DEFAULT_LATE_AFTER, DEFAULT_TIMEZONE
from ..core.exceptions import ValidationError
from .model import AttendanceSettings, GeofenceReference
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name!r}")


class AttendanceSettingsProvider:
    """Cutoff times and the school clock.

    Stored settings win; the defaults apply until an administrator saves
    something, so a fresh install never blocks check-in.
    """

    def __init__(
        self,
        settings: SettingsRepository,
        *,
        default_late_after: str = DEFAULT_LATE_AFTER,
        default_close_after: str = DEFAULT_CLOSE_AFTER,
        default_timezone: str = DEFAULT_TIMEZONE,
    ):
        self._settings = settings
        self._defaults = AttendanceSettings(
            late_after=parse_hhmm(default_late_after),
            close_after=parse_hhmm(default_close_after),
            timezone=default_timezone,
        )

    def get_attendance_settings(self) -> AttendanceSettings:
        return self._settings.get_attendance_settings() or self._defaults

    def get_geofence_reference(self) -> Optional[GeofenceReference]:
        return self._settings.get_geofence_reference()

    # ----- school clock -----

    def timezone(self, settings: Optional[AttendanceSettings] = None) -> ZoneInfo:
        settings = settings or self.get_attendance_settings()
        return _zone(settings.timezone)

    def now(self, settings: Optional[AttendanceSettings] = None) -> datetime:
        return datetime.now(self.timezone(settings))

    def localize(self, value: datetime, settings: Optional[AttendanceSettings] = None) -> datetime:
        """Naive datetimes are read as school-local time; aware ones are converted."""
        tz = self.timezone(settings)
        if value.tzinfo is None:
            return value.replace(tzinfo=tz)
        return value.astimezone(tz)

    def today(self, settings: Optional[AttendanceSettings] = None) -> date:
        return self.now(settings).date()

    def late_cutoff(self, day: date, settings: Optional[AttendanceSettings] = None) -> datetime:
        settings = settings or self.get_attendance_settings()
        return datetime.combine(day, settings.late_after, tzinfo=self.timezone(settings))

    def close_cutoff(self, day: date, settings: Optional[AttendanceSettings] = None) -> datetime:
        settings = settings or self.get_attendance_settings()
        return datetime.combine(day, settings.close_after, tzinfo=self.timezone(settings))

    # ----- admin writes -----

    def save_attendance_settings(self, *, late_after: str, close_after: str, timezone: str) -> AttendanceSettings:
        late_t: time = parse_hhmm(late_after)
        close_t: time = parse_hhmm(close_after)
        if close_t <= late_t:
            raise ValidationError("Close time must be after the late cutoff")
        tz_name = (timezone or "").strip()
        _zone(tz_name)

        settings = AttendanceSettings(late_after=late_t, close_after=close_t, timezone=tz_name)
        self._settings.save_attendance_settings(settings)
        logger.info("Attendance settings updated: late_after=%s close_after=%s tz=%s", late_after, close_after, tz_name)
        return settings

    def save_geofence_reference(self, *, latitude, longitude, radius_meters) -> GeofenceReference:
        lat = require_coordinate(latitude, "latitude", limit=90)
        lon = require_coordinate(longitude, "longitude", limit=180)
        try:
            radius = float(radius_meters)
        except (TypeError, ValueError):
            raise ValidationError("radius_meters must be a number")
        if radius <= 0:
            raise ValidationError("radius_meters must be greater than 0")

        reference = GeofenceReference(latitude=lat, longitude=lon, radius_meters=radius)
        self._settings.save_geofence_reference(reference)
        logger.info("School location updated: (%.6f, %.6f) r=%.0fm", lat, lon, radius)
        return reference
