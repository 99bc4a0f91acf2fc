from __future__ import annotations

from typing import Optional, Protocol

from .model import AttendanceSettings, GeofenceReference


class SettingsRepository(Protocol):
    """Config collaborator: admin-editable settings, one row each."""

    def get_attendance_settings(self) -> Optional[AttendanceSettings]:
        raise NotImplementedError

    def save_attendance_settings(self, settings: AttendanceSettings) -> None:
        raise NotImplementedError

    def get_geofence_reference(self) -> Optional[GeofenceReference]:
        raise NotImplementedError

    def save_geofence_reference(self, reference: GeofenceReference) -> None:
        raise NotImplementedError
