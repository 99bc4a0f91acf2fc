from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class AttendanceSettings:
    """School-wide cutoffs, expressed in the school's local timezone."""

    late_after: time
    close_after: time
    timezone: str


@dataclass(frozen=True)
class GeofenceReference:
    latitude: float
    longitude: float
    radius_meters: float
