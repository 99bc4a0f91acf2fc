from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..common.validators import require_coordinate
from ..core.exceptions import GeofenceNotConfigured, LocationPermissionDenied, OutsideGeofence
from ..settings.model import GeofenceReference
from ..settings.service import AttendanceSettingsProvider
from .distance import haversine_meters


class GeofenceOutcome(str, Enum):
    OK = "ok"
    OUT_OF_RANGE = "out_of_range"
    CONFIG_MISSING = "config_missing"
    PERMISSION_DENIED = "permission_denied"


@dataclass(frozen=True)
class GeofenceResult:
    outcome: GeofenceOutcome
    distance_meters: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.outcome == GeofenceOutcome.OK

    @property
    def message(self) -> str:
        if self.outcome == GeofenceOutcome.OUT_OF_RANGE:
            return f"You are outside the school premises ({round(self.distance_meters or 0)}m away)"
        if self.outcome == GeofenceOutcome.CONFIG_MISSING:
            return "School location not configured"
        if self.outcome == GeofenceOutcome.PERMISSION_DENIED:
            return "Location permission is required for check-in"
        return "Inside school premises"

    def raise_for_outcome(self) -> None:
        if self.outcome == GeofenceOutcome.OUT_OF_RANGE:
            raise OutsideGeofence(self.message, distance_meters=float(self.distance_meters or 0))
        if self.outcome == GeofenceOutcome.CONFIG_MISSING:
            raise GeofenceNotConfigured(self.message)
        if self.outcome == GeofenceOutcome.PERMISSION_DENIED:
            raise LocationPermissionDenied(self.message)


class GeofenceValidator:
    """Checks that a device is inside the configured school radius.

    Stateless apart from one configuration read per call. The boundary is
    inclusive: a device exactly ``radius_meters`` away is inside.
    """

    def __init__(self, settings: AttendanceSettingsProvider):
        self._settings = settings

    @staticmethod
    def check(reference: GeofenceReference, current_lat: float, current_lon: float) -> GeofenceResult:
        distance = haversine_meters(current_lat, current_lon, reference.latitude, reference.longitude)
        if distance <= reference.radius_meters:
            return GeofenceResult(GeofenceOutcome.OK, distance)
        return GeofenceResult(GeofenceOutcome.OUT_OF_RANGE, distance)

    def validate(self, current_lat: Optional[float], current_lon: Optional[float]) -> GeofenceResult:
        # No fix at all means the device could not (or would not) share its location.
        if current_lat is None or current_lon is None:
            return GeofenceResult(GeofenceOutcome.PERMISSION_DENIED)

        lat = require_coordinate(current_lat, "latitude", limit=90)
        lon = require_coordinate(current_lon, "longitude", limit=180)

        reference = self._settings.get_geofence_reference()
        if reference is None:
            return GeofenceResult(GeofenceOutcome.CONFIG_MISSING)

        return self.check(reference, lat, lon)
