from __future__ import annotations

from datetime import date, datetime, time

import pytest

from school_attendance.core.exceptions import ValidationError
from school_attendance.settings.service import AttendanceSettingsProvider
from school_attendance.settings.model import AttendanceSettings


def test_defaults_apply_until_saved(container):
    settings = container.settings_provider.get_attendance_settings()

    assert settings == AttendanceSettings(late_after=time(8, 0), close_after=time(16, 0), timezone="Africa/Accra")


def test_saved_settings_move_the_cutoffs(container, settings_repo):
    container.settings_provider.save_attendance_settings(
        late_after="07:30", close_after="15:00", timezone="Africa/Lagos"
    )

    cutoff = container.settings_provider.late_cutoff(date(2025, 3, 3))
    assert settings_repo.attendance.late_after == time(7, 30)
    assert (cutoff.hour, cutoff.minute) == (7, 30)
    assert cutoff.utcoffset().total_seconds() == 3600


@pytest.mark.parametrize(
    "late_after, close_after, tz",
    [
        ("16:00", "08:00", "Africa/Accra"),
        ("08:00", "08:00", "Africa/Accra"),
        ("8am", "16:00", "Africa/Accra"),
        ("08:00", "16:00", "Mars/Olympus"),
    ],
)
def test_invalid_settings_are_rejected(container, settings_repo, late_after, close_after, tz):
    with pytest.raises(ValidationError):
        container.settings_provider.save_attendance_settings(late_after=late_after, close_after=close_after, timezone=tz)

    assert settings_repo.attendance is None


def test_school_location_requires_positive_radius(container, settings_repo):
    with pytest.raises(ValidationError):
        container.settings_provider.save_geofence_reference(latitude=5.6, longitude=-0.18, radius_meters=0)

    saved = container.settings_provider.save_geofence_reference(latitude="5.6", longitude=-0.18, radius_meters=250)
    assert settings_repo.geofence == saved
    assert saved.radius_meters == 250.0


def test_naive_datetimes_are_school_local(settings_repo):
    provider = AttendanceSettingsProvider(settings_repo, default_timezone="Africa/Lagos")

    local = provider.localize(datetime(2025, 3, 3, 9, 0))

    assert local.hour == 9
    assert local.utcoffset().total_seconds() == 3600
