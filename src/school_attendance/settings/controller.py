from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import format_hhmm
from ..common.http import json_body, json_error, json_unexpected
from ..core.exceptions import DomainError
from ..container import Container
from .model import AttendanceSettings, GeofenceReference


def _settings_json(settings: AttendanceSettings) -> dict:
    return {
        "lateAfter": format_hhmm(settings.late_after),
        "closeAfter": format_hhmm(settings.close_after),
        "timezone": settings.timezone,
    }


def _location_json(reference: GeofenceReference | None) -> dict | None:
    if reference is None:
        return None
    return {
        "latitude": reference.latitude,
        "longitude": reference.longitude,
        "radiusMeters": reference.radius_meters,
    }


def register(app: Flask, container: Container) -> None:
    provider = container.settings_provider

    @app.route("/api/settings/attendance", methods=["GET"], endpoint="api_get_attendance_settings")
    def api_get_attendance_settings():
        try:
            return jsonify({
                "success": True,
                "settings": _settings_json(provider.get_attendance_settings()),
                "location": _location_json(provider.get_geofence_reference()),
            })
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("loading settings")

    @app.route("/api/settings/attendance", methods=["PUT"], endpoint="api_save_attendance_settings")
    def api_save_attendance_settings():
        try:
            data = json_body()
            current = provider.get_attendance_settings()
            saved = provider.save_attendance_settings(
                late_after=data.get("lateAfter") or format_hhmm(current.late_after),
                close_after=data.get("closeAfter") or format_hhmm(current.close_after),
                timezone=data.get("timezone") or current.timezone,
            )
            return jsonify({"success": True, "settings": _settings_json(saved)})
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("saving settings")

    @app.route("/api/settings/location", methods=["PUT"], endpoint="api_save_school_location")
    def api_save_school_location():
        try:
            data = json_body()
            saved = provider.save_geofence_reference(
                latitude=data.get("latitude"),
                longitude=data.get("longitude"),
                radius_meters=data.get("radiusMeters"),
            )
            return jsonify({"success": True, "location": _location_json(saved)})
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("saving school location")
