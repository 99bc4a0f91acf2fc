from __future__ import annotations

import calendar

from flask import Flask, jsonify, request

from ..common.datetime_utils import month_range, parse_iso_date
from ..common.http import json_error, json_unexpected
from ..core.exceptions import DomainError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _range():
        month_s = request.args.get("month")
        if month_s:
            try:
                year, month = (int(p) for p in month_s.split("-"))
                return month_range(year, month)
            except (TypeError, ValueError, calendar.IllegalMonthError):
                raise ValidationError(f"Invalid month (YYYY-MM): {month_s!r}")

        start_s = request.args.get("from")
        end_s = request.args.get("to")
        if not start_s and not end_s:
            return container.summary_aggregator.default_range()
        start = parse_iso_date(start_s) if start_s else None
        end = parse_iso_date(end_s) if end_s else container.settings_provider.today()
        return start or end, end

    @app.route("/api/attendance/summary", endpoint="api_attendance_summary")
    def api_attendance_summary():
        try:
            start, end = _range()
            summary = container.summary_aggregator.summarize(
                start=start,
                end=end,
                subject_id=request.args.get("subjectId"),
                group_id=request.args.get("groupId"),
                subject_type=request.args.get("subjectType"),
            )
            return jsonify({"success": True, "from": start.isoformat(), "to": end.isoformat(), **summary.to_dict()})
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("attendance summary")

    @app.route("/api/attendance/summary/by-subject", endpoint="api_attendance_summary_by_subject")
    def api_attendance_summary_by_subject():
        try:
            start, end = _range()
            rows = container.summary_aggregator.summarize_by_subject(
                request.args.get("subjectType") or "student",
                start=start,
                end=end,
                group_id=request.args.get("groupId"),
            )
            return jsonify({
                "success": True,
                "from": start.isoformat(),
                "to": end.isoformat(),
                "rows": [r.to_dict() for r in rows],
            })
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("attendance summary")

    @app.route("/api/attendance/daily-log", endpoint="api_daily_log")
    def api_daily_log():
        try:
            date_s = request.args.get("date")
            work_date = parse_iso_date(date_s) if date_s else container.settings_provider.today()
            rows = container.summary_aggregator.daily_log(
                request.args.get("subjectType") or "student",
                work_date,
                group_id=request.args.get("groupId"),
            )
            return jsonify({"success": True, "date": work_date.isoformat(), "rows": [r.to_dict() for r in rows]})
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("daily log")

    @app.route("/api/attendance/summary/wards", endpoint="api_ward_attendance")
    def api_ward_attendance():
        """Parent view: one summary per ward for a daily/weekly/monthly/termly window."""
        try:
            scope = request.args.get("scope") or "weekly"
            start_s = request.args.get("from")
            end_s = request.args.get("to")
            start, end = container.summary_aggregator.scope_range(
                scope,
                start=parse_iso_date(start_s) if start_s else None,
                end=parse_iso_date(end_s) if end_s else None,
            )
            subject_ids = [s for raw in request.args.getlist("subjectId") for s in raw.split(",")]
            rows = container.summary_aggregator.summarize_for_subjects(
                request.args.get("subjectType") or "student",
                subject_ids,
                start=start,
                end=end,
            )
            return jsonify({
                "success": True,
                "from": start.isoformat(),
                "to": end.isoformat(),
                "scope": scope.strip().lower(),
                "rows": [r.to_dict() for r in rows],
            })
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("ward attendance")
