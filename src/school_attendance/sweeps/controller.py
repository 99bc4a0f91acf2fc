from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, json_error, json_unexpected
from ..core.enums import SubjectType
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .model import SweepOutcome


def _outcome_json(outcome: SweepOutcome) -> dict:
    return {
        "scope": outcome.scope.value,
        "date": outcome.work_date.isoformat(),
        "created": outcome.created,
        "failed": outcome.failed,
        "skipped_reason": outcome.skipped_reason,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/sweep", methods=["POST"], endpoint="api_absence_sweep")
    def api_absence_sweep():
        try:
            data = json_body()
            work_date = parse_iso_date(data["date"]) if data.get("date") else None
            force = data.get("force", False)
            if not isinstance(force, bool):
                raise ValidationError("force must be true or false")

            scope = data.get("scope") or "all"
            if not isinstance(scope, str):
                raise ValidationError("scope must be one of: student, staff, all")
            scope = scope.strip().lower()
            scopes = list(SubjectType) if scope == "all" else [scope]
            outcomes = [
                container.absence_sweeper.run(
                    s,
                    work_date,
                    force=force,
                    group_id=data.get("groupId"),
                    run_by="api",
                )
                for s in scopes
            ]
            return jsonify({"success": True, "results": [_outcome_json(o) for o in outcomes]})
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("absence sweep")
