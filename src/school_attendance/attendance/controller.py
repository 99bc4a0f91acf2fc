from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.http import json_body, json_error, json_unexpected
from ..common.validators import optional_str, require_enum, require_non_empty
from ..container import Container
from ..core.enums import AttendanceMode, SubjectType
from ..core.exceptions import DomainError, ValidationError
from ..tokens.qr_image import render_token_png
from .model import AttendanceRecord
from .service import AttendanceProof, Coordinates


def record_json(record: AttendanceRecord) -> dict:
    return {
        "record_id": record.record_id,
        "subject_type": record.subject_type.value,
        "subject_id": record.subject_id,
        "group_id": record.group_id,
        "date": record.work_date.isoformat(),
        "state": record.state.value,
        "status": record.status.value,
        "method": record.method.value if record.method else None,
        "verified": record.verified,
        "auto_marked": record.auto_marked,
        "check_in": record.check_in_time.isoformat() if record.check_in_time else None,
        "check_out": record.check_out_time.isoformat() if record.check_out_time else None,
    }


def proof_from_json(data: dict) -> AttendanceProof:
    location = data.get("location")
    coords = None
    if location is not None:
        if not isinstance(location, dict):
            raise ValidationError("location must be an object with latitude and longitude")
        if location.get("latitude") is not None and location.get("longitude") is not None:
            coords = Coordinates(latitude=location["latitude"], longitude=location["longitude"])

    biometric = data.get("biometricVerified")
    if biometric is not None and not isinstance(biometric, bool):
        raise ValidationError("biometricVerified must be true or false")

    embedding = data.get("faceEmbedding")
    if embedding is not None:
        if not isinstance(embedding, list) or not all(
            isinstance(x, (int, float)) and not isinstance(x, bool) for x in embedding
        ):
            raise ValidationError("faceEmbedding must be a list of numbers")

    return AttendanceProof(
        location=coords,
        token=data.get("qr") or None,
        biometric_verified=biometric,
        face_embedding=embedding,
    )


def register(app: Flask, container: Container) -> None:
    def _record(mode: AttendanceMode):
        data = json_body()
        record = container.recorder.record(
            data.get("subjectType"),
            data.get("subjectId"),
            data.get("groupId"),
            mode=mode,
            proof=proof_from_json(data),
        )
        return record

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="api_check_in")
    def api_check_in():
        try:
            record = _record(AttendanceMode.IN)
            message = "Checked in late" if record.status.value == "late" else "Checked in successfully"
            return jsonify({"success": True, "message": message, "record": record_json(record)}), 201
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("check-in")

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="api_check_out")
    def api_check_out():
        try:
            record = _record(AttendanceMode.OUT)
            return jsonify({"success": True, "message": "Checked out successfully", "record": record_json(record)})
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("check-out")

    @app.route("/api/qr/<subject_type>/<subject_id>.png", endpoint="api_subject_qr_image")
    def api_subject_qr_image(subject_type: str, subject_id: str):
        """Printable QR identity card for a student or staff member."""
        try:
            st = require_enum(SubjectType, subject_type, "subject_type")
            role = request.args.get("role") or st.value
            token = container.token_service.issue(
                require_non_empty(subject_id, "subject_id"),
                role,
                optional_str(request.args.get("groupId")),
            )
            png = render_token_png(token)
            return send_file(io.BytesIO(png), mimetype="image/png", download_name=f"{st.value}-{subject_id}.png")
        except DomainError as e:
            return json_error(e)
        except Exception:
            return json_unexpected("QR generation")
