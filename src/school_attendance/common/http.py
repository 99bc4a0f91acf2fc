from __future__ import annotations

import logging

from flask import jsonify, request

from ..core.exceptions import (
    ConfigurationError,
    DomainError,
    InfrastructureError,
    PermissionDeniedError,
    StateConflict,
    ValidationError,
    VerificationFailure,
)

logger = logging.getLogger(__name__)

_STATUS_CODES = (
    (ValidationError, 400),
    (PermissionDeniedError, 403),
    (StateConflict, 409),
    (VerificationFailure, 422),
    (ConfigurationError, 503),
    (InfrastructureError, 503),
)


def status_for(error: DomainError) -> int:
    for cls, code in _STATUS_CODES:
        if isinstance(error, cls):
            return code
    return 400


def json_error(error: DomainError):
    return jsonify({"success": False, **error.to_dict()}), status_for(error)


def json_unexpected(action: str):
    logger.exception("Unexpected error during %s", action)
    return jsonify({"success": False, "kind": "internal_error", "message": f"System error during {action}"}), 500


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
