from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations.

    Every error carries a stable ``kind`` and a human message so callers can
    render a specific remediation instead of a raw exception.
    """

    kind = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


# --- malformed input: fatal, no retry ---------------------------------------


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation_error"


class MalformedToken(ValidationError):
    kind = "malformed_token"


# --- the user must remediate -------------------------------------------------


class PermissionDeniedError(DomainError):
    kind = "permission_denied"


class LocationPermissionDenied(PermissionDeniedError):
    kind = "location_permission_denied"


class ConfigurationError(DomainError):
    """An administrator has not configured something the operation needs."""

    kind = "configuration_error"


class GeofenceNotConfigured(ConfigurationError):
    kind = "geofence_not_configured"


# --- state conflicts: user-facing, not retryable without new input -----------


class StateConflict(DomainError):
    kind = "state_conflict"


class AlreadyCheckedIn(StateConflict):
    kind = "already_checked_in"


class AlreadyCheckedOut(StateConflict):
    kind = "already_checked_out"


class MustCheckInFirst(StateConflict):
    kind = "must_check_in_first"


class DayClosed(StateConflict):
    """The subject was already marked absent for the day."""

    kind = "day_closed"


class DuplicateRecord(StateConflict):
    kind = "duplicate_record"


class InvalidTransition(StateConflict):
    kind = "invalid_transition"


# --- security-relevant rejections ---------------------------------------------


class VerificationFailure(DomainError):
    kind = "verification_failure"


class InvalidToken(VerificationFailure):
    kind = "invalid_token"


class InvalidSignature(InvalidToken):
    kind = "invalid_signature"


class NotEnrolled(VerificationFailure):
    kind = "not_enrolled"


class BiometricMismatch(VerificationFailure):
    kind = "biometric_mismatch"


class OutsideGeofence(VerificationFailure):
    kind = "outside_geofence"

    def __init__(self, message: str, *, distance_meters: float):
        super().__init__(message)
        self.distance_meters = distance_meters

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["distance_meters"] = round(self.distance_meters)
        return data


# --- storage / network: safe to retry the whole call --------------------------


class InfrastructureError(DomainError):
    kind = "infrastructure_error"


class StorageError(InfrastructureError):
    kind = "storage_error"


class OperationTimeout(InfrastructureError):
    kind = "timeout"
