from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional, Sequence, Union

from ..biometrics.matcher import FaceMatcher
from ..common.deadline import Deadline
from ..common.validators import optional_str, require_enum, require_non_empty
from ..core.constants import SECURITY_LOGGER
from ..core.enums import ROLE_SUBJECT_TYPES, AttendanceMethod, AttendanceMode, SubjectType
from ..core.exceptions import (
    BiometricMismatch,
    InvalidSignature,
    InvalidToken,
    NotEnrolled,
    ValidationError,
    VerificationFailure,
)
from ..geofence.validator import GeofenceValidator
from ..roster.repository import RosterRepository
from ..settings.service import AttendanceSettingsProvider
from ..tokens.model import SignedToken
from ..tokens.service import SignedTokenService
from .factory import AttendanceStrategyFactory
from .ledger import AttendanceLedger
from .model import AttendanceRecord

logger = logging.getLogger(__name__)
security_logger = logging.getLogger(SECURITY_LOGGER)


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class AttendanceProof:
    """What the capture device collected for one attendance attempt.

    ``location`` is None when the device could not obtain a position.
    ``token`` may be the raw QR text, the decoded payload or a parsed token.
    A face embedding, when given, is matched here against the enrolled
    reference; otherwise ``biometric_verified`` carries the device's own
    match decision.
    """

    location: Optional[Coordinates] = None
    token: Union[str, bytes, Mapping[str, Any], SignedToken, None] = None
    biometric_verified: Optional[bool] = None
    face_embedding: Optional[Sequence[float]] = None

    @property
    def uses_biometric(self) -> bool:
        return self.biometric_verified is not None or self.face_embedding is not None


@dataclass(frozen=True)
class _Identity:
    method: AttendanceMethod
    verified: bool
    group_id: Optional[str] = None


class AttendanceRecorder:
    def __init__(
        self,
        ledger: AttendanceLedger,
        tokens: SignedTokenService,
        geofence: GeofenceValidator,
        settings: AttendanceSettingsProvider,
        roster: RosterRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        face_matcher: FaceMatcher | None = None,
        token_max_age: timedelta | None = None,
        allow_manual: bool = True,
        default_timeout: float | None = None,
    ):
        self._ledger = ledger
        self._tokens = tokens
        self._geofence = geofence
        self._settings = settings
        self._roster = roster
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._matcher = face_matcher or FaceMatcher()
        self._token_max_age = token_max_age
        self._allow_manual = bool(allow_manual)
        self._default_timeout = default_timeout

    def check_in(self, subject_type, subject_id: str, group_id: Optional[str] = None, **kwargs) -> AttendanceRecord:
        return self.record(subject_type, subject_id, group_id, mode=AttendanceMode.IN, **kwargs)

    def check_out(self, subject_type, subject_id: str, group_id: Optional[str] = None, **kwargs) -> AttendanceRecord:
        return self.record(subject_type, subject_id, group_id, mode=AttendanceMode.OUT, **kwargs)

    def record(
        self,
        subject_type,
        subject_id: str,
        group_id: Optional[str] = None,
        *,
        mode,
        proof: AttendanceProof,
        now: datetime | None = None,
        timeout: float | None = None,
    ) -> AttendanceRecord:
        subject_type = require_enum(SubjectType, subject_type, "subject_type")
        mode = require_enum(AttendanceMode, mode, "mode")
        subject_id = require_non_empty(subject_id, "subject_id")
        group_id = optional_str(group_id)
        deadline = Deadline(timeout if timeout is not None else self._default_timeout)
        with deadline.active():
            return self._record(subject_type, subject_id, group_id, mode=mode, proof=proof, now=now, deadline=deadline)

    def _record(
        self,
        subject_type: SubjectType,
        subject_id: str,
        group_id: Optional[str],
        *,
        mode: AttendanceMode,
        proof: AttendanceProof,
        now: datetime | None,
        deadline: Deadline,
    ) -> AttendanceRecord:
        deadline.check("settings lookup")
        settings = self._settings.get_attendance_settings()
        now = self._settings.localize(now, settings) if now else self._settings.now(settings)
        today = now.date()

        try:
            deadline.check("location check")
            location = proof.location
            result = self._geofence.validate(
                location.latitude if location else None,
                location.longitude if location else None,
            )
            result.raise_for_outcome()

            deadline.check("identity verification")
            identity = self._verify_identity(subject_type, subject_id, proof, now=now)
        except VerificationFailure as e:
            security_logger.warning(
                "Rejected %s %s for %s/%s: %s", mode.value, e.kind, subject_type.value, subject_id, e.message
            )
            raise

        group_id = group_id or identity.group_id

        deadline.check("ledger lookup")
        # Keyed on subject and day only: one record per day across all groups.
        existing = self._ledger.find(subject_type, subject_id, today)

        if mode == AttendanceMode.IN:
            late_cutoff = self._settings.late_cutoff(today, settings)
            strategy = self._factory.for_checkin(now=now, late_cutoff=late_cutoff)
            decision = strategy.decide_checkin(now=now, late_cutoff=late_cutoff)

            deadline.check("check-in commit")
            record = self._ledger.check_in(
                existing,
                subject_type=subject_type,
                subject_id=subject_id,
                work_date=today,
                group_id=group_id,
                at=now,
                status=decision.status,
                method=identity.method,
                verified=identity.verified,
            )
            logger.info(
                "Check-in %s/%s on %s: %s via %s%s",
                subject_type.value,
                subject_id,
                today,
                record.status.value,
                record.method.value,
                f" ({decision.note})" if decision.note else "",
            )
            return record

        deadline.check("check-out commit")
        record = self._ledger.check_out(existing, at=now)
        logger.info("Check-out %s/%s on %s via %s", subject_type.value, subject_id, today, identity.method.value)
        return record

    def _verify_identity(
        self, subject_type: SubjectType, subject_id: str, proof: AttendanceProof, *, now: datetime
    ) -> _Identity:
        if proof.token is not None:
            token = proof.token if isinstance(proof.token, SignedToken) else self._tokens.parse(proof.token)
            if not self._tokens.verify(token):
                raise InvalidSignature("QR code signature is invalid")
            if token.subject_id != subject_id:
                raise InvalidToken("QR code belongs to someone else")
            if ROLE_SUBJECT_TYPES.get(token.role.strip().lower()) != subject_type:
                raise InvalidToken(f"This QR code is not for {subject_type.value} attendance")
            if not self._tokens.is_fresh(token, now=now, max_age=self._token_max_age):
                raise InvalidToken("QR code has expired; please generate a new one")
            return _Identity(AttendanceMethod.QR_TOKEN, True, token.group_id)

        if proof.uses_biometric:
            # Unenrolled subjects can never be marked through biometric mode.
            if proof.face_embedding is not None:
                stored = self._roster.get_face_embedding(subject_type, subject_id)
                if not stored:
                    raise NotEnrolled("No biometric enrollment found for this person")
                if not self._matcher.matches(proof.face_embedding, stored):
                    raise BiometricMismatch("Face does not match the enrolled reference")
            else:
                if not self._roster.has_biometric_enrollment(subject_type, subject_id):
                    raise NotEnrolled("No biometric enrollment found for this person")
                if proof.biometric_verified is not True:
                    raise BiometricMismatch("Biometric verification failed")
            return _Identity(AttendanceMethod.BIOMETRIC, True)

        if not self._allow_manual:
            raise ValidationError("A QR code or biometric verification is required")
        return _Identity(AttendanceMethod.MANUAL, False)
