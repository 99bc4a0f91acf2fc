from __future__ import annotations

import hashlib
import hmac
import json
import re
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Union

from ..common.datetime_utils import epoch_ms, from_epoch_ms
from ..core.exceptions import MalformedToken
from .model import SignedToken

_HEX_DIGEST = re.compile(r"^[0-9a-f]{64}$")

# 9999-12-31T23:59:59.999Z, the last instant a datetime can hold.
_MAX_TS_MS = 253_402_300_799_999


class SignedTokenService:
    """Issues and verifies tamper-evident QR identity tokens.

    The signature is a bare SHA-256 over the pipe-joined fields. It stops
    casual forgery of printed codes; anyone who knows the digest function
    can still mint a valid token, so it is not an authentication secret.
    """

    @staticmethod
    def _digest(base: str) -> str:
        return hashlib.sha256(base.encode("utf-8")).hexdigest()

    def issue(
        self,
        subject_id: str,
        role: str,
        group_id: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> SignedToken:
        now = now or datetime.now(timezone.utc)
        unsigned = SignedToken(
            subject_id=str(subject_id),
            role=str(role),
            group_id=group_id or None,
            issued_at_ms=epoch_ms(now),
            signature="",
        )
        return replace(unsigned, signature=self._digest(unsigned.signing_base()))

    def verify(self, token: SignedToken) -> bool:
        signature = token.signature
        if not isinstance(signature, str) or not signature.isascii():
            return False
        expected = self._digest(token.signing_base())
        return hmac.compare_digest(expected, signature)

    @staticmethod
    def is_fresh(token: SignedToken, *, now: datetime, max_age: Optional[timedelta]) -> bool:
        """Replay window check; ``max_age=None`` accepts any age."""
        if max_age is None:
            return True
        try:
            issued_at = from_epoch_ms(token.issued_at_ms)
            return issued_at - timedelta(minutes=5) <= now <= issued_at + max_age
        except (OverflowError, OSError, ValueError):
            return False

    def parse(self, raw: Union[str, bytes, Mapping[str, Any]]) -> SignedToken:
        """Decode the QR wire payload.

        Raises ``MalformedToken`` for anything that is not a structurally valid
        payload; a well-formed payload with a wrong signature parses fine and
        is rejected later by ``verify``.
        """

        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError:
                raise MalformedToken("QR payload is not valid UTF-8")

        if isinstance(raw, str):
            try:
                data = json.loads(raw)
            except ValueError:
                raise MalformedToken("Invalid QR code")
        else:
            data = raw

        if not isinstance(data, Mapping):
            raise MalformedToken("Invalid QR code")

        subject_id = data.get("userId")
        role = data.get("role")
        group_id = data.get("classId")
        ts = data.get("ts")
        sig = data.get("sig")

        if not isinstance(subject_id, str) or not subject_id:
            raise MalformedToken("QR code has no user id")
        if not isinstance(role, str) or not role:
            raise MalformedToken("QR code has no role")
        if group_id is not None and not isinstance(group_id, str):
            raise MalformedToken("QR code class id must be a string")
        if group_id == "":
            group_id = None

        if isinstance(ts, bool) or not isinstance(ts, (int, float)):
            raise MalformedToken("QR code timestamp must be a number")
        if isinstance(ts, float):
            if not ts.is_integer():
                raise MalformedToken("QR code timestamp must be whole milliseconds")
            ts = int(ts)
        if not 0 <= ts <= _MAX_TS_MS:
            raise MalformedToken("QR code timestamp is out of range")

        if not isinstance(sig, str) or not _HEX_DIGEST.match(sig.lower()):
            raise MalformedToken("QR code signature is not a hex digest")

        return SignedToken(
            subject_id=subject_id,
            role=role,
            group_id=group_id,
            issued_at_ms=ts,
            signature=sig.lower(),
        )
