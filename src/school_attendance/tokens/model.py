from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SignedToken:
    """Identity claim carried by a QR code.

    ``issued_at_ms`` is epoch milliseconds, exactly as it travels in the
    ``ts`` field of the payload.
    """

    subject_id: str
    role: str
    group_id: Optional[str]
    issued_at_ms: int
    signature: str

    def signing_base(self) -> str:
        return f"{self.subject_id}|{self.role}|{self.group_id or ''}|{self.issued_at_ms}"

    def to_payload(self) -> dict:
        payload: dict = {"userId": self.subject_id, "role": self.role}
        if self.group_id is not None:
            payload["classId"] = self.group_id
        payload["ts"] = self.issued_at_ms
        payload["sig"] = self.signature
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), separators=(",", ":"))
