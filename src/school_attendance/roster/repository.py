from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import SubjectType
from .model import RosterEntry


class RosterRepository(Protocol):
    """Roster collaborator. Subject CRUD lives elsewhere; this side only reads."""

    def list_subjects(self, scope: SubjectType, group_id: Optional[str] = None) -> Sequence[RosterEntry]:
        raise NotImplementedError

    def has_biometric_enrollment(self, subject_type: SubjectType, subject_id: str) -> bool:
        raise NotImplementedError

    def get_face_embedding(self, subject_type: SubjectType, subject_id: str) -> Optional[Sequence[float]]:
        raise NotImplementedError
