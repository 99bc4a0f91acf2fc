from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RosterEntry:
    """A student or staff member as the roster collaborator sees them.

    ``group_id`` is the class for students and the department for staff.
    """

    subject_id: str
    group_id: Optional[str] = None
    full_name: Optional[str] = None
