from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import SubjectType


@dataclass(frozen=True)
class SweepLock:
    """Completion marker for one (day, scope) absence sweep."""

    work_date: date
    scope: SubjectType
    completed_at: datetime
    run_by: Optional[str] = None


@dataclass(frozen=True)
class SweepOutcome:
    scope: SubjectType
    work_date: date
    created: int = 0
    failed: int = 0
    skipped_reason: Optional[str] = None
