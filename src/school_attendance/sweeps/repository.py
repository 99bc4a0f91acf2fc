from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ..core.enums import SubjectType
from .model import SweepLock


class SweepLockRepository(Protocol):
    def get(self, work_date: date, scope: SubjectType) -> Optional[SweepLock]:
        raise NotImplementedError

    def upsert(self, lock: SweepLock) -> None:
        raise NotImplementedError
