from __future__ import annotations

import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, Optional

from ..core.exceptions import OperationTimeout

_active: ContextVar[Optional["Deadline"]] = ContextVar("school_attendance_deadline", default=None)


class Deadline:
    """Caller-supplied time budget for a blocking operation.

    ``check`` is called before each storage round-trip. While the deadline is
    ``active()``, storage also checks it right before a write becomes
    durable, so a call that overruns the budget is rolled back instead of
    committed late.
    """

    def __init__(self, seconds: Optional[float], *, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._expires_at = None if seconds is None else clock() + float(seconds)

    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return max(self._expires_at - self._clock(), 0.0)

    def check(self, stage: str) -> None:
        if self._expires_at is not None and self._clock() >= self._expires_at:
            raise OperationTimeout(f"Attendance request timed out during {stage}; nothing was recorded")

    @contextmanager
    def active(self) -> Iterator["Deadline"]:
        token = _active.set(self)
        try:
            yield self
        finally:
            _active.reset(token)


def current_deadline() -> Optional[Deadline]:
    return _active.get()


def check_deadline(stage: str) -> None:
    """Fail if the caller's active deadline has passed; no-op without one."""
    deadline = _active.get()
    if deadline is not None:
        deadline.check(stage)
