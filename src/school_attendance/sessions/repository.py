from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import SessionStatus
from .model import AttendanceSession, SessionDraft


class SessionRepository(Protocol):
    def create(self, draft: SessionDraft) -> AttendanceSession:
        raise NotImplementedError

    def get(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def set_status(self, session_id: int, status: SessionStatus) -> bool:
        """Move a session forward to ``status``.

        Must be safe to call with the current status, and must never move a
        stored row to an earlier status (a racing writer may have advanced it).
        Returns True only when this call changed the stored row.
        """

        raise NotImplementedError

    def list_active_for_date(self, session_date: date) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def list_for_date(self, session_date: date) -> Sequence[AttendanceSession]:
        """All sessions of a day, ordered by start time."""

        raise NotImplementedError
