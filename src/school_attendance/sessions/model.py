from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import at
from ..core.enums import SessionScope, SessionStatus
from ..students.model import Student


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one attendance window on a single civil day."""

    session_id: int
    session_date: date
    start_time: time
    end_time: time
    status: SessionStatus
    created_by: str
    scope: SessionScope = SessionScope.ALL
    class_name: Optional[str] = None
    section: Optional[str] = None

    @property
    def starts_at(self) -> datetime:
        return at(self.session_date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return at(self.session_date, self.end_time)

    @property
    def is_restricted(self) -> bool:
        return self.scope == SessionScope.CLASS_SECTION

    def has_ended(self, now: datetime) -> bool:
        return now > self.ends_at

    def covers(self, student: Student) -> bool:
        if not self.is_restricted:
            return True
        return student.class_name == self.class_name and student.section == self.section


@dataclass(frozen=True)
class SessionDraft:
    """Input for creating a session (validated by SessionService)."""

    session_date: date
    start_time: time
    end_time: time
    created_by: str
    status: SessionStatus = SessionStatus.ACTIVE
    scope: SessionScope = SessionScope.ALL
    class_name: Optional[str] = None
    section: Optional[str] = None
