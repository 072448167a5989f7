from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from ..core.constants import START_BUFFER_MINUTES
from ..core.enums import SessionStatus
from ..core.exceptions import InvalidTransition, NotStarted, OutOfScope, SessionEnded, WrongDay
from ..students.model import Student
from .model import AttendanceSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)

_ALLOWED = {
    SessionStatus.SCHEDULED: {SessionStatus.ACTIVE},
    SessionStatus.ACTIVE: {SessionStatus.COMPLETED},
    SessionStatus.COMPLETED: set(),
}


def check_transition(current: SessionStatus, target: SessionStatus) -> bool:
    """Validate ``current -> target``.

    Returns False for a no-op (already there), True for a real move.
    Raises InvalidTransition for anything else.
    """

    if current == target:
        return False
    if target not in _ALLOWED[current]:
        raise InvalidTransition(f"Cannot move session from {current.value} to {target.value}")
    return True


@dataclass
class SessionStateMachine:
    """Lifecycle rules for a session: transitions and scan eligibility."""

    sessions: SessionRepository
    start_buffer_minutes: int = START_BUFFER_MINUTES

    def _write(self, session: AttendanceSession, target: SessionStatus) -> bool:
        moved = self.sessions.set_status(session.session_id, target)
        if moved:
            logger.info("Session %s: %s -> %s", session.session_id, session.status.value, target.value)
        else:
            logger.debug("Session %s already at or past %s", session.session_id, target.value)
        return moved

    def transition(self, session: AttendanceSession, target: SessionStatus) -> AttendanceSession:
        if not check_transition(session.status, target):
            return session

        self._write(session, target)
        return replace(session, status=target)

    def activate(self, session: AttendanceSession) -> AttendanceSession:
        return self.transition(session, SessionStatus.ACTIVE)

    def complete(self, session: AttendanceSession) -> bool:
        """Move to completed, stepping through active if never scanned.

        Returns True only when this call completed the stored row. A stale
        snapshot of a session another caller already closed gives False.
        """

        if session.status == SessionStatus.SCHEDULED:
            session = self.activate(session)
        if not check_transition(session.status, SessionStatus.COMPLETED):
            return False
        return self._write(session, SessionStatus.COMPLETED)

    def check_scan_eligible(self, session: AttendanceSession, student: Student, now: datetime) -> None:
        """Raise the first rule a scan at ``now`` breaks.

        SessionEnded is raised without side effects; closing the session is
        the caller's job (AttendanceService hands it to reconciliation).
        """

        if session.session_date != now.date():
            raise WrongDay(f"This session is not for today (today: {now.date():%Y-%m-%d}, session: {session.session_date:%Y-%m-%d})")

        if now < session.starts_at - timedelta(minutes=self.start_buffer_minutes):
            raise NotStarted(f"Session has not started yet (starts at {session.start_time:%H:%M})")

        if session.status == SessionStatus.COMPLETED or session.has_ended(now):
            raise SessionEnded()

        if not session.covers(student):
            raise OutOfScope(
                f"Session is for class {session.class_name}-{session.section}, "
                f"student is in {student.class_name}-{student.section}"
            )
