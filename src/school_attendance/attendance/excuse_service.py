from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..audit.model import AuditEntry
from ..audit.service import AuditTrail
from ..common.clock import Clock, SchoolClock
from ..common.validators import optional_text
from ..core.actor import STAFF_ROLES, Actor, require_role
from ..core.constants import EXCUSE_GRACE_MINUTES
from ..core.enums import AttendanceStatus, AuditAction
from ..core.exceptions import NotAbsent, RecordNotFound, SessionNotFound, WindowExpired
from ..sessions.model import AttendanceSession
from ..sessions.repository import SessionRepository
from .model import AttendanceRecord
from .repository import AttendanceLedger

logger = logging.getLogger(__name__)


class ExcuseService:
    """The only path that turns an absence into an excused absence.

    Allowed until ``grace_minutes`` after the session's end time; the window
    starts at session end, not at the moment the absence was recorded.
    """

    def __init__(
        self,
        ledger: AttendanceLedger,
        sessions: SessionRepository,
        *,
        grace_minutes: int = EXCUSE_GRACE_MINUTES,
        clock: Optional[Clock] = None,
        audit: Optional[AuditTrail] = None,
    ):
        self._ledger = ledger
        self._sessions = sessions
        self._grace = timedelta(minutes=int(grace_minutes))
        self._clock = clock or SchoolClock()
        self._audit = audit or AuditTrail()

    def time_past_end(self, session: AttendanceSession, now: datetime) -> timedelta:
        return max(now - session.ends_at, timedelta(0))

    def mark_excused(
        self,
        actor: Actor,
        record_id: int,
        reason: Optional[str] = None,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        require_role(actor, *STAFF_ROLES)
        now = now or self._clock.now()
        reason = optional_text(reason)

        record = self._ledger.get(int(record_id))
        if not record:
            raise RecordNotFound()

        if record.status != AttendanceStatus.ABSENT:
            raise NotAbsent(f"Record is {record.status.value}, only absent records can be excused")

        session = self._sessions.get(record.session_id)
        if not session:
            raise SessionNotFound()

        if self.time_past_end(session, now) > self._grace:
            raise WindowExpired(
                f"Absences can only be excused until {(session.ends_at + self._grace):%H:%M} on {session.session_date:%Y-%m-%d}"
            )

        if not self._ledger.update(record.record_id, status=AttendanceStatus.EXCUSED, reason=reason, scan_time=now):
            raise RecordNotFound()

        self._audit.record(
            AuditEntry(
                action=AuditAction.LEAVE_MARKING,
                student_id=record.student_id,
                session_id=record.session_id,
                previous_status=record.status.value,
                new_status=AttendanceStatus.EXCUSED.value,
                performed_by=actor.actor_id,
                reason=reason,
            )
        )
        logger.info("Excused record=%s student=%s by=%s", record.record_id, record.student_id, actor.actor_id)

        updated = self._ledger.get(record.record_id)
        if updated is None:
            raise RecordNotFound()
        return updated
