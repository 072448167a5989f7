from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..attendance.repository import AttendanceLedger
from ..common.clock import Clock, SchoolClock
from ..common.validators import optional_text
from ..core.actor import Actor, require_role
from ..core.enums import AttendanceStatus, Role, SessionScope, SessionStatus
from ..core.exceptions import SessionNotFound, ValidationError
from ..reconciliation.service import ReconcileReport, ReconciliationService
from .model import AttendanceSession, SessionDraft
from .repository import SessionRepository
from .state_machine import SessionStateMachine

logger = logging.getLogger(__name__)


class SessionService:
    """Use cases around a session's lifecycle.

    Reads are lazy-closing: a session found past its end time is reconciled
    before it is returned, so no timer is required for correctness.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        ledger: AttendanceLedger,
        *,
        reconciler: ReconciliationService,
        state_machine: Optional[SessionStateMachine] = None,
        clock: Optional[Clock] = None,
    ):
        self._sessions = sessions
        self._ledger = ledger
        self._reconciler = reconciler
        self._machine = state_machine or SessionStateMachine(sessions)
        self._clock = clock or SchoolClock()

    def create(
        self,
        actor: Actor,
        *,
        session_date: date,
        start_time: time,
        end_time: time,
        status: SessionStatus = SessionStatus.ACTIVE,
        class_name: Optional[str] = None,
        section: Optional[str] = None,
    ) -> AttendanceSession:
        require_role(actor, Role.ADMIN)

        if start_time >= end_time:
            raise ValidationError("Start time must be before end time")

        status = SessionStatus(status)
        if status == SessionStatus.COMPLETED:
            raise ValidationError("A new session must be scheduled or active")

        class_name = optional_text(class_name)
        section = optional_text(section)
        if bool(class_name) != bool(section):
            raise ValidationError("Class and section must be given together")

        draft = SessionDraft(
            session_date=session_date,
            start_time=start_time,
            end_time=end_time,
            created_by=actor.actor_id,
            status=status,
            scope=SessionScope.CLASS_SECTION if class_name else SessionScope.ALL,
            class_name=class_name,
            section=section,
        )
        session = self._sessions.create(draft)
        logger.info(
            "Session %s created for %s %s-%s (%s) by %s",
            session.session_id,
            session.session_date,
            session.start_time,
            session.end_time,
            session.status.value,
            actor.actor_id,
        )
        return session

    def _close_if_ended(self, session: AttendanceSession, now: datetime) -> AttendanceSession:
        if session.status == SessionStatus.COMPLETED or not session.has_ended(now):
            return session
        self._reconciler.reconcile_session(session, now)
        return self._sessions.get(session.session_id) or session

    def get(self, session_id: int, *, now: datetime | None = None) -> AttendanceSession:
        now = now or self._clock.now()
        session = self._sessions.get(int(session_id))
        if not session:
            raise SessionNotFound()
        return self._close_if_ended(session, now)

    def list_for_date(self, session_date: date, *, now: datetime | None = None) -> Sequence[AttendanceSession]:
        now = now or self._clock.now()
        return [self._close_if_ended(s, now) for s in self._sessions.list_for_date(session_date)]

    def activate(self, actor: Actor, session_id: int, *, now: datetime | None = None) -> AttendanceSession:
        require_role(actor, Role.ADMIN)
        session = self.get(session_id, now=now)
        return self._machine.activate(session)

    def force_complete(self, actor: Actor, session_id: int, *, now: datetime | None = None) -> ReconcileReport:
        """Admin "complete now": reconcile even if the end time has not passed."""

        require_role(actor, Role.ADMIN)
        now = now or self._clock.now()
        session = self._sessions.get(int(session_id))
        if not session:
            raise SessionNotFound()
        return self._reconciler.reconcile_session(session, now, force=True)

    def summary(self, session_id: int, *, now: datetime | None = None) -> dict:
        session = self.get(session_id, now=now)
        counts = Counter(r.status for r in self._ledger.list_by_session(session.session_id))
        out = {status.value: int(counts.get(status, 0)) for status in AttendanceStatus}
        out["total"] = sum(counts.values())
        return out
