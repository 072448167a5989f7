from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..audit.model import AuditEntry
from ..audit.service import AuditTrail
from ..common.clock import Clock, SchoolClock
from ..common.validators import optional_text, require_non_empty
from ..core.actor import STAFF_ROLES, Actor, require_role
from ..core.enums import AttendanceStatus, AuditAction, Role, SessionStatus
from ..core.exceptions import (
    AlreadyMarked,
    ConflictAlreadyExists,
    NoActiveSession,
    RecordNotFound,
    SessionEnded,
    SessionNotFound,
    StudentNotFound,
)
from ..reconciliation.service import ReconciliationService
from ..sessions.model import AttendanceSession
from ..sessions.repository import SessionRepository
from ..sessions.state_machine import SessionStateMachine
from ..students.model import Student
from ..students.repository import RosterRepository
from .factory import ScanStrategyFactory
from .model import AttendanceRecord, NewAttendanceRecord
from .repository import AttendanceLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    status: AttendanceStatus
    record: AttendanceRecord
    student: Student
    session: AttendanceSession


class AttendanceService:
    def __init__(
        self,
        ledger: AttendanceLedger,
        roster: RosterRepository,
        sessions: SessionRepository,
        *,
        reconciler: ReconciliationService,
        state_machine: Optional[SessionStateMachine] = None,
        strategy_factory: Optional[ScanStrategyFactory] = None,
        clock: Optional[Clock] = None,
        audit: Optional[AuditTrail] = None,
    ):
        self._ledger = ledger
        self._roster = roster
        self._sessions = sessions
        self._reconciler = reconciler
        self._machine = state_machine or SessionStateMachine(sessions)
        self._factory = strategy_factory or ScanStrategyFactory()
        self._clock = clock or SchoolClock()
        self._audit = audit or AuditTrail()

    def _resolve_session(self, session_id: Optional[int], now: datetime) -> AttendanceSession:
        if session_id is not None:
            session = self._sessions.get(int(session_id))
            if not session:
                raise SessionNotFound()
            return session

        # General scan: today's earliest active session that is still open.
        # When every active session has ended, the earliest one is returned so
        # the scan closes it and reports SessionEnded.
        active = sorted(self._sessions.list_active_for_date(now.date()), key=lambda s: (s.start_time, s.session_id))
        if not active:
            raise NoActiveSession()
        return next((s for s in active if not s.has_ended(now)), active[0])

    def mark_scan(
        self,
        actor: Actor,
        student_id: str,
        session_id: Optional[int] = None,
        *,
        now: datetime | None = None,
    ) -> ScanResult:
        """Record a scan as present or late.

        Raises StudentNotFound, SessionNotFound/NoActiveSession, WrongDay,
        NotStarted, SessionEnded, OutOfScope or AlreadyMarked. A scan that
        arrives after the end time closes the session before SessionEnded is
        raised.
        """

        require_role(actor, *STAFF_ROLES)
        now = now or self._clock.now()
        student_id = require_non_empty(student_id, "Admission number")

        student = self._roster.get(student_id)
        if not student:
            raise StudentNotFound()

        session = self._resolve_session(session_id, now)

        try:
            self._machine.check_scan_eligible(session, student, now)
        except SessionEnded:
            self._reconciler.reconcile_session(session, now)
            raise

        if self._ledger.find(student.admission_number, session.session_id):
            raise AlreadyMarked()

        strategy = self._factory.for_scan(now=now, session=session)
        decision = strategy.decide(now=now, session=session)

        try:
            record = self._ledger.insert(
                NewAttendanceRecord(
                    student_id=student.admission_number,
                    session_id=session.session_id,
                    session_date=session.session_date,
                    status=decision.status,
                    scan_time=now,
                    marked_by=actor.actor_id,
                )
            )
        except ConflictAlreadyExists:
            # Lost the race against another scan (or reconciliation) for this pair.
            raise AlreadyMarked()

        if session.status == SessionStatus.SCHEDULED:
            session = self._machine.activate(session)

        logger.info(
            "Scan %s session=%s student=%s by=%s",
            decision.status.value,
            session.session_id,
            student.admission_number,
            actor.actor_id,
        )
        return ScanResult(status=decision.status, record=record, student=student, session=session)

    def override(
        self,
        actor: Actor,
        *,
        student_id: str,
        session_id: int,
        status: AttendanceStatus,
        reason: Optional[str] = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Admin sets any status for a (student, session), audited."""

        require_role(actor, Role.ADMIN)
        now = now or self._clock.now()
        reason = optional_text(reason)
        status = AttendanceStatus(status)

        session = self._sessions.get(int(session_id))
        if not session:
            raise SessionNotFound()
        if not self._roster.get(student_id):
            raise StudentNotFound()

        stored_reason = reason if status == AttendanceStatus.EXCUSED else None
        existing = self._ledger.find(student_id, session.session_id)
        previous: Optional[AttendanceStatus] = None

        if existing is None:
            try:
                record = self._ledger.insert(
                    NewAttendanceRecord(
                        student_id=student_id,
                        session_id=session.session_id,
                        session_date=session.session_date,
                        status=status,
                        scan_time=now,
                        marked_by=actor.actor_id,
                        reason=stored_reason,
                    )
                )
            except ConflictAlreadyExists:
                existing = self._ledger.find(student_id, session.session_id)
                if existing is None:
                    raise
        if existing is not None:
            previous = existing.status
            if not self._ledger.update(
                existing.record_id,
                status=status,
                marked_by=actor.actor_id,
                scan_time=now,
                reason=stored_reason,
            ):
                raise RecordNotFound()
            record = self._ledger.get(existing.record_id)
            if record is None:
                raise RecordNotFound()

        self._audit.record(
            AuditEntry(
                action=AuditAction.MANUAL_OVERRIDE if previous else AuditAction.MANUAL_ATTENDANCE,
                student_id=student_id,
                session_id=session.session_id,
                previous_status=previous.value if previous else None,
                new_status=status.value,
                performed_by=actor.actor_id,
                reason=reason or ("Manual attendance override" if previous else "Manual attendance mark"),
            )
        )
        logger.info(
            "Override session=%s student=%s %s -> %s by=%s",
            session.session_id,
            student_id,
            previous.value if previous else "-",
            status.value,
            actor.actor_id,
        )
        return record

    def list_for_session(self, session_id: int):
        return list(self._ledger.list_by_session(int(session_id)))
