from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..attendance.model import NewAttendanceRecord
from ..attendance.repository import AttendanceLedger
from ..audit.model import AuditEntry
from ..audit.service import AuditTrail
from ..common.clock import Clock, SchoolClock
from ..core.enums import AttendanceStatus, AuditAction, SessionStatus
from ..sessions.model import AttendanceSession
from ..sessions.repository import SessionRepository
from ..sessions.state_machine import SessionStateMachine
from ..students.repository import RosterRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileReport:
    sessions_processed: int = 0
    sessions_completed: int = 0
    absent_marked: int = 0

    def __add__(self, other: "ReconcileReport") -> "ReconcileReport":
        return ReconcileReport(
            sessions_processed=self.sessions_processed + other.sessions_processed,
            sessions_completed=self.sessions_completed + other.sessions_completed,
            absent_marked=self.absent_marked + other.absent_marked,
        )

    def as_dict(self) -> dict:
        return {
            "sessions_processed": self.sessions_processed,
            "sessions_completed": self.sessions_completed,
            "absent_marked": self.absent_marked,
        }


class ReconciliationService:
    """Fills in absences for ended sessions and completes them.

    Every trigger (timer sweep, lazy read, late scan, admin force-complete)
    goes through here. Safe to run any number of times, concurrently or not:
    absent rows that already exist are skipped by the ledger's unique key and
    completing an already completed session is a no-op.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        roster: RosterRepository,
        ledger: AttendanceLedger,
        *,
        state_machine: Optional[SessionStateMachine] = None,
        clock: Optional[Clock] = None,
        audit: Optional[AuditTrail] = None,
    ):
        self._sessions = sessions
        self._roster = roster
        self._ledger = ledger
        self._machine = state_machine or SessionStateMachine(sessions)
        self._clock = clock or SchoolClock()
        self._audit = audit or AuditTrail()

    def reconcile(self, now: datetime | None = None) -> ReconcileReport:
        """Sweep today's active sessions and close the ones that have ended."""

        now = now or self._clock.now()
        report = ReconcileReport()

        for session in self._sessions.list_active_for_date(now.date()):
            report += self.reconcile_session(session, now)

        logger.info(
            "Reconcile sweep at %s: processed=%d completed=%d absent=%d",
            now.isoformat(timespec="seconds"),
            report.sessions_processed,
            report.sessions_completed,
            report.absent_marked,
        )
        return report

    def reconcile_session(
        self,
        session: AttendanceSession,
        now: datetime | None = None,
        *,
        force: bool = False,
    ) -> ReconcileReport:
        """Close one session if it has ended (or ``force``); otherwise no-op."""

        now = now or self._clock.now()

        if session.status == SessionStatus.COMPLETED:
            return ReconcileReport(sessions_processed=1)
        if not force and not session.has_ended(now):
            return ReconcileReport(sessions_processed=1)

        marked = self._mark_absentees(session, now)
        if not self._machine.complete(session):
            logger.debug("Session %s was already completed by another caller", session.session_id)
            return ReconcileReport(sessions_processed=1, absent_marked=marked)

        self._audit.record(
            AuditEntry(
                action=AuditAction.SYSTEM_AUTO,
                session_id=session.session_id,
                previous_status=session.status.value,
                new_status=SessionStatus.COMPLETED.value,
                performed_by=session.created_by,
                reason=f"Session closed, {marked} marked absent",
            )
        )
        logger.info("Session %s completed, %d marked absent", session.session_id, marked)
        return ReconcileReport(sessions_processed=1, sessions_completed=1, absent_marked=marked)

    def absent_ids(self, session: AttendanceSession) -> list[str]:
        """In-scope roster minus students already holding a record."""

        scanned_ids = {r.student_id for r in self._ledger.list_by_session(session.session_id)}
        if session.is_restricted:
            all_ids = self._roster.list_ids(class_name=session.class_name, section=session.section)
        else:
            all_ids = self._roster.list_ids()
        return [sid for sid in all_ids if sid not in scanned_ids]

    def _mark_absentees(self, session: AttendanceSession, now: datetime) -> int:
        absent_ids = self.absent_ids(session)
        if not absent_ids:
            return 0

        inserted = self._ledger.bulk_insert_ignoring_conflicts(
            NewAttendanceRecord(
                student_id=sid,
                session_id=session.session_id,
                session_date=session.session_date,
                status=AttendanceStatus.ABSENT,
                scan_time=now,
                marked_by=session.created_by,
            )
            for sid in absent_ids
        )
        if inserted < len(absent_ids):
            logger.debug(
                "Session %s: %d absent rows already existed", session.session_id, len(absent_ids) - inserted
            )
        return inserted
