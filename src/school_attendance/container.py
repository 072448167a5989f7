from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.excuse_service import ExcuseService
from .attendance.factory import ScanStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceLedger
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .audit.service import AuditTrail
from .common.clock import Clock, SchoolClock
from .core.constants import (
    DEFAULT_SCHOOL_TIMEZONE,
    EXCUSE_GRACE_MINUTES,
    LATE_GRACE_MINUTES,
    START_BUFFER_MINUTES,
)
from .database.connection import DatabaseConnection, DBConfig
from .reconciliation.service import ReconciliationService
from .reports.service import AttendanceReportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .sessions.state_machine import SessionStateMachine
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import RosterRepository


@dataclass(frozen=True)
class Container:
    clock: Clock

    students_repo: RosterRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceLedger
    audit_repo: Optional[AuditRepository]
    audit_trail: AuditTrail

    state_machine: SessionStateMachine
    reconciliation_service: ReconciliationService
    session_service: SessionService
    attendance_service: AttendanceService
    excuse_service: ExcuseService
    report_service: AttendanceReportService


def build_services(
    *,
    students_repo: RosterRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceLedger,
    audit_repo: Optional[AuditRepository] = None,
    clock: Optional[Clock] = None,
    start_buffer_minutes: int = START_BUFFER_MINUTES,
    late_grace_minutes: int = LATE_GRACE_MINUTES,
    excuse_grace_minutes: int = EXCUSE_GRACE_MINUTES,
) -> Container:
    """Wire services over any repository implementation (MySQL or in-memory)."""

    clock = clock or SchoolClock()
    audit = AuditTrail(audit_repo)

    state_machine = SessionStateMachine(sessions_repo, start_buffer_minutes=int(start_buffer_minutes))
    reconciliation_service = ReconciliationService(
        sessions_repo,
        students_repo,
        attendance_repo,
        state_machine=state_machine,
        clock=clock,
        audit=audit,
    )
    session_service = SessionService(
        sessions_repo,
        attendance_repo,
        reconciler=reconciliation_service,
        state_machine=state_machine,
        clock=clock,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        students_repo,
        sessions_repo,
        reconciler=reconciliation_service,
        state_machine=state_machine,
        strategy_factory=ScanStrategyFactory(late_grace_minutes=int(late_grace_minutes)),
        clock=clock,
        audit=audit,
    )
    excuse_service = ExcuseService(
        attendance_repo,
        sessions_repo,
        grace_minutes=int(excuse_grace_minutes),
        clock=clock,
        audit=audit,
    )
    report_service = AttendanceReportService(attendance_repo)

    return Container(
        clock=clock,
        students_repo=students_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        audit_repo=audit_repo,
        audit_trail=audit,
        state_machine=state_machine,
        reconciliation_service=reconciliation_service,
        session_service=session_service,
        attendance_service=attendance_service,
        excuse_service=excuse_service,
        report_service=report_service,
    )


def build_container(*, db_config: dict, settings: object | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        students_repo=MySQLStudentRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
        clock=SchoolClock(getattr(settings, "SCHOOL_TIMEZONE", DEFAULT_SCHOOL_TIMEZONE)),
        start_buffer_minutes=getattr(settings, "START_BUFFER_MINUTES", START_BUFFER_MINUTES),
        late_grace_minutes=getattr(settings, "LATE_GRACE_MINUTES", LATE_GRACE_MINUTES),
        excuse_grace_minutes=getattr(settings, "EXCUSE_GRACE_MINUTES", EXCUSE_GRACE_MINUTES),
    )
