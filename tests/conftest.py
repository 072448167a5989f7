from __future__ import annotations

from dataclasses import asdict, replace
from datetime import date, datetime, time
from typing import Iterable, Optional

import pytest

from school_attendance.attendance.model import AttendanceRecord, AttendanceReportRow, NewAttendanceRecord
from school_attendance.attendance.repository import UPDATABLE_FIELDS
from school_attendance.audit.model import AuditEntry
from school_attendance.common.clock import FixedClock
from school_attendance.container import build_services
from school_attendance.core.actor import Actor
from school_attendance.core.enums import Role, SessionScope, SessionStatus
from school_attendance.core.exceptions import ConflictAlreadyExists
from school_attendance.sessions.model import AttendanceSession, SessionDraft
from school_attendance.students.model import Student

TODAY = date(2026, 3, 2)


class InMemoryRoster:
    def __init__(self, students: Iterable[Student]):
        self.students = {s.admission_number: s for s in students}

    def list_ids(self, *, class_name: Optional[str] = None, section: Optional[str] = None):
        return sorted(
            s.admission_number
            for s in self.students.values()
            if (class_name is None or s.class_name == class_name) and (section is None or s.section == section)
        )

    def get(self, admission_number: str) -> Optional[Student]:
        return self.students.get(admission_number)


class InMemorySessions:
    def __init__(self):
        self.by_id: dict[int, AttendanceSession] = {}
        self.set_status_calls: list[tuple[int, SessionStatus]] = []
        self._id = 0

    def create(self, draft: SessionDraft) -> AttendanceSession:
        self._id += 1
        session = AttendanceSession(session_id=self._id, **asdict(draft))
        self.by_id[self._id] = session
        return session

    def get(self, session_id: int) -> Optional[AttendanceSession]:
        return self.by_id.get(session_id)

    def set_status(self, session_id: int, status: SessionStatus) -> bool:
        self.set_status_calls.append((session_id, status))
        current = self.by_id.get(session_id)
        if current and current.status.rank < status.rank:
            self.by_id[session_id] = replace(current, status=status)
            return True
        return False

    def list_active_for_date(self, session_date: date):
        return sorted(
            (s for s in self.by_id.values() if s.session_date == session_date and s.status == SessionStatus.ACTIVE),
            key=lambda s: (s.start_time, s.session_id),
        )

    def list_for_date(self, session_date: date):
        return sorted(
            (s for s in self.by_id.values() if s.session_date == session_date),
            key=lambda s: (s.start_time, s.session_id),
        )


class InMemoryLedger:
    """Honours the (student_id, session_id) unique key like the real table."""

    def __init__(self, roster: InMemoryRoster, sessions: InMemorySessions):
        self.by_id: dict[int, AttendanceRecord] = {}
        self._roster = roster
        self._sessions = sessions
        self._id = 0

    def _pair_exists(self, student_id: str, session_id: int) -> bool:
        return any(r.student_id == student_id and r.session_id == session_id for r in self.by_id.values())

    def find(self, student_id: str, session_id: int) -> Optional[AttendanceRecord]:
        for r in self.by_id.values():
            if r.student_id == student_id and r.session_id == session_id:
                return r
        return None

    def get(self, record_id: int) -> Optional[AttendanceRecord]:
        return self.by_id.get(record_id)

    def insert(self, record: NewAttendanceRecord) -> AttendanceRecord:
        if self._pair_exists(record.student_id, record.session_id):
            raise ConflictAlreadyExists(f"{record.student_id}@{record.session_id}")
        self._id += 1
        stored = AttendanceRecord(record_id=self._id, **asdict(record))
        self.by_id[self._id] = stored
        return stored

    def bulk_insert_ignoring_conflicts(self, records) -> int:
        inserted = 0
        for record in records:
            try:
                self.insert(record)
                inserted += 1
            except ConflictAlreadyExists:
                pass
        return inserted

    def update(self, record_id: int, **fields) -> bool:
        assert set(fields) <= UPDATABLE_FIELDS
        current = self.by_id.get(record_id)
        if not current:
            return False
        self.by_id[record_id] = replace(current, **fields)
        return True

    def list_by_session(self, session_id: int):
        return sorted((r for r in self.by_id.values() if r.session_id == session_id), key=lambda r: r.record_id)

    def get_report_rows(self, *, start_date, end_date, class_name=None, section=None):
        rows = []
        for r in self.by_id.values():
            student = self._roster.get(r.student_id)
            session = self._sessions.get(r.session_id)
            if not (start_date <= session.session_date <= end_date):
                continue
            if class_name and student.class_name != class_name:
                continue
            if section and student.section != section:
                continue
            rows.append(
                AttendanceReportRow(
                    student_id=r.student_id,
                    full_name=student.full_name,
                    class_name=student.class_name,
                    section=student.section,
                    session_id=session.session_id,
                    session_date=session.session_date,
                    start_time=session.start_time,
                    end_time=session.end_time,
                    status=r.status,
                    scan_time=r.scan_time,
                    marked_by=r.marked_by,
                    reason=r.reason,
                )
            )
        rows.sort(key=lambda x: (x.session_date, x.scan_time), reverse=True)
        return rows

    def pairs(self) -> list[tuple[str, int]]:
        return sorted((r.student_id, r.session_id) for r in self.by_id.values())


class InMemoryAudit:
    def __init__(self):
        self.entries: list[AuditEntry] = []

    def add(self, entry: AuditEntry) -> int:
        self.entries.append(entry)
        return len(self.entries)

    def list_for_session(self, session_id: int):
        return [e for e in self.entries if e.session_id == session_id]


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 2, 8, 0, 0))


@pytest.fixture
def roster():
    return InMemoryRoster(
        [
            Student("S001", "Ali Raza", "5", "A"),
            Student("S002", "Bilal Khan", "5", "A"),
            Student("S003", "Chandni Shah", "5", "B"),
            Student("S004", "Danish Iqbal", "6", "A"),
            Student("S005", "Eman Tariq", "6", "A"),
        ]
    )


@pytest.fixture
def sessions_repo():
    return InMemorySessions()


@pytest.fixture
def ledger(roster, sessions_repo):
    return InMemoryLedger(roster, sessions_repo)


@pytest.fixture
def audit_repo():
    return InMemoryAudit()


@pytest.fixture
def container(roster, sessions_repo, ledger, audit_repo, clock):
    return build_services(
        students_repo=roster,
        sessions_repo=sessions_repo,
        attendance_repo=ledger,
        audit_repo=audit_repo,
        clock=clock,
    )


@pytest.fixture
def admin():
    return Actor(actor_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def teacher():
    return Actor(actor_id="teacher-1", role=Role.TEACHER)


@pytest.fixture
def make_session(sessions_repo):
    def _make(
        *,
        session_date: date = TODAY,
        start: time = time(9, 0),
        end: time = time(9, 30),
        status: SessionStatus = SessionStatus.ACTIVE,
        class_name: Optional[str] = None,
        section: Optional[str] = None,
        created_by: str = "admin-1",
    ) -> AttendanceSession:
        return sessions_repo.create(
            SessionDraft(
                session_date=session_date,
                start_time=start,
                end_time=end,
                created_by=created_by,
                status=status,
                scope=SessionScope.CLASS_SECTION if class_name else SessionScope.ALL,
                class_name=class_name,
                section=section,
            )
        )

    return _make


def at(hh: int, mm: int, ss: int = 0, day: date = TODAY) -> datetime:
    return datetime(day.year, day.month, day.day, hh, mm, ss)


@pytest.fixture
def moment():
    """``moment(9, 10, 1)`` -> datetime on TODAY."""

    return at
