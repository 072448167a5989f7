from __future__ import annotations

from datetime import date, time

import pytest

from school_attendance.core.actor import Actor
from school_attendance.core.enums import AttendanceStatus, AuditAction, SessionStatus
from school_attendance.core.exceptions import (
    AlreadyMarked,
    AuthorizationError,
    NoActiveSession,
    NotStarted,
    OutOfScope,
    SessionEnded,
    SessionNotFound,
    StudentNotFound,
    ValidationError,
    WrongDay,
)


def test_scan_inside_grace_is_present(container, teacher, make_session, moment, ledger):
    session = make_session()

    result = container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 5))

    assert result.status == AttendanceStatus.PRESENT
    assert result.record.scan_time == moment(9, 5)
    assert result.record.marked_by == "teacher-1"
    assert ledger.pairs() == [("S001", session.session_id)]


def test_scan_after_grace_is_late(container, teacher, make_session, moment):
    session = make_session()

    result = container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 10, 1))

    assert result.status == AttendanceStatus.LATE


def test_uses_clock_when_now_not_given(container, teacher, make_session, clock, moment):
    session = make_session()
    clock.current = moment(9, 12)

    result = container.attendance_service.mark_scan(teacher, "S001", session.session_id)

    assert result.status == AttendanceStatus.LATE
    assert result.record.scan_time == moment(9, 12)


def test_second_scan_is_already_marked(container, teacher, make_session, moment, ledger):
    session = make_session()
    container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 1))

    with pytest.raises(AlreadyMarked):
        container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 2))
    assert len(ledger.list_by_session(session.session_id)) == 1


def test_lost_insert_race_maps_to_already_marked(container, teacher, make_session, moment, ledger, monkeypatch):
    session = make_session()
    container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 1))
    # The pre-check misses the concurrent row; the unique key still rejects it.
    monkeypatch.setattr(ledger, "find", lambda student_id, session_id: None)

    with pytest.raises(AlreadyMarked):
        container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 2))
    assert len(ledger.list_by_session(session.session_id)) == 1


def test_unknown_student(container, teacher, make_session, moment):
    session = make_session()

    with pytest.raises(StudentNotFound):
        container.attendance_service.mark_scan(teacher, "S999", session.session_id, now=moment(9, 1))


def test_blank_admission_number(container, teacher, make_session, moment):
    session = make_session()

    with pytest.raises(ValidationError):
        container.attendance_service.mark_scan(teacher, "   ", session.session_id, now=moment(9, 1))


def test_unknown_session(container, teacher, moment):
    with pytest.raises(SessionNotFound):
        container.attendance_service.mark_scan(teacher, "S001", 404, now=moment(9, 1))


def test_wrong_day_is_checked_first(container, teacher, make_session, moment):
    session = make_session(session_date=date(2026, 3, 1), class_name="6", section="A")

    with pytest.raises(WrongDay):
        container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 1))


def test_too_early(container, teacher, make_session, moment, ledger):
    session = make_session()

    with pytest.raises(NotStarted):
        container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(8, 54))
    assert ledger.pairs() == []


def test_out_of_scope(container, teacher, make_session, moment):
    session = make_session(class_name="6", section="A")

    with pytest.raises(OutOfScope):
        container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 1))


def test_late_scan_closes_session_and_marks_absentees(container, teacher, make_session, moment, ledger, sessions_repo):
    session = make_session(class_name="5", section="A")
    container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 3))

    with pytest.raises(SessionEnded):
        container.attendance_service.mark_scan(teacher, "S002", session.session_id, now=moment(9, 31))

    assert sessions_repo.get(session.session_id).status == SessionStatus.COMPLETED
    statuses = {r.student_id: r.status for r in ledger.list_by_session(session.session_id)}
    assert statuses == {"S001": AttendanceStatus.PRESENT, "S002": AttendanceStatus.ABSENT}


def test_scan_into_completed_session(container, admin, teacher, make_session, moment):
    session = make_session()
    container.session_service.force_complete(admin, session.session_id, now=moment(9, 5))

    with pytest.raises(SessionEnded):
        container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 6))


def test_scan_activates_scheduled_session(container, teacher, make_session, moment, sessions_repo):
    session = make_session(status=SessionStatus.SCHEDULED)

    result = container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(8, 58))

    assert result.session.status == SessionStatus.ACTIVE
    assert sessions_repo.get(session.session_id).status == SessionStatus.ACTIVE


def test_general_scan_picks_earliest_active_session(container, teacher, make_session, moment):
    make_session(start=time(10, 0), end=time(10, 30))
    first = make_session(start=time(9, 0), end=time(9, 30))
    make_session(start=time(8, 0), end=time(8, 30), status=SessionStatus.SCHEDULED)

    result = container.attendance_service.mark_scan(teacher, "S001", now=moment(9, 1))

    assert result.session.session_id == first.session_id


def test_general_scan_skips_sessions_that_have_ended(container, teacher, make_session, moment, sessions_repo):
    ended = make_session(start=time(9, 0), end=time(9, 30))
    open_ = make_session(start=time(9, 30), end=time(10, 30))

    result = container.attendance_service.mark_scan(teacher, "S001", now=moment(9, 40))

    assert result.session.session_id == open_.session_id
    assert sessions_repo.get(ended.session_id).status == SessionStatus.ACTIVE


def test_general_scan_when_every_session_has_ended(container, teacher, make_session, moment, sessions_repo):
    session = make_session(start=time(9, 0), end=time(9, 30))

    with pytest.raises(SessionEnded):
        container.attendance_service.mark_scan(teacher, "S001", now=moment(9, 40))
    assert sessions_repo.get(session.session_id).status == SessionStatus.COMPLETED


def test_general_scan_without_active_session(container, teacher, make_session, moment):
    make_session(status=SessionStatus.SCHEDULED)

    with pytest.raises(NoActiveSession):
        container.attendance_service.mark_scan(teacher, "S001", now=moment(9, 1))


def test_scan_requires_staff_role(container, make_session, moment):
    session = make_session()
    stranger = Actor(actor_id="x", role="student")

    with pytest.raises(AuthorizationError):
        container.attendance_service.mark_scan(stranger, "S001", session.session_id, now=moment(9, 1))


def test_override_creates_missing_record(container, admin, make_session, moment, audit_repo):
    session = make_session()

    record = container.attendance_service.override(
        admin, student_id="S002", session_id=session.session_id, status=AttendanceStatus.PRESENT, now=moment(9, 40)
    )

    assert record.status == AttendanceStatus.PRESENT
    assert record.marked_by == "admin-1"
    entry = audit_repo.entries[-1]
    assert entry.action == AuditAction.MANUAL_ATTENDANCE
    assert entry.previous_status is None
    assert entry.new_status == "present"


def test_override_replaces_existing_status(container, admin, teacher, make_session, moment, audit_repo):
    session = make_session()
    scanned = container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 20))

    record = container.attendance_service.override(
        admin,
        student_id="S001",
        session_id=session.session_id,
        status="excused",
        reason=" Doctor's note ",
        now=moment(9, 25),
    )

    assert record.record_id == scanned.record.record_id
    assert record.status == AttendanceStatus.EXCUSED
    assert record.reason == "Doctor's note"
    entry = audit_repo.entries[-1]
    assert entry.action == AuditAction.MANUAL_OVERRIDE
    assert (entry.previous_status, entry.new_status) == ("late", "excused")


def test_override_drops_reason_for_non_excused(container, admin, make_session, moment):
    session = make_session()

    record = container.attendance_service.override(
        admin, student_id="S001", session_id=session.session_id, status="late", reason="bus", now=moment(9, 40)
    )

    assert record.reason is None


def test_override_is_admin_only(container, teacher, make_session, moment):
    session = make_session()

    with pytest.raises(AuthorizationError):
        container.attendance_service.override(
            teacher, student_id="S001", session_id=session.session_id, status="present", now=moment(9, 1)
        )


def test_override_rejects_unknown_status(container, admin, make_session, moment):
    session = make_session()

    with pytest.raises(ValueError):
        container.attendance_service.override(
            admin, student_id="S001", session_id=session.session_id, status="sleeping", now=moment(9, 1)
        )
