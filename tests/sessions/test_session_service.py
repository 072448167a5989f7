from datetime import date, time

import pytest

from school_attendance.core.enums import AttendanceStatus, SessionScope, SessionStatus
from school_attendance.core.exceptions import (
    AuthorizationError,
    InvalidTransition,
    SessionNotFound,
    ValidationError,
)

TODAY = date(2026, 3, 2)


def test_create_defaults_to_active_for_all_students(container, admin):
    session = container.session_service.create(
        admin, session_date=TODAY, start_time=time(9, 0), end_time=time(9, 30)
    )

    assert session.status == SessionStatus.ACTIVE
    assert session.scope == SessionScope.ALL
    assert session.created_by == "admin-1"


def test_create_restricted_session(container, admin):
    session = container.session_service.create(
        admin,
        session_date=TODAY,
        start_time=time(9, 0),
        end_time=time(9, 30),
        status="scheduled",
        class_name=" 5 ",
        section="A",
    )

    assert session.status == SessionStatus.SCHEDULED
    assert session.scope == SessionScope.CLASS_SECTION
    assert (session.class_name, session.section) == ("5", "A")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"start_time": time(9, 30), "end_time": time(9, 30)},
        {"start_time": time(10, 0), "end_time": time(9, 0)},
        {"start_time": time(9, 0), "end_time": time(9, 30), "status": SessionStatus.COMPLETED},
        {"start_time": time(9, 0), "end_time": time(9, 30), "class_name": "5"},
        {"start_time": time(9, 0), "end_time": time(9, 30), "section": "A"},
    ],
)
def test_create_rejects_invalid_input(container, admin, kwargs):
    with pytest.raises(ValidationError):
        container.session_service.create(admin, session_date=TODAY, **kwargs)


def test_create_is_admin_only(container, teacher):
    with pytest.raises(AuthorizationError):
        container.session_service.create(teacher, session_date=TODAY, start_time=time(9, 0), end_time=time(9, 30))


def test_get_unknown_session(container, moment):
    with pytest.raises(SessionNotFound):
        container.session_service.get(99, now=moment(9, 0))


def test_get_before_end_leaves_session_open(container, make_session, moment, ledger):
    session = make_session()

    fetched = container.session_service.get(session.session_id, now=moment(9, 30))

    assert fetched.status == SessionStatus.ACTIVE
    assert ledger.pairs() == []


def test_get_after_end_closes_lazily(container, make_session, moment, ledger):
    session = make_session(class_name="6", section="A")

    fetched = container.session_service.get(session.session_id, now=moment(9, 30, 1))

    assert fetched.status == SessionStatus.COMPLETED
    assert ledger.pairs() == [("S004", session.session_id), ("S005", session.session_id)]


def test_list_for_date_closes_ended_sessions(container, make_session, moment):
    early = make_session(start=time(8, 0), end=time(8, 30))
    later = make_session(start=time(10, 0), end=time(10, 30))

    listed = container.session_service.list_for_date(TODAY, now=moment(9, 0))

    assert [(s.session_id, s.status) for s in listed] == [
        (early.session_id, SessionStatus.COMPLETED),
        (later.session_id, SessionStatus.ACTIVE),
    ]


def test_activate_scheduled_session(container, admin, make_session, moment):
    session = make_session(status=SessionStatus.SCHEDULED)

    assert container.session_service.activate(admin, session.session_id, now=moment(8, 50)).status == SessionStatus.ACTIVE


def test_activate_completed_session_is_rejected(container, admin, make_session, moment):
    session = make_session(status=SessionStatus.COMPLETED)

    with pytest.raises(InvalidTransition):
        container.session_service.activate(admin, session.session_id, now=moment(9, 0))


def test_force_complete_before_end(container, admin, teacher, make_session, moment, sessions_repo):
    session = make_session(class_name="5", section="A")
    container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 1))

    report = container.session_service.force_complete(admin, session.session_id, now=moment(9, 10))

    assert report.as_dict() == {"sessions_processed": 1, "sessions_completed": 1, "absent_marked": 1}
    assert sessions_repo.get(session.session_id).status == SessionStatus.COMPLETED


def test_force_complete_is_admin_only(container, teacher, make_session, moment):
    session = make_session()

    with pytest.raises(AuthorizationError):
        container.session_service.force_complete(teacher, session.session_id, now=moment(9, 10))


def test_summary_counts(container, admin, teacher, make_session, moment):
    session = make_session(class_name="5", section="A")
    container.attendance_service.mark_scan(teacher, "S001", session.session_id, now=moment(9, 15))

    summary = container.session_service.summary(session.session_id, now=moment(9, 45))

    assert summary == {
        AttendanceStatus.PRESENT.value: 0,
        AttendanceStatus.LATE.value: 1,
        AttendanceStatus.ABSENT.value: 1,
        AttendanceStatus.EXCUSED.value: 0,
        "total": 2,
    }
