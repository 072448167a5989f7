class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` is a stable identifier surfaced to API callers.
    """

    code = "domain_error"
    default_message = "Request violates a business rule"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"
    default_message = "Invalid input"


class AuthorizationError(DomainError):
    """Raised when the current actor lacks permission for an action."""

    code = "forbidden"
    default_message = "You are not allowed to perform this action"


class NotFoundError(DomainError):
    code = "not_found"
    default_message = "Not found"


class StudentNotFound(NotFoundError):
    code = "student_not_found"
    default_message = "Student not found"


class SessionNotFound(NotFoundError):
    code = "session_not_found"
    default_message = "Session not found"


class RecordNotFound(NotFoundError):
    code = "record_not_found"
    default_message = "Attendance record not found"


class NoActiveSession(NotFoundError):
    code = "no_active_session"
    default_message = "No active session found"


class InvalidTransition(DomainError):
    code = "invalid_transition"
    default_message = "Session status cannot move backwards"


class WrongDay(DomainError):
    code = "wrong_day"
    default_message = "This session is not for today"


class NotStarted(DomainError):
    code = "not_started"
    default_message = "Session has not started yet"


class SessionEnded(DomainError):
    code = "session_ended"
    default_message = "Session has ended and is now closed"


class OutOfScope(DomainError):
    code = "out_of_scope"
    default_message = "Student is not part of this session's class/section"


class AlreadyMarked(DomainError):
    code = "already_marked"
    default_message = "Attendance already marked"


class NotAbsent(DomainError):
    code = "not_absent"
    default_message = "Only absent records can be excused"


class WindowExpired(DomainError):
    code = "window_expired"
    default_message = "The excuse window for this session has closed"


class ConflictAlreadyExists(Exception):
    """Storage-level unique key violation on (student_id, session_id).

    Not a DomainError: services translate it (AlreadyMarked for scans,
    ignored for reconciliation).
    """
