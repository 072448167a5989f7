from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of the current actor, used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"


class SessionStatus(str, Enum):
    """Lifecycle of an attendance session. Only moves forward."""

    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _SESSION_ORDER.index(self)


_SESSION_ORDER = (SessionStatus.SCHEDULED, SessionStatus.ACTIVE, SessionStatus.COMPLETED)


class SessionScope(str, Enum):
    """Which students a session covers."""

    ALL = "all"
    CLASS_SECTION = "class_section"


class AttendanceStatus(str, Enum):
    """Attendance status stored per (student, session)."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    EXCUSED = "excused"


class AuditAction(str, Enum):
    MANUAL_ATTENDANCE = "manual_attendance"
    MANUAL_OVERRIDE = "manual_override"
    LEAVE_MARKING = "leave_marking"
    SYSTEM_AUTO = "system_auto"
