from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: the single attendance fact for one (student, session)."""

    record_id: int
    student_id: str
    session_id: int
    session_date: date
    status: AttendanceStatus
    scan_time: datetime
    marked_by: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class NewAttendanceRecord:
    student_id: str
    session_id: int
    session_date: date
    status: AttendanceStatus
    scan_time: datetime
    marked_by: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports/exports (record joined with student and session)."""

    student_id: str
    full_name: str
    class_name: str
    section: str
    session_id: int
    session_date: date
    start_time: time
    end_time: time
    status: AttendanceStatus
    scan_time: datetime
    marked_by: str
    reason: Optional[str] = None
