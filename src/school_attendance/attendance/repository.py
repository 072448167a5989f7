from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceReportRow, NewAttendanceRecord

UPDATABLE_FIELDS = frozenset({"status", "scan_time", "marked_by", "reason"})


class AttendanceLedger(Protocol):
    """Durable store of one-record-per-(student, session) attendance facts.

    The unique key on (student_id, session_id) is the only concurrency
    primitive the services rely on.
    """

    def find(self, student_id: str, session_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert(self, record: NewAttendanceRecord) -> AttendanceRecord:
        """Insert one record.

        Raises ConflictAlreadyExists if the pair is already recorded.
        """

        raise NotImplementedError

    def bulk_insert_ignoring_conflicts(self, records: Iterable[NewAttendanceRecord]) -> int:
        """Insert many records, skipping pairs that already exist. Returns inserted count."""

        raise NotImplementedError

    def update(self, record_id: int, **fields) -> bool:
        """Partial update restricted to UPDATABLE_FIELDS. False if the record is gone."""

        raise NotImplementedError

    def list_by_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        class_name: Optional[str] = None,
        section: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
