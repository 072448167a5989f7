from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictAlreadyExists
from ..database.connection import DatabaseConnection
from ..database.mysql_base import Row, db_cursor, is_duplicate_key, select_all, select_one, to_time, where_equals
from .model import AttendanceRecord, AttendanceReportRow, NewAttendanceRecord
from .repository import UPDATABLE_FIELDS, AttendanceLedger

_COLUMNS = "record_id, student_id, session_id, session_date, status, scan_time, marked_by, reason"

_INSERT_COLUMNS = ("student_id", "session_id", "session_date", "status", "scan_time", "marked_by", "reason")


def _insert_sql(*, keep_existing: bool = False) -> str:
    sql = "INSERT INTO attendance_records({}) VALUES({})".format(
        ", ".join(_INSERT_COLUMNS),
        ", ".join(["%s"] * len(_INSERT_COLUMNS)),
    )
    if keep_existing:
        # Only the unique key is forgiven; any other error still raises.
        sql += " ON DUPLICATE KEY UPDATE record_id=record_id"
    return sql


def _db_value(value):
    return value.value if isinstance(value, AttendanceStatus) else value


def _insert_params(record: NewAttendanceRecord) -> tuple:
    values = asdict(record)
    return tuple(_db_value(values[c]) for c in _INSERT_COLUMNS)


def _to_record(r: Row) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        student_id=str(r["student_id"]),
        session_id=int(r["session_id"]),
        session_date=r["session_date"],
        status=AttendanceStatus(r["status"]),
        scan_time=r["scan_time"],
        marked_by=str(r["marked_by"]),
        reason=r.get("reason"),
    )


def _to_report_row(r: Row) -> AttendanceReportRow:
    return AttendanceReportRow(
        student_id=str(r["student_id"]),
        full_name=r["full_name"],
        class_name=r["class_name"],
        section=r["section"],
        session_id=int(r["session_id"]),
        session_date=r["session_date"],
        start_time=to_time(r["start_time"]),
        end_time=to_time(r["end_time"]),
        status=AttendanceStatus(r["status"]),
        scan_time=r["scan_time"],
        marked_by=str(r["marked_by"]),
        reason=r.get("reason"),
    )


class MySQLAttendanceRepository(AttendanceLedger):
    """Ledger on ``attendance_records``; UNIQUE(student_id, session_id) is the arbiter."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _one(self, where: str, params: tuple) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as cur:
            r = select_one(cur, f"SELECT {_COLUMNS} FROM attendance_records WHERE {where}", params)
        return _to_record(r) if r else None

    def find(self, student_id: str, session_id: int) -> Optional[AttendanceRecord]:
        return self._one("student_id=%s AND session_id=%s", (student_id, int(session_id)))

    def get(self, record_id: int) -> Optional[AttendanceRecord]:
        return self._one("record_id=%s", (int(record_id),))

    def insert(self, record: NewAttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as cur:
                cur.execute(_insert_sql(), _insert_params(record))
                record_id = int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise ConflictAlreadyExists(f"{record.student_id}@{record.session_id}") from e
            raise

        return AttendanceRecord(record_id=record_id, **asdict(record))

    def bulk_insert_ignoring_conflicts(self, records: Iterable[NewAttendanceRecord]) -> int:
        params = [_insert_params(r) for r in records]
        if not params:
            return 0

        with db_cursor(self._conn_factory) as cur:
            # A duplicate left unchanged counts 0 in rowcount, an inserted row 1.
            cur.executemany(_insert_sql(keep_existing=True), params)
            return max(int(cur.rowcount), 0)

    def update(self, record_id: int, **fields) -> bool:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        if not fields:
            return self.get(record_id) is not None

        names = sorted(fields)
        assignments = ", ".join(f"{name}=%s" for name in names)
        params = tuple(_db_value(fields[name]) for name in names) + (int(record_id),)

        with db_cursor(self._conn_factory) as cur:
            cur.execute(f"UPDATE attendance_records SET {assignments} WHERE record_id=%s", params)
            if cur.rowcount > 0:
                return True
            # Unchanged values also give rowcount 0.
            return select_one(cur, "SELECT 1 AS found FROM attendance_records WHERE record_id=%s", (int(record_id),)) is not None

    def list_by_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as cur:
            rows = select_all(
                cur,
                f"SELECT {_COLUMNS} FROM attendance_records WHERE session_id=%s ORDER BY scan_time, record_id",
                (int(session_id),),
            )
        return [_to_record(r) for r in rows]

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        class_name: Optional[str] = None,
        section: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        where, params = where_equals(
            {"st.class_name": class_name or None, "st.section": section or None},
            base=["ses.session_date BETWEEN %s AND %s"],
        )

        with db_cursor(self._conn_factory) as cur:
            rows = select_all(
                cur,
                f"""
                SELECT
                    ar.student_id, st.full_name, st.class_name, st.section,
                    ses.session_id, ses.session_date, ses.start_time, ses.end_time,
                    ar.status, ar.scan_time, ar.marked_by, ar.reason
                FROM attendance_records ar
                JOIN students st ON st.admission_number = ar.student_id
                JOIN attendance_sessions ses ON ses.session_id = ar.session_id
                {where}
                ORDER BY ses.session_date DESC, ar.scan_time DESC
                """,
                [start_date, end_date, *params],
            )
        return [_to_report_row(r) for r in rows]
