from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Optional, Sequence

from ..core.enums import SessionScope, SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import Row, db_cursor, select_all, select_one, to_time
from .model import AttendanceSession, SessionDraft
from .repository import SessionRepository

_COLUMNS = "session_id, session_date, start_time, end_time, status, created_by, scope, class_name, section"
_ORDER = "ORDER BY start_time, session_id"


def _to_session(r: Row) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        session_date=r["session_date"],
        start_time=to_time(r["start_time"]),
        end_time=to_time(r["end_time"]),
        status=SessionStatus(r["status"]),
        created_by=str(r["created_by"]),
        scope=SessionScope(r["scope"]),
        class_name=r.get("class_name"),
        section=r.get("section"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str, params: tuple) -> list[AttendanceSession]:
        with db_cursor(self._conn_factory) as cur:
            rows = select_all(cur, f"SELECT {_COLUMNS} FROM attendance_sessions WHERE {where} {_ORDER}", params)
        return [_to_session(r) for r in rows]

    def create(self, draft: SessionDraft) -> AttendanceSession:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                """
                INSERT INTO attendance_sessions(
                    session_date, start_time, end_time, status, created_by, scope, class_name, section
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    draft.session_date,
                    draft.start_time,
                    draft.end_time,
                    draft.status.value,
                    draft.created_by,
                    draft.scope.value,
                    draft.class_name,
                    draft.section,
                ),
            )
            session_id = int(cur.lastrowid)

        return AttendanceSession(session_id=session_id, **asdict(draft))

    def get(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as cur:
            r = select_one(cur, f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
        return _to_session(r) if r else None

    def set_status(self, session_id: int, status: SessionStatus) -> bool:
        # ENUM+0 is the 1-based declaration index, so a row never moves backwards.
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                "UPDATE attendance_sessions SET status=%s WHERE session_id=%s AND status+0 < %s",
                (status.value, int(session_id), status.rank + 1),
            )
            return cur.rowcount > 0

    def list_active_for_date(self, session_date: date) -> Sequence[AttendanceSession]:
        return self._select("session_date=%s AND status=%s", (session_date, SessionStatus.ACTIVE.value))

    def list_for_date(self, session_date: date) -> Sequence[AttendanceSession]:
        return self._select("session_date=%s", (session_date,))
