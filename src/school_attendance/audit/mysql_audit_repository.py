from __future__ import annotations

from typing import Sequence

from ..core.enums import AuditAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, select_all
from .model import AuditEntry
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, entry: AuditEntry) -> int:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                """
                INSERT INTO audit_logs(action, student_id, session_id, previous_status, new_status, performed_by, reason)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.action.value,
                    entry.student_id,
                    entry.session_id,
                    entry.previous_status,
                    entry.new_status,
                    entry.performed_by,
                    entry.reason,
                ),
            )
            return int(cur.lastrowid)

    def list_for_session(self, session_id: int) -> Sequence[AuditEntry]:
        with db_cursor(self._conn_factory) as cur:
            rows = select_all(
                cur,
                """
                SELECT action, student_id, session_id, previous_status, new_status, performed_by, reason
                FROM audit_logs
                WHERE session_id=%s
                ORDER BY audit_id ASC
                """,
                (int(session_id),),
            )
        return [
            AuditEntry(
                action=AuditAction(r["action"]),
                new_status=r["new_status"],
                performed_by=str(r["performed_by"]),
                student_id=r.get("student_id"),
                session_id=int(r["session_id"]) if r.get("session_id") is not None else None,
                previous_status=r.get("previous_status"),
                reason=r.get("reason"),
            )
            for r in rows
        ]
