from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, select_all, select_one, where_equals
from .model import Student
from .repository import RosterRepository


class MySQLStudentRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_ids(self, *, class_name: Optional[str] = None, section: Optional[str] = None) -> Sequence[str]:
        where, params = where_equals({"class_name": class_name, "section": section})

        with db_cursor(self._conn_factory) as cur:
            rows = select_all(cur, f"SELECT admission_number FROM students {where} ORDER BY admission_number", params)
        return [str(r["admission_number"]) for r in rows]

    def get(self, admission_number: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as cur:
            r = select_one(
                cur,
                "SELECT admission_number, full_name, class_name, section FROM students WHERE admission_number=%s",
                (admission_number,),
            )
        if not r:
            return None
        return Student(
            admission_number=str(r["admission_number"]),
            full_name=r["full_name"],
            class_name=r["class_name"],
            section=r["section"],
        )
