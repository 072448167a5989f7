from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, time, timedelta
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from .connection import DatabaseConnection

Row = Dict[str, Any]


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Any]:
    """One short transaction: commit on success, roll back on any error."""

    conn = conn_factory.connect()
    cur = None
    try:
        cur = conn.cursor(dictionary=dictionary)
        yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        if cur is not None:
            cur.close()
        conn.close()


def select_one(cur, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
    cur.execute(sql, tuple(params))
    return cur.fetchone() or None


def select_all(cur, sql: str, params: Sequence[Any] = ()) -> List[Row]:
    cur.execute(sql, tuple(params))
    return list(cur.fetchall() or [])


def where_equals(filters: Mapping[str, Any], *, base: Sequence[str] = ()) -> Tuple[str, list]:
    """``WHERE a=%s AND ...`` for the non-None filters, plus their params."""

    clauses = list(base)
    params: list = []
    for column, value in filters.items():
        if value is None:
            continue
        clauses.append(f"{column}=%s")
        params.append(value)
    return (f"WHERE {' AND '.join(clauses)}" if clauses else ""), params


def is_duplicate_key(exc: Exception) -> bool:
    """True when ``exc`` is a unique key violation (ER_DUP_ENTRY)."""

    return isinstance(exc, IntegrityError) and exc.errno == errorcode.ER_DUP_ENTRY


def to_time(value: Any) -> Optional[time]:
    """TIME column value as ``datetime.time``.

    The pure-Python connector hands TIME back as ``timedelta``, the C
    extension and some drivers as ``time`` or ``'HH:MM[:SS]'`` text.
    """

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        return (datetime.min + timedelta(seconds=int(value.total_seconds()) % 86400)).time()
    if isinstance(value, str):
        parts = [int(p) for p in value.strip().split(":")]
        if not 2 <= len(parts) <= 3:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(*parts)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
