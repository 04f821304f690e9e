from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` inside one transaction.

    Commits when the block exits normally, rolls back on any exception.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def placeholders(values: Sequence[Any]) -> str:
    """Build ``%s,%s,...`` for an ``IN (...)`` clause."""
    if not values:
        raise ValueError("placeholders() needs at least one value")
    return ",".join(["%s"] * len(values))


def as_bool(value: Any) -> bool:
    """MySQL BOOLEAN columns come back as 0/1 ints."""
    return bool(int(value)) if value is not None else False


def as_float(value: Any) -> Optional[float]:
    """Normalize DECIMAL/DOUBLE columns to float (None stays None)."""
    if value is None:
        return None
    return float(value)
