from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ComplaintStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Complaint
from .repository import ComplaintRepository

_SELECT = """
    SELECT c.complaint_id, c.text, c.category, c.status, c.created_at, c.resolved_at,
           COUNT(u.voter_key) AS upvotes
    FROM complaints c
    LEFT JOIN complaint_upvotes u ON u.complaint_id = c.complaint_id
"""


class MySQLComplaintRepository(ComplaintRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_complaint(r: dict) -> Complaint:
        return Complaint(
            complaint_id=int(r["complaint_id"]),
            text=r["text"],
            category=r["category"],
            status=ComplaintStatus(r["status"]),
            created_at=r["created_at"],
            resolved_at=r.get("resolved_at"),
            upvotes=int(r.get("upvotes") or 0),
        )

    def create(self, *, text: str, category: str, created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO complaints(text, category, status, created_at) VALUES(%s,%s,%s,%s)",
                (text, category, ComplaintStatus.OPEN.value, created_at),
            )
            return int(cur.lastrowid)

    def get(self, complaint_id: int) -> Optional[Complaint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE c.complaint_id=%s GROUP BY c.complaint_id",
                (int(complaint_id),),
            )
            r = fetchone(cur)
            return self._to_complaint(r) if r else None

    def list_complaints(self, *, status: Optional[ComplaintStatus] = None) -> Sequence[Complaint]:
        where = ""
        params: tuple = ()
        if status is not None:
            where = " WHERE c.status=%s"
            params = (status.value,)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + where + " GROUP BY c.complaint_id ORDER BY upvotes DESC, c.created_at DESC",
                params,
            )
            return [self._to_complaint(r) for r in fetchall(cur)]

    def add_upvote(self, *, complaint_id: int, voter_key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO complaint_upvotes(complaint_id, voter_key) VALUES(%s,%s)",
                (int(complaint_id), voter_key),
            )
            return cur.rowcount > 0

    def has_upvote(self, *, complaint_id: int, voter_key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS hit FROM complaint_upvotes WHERE complaint_id=%s AND voter_key=%s",
                (int(complaint_id), voter_key),
            )
            return fetchone(cur) is not None

    def resolve(self, *, complaint_id: int, resolved_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT complaint_id FROM complaints WHERE complaint_id=%s FOR UPDATE", (int(complaint_id),))
            if not fetchone(cur):
                return False
            cur.execute(
                "UPDATE complaints SET status=%s, resolved_at=COALESCE(resolved_at, %s) WHERE complaint_id=%s",
                (ComplaintStatus.RESOLVED.value, resolved_at, int(complaint_id)),
            )
            return True
