from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import RequestStatus, RequestType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import RoomRequest
from .repository import RequestRepository

_COLUMNS = "request_id, type, student_id, target_room_id, status, created_at, resolved_at, note"


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_request(r: dict) -> RoomRequest:
        return RoomRequest(
            request_id=int(r["request_id"]),
            type=RequestType(r["type"]),
            student_id=int(r["student_id"]),
            target_room_id=int(r["target_room_id"]) if r.get("target_room_id") is not None else None,
            status=RequestStatus(r["status"]),
            created_at=r["created_at"],
            resolved_at=r.get("resolved_at"),
            note=r.get("note"),
        )

    def create(
        self,
        *,
        type: RequestType,
        student_id: int,
        target_room_id: Optional[int],
        note: Optional[str],
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO room_requests(type, student_id, target_room_id, status, created_at, note)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    type.value,
                    int(student_id),
                    int(target_room_id) if target_room_id is not None else None,
                    RequestStatus.PENDING.value,
                    created_at,
                    note,
                ),
            )
            return int(cur.lastrowid)

    def get(self, *, request_id: int) -> Optional[RoomRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM room_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return self._to_request(r) if r else None

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        student_id: Optional[int] = None,
    ) -> Sequence[RoomRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM room_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                """,
                tuple(params),
            )
            return [self._to_request(r) for r in fetchall(cur)]

    def resolve(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        resolved_at: datetime,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE room_requests
                SET status=%s, resolved_at=%s, note=COALESCE(%s, note)
                WHERE request_id=%s AND status=%s
                """,
                (status.value, resolved_at, note, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def delete_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM room_requests")
            return int(cur.rowcount)
