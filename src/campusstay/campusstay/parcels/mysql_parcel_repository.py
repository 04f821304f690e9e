from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Parcel
from .repository import ParcelRepository

_COLUMNS = "parcel_id, student_id, parcel_code, carrier, received_at, collected, collected_at, otp, note"


class MySQLParcelRepository(ParcelRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_parcel(r: dict) -> Parcel:
        return Parcel(
            parcel_id=int(r["parcel_id"]),
            student_id=int(r["student_id"]),
            parcel_code=r["parcel_code"],
            carrier=r.get("carrier"),
            received_at=r["received_at"],
            collected=as_bool(r.get("collected")),
            collected_at=r.get("collected_at"),
            otp=str(r["otp"]),
            note=r.get("note"),
        )

    def create(
        self,
        *,
        student_id: int,
        parcel_code: str,
        carrier: Optional[str],
        received_at: datetime,
        otp: str,
        note: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO parcels(student_id, parcel_code, carrier, received_at, collected, otp, note)
                VALUES(%s,%s,%s,%s,0,%s,%s)
                """,
                (int(student_id), parcel_code, carrier, received_at, otp, note),
            )
            return int(cur.lastrowid)

    def get(self, parcel_id: int) -> Optional[Parcel]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM parcels WHERE parcel_id=%s", (int(parcel_id),))
            r = fetchone(cur)
            return self._to_parcel(r) if r else None

    def list_parcels(
        self,
        *,
        student_id: Optional[int] = None,
        pending_only: bool = False,
    ) -> Sequence[Parcel]:
        clauses = ["1=1"]
        params: list[object] = []
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))
        if pending_only:
            clauses.append("collected=0")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM parcels
                WHERE {" AND ".join(clauses)}
                ORDER BY received_at DESC, parcel_id DESC
                """,
                tuple(params),
            )
            return [self._to_parcel(r) for r in fetchall(cur)]

    def mark_collected(self, *, parcel_id: int, collected_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE parcels SET collected=1, collected_at=%s WHERE parcel_id=%s AND collected=0",
                (collected_at, int(parcel_id)),
            )
            return cur.rowcount > 0

    def delete(self, parcel_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM parcels WHERE parcel_id=%s", (int(parcel_id),))
            return cur.rowcount > 0
