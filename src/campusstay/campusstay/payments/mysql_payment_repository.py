from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Sequence

from ..core.enums import PaymentMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall
from .model import Payment
from .repository import PaymentRepository


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        student_id: int,
        amount: float,
        method: PaymentMethod,
        paid_at: datetime,
        note: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO payments(student_id, amount, method, paid_at, note) VALUES(%s,%s,%s,%s,%s)",
                (int(student_id), amount, method.value, paid_at, note),
            )
            return int(cur.lastrowid)

    def list_by_student(self, student_id: int) -> Sequence[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT payment_id, student_id, amount, method, paid_at, note
                FROM payments
                WHERE student_id=%s
                ORDER BY paid_at DESC, payment_id DESC
                """,
                (int(student_id),),
            )
            return [
                Payment(
                    payment_id=int(r["payment_id"]),
                    student_id=int(r["student_id"]),
                    amount=as_float(r["amount"]) or 0.0,
                    method=PaymentMethod(r["method"]),
                    paid_at=r["paid_at"],
                    note=r.get("note"),
                )
                for r in fetchall(cur)
            ]

    def paid_by_student(self) -> Dict[int, float]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT student_id, SUM(amount) AS paid FROM payments GROUP BY student_id")
            return {int(r["student_id"]): as_float(r["paid"]) or 0.0 for r in fetchall(cur)}
