from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from ..common.validators import clean_optional, require_positive
from ..core.constants import DEFAULT_PAYMENT_DUE_DAYS
from ..core.enums import PaymentMethod, PaymentStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import Payment, PaymentSummaryRow, PaymentTotals
from .repository import PaymentRepository

logger = logging.getLogger(__name__)

CSV_FIELDS = ["student_id", "name", "total", "paid", "balance", "status"]


class PaymentService:
    """Use cases: record fee payments and report each student's balance.

    A student is ``paid`` once payments cover ``total_amount``; otherwise the
    balance becomes ``overdue`` ``due_days`` after the joining date.
    """

    def __init__(
        self,
        payments: PaymentRepository,
        students: StudentRepository,
        *,
        due_days: int = DEFAULT_PAYMENT_DUE_DAYS,
    ):
        self._payments = payments
        self._students = students
        self._due_days = int(due_days)

    def _get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def add_payment(
        self,
        student_id: int,
        amount,
        method: PaymentMethod | str,
        paid_at: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> Payment:
        student = self._get_student(student_id)
        value = round(require_positive(amount, "Amount"), 2)
        try:
            method = PaymentMethod(str.lower(method))
        except (TypeError, ValueError):
            raise ValidationError("Payment method must be cash, upi, card or bank")

        paid_at = paid_at or datetime.now()
        payment_id = self._payments.create(
            student_id=student.student_id,
            amount=value,
            method=method,
            paid_at=paid_at,
            note=clean_optional(note),
        )
        logger.info("Payment %s: %.2f via %s from student %s", payment_id, value, method.value, student.student_id)
        return Payment(
            payment_id=payment_id,
            student_id=student.student_id,
            amount=value,
            method=method,
            paid_at=paid_at,
            note=clean_optional(note),
        )

    def list_payments_by_student(self, student_id: int) -> List[Payment]:
        return sorted(
            self._payments.list_by_student(int(student_id)),
            key=lambda p: (p.paid_at, p.payment_id),
            reverse=True,
        )

    def _totals(self, student: Student, paid: float, today: date) -> PaymentTotals:
        total = float(student.details.total_amount or 0.0)
        balance = round(total - paid, 2)
        if balance <= 0:
            status = PaymentStatus.PAID
        elif student.details.joining_date and today > student.details.joining_date + timedelta(days=self._due_days):
            status = PaymentStatus.OVERDUE
        else:
            status = PaymentStatus.PENDING
        return PaymentTotals(total=total, paid=round(paid, 2), balance=balance, status=status)

    def payment_totals(self, student_id: int, today: Optional[date] = None) -> PaymentTotals:
        student = self._get_student(student_id)
        paid = sum(p.amount for p in self._payments.list_by_student(student.student_id))
        return self._totals(student, paid, today or date.today())

    def payment_summary_all(
        self,
        today: Optional[date] = None,
        *,
        status: Optional[PaymentStatus] = None,
    ) -> List[PaymentSummaryRow]:
        today = today or date.today()
        paid_by = self._payments.paid_by_student()
        rows = [
            PaymentSummaryRow(
                student_id=s.student_id,
                name=s.name,
                totals=self._totals(s, paid_by.get(s.student_id, 0.0), today),
            )
            for s in self._students.list_all()
        ]
        if status is not None:
            rows = [r for r in rows if r.totals.status == status]
        return rows

    def export_payments_csv(self, today: Optional[date] = None) -> str:
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in self.payment_summary_all(today):
            writer.writerow(
                {
                    "student_id": row.student_id,
                    "name": row.name,
                    "total": f"{row.totals.total:.2f}",
                    "paid": f"{row.totals.paid:.2f}",
                    "balance": f"{row.totals.balance:.2f}",
                    "status": row.totals.status.value,
                }
            )
        return buf.getvalue()
