from __future__ import annotations

import csv
import io
from datetime import date, datetime

import pytest

from src.campusstay.campusstay.core.enums import PaymentMethod, PaymentStatus
from src.campusstay.campusstay.core.exceptions import NotFoundError, ValidationError
from src.campusstay.campusstay.payments.service import PaymentService
from src.campusstay.campusstay.students.model import StudentDetails


@pytest.fixture
def svc(payments_repo, students_repo):
    return PaymentService(payments_repo, students_repo, due_days=30)


@pytest.fixture
def asha(students_repo):
    return students_repo.create(StudentDetails(name="Asha", total_amount=60000.0, joining_date=date(2026, 1, 1)))


def test_add_payment_validates_input(svc, asha):
    with pytest.raises(NotFoundError):
        svc.add_payment(404, 100, "cash")
    with pytest.raises(ValidationError):
        svc.add_payment(asha, 0, "cash")
    with pytest.raises(ValidationError):
        svc.add_payment(asha, "abc", "cash")
    with pytest.raises(ValidationError):
        svc.add_payment(asha, 100, "cheque")

    p = svc.add_payment(asha, "2500.50", "UPI", paid_at=datetime(2026, 1, 5), note=" first ")
    assert (p.amount, p.method, p.note) == (2500.5, PaymentMethod.UPI, "first")


def test_add_payment_accepts_method_member(svc, asha):
    p = svc.add_payment(asha, 100, PaymentMethod.CASH)

    assert p.method == PaymentMethod.CASH
    with pytest.raises(ValidationError):
        svc.add_payment(asha, 100, None)


def test_payments_listed_newest_first(svc, asha):
    first = svc.add_payment(asha, 100, "cash", paid_at=datetime(2026, 1, 2))
    second = svc.add_payment(asha, 200, "card", paid_at=datetime(2026, 1, 9))

    assert [p.payment_id for p in svc.list_payments_by_student(asha)] == [second.payment_id, first.payment_id]


def test_totals_status_pending_then_overdue_then_paid(svc, asha):
    svc.add_payment(asha, 20000, "bank", paid_at=datetime(2026, 1, 3))

    pending = svc.payment_totals(asha, date(2026, 1, 31))
    assert (pending.total, pending.paid, pending.balance) == (60000.0, 20000.0, 40000.0)
    assert pending.status == PaymentStatus.PENDING

    assert svc.payment_totals(asha, date(2026, 2, 1)).status == PaymentStatus.OVERDUE

    svc.add_payment(asha, 40000, "bank", paid_at=datetime(2026, 2, 2))
    assert svc.payment_totals(asha, date(2026, 3, 1)).status == PaymentStatus.PAID


def test_student_without_fee_is_paid(svc, students_repo):
    sid = students_repo.create(StudentDetails(name="Ben"))
    totals = svc.payment_totals(sid, date(2026, 6, 1))

    assert totals.balance == 0
    assert totals.status == PaymentStatus.PAID


def test_summary_and_csv_export(svc, students_repo, asha):
    ben = students_repo.create(StudentDetails(name="Ben", total_amount=1000.0))
    svc.add_payment(ben, 1000, "cash")

    rows = svc.payment_summary_all(date(2026, 1, 10))
    assert [(r.name, r.totals.status) for r in rows] == [("Asha", PaymentStatus.PENDING), ("Ben", PaymentStatus.PAID)]
    assert [r.name for r in svc.payment_summary_all(date(2026, 1, 10), status=PaymentStatus.PAID)] == ["Ben"]

    exported = list(csv.DictReader(io.StringIO(svc.export_payments_csv(date(2026, 3, 1)))))
    assert exported[0] == {
        "student_id": str(asha),
        "name": "Asha",
        "total": "60000.00",
        "paid": "0.00",
        "balance": "60000.00",
        "status": "overdue",
    }
    assert exported[1]["status"] == "paid"
