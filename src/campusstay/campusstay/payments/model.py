from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PaymentMethod, PaymentStatus


@dataclass(frozen=True)
class Payment:
    payment_id: int
    student_id: int
    amount: float
    method: PaymentMethod
    paid_at: datetime
    note: Optional[str] = None


@dataclass(frozen=True)
class PaymentTotals:
    """Fee position of one student. ``balance`` may go negative (advance)."""

    total: float
    paid: float
    balance: float
    status: PaymentStatus


@dataclass(frozen=True)
class PaymentSummaryRow:
    student_id: int
    name: str
    totals: PaymentTotals
