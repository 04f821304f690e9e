from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Protocol, Sequence

from ..core.enums import PaymentMethod
from .model import Payment


class PaymentRepository(Protocol):
    def create(
        self,
        *,
        student_id: int,
        amount: float,
        method: PaymentMethod,
        paid_at: datetime,
        note: Optional[str],
    ) -> int:
        raise NotImplementedError

    def list_by_student(self, student_id: int) -> Sequence[Payment]:
        """Newest first."""

        raise NotImplementedError

    def paid_by_student(self) -> Dict[int, float]:
        """Sum of payments per student id (students without payments are absent)."""

        raise NotImplementedError
