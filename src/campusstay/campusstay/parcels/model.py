from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Parcel:
    """A parcel held at the hostel desk until the student collects it.

    The OTP is shown to the student and checked by the warden on handover.
    """

    parcel_id: int
    student_id: int
    parcel_code: str
    received_at: datetime
    otp: str
    collected: bool = False
    collected_at: Optional[datetime] = None
    carrier: Optional[str] = None
    note: Optional[str] = None
