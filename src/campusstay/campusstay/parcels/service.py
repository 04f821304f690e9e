from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import List, Optional

from ..common.validators import clean_optional, require_non_empty
from ..core.exceptions import ClosedError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .model import Parcel
from .repository import ParcelRepository

logger = logging.getLogger(__name__)


def generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


class ParcelService:
    """Use case: log parcels at the desk and hand them over against an OTP."""

    def __init__(self, parcels: ParcelRepository, students: StudentRepository):
        self._parcels = parcels
        self._students = students

    def create_parcel(
        self,
        student_id: int,
        parcel_code: str,
        carrier: Optional[str] = None,
        received_at: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> Parcel:
        if not self._students.get_by_id(int(student_id)):
            raise NotFoundError("Student not found")
        code = require_non_empty(parcel_code, "Parcel code")

        parcel_id = self._parcels.create(
            student_id=int(student_id),
            parcel_code=code,
            carrier=clean_optional(carrier),
            received_at=received_at or datetime.now(),
            otp=generate_otp(),
            note=clean_optional(note),
        )
        logger.info("Parcel %s (%s) logged for student %s", parcel_id, code, student_id)
        return self.get_parcel(parcel_id)

    def get_parcel(self, parcel_id: int) -> Parcel:
        p = self._parcels.get(int(parcel_id))
        if not p:
            raise NotFoundError("Parcel not found")
        return p

    def list_all_parcels(self) -> List[Parcel]:
        return list(self._parcels.list_parcels())

    def list_pending_parcels(self) -> List[Parcel]:
        return list(self._parcels.list_parcels(pending_only=True))

    def list_parcels_by_student(self, student_id: int) -> List[Parcel]:
        return list(self._parcels.list_parcels(student_id=int(student_id)))

    def mark_collected_with_otp(self, parcel_id: int, otp: str, *, now: Optional[datetime] = None) -> Parcel:
        p = self.get_parcel(parcel_id)
        if p.collected:
            raise ClosedError("Already collected")
        if not secrets.compare_digest(p.otp, (otp or "").strip()):
            raise ValidationError("Invalid OTP")

        if not self._parcels.mark_collected(parcel_id=p.parcel_id, collected_at=now or datetime.now()):
            raise ClosedError("Already collected")
        logger.info("Parcel %s collected by student %s", p.parcel_id, p.student_id)
        return self.get_parcel(p.parcel_id)

    def admin_override_collected(self, parcel_id: int, *, now: Optional[datetime] = None) -> Parcel:
        p = self.get_parcel(parcel_id)
        if not p.collected:
            self._parcels.mark_collected(parcel_id=p.parcel_id, collected_at=now or datetime.now())
            logger.info("Parcel %s marked collected by warden without OTP", p.parcel_id)
        return self.get_parcel(p.parcel_id)

    def delete_parcel(self, parcel_id: int) -> None:
        if not self._parcels.delete(int(parcel_id)):
            raise NotFoundError("Parcel not found")
        logger.info("Parcel %s deleted", parcel_id)
