from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Parcel


class ParcelRepository(Protocol):
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
        raise NotImplementedError

    def get(self, parcel_id: int) -> Optional[Parcel]:
        raise NotImplementedError

    def list_parcels(
        self,
        *,
        student_id: Optional[int] = None,
        pending_only: bool = False,
    ) -> Sequence[Parcel]:
        """Newest first (by received_at)."""

        raise NotImplementedError

    def mark_collected(self, *, parcel_id: int, collected_at: datetime) -> bool:
        """Only flips parcels that are still uncollected."""

        raise NotImplementedError

    def delete(self, parcel_id: int) -> bool:
        raise NotImplementedError
