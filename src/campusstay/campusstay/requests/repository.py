from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus, RequestType
from .model import RoomRequest


class RequestRepository(Protocol):
    def create(
        self,
        *,
        type: RequestType,
        student_id: int,
        target_room_id: Optional[int],
        note: Optional[str],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[RoomRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        student_id: Optional[int] = None,
    ) -> Sequence[RoomRequest]:
        """Newest first."""

        raise NotImplementedError

    def resolve(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        resolved_at: datetime,
        note: Optional[str] = None,
    ) -> bool:
        """Move a pending request to a terminal status.

        Returns False when the request is missing or no longer pending. A None
        note keeps the existing one.
        """

        raise NotImplementedError

    def delete_all(self) -> int:
        raise NotImplementedError
