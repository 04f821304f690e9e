from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RequestStatus, RequestType


@dataclass(frozen=True)
class RoomRequest:
    """A student's request to leave their room or change to another one."""

    request_id: int
    type: RequestType
    student_id: int
    status: RequestStatus
    created_at: datetime
    target_room_id: Optional[int] = None
    resolved_at: Optional[datetime] = None
    note: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.status != RequestStatus.PENDING
