from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ComplaintStatus


@dataclass(frozen=True)
class Complaint:
    """An anonymous complaint. No author is stored, only upvote keys."""

    complaint_id: int
    text: str
    category: str
    status: ComplaintStatus
    created_at: datetime
    upvotes: int = 0
    resolved_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.status == ComplaintStatus.OPEN
