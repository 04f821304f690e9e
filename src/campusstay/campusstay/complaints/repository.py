from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ComplaintStatus
from .model import Complaint


class ComplaintRepository(Protocol):
    def create(self, *, text: str, category: str, created_at: datetime) -> int:
        raise NotImplementedError

    def get(self, complaint_id: int) -> Optional[Complaint]:
        raise NotImplementedError

    def list_complaints(self, *, status: Optional[ComplaintStatus] = None) -> Sequence[Complaint]:
        raise NotImplementedError

    def add_upvote(self, *, complaint_id: int, voter_key: str) -> bool:
        """False when this voter already upvoted."""

        raise NotImplementedError

    def has_upvote(self, *, complaint_id: int, voter_key: str) -> bool:
        raise NotImplementedError

    def resolve(self, *, complaint_id: int, resolved_at: datetime) -> bool:
        raise NotImplementedError
