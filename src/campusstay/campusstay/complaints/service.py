from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from ..common.validators import require_non_empty
from ..core.constants import COMPLAINT_CATEGORIES
from ..core.enums import ComplaintStatus
from ..core.exceptions import ClosedError, NotFoundError, ValidationError
from .model import Complaint
from .repository import ComplaintRepository

logger = logging.getLogger(__name__)


class ComplaintService:
    """Use case: anonymous complaints feed with one upvote per voter."""

    def __init__(self, complaints: ComplaintRepository):
        self._complaints = complaints

    def create_complaint(self, text: str, category: str, *, now: Optional[datetime] = None) -> Complaint:
        body = require_non_empty(text or "", "Complaint")
        wanted = (category or "").strip().casefold()
        match = next((c for c in COMPLAINT_CATEGORIES if c.casefold() == wanted), None)
        if match is None:
            raise ValidationError(f"Category must be one of: {', '.join(COMPLAINT_CATEGORIES)}")

        complaint_id = self._complaints.create(text=body, category=match, created_at=now or datetime.now())
        logger.info("Complaint %s filed under %s", complaint_id, match)
        return self.get_complaint(complaint_id)

    def get_complaint(self, complaint_id: int) -> Complaint:
        c = self._complaints.get(int(complaint_id))
        if not c:
            raise NotFoundError("Complaint not found")
        return c

    def list_active_complaints(self) -> List[Complaint]:
        open_ones = self._complaints.list_complaints(status=ComplaintStatus.OPEN)
        return sorted(open_ones, key=lambda c: (-c.upvotes, -c.created_at.timestamp(), -c.complaint_id))

    def list_all_complaints(self) -> List[Complaint]:
        return sorted(
            self._complaints.list_complaints(),
            key=lambda c: (not c.is_open, -c.upvotes, -c.created_at.timestamp()),
        )

    def upvote_complaint(self, complaint_id: int, voter_key: str) -> Complaint:
        c = self.get_complaint(complaint_id)
        if not c.is_open:
            raise ClosedError("Complaint already resolved")
        key = require_non_empty(str(voter_key or ""), "Voter")
        if self._complaints.add_upvote(complaint_id=c.complaint_id, voter_key=key):
            logger.info("Complaint %s upvoted", c.complaint_id)
        return self.get_complaint(c.complaint_id)

    def has_upvoted(self, complaint_id: int, voter_key: str) -> bool:
        return self._complaints.has_upvote(complaint_id=int(complaint_id), voter_key=str(voter_key))

    def resolve_complaint(self, complaint_id: int, *, now: Optional[datetime] = None) -> Complaint:
        if not self._complaints.resolve(complaint_id=int(complaint_id), resolved_at=now or datetime.now()):
            raise NotFoundError("Complaint not found")
        logger.info("Complaint %s resolved", complaint_id)
        return self.get_complaint(complaint_id)
