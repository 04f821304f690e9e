from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from ..common.validators import clean_optional, require_id
from ..core.enums import RequestStatus, RequestType
from ..core.exceptions import ClosedError, NotFoundError, ValidationError
from ..rooms.service import RoomService
from .model import RoomRequest
from .repository import RequestRepository

logger = logging.getLogger(__name__)


class RequestService:
    """Use cases: room leave/change requests and their approval.

    Approving a request touches two collections. The room registry mutation
    runs first; the request only becomes APPROVED after it succeeded, so a
    failed move leaves the request PENDING.
    """

    def __init__(self, requests: RequestRepository, rooms: RoomService):
        self._requests = requests
        self._rooms = rooms

    def list_requests(self, status: Optional[RequestStatus] = None) -> List[RoomRequest]:
        return list(self._requests.list_requests(status=status))

    def list_student_requests(self, student_id: int) -> List[RoomRequest]:
        return list(self._requests.list_requests(student_id=int(student_id)))

    def get_request(self, request_id: int) -> RoomRequest:
        req = self._requests.get(request_id=int(request_id))
        if not req:
            raise NotFoundError("Request not found")
        return req

    def create_leave_request(
        self, student_id: int, note: Optional[str] = None, *, now: datetime | None = None
    ) -> RoomRequest:
        return self._create(RequestType.LEAVE, student_id, None, note, now)

    def create_change_request(
        self,
        student_id: int,
        target_room_id: int,
        note: Optional[str] = None,
        *,
        now: datetime | None = None,
    ) -> RoomRequest:
        if target_room_id in (None, ""):
            raise ValidationError("Target room is required for a change request")
        return self._create(RequestType.CHANGE, student_id, require_id(target_room_id, "Target room"), note, now)

    def _create(
        self,
        type: RequestType,
        student_id: int,
        target_room_id: Optional[int],
        note: Optional[str],
        now: datetime | None,
    ) -> RoomRequest:
        now = now or datetime.now()
        request_id = self._requests.create(
            type=type,
            student_id=int(student_id),
            target_room_id=target_room_id,
            note=clean_optional(note),
            created_at=now,
        )
        logger.info("Student %s filed %s request %s", student_id, type.value, request_id)
        return self.get_request(request_id)

    def approve_request(self, request_id: int, *, now: datetime | None = None) -> RoomRequest:
        req = self.get_request(request_id)
        if req.is_resolved:
            raise ClosedError("Request already resolved")

        # Phase 1: validate without touching the registry.
        if req.type == RequestType.CHANGE:
            if req.target_room_id is None:
                raise ValidationError("Missing target room")
            self._rooms.validate_move(req.student_id, req.target_room_id)

        # Phase 2: apply the room registry side effect.
        if req.type == RequestType.LEAVE:
            self._rooms.unbook_student(req.student_id)
        else:
            self._rooms.move_student(req.student_id, req.target_room_id)

        # Phase 3: commit the approval.
        now = now or datetime.now()
        if not self._requests.resolve(request_id=req.request_id, status=RequestStatus.APPROVED, resolved_at=now):
            logger.warning("Request %s was resolved concurrently after its room change was applied", req.request_id)
            raise ClosedError("Request already resolved")

        logger.info("Approved %s request %s for student %s", req.type.value, req.request_id, req.student_id)
        return self.get_request(req.request_id)

    def reject_request(
        self, request_id: int, note: Optional[str] = None, *, now: datetime | None = None
    ) -> RoomRequest:
        req = self.get_request(request_id)
        if req.is_resolved:
            raise ClosedError("Request already resolved")

        now = now or datetime.now()
        if not self._requests.resolve(
            request_id=req.request_id,
            status=RequestStatus.REJECTED,
            resolved_at=now,
            note=clean_optional(note),
        ):
            raise ClosedError("Request already resolved")

        logger.info("Rejected %s request %s", req.type.value, req.request_id)
        return self.get_request(req.request_id)

    def clear_all_requests(self) -> int:
        removed = self._requests.delete_all()
        logger.warning("Cleared all room requests (%d removed)", removed)
        return removed
