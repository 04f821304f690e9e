from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Portal roles used for access control."""

    WARDEN = "warden"
    STUDENT = "student"


class RequestType(str, Enum):
    LEAVE = "leave"
    CHANGE = "change"


class RequestStatus(str, Enum):
    """Lifecycle of a room request. APPROVED and REJECTED are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


class EventStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class Organizer(str, Enum):
    STUDENT = "student"
    WARDEN = "warden"


class PollKind(str, Enum):
    WEEKLY = "weekly"
    DAILY = "daily"


class MealSlot(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class ComplaintStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class PaymentMethod(str, Enum):
    CASH = "cash"
    UPI = "upi"
    CARD = "card"
    BANK = "bank"


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"
