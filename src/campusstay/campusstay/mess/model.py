from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import MealSlot, PollKind


@dataclass(frozen=True)
class MessPoll:
    """A mess poll.

    WEEKLY polls pick a menu among free-form options. DAILY polls ask whether
    a student eats one meal (``eat`` / ``skip``) on ``poll_date``.
    """

    poll_id: int
    title: str
    kind: PollKind
    options: Tuple[str, ...]
    created_at: datetime
    closes_at: datetime
    closed: bool = False
    meal_slot: Optional[MealSlot] = None
    poll_date: Optional[date] = None

    def is_open(self, now: datetime) -> bool:
        return not self.closed and now < self.closes_at


@dataclass(frozen=True)
class MessVote:
    poll_id: int
    student_id: int
    option: str
    voted_at: datetime


@dataclass(frozen=True)
class PollResults:
    poll: MessPoll
    counts: Tuple[Tuple[str, int], ...]

    @property
    def total_votes(self) -> int:
        return sum(n for _, n in self.counts)
