from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import MealSlot, PollKind
from .model import MessPoll, MessVote


class MessPollRepository(Protocol):
    def create(
        self,
        *,
        title: str,
        kind: PollKind,
        options: Sequence[str],
        created_at: datetime,
        closes_at: datetime,
        meal_slot: Optional[MealSlot] = None,
        poll_date: Optional[date] = None,
    ) -> int:
        raise NotImplementedError

    def get(self, poll_id: int) -> Optional[MessPoll]:
        raise NotImplementedError

    def list_polls(self, *, include_closed: bool = True) -> Sequence[MessPoll]:
        """Newest first."""

        raise NotImplementedError

    def close(self, poll_id: int) -> bool:
        raise NotImplementedError

    def upsert_vote(self, vote: MessVote) -> None:
        """Insert or replace the student's vote on that poll."""

        raise NotImplementedError

    def list_votes(self, poll_id: int) -> Sequence[MessVote]:
        raise NotImplementedError

    def count_student_votes(self, *, student_id: int, option: str, kind: PollKind) -> int:
        raise NotImplementedError
