from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional

from ..common.validators import require_non_empty
from ..core.constants import DAILY_MEAL_OPTIONS, SKIP_OPTION
from ..core.enums import MealSlot, PollKind
from ..core.exceptions import ClosedError, InvalidOptionError, NotFoundError, ValidationError
from .model import MessPoll, MessVote, PollResults
from .repository import MessPollRepository

logger = logging.getLogger(__name__)


def _clean_options(options: Iterable[str]) -> List[str]:
    seen = set()
    cleaned = []
    for raw in options or ():
        text = str(raw or "").strip()
        if text and text.casefold() not in seen:
            seen.add(text.casefold())
            cleaned.append(text)
    return cleaned


class MessService:
    """Use cases: weekly menu polls and daily eat/skip meal polls."""

    def __init__(self, polls: MessPollRepository):
        self._polls = polls

    def create_poll(
        self,
        title: str,
        options: Iterable[str],
        closes_at: datetime,
        kind: PollKind = PollKind.WEEKLY,
        *,
        now: Optional[datetime] = None,
    ) -> MessPoll:
        now = now or datetime.now()
        title = require_non_empty(title or "", "Poll title")
        cleaned = _clean_options(options)
        if len(cleaned) < 2:
            raise ValidationError("A poll needs at least two distinct options")
        if closes_at <= now:
            raise ValidationError("Closing time must be in the future")

        poll_id = self._polls.create(
            title=title,
            kind=PollKind(kind),
            options=cleaned,
            created_at=now,
            closes_at=closes_at,
        )
        logger.info("Mess poll %s (%s) open until %s", poll_id, title, closes_at)
        return self.get_poll(poll_id)

    def create_daily_meal_poll(
        self,
        meal_slot: MealSlot | str,
        poll_date: date,
        closes_at: datetime,
        *,
        now: Optional[datetime] = None,
    ) -> MessPoll:
        now = now or datetime.now()
        try:
            slot = MealSlot(str.lower(meal_slot))
        except (TypeError, ValueError):
            raise ValidationError("Meal slot must be breakfast, lunch or dinner")
        if closes_at <= now:
            raise ValidationError("Closing time must be in the future")

        poll_id = self._polls.create(
            title=f"{slot.value.capitalize()} on {poll_date.isoformat()}",
            kind=PollKind.DAILY,
            options=DAILY_MEAL_OPTIONS,
            created_at=now,
            closes_at=closes_at,
            meal_slot=slot,
            poll_date=poll_date,
        )
        logger.info("Daily %s poll %s created for %s", slot.value, poll_id, poll_date)
        return self.get_poll(poll_id)

    def get_poll(self, poll_id: int) -> MessPoll:
        poll = self._polls.get(int(poll_id))
        if not poll:
            raise NotFoundError("Poll not found")
        return poll

    def list_polls(self) -> List[MessPoll]:
        return list(self._polls.list_polls())

    def list_active_polls(self, now: Optional[datetime] = None) -> List[MessPoll]:
        now = now or datetime.now()
        return [p for p in self._polls.list_polls(include_closed=False) if p.is_open(now)]

    def vote(self, poll_id: int, student_id: int, option: str, *, now: Optional[datetime] = None) -> MessVote:
        now = now or datetime.now()
        poll = self.get_poll(poll_id)
        if not poll.is_open(now):
            raise ClosedError("Poll is closed")

        wanted = (option or "").strip().casefold()
        match = next((o for o in poll.options if o.casefold() == wanted), None)
        if match is None:
            raise InvalidOptionError("Invalid option")

        vote = MessVote(poll_id=poll.poll_id, student_id=int(student_id), option=match, voted_at=now)
        self._polls.upsert_vote(vote)
        logger.info("Student %s voted %r on poll %s", student_id, match, poll.poll_id)
        return vote

    def close_poll(self, poll_id: int) -> MessPoll:
        if not self._polls.close(int(poll_id)):
            raise NotFoundError("Poll not found")
        logger.info("Mess poll %s closed", poll_id)
        return self.get_poll(poll_id)

    def poll_results(self, poll_id: int) -> PollResults:
        poll = self.get_poll(poll_id)
        counts = {o: 0 for o in poll.options}
        for v in self._polls.list_votes(poll.poll_id):
            if v.option in counts:
                counts[v.option] += 1
        return PollResults(poll=poll, counts=tuple(counts.items()))

    def student_vote(self, poll_id: int, student_id: int) -> Optional[str]:
        for v in self._polls.list_votes(int(poll_id)):
            if v.student_id == int(student_id):
                return v.option
        return None

    def skipped_meals_count(self, student_id: int) -> int:
        return self._polls.count_student_votes(student_id=int(student_id), option=SKIP_OPTION, kind=PollKind.DAILY)
