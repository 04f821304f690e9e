from __future__ import annotations

from dataclasses import asdict

from flask import Flask, session

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.web import (
    current_student_id,
    json_endpoint,
    login_required,
    ok,
    payload,
    student_required,
    warden_required,
)
from ..container import Container
from ..core.enums import PollKind, Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _closes_at(data: dict):
        try:
            return parse_iso_datetime(str(data.get("closes_at") or ""))
        except ValueError:
            raise ValidationError("Closing time must be an ISO date-time")

    def _results_view(results) -> dict:
        view = asdict(results.poll)
        view["counts"] = dict(results.counts)
        view["total_votes"] = results.total_votes
        if session.get("role") == Role.STUDENT.value:
            view["my_vote"] = container.mess_service.student_vote(results.poll.poll_id, current_student_id())
        return view

    @app.route("/api/mess/polls", methods=["GET"], endpoint="list_polls")
    @login_required
    @json_endpoint
    def list_polls():
        if session.get("role") == Role.WARDEN.value:
            polls = container.mess_service.list_polls()
        else:
            polls = container.mess_service.list_active_polls()
        return ok([_results_view(container.mess_service.poll_results(p.poll_id)) for p in polls])

    @app.route("/api/mess/polls", methods=["POST"], endpoint="create_poll")
    @warden_required
    @json_endpoint
    def create_poll():
        data = payload()
        options = data.get("options") or []
        if isinstance(options, str):
            options = options.split(",")
        try:
            kind = PollKind(data.get("kind") or PollKind.WEEKLY.value)
        except ValueError:
            raise ValidationError("Unknown poll kind")
        poll = container.mess_service.create_poll(data.get("title", ""), options, _closes_at(data), kind)
        return ok(poll, message="Poll created", status=201)

    @app.route("/api/mess/polls/daily", methods=["POST"], endpoint="create_daily_poll")
    @warden_required
    @json_endpoint
    def create_daily_poll():
        data = payload()
        try:
            poll_date = parse_iso_date(str(data.get("poll_date") or ""))
        except ValueError:
            raise ValidationError("Poll date must be YYYY-MM-DD")
        poll = container.mess_service.create_daily_meal_poll(data.get("meal_slot", ""), poll_date, _closes_at(data))
        return ok(poll, message="Meal poll created", status=201)

    @app.route("/api/mess/polls/<int:poll_id>", methods=["GET"], endpoint="get_poll")
    @login_required
    @json_endpoint
    def get_poll(poll_id: int):
        return ok(_results_view(container.mess_service.poll_results(poll_id)))

    @app.route("/api/mess/polls/<int:poll_id>/vote", methods=["POST"], endpoint="vote_poll")
    @student_required
    @json_endpoint
    def vote_poll(poll_id: int):
        vote = container.mess_service.vote(poll_id, current_student_id(), payload().get("option", ""))
        return ok(vote, message="Vote recorded")

    @app.route("/api/mess/polls/<int:poll_id>/close", methods=["POST"], endpoint="close_poll")
    @warden_required
    @json_endpoint
    def close_poll(poll_id: int):
        return ok(container.mess_service.close_poll(poll_id), message="Poll closed")

    @app.route("/api/me/skipped-meals", methods=["GET"], endpoint="my_skipped_meals")
    @student_required
    @json_endpoint
    def my_skipped_meals():
        return ok({"skipped": container.mess_service.skipped_meals_count(current_student_id())})
