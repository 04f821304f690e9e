from __future__ import annotations

from flask import Flask

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


def register(app: Flask, container: Container) -> None:
    def _room_view(room) -> dict:
        return {
            "room_id": room.room_id,
            "name": room.name,
            "capacity": room.capacity,
            "occupants": list(room.occupants),
            "available_seats": room.available_seats,
        }

    @app.route("/api/rooms", methods=["GET"], endpoint="list_rooms")
    @login_required
    @json_endpoint
    def list_rooms():
        return ok([_room_view(r) for r in container.room_service.list_rooms()])

    @app.route("/api/rooms", methods=["POST"], endpoint="create_room")
    @warden_required
    @json_endpoint
    def create_room():
        data = payload()
        room = container.room_service.create_room(data.get("name", ""), data.get("capacity", 2))
        return ok(_room_view(room), message="Room created", status=201)

    @app.route("/api/rooms/<int:room_id>", methods=["DELETE"], endpoint="delete_room")
    @warden_required
    @json_endpoint
    def delete_room(room_id: int):
        container.room_service.delete_room(room_id)
        return ok(message="Room deleted")

    @app.route("/api/rooms/<int:room_id>/capacity", methods=["POST"], endpoint="set_room_capacity")
    @warden_required
    @json_endpoint
    def set_room_capacity(room_id: int):
        room = container.room_service.set_room_capacity(room_id, payload().get("capacity"))
        return ok(_room_view(room), message="Capacity updated")

    @app.route("/api/rooms/<int:room_id>/book", methods=["POST"], endpoint="book_room")
    @student_required
    @json_endpoint
    def book_room(room_id: int):
        result = container.room_service.book_room(current_student_id(), room_id)
        return ok(
            {"room": _room_view(result.room), "roommates": list(result.roommates)},
            message=f"Booked {result.room.name}",
        )

    @app.route("/api/rooms/reset", methods=["POST"], endpoint="reset_bookings")
    @warden_required
    @json_endpoint
    def reset_bookings():
        cleared = container.room_service.reset_all_bookings()
        return ok({"cleared": cleared}, message="All bookings cleared")

    @app.route("/api/rooms/occupants/<int:student_id>", methods=["DELETE"], endpoint="unbook_student")
    @warden_required
    @json_endpoint
    def unbook_student(student_id: int):
        container.room_service.unbook_student(student_id)
        return ok(message="Student removed from room")

    @app.route("/api/me/room", methods=["GET"], endpoint="my_room")
    @student_required
    @json_endpoint
    def my_room():
        room = container.room_service.find_student_room(current_student_id())
        return ok(_room_view(room) if room else {})
