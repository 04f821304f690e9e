from __future__ import annotations

import pytest

from src.campusstay.campusstay.core.exceptions import (
    AlreadyBookedError,
    NoCurrentRoomError,
    NotFoundError,
    RoomFullError,
    ValidationError,
)
from src.campusstay.campusstay.rooms.service import RoomService


@pytest.fixture
def svc(rooms_repo):
    return RoomService(rooms_repo)


def test_booking_walkthrough_a101(svc):
    a101 = svc.create_room("A-101", 2)
    b202 = svc.create_room("B-202", 2)

    first = svc.book_room(1, a101.room_id)
    assert first.room.occupants == (1,)
    assert first.roommates == ()
    assert svc.available_seats(a101.room_id) == 1

    with pytest.raises(AlreadyBookedError):
        svc.book_room(1, b202.room_id)

    second = svc.book_room(2, a101.room_id)
    assert second.room.occupants == (1, 2)
    assert second.roommates == (1,)

    with pytest.raises(RoomFullError):
        svc.book_room(3, a101.room_id)
    assert svc.find_student_room(3) is None


def test_book_unknown_room_is_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.book_room(1, 999)


def test_already_booked_wins_over_unknown_room(svc):
    room = svc.create_room("A-101")
    svc.book_room(1, room.room_id)

    with pytest.raises(AlreadyBookedError):
        svc.book_room(1, 999)


def test_create_room_floors_capacity_and_defaults_to_two(svc):
    assert svc.create_room("C-1", "3.9").capacity == 3
    assert svc.create_room("C-2", 0).capacity == 1
    assert svc.create_room("C-3").capacity == 2

    with pytest.raises(ValidationError):
        svc.create_room("C-4", "lots")


def test_create_room_trims_name_and_accepts_blank(svc):
    assert svc.create_room("  D-1  ").name == "D-1"
    assert svc.create_room("   ", 2).name == ""


def test_list_rooms_sorted_by_name(svc):
    svc.create_room("b-2")
    svc.create_room("A-1")
    svc.create_room("a-3")

    assert [r.name for r in svc.list_rooms()] == ["A-1", "a-3", "b-2"]


def test_shrinking_capacity_drops_latest_bookings(svc):
    room = svc.create_room("D-1", 3)
    for sid in (10, 11, 12):
        svc.book_room(sid, room.room_id)

    shrunk = svc.set_room_capacity(room.room_id, 1)

    assert shrunk.capacity == 1
    assert shrunk.occupants == (10,)
    assert svc.find_student_room(12) is None


def test_set_capacity_of_unknown_room(svc):
    with pytest.raises(NotFoundError):
        svc.set_room_capacity(42, 3)


def test_delete_room_unhouses_occupants(svc):
    room = svc.create_room("E-1")
    svc.book_room(5, room.room_id)

    svc.delete_room(room.room_id)

    assert svc.find_student_room(5) is None
    assert svc.available_seats(room.room_id) == 0
    with pytest.raises(NotFoundError):
        svc.delete_room(room.room_id)


def test_move_student_checks_target_then_current_room(svc):
    a = svc.create_room("A", 1)
    b = svc.create_room("B", 1)

    with pytest.raises(NotFoundError):
        svc.validate_move(1, 999)
    with pytest.raises(NoCurrentRoomError):
        svc.validate_move(1, b.room_id)

    svc.book_room(1, a.room_id)
    svc.book_room(2, b.room_id)
    with pytest.raises(RoomFullError):
        svc.move_student(1, b.room_id)

    # A full room stays full for its own occupant.
    with pytest.raises(RoomFullError):
        svc.move_student(1, a.room_id)
    assert svc.find_student_room(1).room_id == a.room_id


def test_move_into_own_room_with_space_requeues_student(svc):
    a = svc.create_room("A", 3)
    svc.book_room(1, a.room_id)
    svc.book_room(2, a.room_id)

    assert svc.move_student(1, a.room_id).occupants == (2, 1)


def test_move_student_frees_old_seat(svc):
    a = svc.create_room("A", 1)
    b = svc.create_room("B", 2)
    svc.book_room(1, a.room_id)

    moved = svc.move_student(1, b.room_id)

    assert moved.occupants == (1,)
    assert svc.get_room(a.room_id).occupants == ()


def test_unbook_and_reset(svc):
    a = svc.create_room("A", 2)
    svc.book_room(1, a.room_id)
    svc.book_room(2, a.room_id)

    svc.unbook_student(1)
    svc.unbook_student(1)
    assert svc.get_room(a.room_id).occupants == (2,)

    assert svc.reset_all_bookings() == 1
    assert svc.get_room(a.room_id).occupants == ()
