"""Example: drive the service layer directly (no Flask).

Controllers stay thin; the hostel rules live in the services.
"""

import importlib

from config import get_settings_module

from src.campusstay.campusstay.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    for room in container.room_service.list_rooms():
        print(f"{room.name}: {len(room.occupants)}/{room.capacity} (free {room.available_seats})")

    session = container.attendance_service.get_active_attendance_session()
    print("active attendance session:", session.expires_at if session else None)

    for row in container.payment_service.payment_summary_all():
        print(row.name, row.totals.balance, row.totals.status.value)


if __name__ == "__main__":
    main()
