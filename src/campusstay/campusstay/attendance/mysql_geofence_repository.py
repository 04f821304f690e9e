from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchone
from .model import GeofenceSettings, GeoPoint
from .repository import GeofenceRepository

# The hostel has a single geofence; it lives in row 1.
_SETTINGS_ID = 1


class MySQLGeofenceRepository(GeofenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[GeofenceSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT center_lat, center_lng, radius_m FROM geofence_settings WHERE settings_id=%s",
                (_SETTINGS_ID,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return GeofenceSettings(
                center=GeoPoint(lat=as_float(r["center_lat"]), lng=as_float(r["center_lng"])),
                radius_m=as_float(r["radius_m"]),
            )

    def save(self, settings: GeofenceSettings) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO geofence_settings(settings_id, center_lat, center_lng, radius_m)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    center_lat=VALUES(center_lat),
                    center_lng=VALUES(center_lng),
                    radius_m=VALUES(radius_m)
                """,
                (_SETTINGS_ID, settings.center.lat, settings.center.lng, settings.radius_m),
            )

    def clear(self) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM geofence_settings WHERE settings_id=%s", (_SETTINGS_ID,))
