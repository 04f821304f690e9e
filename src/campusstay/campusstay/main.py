from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_students, list_tables
from .database.connection import DBConfig

from .attendance.model import GeoPoint
from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .complaints.controller import register as register_complaints
from .events.controller import register as register_events
from .mess.controller import register as register_mess
from .parcels.controller import register as register_parcels
from .payments.controller import register as register_payments
from .requests.controller import register as register_requests
from .rooms.controller import register as register_rooms
from .students.controller import register as register_students

logger = logging.getLogger("campusstay")

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _seed_geofence(container: Container, settings) -> None:
    lat = getattr(settings, "GEOFENCE_LAT", None)
    lng = getattr(settings, "GEOFENCE_LNG", None)
    radius = getattr(settings, "GEOFENCE_RADIUS_M", None)
    if lat is None or lng is None or radius is None:
        return
    if container.attendance_service.get_geofence() is not None:
        return
    container.attendance_service.set_geofence(GeoPoint(lat=float(lat), lng=float(lng)), radius)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        # Helpful startup info to avoid "connected but no tables" confusion.
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            ensure_demo_students(db_config)
            logger.info("demo seed ready")

        container = build_container(db_config=db_config, settings=settings)

    _seed_geofence(container, settings)

    register_students(app, container)
    register_rooms(app, container)
    register_requests(app, container)
    register_attendance(app, container)
    register_parcels(app, container)
    register_events(app, container)
    register_mess(app, container)
    register_complaints(app, container)
    register_payments(app, container)

    return app
