import os


def _optional_float(name: str):
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campusstay_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Warden login (single account, not stored in the database)
WARDEN_USERNAME = os.getenv("WARDEN_USERNAME", "warden")
WARDEN_PASSWORD = os.getenv("WARDEN_PASSWORD", "warden123")

# How long a generated attendance QR stays valid
ATTENDANCE_QR_MINUTES = int(os.getenv("ATTENDANCE_QR_MINUTES", "60"))
# Fees become overdue this many days after the joining date
PAYMENT_DUE_DAYS = int(os.getenv("PAYMENT_DUE_DAYS", "30"))

# Optional geofence applied on startup when none is stored yet
GEOFENCE_LAT = _optional_float("GEOFENCE_LAT")
GEOFENCE_LNG = _optional_float("GEOFENCE_LNG")
GEOFENCE_RADIUS_M = _optional_float("GEOFENCE_RADIUS_M")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
