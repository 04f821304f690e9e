import os


def _optional_float(name: str):
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campusstay_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

WARDEN_USERNAME = os.getenv("WARDEN_USERNAME", "warden")
WARDEN_PASSWORD = os.getenv("WARDEN_PASSWORD", "please-set-WARDEN_PASSWORD")

ATTENDANCE_QR_MINUTES = int(os.getenv("ATTENDANCE_QR_MINUTES", "60"))
PAYMENT_DUE_DAYS = int(os.getenv("PAYMENT_DUE_DAYS", "30"))

GEOFENCE_LAT = _optional_float("GEOFENCE_LAT")
GEOFENCE_LNG = _optional_float("GEOFENCE_LNG")
GEOFENCE_RADIUS_M = _optional_float("GEOFENCE_RADIUS_M")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
