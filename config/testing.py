import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campusstay_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

WARDEN_USERNAME = "warden"
WARDEN_PASSWORD = "warden123"

ATTENDANCE_QR_MINUTES = 60
PAYMENT_DUE_DAYS = 30

GEOFENCE_LAT = None
GEOFENCE_LNG = None
GEOFENCE_RADIUS_M = None

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
