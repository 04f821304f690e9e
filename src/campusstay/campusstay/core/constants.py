"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ROOM_CAPACITY = 2
DEFAULT_ATTENDANCE_QR_MINUTES = 60
DEFAULT_PAYMENT_DUE_DAYS = 30
DEFAULT_PASSWORD_LENGTH = 12

EARTH_RADIUS_M = 6_371_000

PASSWORD_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz23456789!@#$%^&*"

COMPLAINT_CATEGORIES = (
    "Room",
    "Mess",
    "Cleanliness",
    "Electricity",
    "Water",
    "Internet",
    "Security",
    "Other",
)

EVENT_TYPES = ("Cultural", "Sports", "Workshop", "Festival", "Party", "Other")

DAILY_MEAL_OPTIONS = ("eat", "skip")
SKIP_OPTION = "skip"
