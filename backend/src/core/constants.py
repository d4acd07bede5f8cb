"""Application constants and configuration values."""

from core.config import FRONTEND_URL

# Database field lengths
MAX_REASON_LENGTH = 500

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
_CORS_ORIGINS_RAW = [
    "http://localhost:5173",      # React dev server (Vite)
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# User roles
ROLE_OWNER = "OWNER"
ROLE_VET = "VET"
ROLE_ADMIN = "ADMIN"

# Appointment lifecycle
APPOINTMENT_STATUS_BOOKED = "BOOKED"
APPOINTMENT_STATUS_CANCELLED = "CANCELLED"
APPOINTMENT_STATUS_COMPLETED = "COMPLETED"
APPOINTMENT_STATUSES = (
    APPOINTMENT_STATUS_BOOKED,
    APPOINTMENT_STATUS_CANCELLED,
    APPOINTMENT_STATUS_COMPLETED,
)

# Payment records
PAYMENT_STATUS_SUCCESS = "SUCCESS"

# Weekly availability (minute-of-day bounds, 0=Sunday weekday numbering)
MINUTES_PER_DAY = 1440
MIN_WEEKDAY = 0
MAX_WEEKDAY = 6

# Appointment listing
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Error codes returned in HTTPException detail: {"error": <code>, "message": <text>}
ERROR_INVALID_INPUT = "invalid_input"
ERROR_INVALID_FORMAT = "invalid_format"
ERROR_INVALID_RANGE = "invalid_range"
ERROR_NOT_FOUND = "not_found"
ERROR_PET_ARCHIVED = "pet_archived"
ERROR_VET_UNAVAILABLE = "vet_unavailable"
ERROR_OUTSIDE_AVAILABILITY = "outside_availability"
ERROR_SLOT_CONFLICT = "slot_conflict"
ERROR_INVALID_STATE = "invalid_state"
ERROR_PAYMENT_REQUIRED = "payment_required"
ERROR_UNSUPPORTED_TRANSITION = "unsupported_transition"
ERROR_FORBIDDEN = "forbidden"
