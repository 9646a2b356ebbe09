"""Request lifecycle constants."""

from __future__ import annotations

# Request statuses (stored lower-case, compared case-insensitively)
STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_COMPLETED = "completed"
STATUS_EMERGENCY = "emergency"

REQUEST_STATUSES = (STATUS_PENDING, STATUS_ACCEPTED, STATUS_COMPLETED, STATUS_EMERGENCY)

REQUEST_CATEGORIES = ("Medical", "Rescue", "Supplies", "Shelter", "Other")
URGENCY_LEVELS = ("Low", "Medium", "High", "Critical")

# Derived volunteer availability
AVAILABILITY_AVAILABLE = "available"
AVAILABILITY_BUSY = "busy"
AVAILABILITY_OFFLINE = "offline"

# Minimum digits for a dialable phone number after normalization
MIN_PHONE_DIGITS = 7

# Earth radius used by the proximity query
EARTH_RADIUS_KM = 6371.0

COMPLETION_SMS_BODY = (
    "Your request has been completed by our volunteer. "
    "Thank you for using the RescueConnect crisis response platform."
)
