"""Domain errors and warning codes for the request lifecycle."""

from __future__ import annotations

from fastapi import status

# Warning codes attached to otherwise-successful lifecycle outcomes
NOTIFICATION_FAILED = "NOTIFICATION_FAILED"
NO_RECIPIENTS_FOUND = "NO_RECIPIENTS_FOUND"
PARTIAL_DELIVERY_FAILURE = "PARTIAL_DELIVERY_FAILURE"


class LifecycleError(Exception):
    """Base error for lifecycle operations, carrying a machine-readable code."""

    code = "LIFECYCLE_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class RequestNotFound(LifecycleError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class AlreadyClaimed(LifecycleError):
    code = "ALREADY_CLAIMED"
    status_code = status.HTTP_404_NOT_FOUND


class NotEligible(LifecycleError):
    code = "NOT_ELIGIBLE"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidContact(LifecycleError):
    code = "INVALID_CONTACT"
    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateLocation(LifecycleError):
    code = "DUPLICATE_LOCATION"
    status_code = status.HTTP_409_CONFLICT


class AlertPersistenceError(LifecycleError):
    """Alert transaction rolled back; no alert or recipient rows exist."""

    code = "ALERT_PERSISTENCE_FAILED"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class NotificationError(Exception):
    """Raised by a notifier when an email or SMS could not be dispatched."""
