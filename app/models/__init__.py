"""SQLAlchemy models."""

from __future__ import annotations

from app.models.alert import Alert
from app.models.alert_recipient import AlertRecipient
from app.models.help_request import HelpRequest
from app.models.volunteer import Volunteer

__all__ = [
    "Alert",
    "AlertRecipient",
    "HelpRequest",
    "Volunteer",
]
