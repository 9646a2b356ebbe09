"""Volunteer location and derived availability."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.lifecycle_policies import (
    AVAILABILITY_AVAILABLE,
    AVAILABILITY_BUSY,
    AVAILABILITY_OFFLINE,
    STATUS_ACCEPTED,
)
from app.models.help_request import HelpRequest
from app.models.volunteer import Volunteer
from app.schemas.volunteer import VolunteerSummary


def update_location(db: Session, volunteer: Volunteer, latitude: float, longitude: float) -> Volunteer:
    """Store the volunteer's current location; sharing a location counts as being seen."""
    volunteer.latitude = latitude
    volunteer.longitude = longitude
    volunteer.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(volunteer)
    return volunteer


def _as_utc(ts: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def derive_availability(volunteer: Volunteer, busy_ids: set[int], now: datetime | None = None) -> str:
    """
    available | busy | offline.

    Offline without a location or when not seen within the availability
    window; busy while holding an accepted request.
    """
    now = now or datetime.now(timezone.utc)
    if not volunteer.has_location or volunteer.last_login is None:
        return AVAILABILITY_OFFLINE
    if now - _as_utc(volunteer.last_login) > timedelta(hours=settings.availability_window_hours):
        return AVAILABILITY_OFFLINE
    if volunteer.id in busy_ids:
        return AVAILABILITY_BUSY
    return AVAILABILITY_AVAILABLE


def _busy_volunteer_ids(db: Session) -> set[int]:
    result = db.execute(
        select(HelpRequest.assigned_to)
        .where(
            func.lower(HelpRequest.status) == STATUS_ACCEPTED,
            HelpRequest.assigned_to.is_not(None),
        )
        .distinct()
    )
    return set(result.scalars().all())


def list_located_volunteers(db: Session) -> list[VolunteerSummary]:
    """Volunteers that have shared a location, with derived availability."""
    volunteers = db.execute(
        select(Volunteer)
        .where(Volunteer.latitude.is_not(None), Volunteer.longitude.is_not(None))
        .order_by(Volunteer.id)
    ).scalars().all()
    busy = _busy_volunteer_ids(db)
    now = datetime.now(timezone.utc)
    return [
        VolunteerSummary(
            id=v.id,
            name=v.name,
            contact=v.contact,
            skills=v.skills,
            latitude=v.latitude,
            longitude=v.longitude,
            availability=derive_availability(v, busy, now),
            last_login=v.last_login,
        )
        for v in volunteers
    ]
