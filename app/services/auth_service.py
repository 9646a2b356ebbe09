"""Volunteer registration and authentication."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import hash_password, verify_password
from app.models.volunteer import Volunteer
from app.schemas.volunteer import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


def get_volunteer_by_contact(db: Session, contact: str) -> Volunteer | None:
    """Get volunteer by contact (phone or email)."""
    return db.execute(select(Volunteer).where(Volunteer.contact == contact)).scalar_one_or_none()


def create_volunteer(db: Session, data: RegisterRequest) -> Volunteer:
    """Create a new volunteer. Location stays empty until first shared."""
    volunteer = Volunteer(
        name=data.name,
        contact=data.contact,
        hashed_password=hash_password(data.password),
        skills=data.skills,
        certifications=list(data.certifications),
    )
    db.add(volunteer)
    db.commit()
    db.refresh(volunteer)
    logger.info("Volunteer %s registered", volunteer.id)
    return volunteer


def authenticate_volunteer(db: Session, data: LoginRequest) -> Volunteer | None:
    """
    Authenticate by contact and password.

    A successful login refreshes last_login and, when the login carries
    coordinates, the volunteer's location.
    """
    volunteer = get_volunteer_by_contact(db, data.contact)
    if not volunteer or not verify_password(data.password, volunteer.hashed_password):
        return None

    volunteer.last_login = datetime.now(timezone.utc)
    if data.latitude is not None and data.longitude is not None:
        volunteer.latitude = data.latitude
        volunteer.longitude = data.longitude
    db.commit()
    db.refresh(volunteer)
    return volunteer
