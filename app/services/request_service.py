"""Help request intake and queries."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateLocation
from app.core.lifecycle_policies import STATUS_PENDING
from app.models.help_request import HelpRequest
from app.schemas.help_request import HelpRequestCreate

logger = logging.getLogger(__name__)


def create_request(db: Session, data: HelpRequestCreate) -> HelpRequest:
    """
    Create a pending request.

    The (latitude, longitude) pair is unique at the storage layer; a second
    report at the exact same point raises DuplicateLocation.
    """
    req = HelpRequest(
        name=data.name,
        contact=data.contact,
        category=data.category,
        urgency=data.urgency,
        description=data.description or None,
        latitude=data.latitude,
        longitude=data.longitude,
        image_url=data.image_url or None,
        status=STATUS_PENDING,
    )
    db.add(req)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateLocation(
            "A request with the same latitude and longitude already exists."
        ) from exc
    db.refresh(req)
    logger.info("Request %s created (%s/%s)", req.id, req.category, req.urgency)
    return req


def get_request(db: Session, request_id: int) -> HelpRequest | None:
    return db.get(HelpRequest, request_id)


def list_requests(db: Session, status: str | None = None, limit: int = 100) -> list[HelpRequest]:
    """List requests newest first, optionally filtered by status (case-insensitive)."""
    stmt = select(HelpRequest)
    if status:
        stmt = stmt.where(func.lower(HelpRequest.status) == status.lower())
    stmt = stmt.order_by(HelpRequest.created_at.desc(), HelpRequest.id.desc()).limit(limit)
    return list(db.execute(stmt).scalars().all())
