"""Alert persistence and recipient fan-out."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import AlertPersistenceError, NotificationError
from app.models.alert import Alert
from app.models.alert_recipient import AlertRecipient
from app.services.geo_service import NearbyVolunteer
from app.services.notification_service import Notifier, send_to_contact

logger = logging.getLogger(__name__)


def create_alert(
    db: Session,
    point: tuple[float, float],
    message: str,
    timestamp: datetime,
    recipients: Sequence[NearbyVolunteer],
    request_id: int | None = None,
) -> Alert:
    """
    Insert one alert and one recipient row per volunteer in a single transaction.

    Either every recipient row is committed with its alert or nothing is.
    Raises AlertPersistenceError after rolling back.
    """
    if not recipients:
        raise ValueError("An alert needs at least one recipient")

    lat, lon = point
    alert = Alert(
        request_id=request_id,
        latitude=lat,
        longitude=lon,
        message=message,
        timestamp=timestamp,
    )
    for v in recipients:
        alert.recipients.append(AlertRecipient(volunteer_id=v.id, name=v.name, contact=v.contact))

    try:
        db.add(alert)
        db.flush()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Alert transaction rolled back (%d recipients): %s", len(recipients), exc)
        raise AlertPersistenceError("Failed to persist alert; no recipients were recorded") from exc

    db.refresh(alert)
    logger.info("Alert %s persisted with %d recipients", alert.id, len(recipients))
    return alert


def notify_recipients(notifier: Notifier, alert: Alert, subject: str) -> list[int]:
    """
    Send the alert message to each recipient individually.

    Delivery failures are logged and returned as recipient volunteer ids; the
    persisted alert is never touched.
    """
    failed: list[int] = []
    for rec in alert.recipients:
        try:
            send_to_contact(notifier, rec.contact, subject, alert.message)
        except NotificationError as exc:
            logger.warning("Alert %s delivery to volunteer %s failed: %s", alert.id, rec.volunteer_id, exc)
            failed.append(rec.volunteer_id if rec.volunteer_id is not None else rec.id)
    return failed


def list_alerts(db: Session, limit: int = 50) -> list[Alert]:
    """List alerts with their recipients, newest first."""
    result = db.execute(
        select(Alert)
        .options(selectinload(Alert.recipients))
        .order_by(Alert.created_at.desc(), Alert.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


def get_alert(db: Session, alert_id: int) -> Alert | None:
    return db.get(Alert, alert_id)
