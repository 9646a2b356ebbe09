"""Proximity alert API."""

from datetime import timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_current_volunteer, get_notifier
from app.core.errors import AlertPersistenceError
from app.db.session import get_db
from app.models.volunteer import Volunteer
from app.schemas.alert import AlertCreate, AlertDispatchResponse, AlertResponse
from app.services.alert_service import create_alert, get_alert, list_alerts, notify_recipients
from app.services.geo_service import find_within_radius
from app.services.notification_service import Notifier

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.post("", response_model=AlertDispatchResponse, status_code=status.HTTP_201_CREATED)
def broadcast_alert(
    data: AlertCreate,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    """Create an alert at a point and send it to every volunteer within the alert radius."""
    nearby = find_within_radius(db, (data.latitude, data.longitude), radius_m=settings.alert_radius_km * 1000)
    if not nearby:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No volunteers found within {settings.alert_radius_km:g} km of the specified location.",
        )
    timestamp = data.timestamp if data.timestamp.tzinfo else data.timestamp.replace(tzinfo=timezone.utc)
    try:
        alert = create_alert(db, (data.latitude, data.longitude), data.message, timestamp, nearby)
    except AlertPersistenceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    failed = notify_recipients(notifier, alert, "EMERGENCY ALERT")
    return AlertDispatchResponse(
        alert=AlertResponse.model_validate(alert),
        delivered=len(nearby) - len(failed),
        failed_recipient_ids=failed,
    )


@router.get("", response_model=list[AlertResponse])
def list_all(
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    """List alerts with their recipients, newest first."""
    return list_alerts(db, limit)


@router.get("/{alert_id}", response_model=AlertResponse)
def get_one(
    alert_id: int,
    db: Session = Depends(get_db),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    alert = get_alert(db, alert_id)
    if not alert:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")
    return alert
