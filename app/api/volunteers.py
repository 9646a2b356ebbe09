"""Volunteer location and proximity API."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_current_volunteer
from app.db.session import get_db
from app.models.volunteer import Volunteer
from app.schemas.volunteer import LocationUpdate, NearbyVolunteerResponse, VolunteerSummary
from app.services.geo_service import find_within_radius
from app.services.volunteer_service import list_located_volunteers, update_location

router = APIRouter(prefix="/volunteers", tags=["volunteers"])


@router.post("/location")
def share_location(
    data: LocationUpdate,
    db: Session = Depends(get_db),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    """Volunteer updates their location."""
    update_location(db, current_volunteer, data.latitude, data.longitude)
    return {"status": "ok", "latitude": data.latitude, "longitude": data.longitude}


@router.get("", response_model=list[VolunteerSummary])
def list_volunteers(
    db: Session = Depends(get_db),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    """Volunteers with a known location and their derived availability."""
    return list_located_volunteers(db)


@router.get("/nearby", response_model=list[NearbyVolunteerResponse])
def nearby_volunteers(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    radius_km: float = Query(default=settings.alert_radius_km, gt=0, le=500),
    db: Session = Depends(get_db),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    """Volunteers within radius_km of a point, nearest first."""
    nearby = find_within_radius(db, (latitude, longitude), radius_m=radius_km * 1000)
    return [
        NearbyVolunteerResponse(id=v.id, name=v.name, contact=v.contact, distance_km=v.distance_km)
        for v in nearby
    ]
