"""Geospatial volunteer index: proximity queries over volunteer locations."""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.lifecycle_policies import EARTH_RADIUS_KM
from app.models.volunteer import Volunteer


@dataclass(frozen=True)
class NearbyVolunteer:
    """Volunteer found by a proximity query."""

    id: int
    name: str
    contact: str
    distance_km: float


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two lat/lng points in kilometers."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bounding_box(lat: float, lon: float, radius_km: float) -> tuple[float, float, float, float]:
    """
    Lat/lng box enclosing the circle of radius_km around a point.

    Returns (min_lat, max_lat, min_lon, max_lon). Near the poles, or when the
    box crosses the antimeridian, longitude bounds widen to the full range.
    """
    dlat = math.degrees(radius_km / EARTH_RADIUS_KM)
    min_lat = max(lat - dlat, -90.0)
    max_lat = min(lat + dlat, 90.0)

    cos_lat = math.cos(math.radians(lat))
    if min_lat <= -90.0 or max_lat >= 90.0 or cos_lat < 1e-9:
        return min_lat, max_lat, -180.0, 180.0

    dlon = math.degrees(radius_km / (EARTH_RADIUS_KM * cos_lat))
    min_lon = lon - dlon
    max_lon = lon + dlon
    if min_lon < -180.0 or max_lon > 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, min_lon, max_lon


def find_within_radius(
    db: Session,
    point: tuple[float, float],
    radius_m: float,
    exclude_ids: Iterable[int] = (),
) -> list[NearbyVolunteer]:
    """
    All volunteers whose last known location lies within radius_m of point.

    Candidates are narrowed with a bounding box in SQL, then filtered by
    great-circle distance. Volunteers without a location never match.
    Results are ordered nearest first.
    """
    lat, lon = point
    radius_km = radius_m / 1000.0
    min_lat, max_lat, min_lon, max_lon = bounding_box(lat, lon, radius_km)

    stmt = select(Volunteer).where(
        Volunteer.latitude.is_not(None),
        Volunteer.longitude.is_not(None),
        Volunteer.latitude.between(min_lat, max_lat),
        Volunteer.longitude.between(min_lon, max_lon),
    )
    excluded = set(exclude_ids)
    if excluded:
        stmt = stmt.where(Volunteer.id.not_in(excluded))

    matches: list[NearbyVolunteer] = []
    for v in db.execute(stmt).scalars().all():
        dist = haversine_km(lat, lon, v.latitude, v.longitude)
        if dist <= radius_km:
            matches.append(
                NearbyVolunteer(id=v.id, name=v.name, contact=v.contact, distance_km=round(dist, 3))
            )

    matches.sort(key=lambda m: (m.distance_km, m.id))
    return matches
