"""Help request intake and query API."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.deps import get_current_volunteer
from app.core.errors import DuplicateLocation
from app.core.lifecycle_policies import REQUEST_STATUSES
from app.db.session import get_db
from app.models.volunteer import Volunteer
from app.schemas.help_request import HelpRequestCreate, HelpRequestResponse
from app.services.request_service import create_request, get_request, list_requests

router = APIRouter(prefix="/requests", tags=["requests"])

_STATUS_PATTERN = f"(?i)^({'|'.join(REQUEST_STATUSES)})$"


@router.post("", response_model=HelpRequestResponse, status_code=status.HTTP_201_CREATED)
def submit_request(
    data: HelpRequestCreate,
    db: Session = Depends(get_db),
):
    """Submit a help request. Open to unauthenticated requesters."""
    try:
        return create_request(db, data)
    except DuplicateLocation as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("", response_model=list[HelpRequestResponse])
def list_all(
    status_filter: str | None = Query(default=None, alias="status", pattern=_STATUS_PATTERN),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    """List requests, newest first."""
    return list_requests(db, status_filter, limit)


@router.get("/{request_id}", response_model=HelpRequestResponse)
def get_one(
    request_id: int,
    db: Session = Depends(get_db),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    req = get_request(db, request_id)
    if not req:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request not found")
    return req
