"""Volunteer auth endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.deps import get_current_volunteer
from app.core.security import create_access_token
from app.db.session import get_db
from app.models.volunteer import Volunteer
from app.schemas.volunteer import LoginRequest, RegisterRequest, TokenResponse, VolunteerMe
from app.services.auth_service import authenticate_volunteer, create_volunteer, get_volunteer_by_contact

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=VolunteerMe, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
):
    """Register a new volunteer."""
    if get_volunteer_by_contact(db, data.contact):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Volunteer already exists",
        )
    return create_volunteer(db, data)


@router.post("/login", response_model=TokenResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
):
    """Login and return access token. Optional coordinates refresh the volunteer's location."""
    volunteer = authenticate_volunteer(db, data)
    if not volunteer:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return TokenResponse(access_token=create_access_token(volunteer.id))


@router.get("/me", response_model=VolunteerMe)
def me(current_volunteer: Volunteer = Depends(get_current_volunteer)):
    """Get current authenticated volunteer."""
    return current_volunteer
