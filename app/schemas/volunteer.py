"""Volunteer and auth schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)
    skills: str | None = None
    certifications: list[str] = []


class LoginRequest(BaseModel):
    contact: str
    password: str
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def _both_or_neither(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class VolunteerMe(BaseModel):
    id: int
    name: str
    contact: str
    skills: str | None
    certifications: list[str]
    latitude: float | None = None
    longitude: float | None = None
    last_login: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class LocationUpdate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class VolunteerSummary(BaseModel):
    id: int
    name: str
    contact: str
    skills: str | None
    latitude: float
    longitude: float
    availability: str  # available | busy | offline
    last_login: datetime | None


class NearbyVolunteerResponse(BaseModel):
    id: int
    name: str
    contact: str
    distance_km: float
