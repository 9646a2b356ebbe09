"""Alert schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class AlertCreate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    message: str = Field(..., min_length=1)
    timestamp: datetime


class AlertRecipientResponse(BaseModel):
    id: int
    volunteer_id: int | None
    name: str
    contact: str

    model_config = {"from_attributes": True}


class AlertResponse(BaseModel):
    id: int
    request_id: int | None
    latitude: float
    longitude: float
    message: str
    timestamp: datetime
    created_at: datetime
    recipients: list[AlertRecipientResponse] = []

    model_config = {"from_attributes": True}


class AlertDispatchResponse(BaseModel):
    """Alert created from a manual broadcast, with delivery results."""

    alert: AlertResponse
    delivered: int
    failed_recipient_ids: list[int] = []
