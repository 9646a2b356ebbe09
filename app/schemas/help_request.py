"""Help request schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.core.lifecycle_policies import REQUEST_CATEGORIES, URGENCY_LEVELS

_CATEGORY_PATTERN = f"^({'|'.join(REQUEST_CATEGORIES)})$"
_URGENCY_PATTERN = f"^({'|'.join(URGENCY_LEVELS)})$"


class HelpRequestCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., pattern=_CATEGORY_PATTERN)
    urgency: str = Field(..., pattern=_URGENCY_PATTERN)
    description: str | None = None
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    image_url: str | None = Field(default=None, description="Reference to an already-uploaded image")


class HelpRequestResponse(BaseModel):
    id: int
    name: str
    contact: str
    category: str
    urgency: str
    description: str | None
    latitude: float
    longitude: float
    image_url: str | None
    status: str
    assigned_to: int | None
    created_at: datetime
    updated_at: datetime | None

    model_config = {"from_attributes": True}
