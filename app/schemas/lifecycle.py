"""Lifecycle operation schemas."""

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.alert import AlertResponse
from app.schemas.help_request import HelpRequestResponse


class LifecycleRequest(BaseModel):
    """Body shared by claim, complete and escalate."""

    model_config = ConfigDict(populate_by_name=True)

    request_id: int | None = Field(default=None, alias="requestId")


class LifecycleWarning(BaseModel):
    code: str  # NOTIFICATION_FAILED | NO_RECIPIENTS_FOUND | PARTIAL_DELIVERY_FAILURE
    message: str
    failed_recipient_ids: list[int] = []


class EscalationResponse(BaseModel):
    request: HelpRequestResponse
    authority_notified: bool
    alert: AlertResponse | None = None
    warnings: list[LifecycleWarning] = []
