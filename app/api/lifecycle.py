"""Request lifecycle API: claim (PATCH), complete (POST), escalate (PUT)."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.deps import get_current_volunteer, get_notifier
from app.core.errors import NO_RECIPIENTS_FOUND, NOTIFICATION_FAILED, LifecycleError
from app.db.session import get_db
from app.models.volunteer import Volunteer
from app.schemas.alert import AlertResponse
from app.schemas.help_request import HelpRequestResponse
from app.schemas.lifecycle import EscalationResponse, LifecycleRequest, LifecycleWarning
from app.services.lifecycle_service import (
    LifecycleOutcome,
    claim_request,
    complete_request,
    escalate_request,
)
from app.services.notification_service import Notifier

router = APIRouter(prefix="/lifecycle", tags=["lifecycle"])


def _require_request_id(data: LifecycleRequest | None) -> int:
    if data is None or data.request_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "MISSING_REQUEST_ID", "message": "Missing requestId"},
        )
    return data.request_id


def _http_error(e: LifecycleError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.to_detail())


def _warnings(outcome: LifecycleOutcome) -> list[LifecycleWarning]:
    return [
        LifecycleWarning(code=w.code, message=w.message, failed_recipient_ids=w.failed_recipient_ids)
        for w in outcome.warnings
    ]


def _committed_failure(status_code: int, code: str, outcome: LifecycleOutcome) -> JSONResponse:
    """Error response for a transition that already committed; the new state travels with it."""
    warning = next(w for w in outcome.warnings if w.code == code)
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": {"code": code, "message": warning.message},
            "request": HelpRequestResponse.model_validate(outcome.request).model_dump(mode="json"),
            "warnings": [w.model_dump(mode="json") for w in _warnings(outcome)],
        },
    )


@router.patch("", response_model=HelpRequestResponse)
def claim(
    data: LifecycleRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    """Claim a pending request for the calling volunteer."""
    request_id = _require_request_id(data)
    try:
        return claim_request(db, request_id, current_volunteer.id)
    except LifecycleError as e:
        raise _http_error(e)


@router.post("", response_model=HelpRequestResponse)
def complete(
    data: LifecycleRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    """Mark the caller's accepted request completed and text the requester."""
    request_id = _require_request_id(data)
    try:
        outcome = complete_request(db, notifier, request_id, current_volunteer.id)
    except LifecycleError as e:
        raise _http_error(e)
    if outcome.has_warning(NOTIFICATION_FAILED):
        return _committed_failure(status.HTTP_500_INTERNAL_SERVER_ERROR, NOTIFICATION_FAILED, outcome)
    return outcome.request


@router.put("", response_model=EscalationResponse)
def escalate(
    data: LifecycleRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_volunteer: Volunteer = Depends(get_current_volunteer),
):
    """Escalate the caller's accepted request to an emergency and alert volunteers within range."""
    request_id = _require_request_id(data)
    try:
        outcome = escalate_request(db, notifier, request_id, current_volunteer.id)
    except LifecycleError as e:
        raise _http_error(e)
    if outcome.has_warning(NO_RECIPIENTS_FOUND):
        return _committed_failure(status.HTTP_404_NOT_FOUND, NO_RECIPIENTS_FOUND, outcome)
    return EscalationResponse(
        request=HelpRequestResponse.model_validate(outcome.request),
        authority_notified=outcome.authority_notified,
        alert=AlertResponse.model_validate(outcome.alert) if outcome.alert else None,
        warnings=_warnings(outcome),
    )
