"""Request lifecycle: claim, complete and escalate.

Every transition is a single conditional UPDATE whose WHERE clause carries the
expected prior status (and owner); the affected row count decides whether the
caller won. Notifications are sent only after the transition has committed and
never undo it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    NO_RECIPIENTS_FOUND,
    NOTIFICATION_FAILED,
    PARTIAL_DELIVERY_FAILURE,
    AlreadyClaimed,
    NotEligible,
    NotificationError,
    RequestNotFound,
)
from app.core.lifecycle_policies import (
    COMPLETION_SMS_BODY,
    STATUS_ACCEPTED,
    STATUS_COMPLETED,
    STATUS_EMERGENCY,
    STATUS_PENDING,
)
from app.models.alert import Alert
from app.models.help_request import HelpRequest
from app.models.volunteer import Volunteer
from app.services.alert_service import create_alert, notify_recipients
from app.services.geo_service import find_within_radius
from app.services.notification_service import Notifier, is_email, normalize_phone

logger = logging.getLogger(__name__)


@dataclass
class OutcomeWarning:
    """Non-fatal problem reported alongside a committed transition."""

    code: str
    message: str
    failed_recipient_ids: list[int] = field(default_factory=list)


@dataclass
class LifecycleOutcome:
    """Committed lifecycle result plus the separately reported notification result."""

    request: HelpRequest
    warnings: list[OutcomeWarning] = field(default_factory=list)
    alert: Alert | None = None
    authority_notified: bool = False

    def has_warning(self, code: str) -> bool:
        return any(w.code == code for w in self.warnings)


def _transition(
    db: Session,
    request_id: int,
    from_status: str,
    values: dict,
    owner_id: int | None = None,
) -> bool:
    """Apply values to the request iff it is still in from_status (and owned by owner_id)."""
    stmt = update(HelpRequest).where(
        HelpRequest.id == request_id,
        func.lower(HelpRequest.status) == from_status,
    )
    if owner_id is not None:
        stmt = stmt.where(HelpRequest.assigned_to == owner_id)
    stmt = stmt.values(**values, updated_at=datetime.now(timezone.utc)).execution_options(
        synchronize_session=False
    )
    result = db.execute(stmt)
    won = result.rowcount == 1
    if won:
        db.commit()
    else:
        db.rollback()
    return won


def _load(db: Session, request_id: int) -> HelpRequest:
    req = db.get(HelpRequest, request_id)
    db.refresh(req)
    return req


def _ensure_owned_and_accepted(db: Session, request_id: int, volunteer_id: int) -> HelpRequest:
    req = db.get(HelpRequest, request_id)
    if (
        req is None
        or (req.status or "").lower() != STATUS_ACCEPTED
        or req.assigned_to != volunteer_id
    ):
        raise NotEligible("Request not found, not assigned to you, or not in accepted status")
    return req


def claim_request(db: Session, request_id: int, volunteer_id: int) -> HelpRequest:
    """Pending -> Accepted for exactly one volunteer."""
    won = _transition(
        db,
        request_id,
        STATUS_PENDING,
        {"status": STATUS_ACCEPTED, "assigned_to": volunteer_id},
    )
    if not won:
        if db.get(HelpRequest, request_id) is None:
            raise RequestNotFound(f"Request {request_id} not found")
        raise AlreadyClaimed(f"Request {request_id} is already claimed")

    logger.info("Request %s claimed by volunteer %s", request_id, volunteer_id)
    return _load(db, request_id)


def complete_request(
    db: Session,
    notifier: Notifier,
    request_id: int,
    volunteer_id: int,
) -> LifecycleOutcome:
    """Accepted -> Completed by the assignee, then notify the requester."""
    req = _ensure_owned_and_accepted(db, request_id, volunteer_id)
    contact = req.contact
    # InvalidContact is raised before the transition, leaving the request untouched
    destination = contact.strip() if is_email(contact) else normalize_phone(contact)

    if not _transition(
        db,
        request_id,
        STATUS_ACCEPTED,
        {"status": STATUS_COMPLETED},
        owner_id=volunteer_id,
    ):
        raise NotEligible("Request not found, not assigned to you, or not in accepted status")

    logger.info("Request %s completed by volunteer %s", request_id, volunteer_id)
    outcome = LifecycleOutcome(request=_load(db, request_id))

    try:
        if is_email(destination):
            notifier.send_email(destination, "Your request has been completed", COMPLETION_SMS_BODY)
        else:
            notifier.send_sms(destination, COMPLETION_SMS_BODY)
    except NotificationError as exc:
        logger.error("Completion notice for request %s failed: %s", request_id, exc)
        outcome.warnings.append(
            OutcomeWarning(
                code=NOTIFICATION_FAILED,
                message=f"Request marked as completed, but failed to notify the requester: {exc}",
            )
        )
    return outcome


def _authority_report(req: HelpRequest, volunteer_name: str) -> tuple[str, str]:
    subject = f"Emergency Alert: Incident Reported at ({req.latitude}, {req.longitude})"
    reported_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    body = "\n".join(
        [
            "Emergency Incident Report",
            "",
            f"Reported by Volunteer: {volunteer_name}",
            f"Incident Location: Latitude {req.latitude}, Longitude {req.longitude}",
            f"Map: https://www.google.com/maps?q={req.latitude},{req.longitude}",
            f"Request Type: {req.category}",
            f"Urgency: {req.urgency}",
            f"Description: {req.description or 'No description provided.'}",
            f"Contact: {req.contact}",
            f"Reported At: {reported_at}",
            "",
            "Please take immediate action to address this emergency.",
        ]
    )
    return subject, body


def _alert_message(req: HelpRequest, volunteer_name: str) -> str:
    return (
        f"Emergency Alert: {req.category} incident reported by {volunteer_name}. "
        f"Urgency: {req.urgency}. "
        f"Description: {req.description or 'No description provided.'}"
    )


def escalate_request(
    db: Session,
    notifier: Notifier,
    request_id: int,
    volunteer_id: int,
) -> LifecycleOutcome:
    """
    Accepted -> Emergency by the assignee, then alert the authority and nearby volunteers.

    The status change commits first. The authority email, the alert
    transaction and the per-recipient fan-out each succeed or fail on their
    own and are reported through the outcome's warnings.
    """
    _ensure_owned_and_accepted(db, request_id, volunteer_id)
    if not _transition(
        db,
        request_id,
        STATUS_ACCEPTED,
        {"status": STATUS_EMERGENCY},
        owner_id=volunteer_id,
    ):
        raise NotEligible("Request not found, not assigned to you, or not in accepted status")

    logger.warning("Request %s escalated to emergency by volunteer %s", request_id, volunteer_id)
    req = _load(db, request_id)
    outcome = LifecycleOutcome(request=req)

    volunteer = db.get(Volunteer, volunteer_id)
    volunteer_name = volunteer.name if volunteer else f"volunteer #{volunteer_id}"

    subject, body = _authority_report(req, volunteer_name)
    try:
        notifier.send_email(settings.authority_email, subject, body)
        outcome.authority_notified = True
    except NotificationError as exc:
        logger.error("Authority notification for request %s failed: %s", request_id, exc)

    nearby = find_within_radius(
        db,
        (req.latitude, req.longitude),
        radius_m=settings.alert_radius_km * 1000,
        exclude_ids={volunteer_id},
    )
    if not nearby:
        logger.info("No volunteers within %s km of request %s", settings.alert_radius_km, request_id)
        outcome.warnings.append(
            OutcomeWarning(
                code=NO_RECIPIENTS_FOUND,
                message=f"No volunteers found within {settings.alert_radius_km:g} km of the request.",
            )
        )
        return outcome

    alert = create_alert(
        db,
        (req.latitude, req.longitude),
        _alert_message(req, volunteer_name),
        datetime.now(timezone.utc),
        nearby,
        request_id=req.id,
    )
    outcome.alert = alert
    # the alert commit expired the loaded request
    outcome.request = _load(db, request_id)

    failed = notify_recipients(notifier, alert, f"EMERGENCY ALERT: {req.category}")
    if failed:
        outcome.warnings.append(
            OutcomeWarning(
                code=PARTIAL_DELIVERY_FAILURE,
                message=f"Alert delivery failed for {len(failed)} of {len(nearby)} volunteer(s).",
                failed_recipient_ids=failed,
            )
        )
    else:
        logger.info("Alert %s sent to %d nearby volunteers", alert.id, len(nearby))
    return outcome
