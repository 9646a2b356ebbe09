"""Notification dispatch: email and SMS delivery behind a small interface."""

from __future__ import annotations

import logging
import re
import smtplib
from email.message import EmailMessage
from typing import Protocol

import httpx

from app.core.config import Settings, settings
from app.core.errors import InvalidContact, NotificationError
from app.core.lifecycle_policies import MIN_PHONE_DIGITS

logger = logging.getLogger(__name__)

_NON_DIAL_CHARS = re.compile(r"[^\d+]")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class Notifier(Protocol):
    """Best-effort email/SMS sender. Implementations raise NotificationError on failure."""

    def send_email(self, to: str, subject: str, body: str) -> None: ...

    def send_sms(self, to: str, body: str) -> None: ...

    def close(self) -> None: ...


def is_email(contact: str) -> bool:
    return bool(_EMAIL.match(contact.strip()))


def normalize_phone(contact: str | None, default_country_code: str | None = None) -> str:
    """
    Normalize a phone number to international format.

    Strips everything but digits and '+', and prefixes the default country
    code when no leading '+' is present. Raises InvalidContact when the result
    cannot be dialled.
    """
    if not contact or not contact.strip():
        raise InvalidContact("Requester contact is missing")

    country_code = default_country_code or settings.default_country_code
    cleaned = _NON_DIAL_CHARS.sub("", contact)
    if not cleaned.startswith("+"):
        cleaned = f"{country_code}{cleaned}"

    digits = cleaned[1:]
    if "+" in digits or not digits.isdigit() or len(digits) < MIN_PHONE_DIGITS:
        raise InvalidContact(f"Contact {contact!r} is not a usable phone number")
    return cleaned


class ConsoleNotifier:
    """Logs notifications instead of sending them."""

    def send_email(self, to: str, subject: str, body: str) -> None:
        logger.info("[console email] to=%s subject=%s body=%s", to, subject, body)

    def send_sms(self, to: str, body: str) -> None:
        logger.info("[console sms] to=%s body=%s", to, body)

    def close(self) -> None:
        pass


class GatewayNotifier:
    """Sends email over SMTP and SMS through the Twilio REST API."""

    def __init__(self, config: Settings, client: httpx.Client | None = None) -> None:
        self._config = config
        self._client = client or httpx.Client(timeout=config.notification_timeout_seconds)

    def send_email(self, to: str, subject: str, body: str) -> None:
        cfg = self._config
        msg = EmailMessage()
        msg["From"] = cfg.email_sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        try:
            with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.notification_timeout_seconds) as smtp:
                smtp.starttls()
                if cfg.smtp_username:
                    smtp.login(cfg.smtp_username, cfg.smtp_password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"Email to {to} failed: {exc}") from exc
        logger.info("Email sent to %s", to)

    def send_sms(self, to: str, body: str) -> None:
        cfg = self._config
        if not cfg.twilio_account_sid or not cfg.twilio_auth_token:
            raise NotificationError("SMS gateway credentials are not configured")
        url = f"{cfg.twilio_base_url.rstrip('/')}/Accounts/{cfg.twilio_account_sid}/Messages.json"
        try:
            response = self._client.post(
                url,
                data={"To": to, "From": cfg.twilio_phone_number, "Body": body},
                auth=(cfg.twilio_account_sid, cfg.twilio_auth_token),
            )
            response.raise_for_status()
            sid = response.json()["sid"]
        except httpx.HTTPError as exc:
            raise NotificationError(f"SMS to {to} failed: {exc}") from exc
        except (ValueError, KeyError, TypeError) as exc:
            # a 2xx without a message sid was not accepted by the gateway
            raise NotificationError(f"SMS to {to} got an unexpected gateway response: {exc!r}") from exc
        logger.info("SMS sent to %s sid=%s", to, sid)

    def close(self) -> None:
        """Release the pooled HTTP connections."""
        self._client.close()


def build_notifier(config: Settings | None = None) -> Notifier:
    """Create the notifier selected by the notification_provider setting."""
    cfg = config or settings
    if cfg.notification_provider == "gateway":
        return GatewayNotifier(cfg)
    if cfg.notification_provider != "console":
        logger.warning("Unknown notification_provider %r, using console", cfg.notification_provider)
    return ConsoleNotifier()


def send_to_contact(notifier: Notifier, contact: str, subject: str, body: str) -> None:
    """Email the contact if it is an address, otherwise SMS its normalized number."""
    if is_email(contact):
        notifier.send_email(contact.strip(), subject, body)
        return
    try:
        number = normalize_phone(contact)
    except InvalidContact as exc:
        raise NotificationError(exc.message) from exc
    notifier.send_sms(number, body)
