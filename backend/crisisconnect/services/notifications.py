"""
Outbound email/SMS notifications.

Delivery is best-effort with a single attempt. The request path never
awaits delivery: NotificationChannel schedules each notification as a
background task and only logs the outcome.
"""

import asyncio
import logging
import re
import smtplib
from collections.abc import Awaitable, Sequence
from email.message import EmailMessage
from typing import Any, Protocol

import httpx

from crisisconnect.config import Settings, get_settings
from crisisconnect.errors import NotificationError

logger = logging.getLogger(__name__)

TWILIO_SID_PATTERN = re.compile(r"^AC[0-9a-fA-F]{32}$")

SEVERITY_LABELS = {
    1: "Very Low",
    2: "Low",
    3: "Medium",
    4: "High",
    5: "Very High",
}


class Notifier(Protocol):
    """Fire-and-forget notifier. Implementations return success and never raise."""

    async def notify_incident_verified(self, recipients: Sequence[str], incident: Any) -> bool:
        ...

    async def notify_request_claimed(self, civilian: Any, volunteer: Any, request: Any) -> bool:
        ...


class EmailSmsNotifier:
    """
    Notifier backed by SMTP email and the Twilio REST API for SMS.

    Channels that are not configured are skipped.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def email_configured(self) -> bool:
        return bool(self.settings.smtp_host)

    @property
    def sms_configured(self) -> bool:
        sid = self.settings.twilio_account_sid
        return bool(
            sid
            and TWILIO_SID_PATTERN.match(sid)
            and self.settings.twilio_auth_token
            and self.settings.twilio_from_number
        )

    async def notify_incident_verified(self, recipients: Sequence[str], incident: Any) -> bool:
        if not self.email_configured:
            logger.info("Email not configured, skipping incident verification notice")
            return False
        if not recipients:
            logger.info(f"No accepted volunteers to notify for incident {incident.id}")
            return False

        severity = SEVERITY_LABELS.get(incident.severity, "Unknown")
        maps_url = f"https://www.google.com/maps?q={incident.latitude},{incident.longitude}"
        body = (
            f"A new incident has been verified and volunteers are needed.\n\n"
            f"Type: {incident.type}\n"
            f"Severity: {severity} ({incident.severity}/5)\n"
            f"Location: {incident.location}\n"
            f"Description: {incident.description}\n"
            f"Map: {maps_url}\n\n"
            f"Open your dashboard: {self.settings.app_base_url}\n"
        )
        try:
            await self._send_email(
                to=[],
                bcc=list(recipients),
                subject=f"New Verified Incident Alert - {incident.type}",
                body=body,
            )
        except NotificationError as e:
            logger.error(f"Incident verification notice for {incident.id} failed: {e}")
            return False

        logger.info(
            f"Incident verification notice for {incident.id} sent to {len(recipients)} volunteers"
        )
        return True

    async def notify_request_claimed(self, civilian: Any, volunteer: Any, request: Any) -> bool:
        sent = False
        lines = [
            f"Dear {civilian.name},",
            "",
            "A volunteer has claimed your request and is responding to help you.",
            "",
            f"Volunteer: {volunteer.name}",
        ]
        if volunteer.email:
            lines.append(f"Email: {volunteer.email}")
        if volunteer.phone:
            lines.append(f"Phone: {volunteer.phone}")
        lines += [
            "",
            f"Request: {request.title}",
            f"Priority: {request.priority}",
            f"Category: {request.category}",
        ]
        if request.address:
            lines.append(f"Location: {request.address}")

        if not self.email_configured:
            logger.info("Email not configured, skipping claim notice")
        elif not civilian.email:
            logger.info(f"Civilian {civilian.id} has no email, skipping claim notice")
        else:
            try:
                await self._send_email(
                    to=[civilian.email],
                    bcc=[],
                    subject="Your Crisis Connect request has been claimed",
                    body="\n".join(lines) + "\n",
                )
                sent = True
            except NotificationError as e:
                logger.error(f"Claim email for request {request.id} failed: {e}")

        if not self.sms_configured:
            logger.info("SMS not configured, skipping claim text")
        elif not civilian.phone:
            logger.info(f"Civilian {civilian.id} has no phone, skipping claim text")
        else:
            try:
                await self._send_sms(
                    civilian.phone,
                    f"Crisis Connect: {volunteer.name} has claimed your request "
                    f"'{request.title}' and is on the way.",
                )
                sent = True
            except NotificationError as e:
                logger.error(f"Claim text for request {request.id} failed: {e}")

        return sent

    async def _send_email(self, to: list[str], bcc: list[str], subject: str, body: str) -> None:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = f"{self.settings.mail_from_name} <{self.settings.mail_from}>"
        message["To"] = ", ".join(to) if to else self.settings.mail_from
        message.set_content(body)

        # smtplib blocks, keep it off the event loop
        await asyncio.to_thread(self._deliver_email, message, to + bcc)

    def _deliver_email(self, message: EmailMessage, recipients: list[str]) -> None:
        settings = self.settings
        try:
            with smtplib.SMTP(
                settings.smtp_host,
                settings.smtp_port,
                timeout=settings.notification_timeout_seconds,
            ) as server:
                if settings.smtp_use_tls:
                    server.starttls()
                if settings.smtp_username and settings.smtp_password:
                    server.login(settings.smtp_username, settings.smtp_password)
                server.send_message(message, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP delivery failed: {e}") from e

    async def _send_sms(self, to: str, body: str) -> None:
        settings = self.settings
        url = f"{settings.twilio_base_url}/Accounts/{settings.twilio_account_sid}/Messages.json"
        async with httpx.AsyncClient(
            timeout=settings.notification_timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(
                    url,
                    data={"To": to, "From": settings.twilio_from_number, "Body": body},
                    auth=(settings.twilio_account_sid, settings.twilio_auth_token),
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise NotificationError(f"SMS delivery failed: {e}") from e


class NotificationChannel:
    """
    Non-blocking front for a Notifier.

    Each call schedules delivery as a task and returns immediately. Failures
    are logged and never reach the caller.
    """

    def __init__(self, notifier: Notifier):
        self.notifier = notifier
        self._pending: set[asyncio.Task] = set()

    def incident_verified(self, recipients: Sequence[str], incident: Any) -> None:
        self._schedule(
            f"incident-verified:{incident.id}",
            self.notifier.notify_incident_verified(list(recipients), incident),
        )

    def request_claimed(self, civilian: Any, volunteer: Any, request: Any) -> None:
        self._schedule(
            f"request-claimed:{request.id}",
            self.notifier.notify_request_claimed(civilian, volunteer, request),
        )

    def _schedule(self, label: str, delivery: Awaitable[bool]) -> None:
        task = asyncio.create_task(self._run(label, delivery))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _run(self, label: str, delivery: Awaitable[bool]) -> None:
        try:
            delivered = await delivery
        except Exception:
            logger.exception(f"Notification {label} raised")
            return
        if not delivered:
            logger.warning(f"Notification {label} was not delivered")

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight notifications (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
