"""
Notification senders - pluggable email delivery.

LocalSender: Logs messages (dev, tests)
ResendSender: Sends through the Resend HTTP API (production)
"""

from abc import ABC, abstractmethod

import httpx

from apps.core.logging import get_logger
from apps.notifications.services import Message
from config.settings.base import settings

logger = get_logger(__name__)


class SendError(Exception):
    """Raised when a sender fails to deliver a message."""

    pass


class NotificationSender(ABC):
    """Abstract base class for email senders."""

    @abstractmethod
    def send(self, message: Message) -> None:
        """Deliver one message. Raises SendError on failure."""
        pass


class LocalSender(NotificationSender):
    """Logs messages instead of sending them."""

    def send(self, message: Message) -> None:
        logger.info(
            "notification_sent",
            to=message.to,
            subject=message.subject,
            backend="local",
        )


class ResendSender(NotificationSender):
    """Resend transactional email API."""

    API_URL = "https://api.resend.com/emails"
    TIMEOUT = 10.0

    def __init__(self, api_key: str, from_email: str, reply_to: str = ""):
        self.api_key = api_key
        self.from_email = from_email
        self.reply_to = reply_to

    def send(self, message: Message) -> None:
        body: dict = {
            "from": self.from_email,
            "to": [message.to],
            "subject": message.subject,
            "text": message.text,
        }
        if self.reply_to:
            body["reply_to"] = self.reply_to

        try:
            with httpx.Client(timeout=self.TIMEOUT) as client:
                response = client.post(
                    self.API_URL,
                    json=body,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            raise SendError(f"Resend request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise SendError(f"Resend HTTP {response.status_code}: {response.text[:500]}")

        logger.info("notification_sent", to=message.to, subject=message.subject, backend="resend")


def get_sender() -> NotificationSender:
    """
    Get the configured sender.

    Uses NOTIFICATION_BACKEND setting: 'local' or 'resend'
    """
    if settings.NOTIFICATION_BACKEND == "resend":
        if not settings.RESEND_API_KEY:
            raise ValueError("RESEND_API_KEY setting required for resend backend")
        return ResendSender(
            api_key=settings.RESEND_API_KEY,
            from_email=settings.EMAIL_FROM,
            reply_to=settings.EMAIL_REPLY_TO,
        )

    return LocalSender()
