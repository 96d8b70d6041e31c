"""
Notification services - enqueueing and rendering transactional email.
"""

from dataclasses import dataclass
from typing import Any

from django.db import transaction

from apps.core.logging import get_logger
from apps.notifications.models import Notification
from apps.organizations.models import Organization

logger = get_logger(__name__)


@dataclass(frozen=True)
class Message:
    """A rendered email ready for a sender."""

    to: str
    subject: str
    text: str


def enqueue_notification(
    kind: str,
    recipient_email: str,
    context: dict[str, Any] | None = None,
    organization: Organization | None = None,
) -> Notification:
    """
    Insert a pending notification.

    Call this inside the transaction that makes the triggering change so
    the email is only sent if that change commits.
    """
    if not recipient_email:
        raise ValueError("recipient_email is required")

    notification = Notification.objects.create(
        kind=kind,
        recipient_email=recipient_email,
        context=context or {},
        organization=organization,
    )
    logger.info(
        "notification_enqueued",
        notification_id=notification.pk,
        kind=kind,
        organization_id=str(organization.pk) if organization else None,
    )
    return notification


def queue_notification_safely(
    kind: str,
    recipient_email: str | None,
    context: dict[str, Any] | None = None,
    organization: Organization | None = None,
) -> Notification | None:
    """
    Best-effort enqueue for webhook handlers.

    Runs in a savepoint so a failed insert cannot roll back the caller's
    transaction. Failures are logged and return None.
    """
    if not recipient_email:
        logger.info("notification_skipped_no_recipient", kind=kind)
        return None

    try:
        with transaction.atomic():
            return enqueue_notification(kind, recipient_email, context, organization)
    except Exception:
        logger.exception("notification_enqueue_failed", kind=kind)
        return None


def _format_amount(value: Any) -> str:
    return f"${value}" if value not in (None, "") else ""


def build_message(notification: Notification) -> Message:
    """Render the subject and plain-text body for a notification."""
    ctx = notification.context or {}
    org_name = ctx.get("organization_name") or "your daycare"

    match notification.kind:
        case Notification.Kind.WELCOME:
            plan = ctx.get("plan_name") or "your plan"
            subject = "Welcome to KinderCause"
            text = (
                f"Thanks for subscribing to {plan}.\n\n"
                f"{org_name} is ready. Create your first fundraiser from the dashboard."
            )

        case Notification.Kind.SUBSCRIPTION_CANCELED:
            subject = "Your KinderCause subscription was canceled"
            text = (
                f"The subscription for {org_name} has been canceled.\n\n"
                "Existing fundraisers stay visible, but new ones cannot be published "
                "until you subscribe again."
            )

        case Notification.Kind.PURCHASE_CONFIRMATION:
            fundraiser = ctx.get("fundraiser_name") or "the fundraiser"
            name = ctx.get("purchaser_name") or "there"
            amount = _format_amount(ctx.get("amount"))
            if ctx.get("purchase_type") == "ticket":
                subject = f"Your tickets for {fundraiser}"
                text = (
                    f"Hi {name},\n\n"
                    f"Thanks for your purchase of {ctx.get('quantity', 1)} ticket(s) "
                    f"for {fundraiser} ({amount}).\n"
                    f"Your ticket code: {ctx.get('fulfillment_token', '')}"
                )
            else:
                subject = f"Thank you for supporting {fundraiser}"
                text = f"Hi {name},\n\nThank you for your donation of {amount} to {fundraiser}."

        case _:
            raise ValueError(f"Unknown notification kind: {notification.kind}")

    return Message(to=notification.recipient_email, subject=subject, text=text)
