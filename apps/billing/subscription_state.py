"""
Organization subscription state machine.

Every subscription status write goes through next_status() so the
transition rules live in one place:

    none      --checkout_completed-->  active
    any       --provider_updated-->    mapped from the Stripe status
    any       --provider_deleted-->    canceled
    past_due  --invoice_paid-->        active
"""

from enum import StrEnum

from apps.organizations.models import Organization

Status = Organization.SubscriptionStatus


class SubscriptionTrigger(StrEnum):
    CHECKOUT_COMPLETED = "checkout_completed"
    PROVIDER_UPDATED = "provider_updated"
    PROVIDER_DELETED = "provider_deleted"
    INVOICE_PAID = "invoice_paid"


# Stripe subscription.status -> our status
PROVIDER_STATUS_MAP: dict[str, str] = {
    "active": Status.ACTIVE,
    "trialing": Status.ACTIVE,
    "past_due": Status.PAST_DUE,
    "unpaid": Status.PAST_DUE,
    "incomplete": Status.PAST_DUE,
    "paused": Status.PAST_DUE,
    "canceled": Status.CANCELED,
    "incomplete_expired": Status.CANCELED,
}


def map_provider_status(provider_status: str | None) -> str | None:
    """Map a Stripe subscription status, or None if it is unknown."""
    if not provider_status:
        return None
    return PROVIDER_STATUS_MAP.get(provider_status)


def next_status(
    current: str,
    trigger: SubscriptionTrigger,
    provider_status: str | None = None,
) -> str:
    """
    Compute the status after a trigger.

    Unknown provider statuses and triggers that do not apply to the
    current state leave it unchanged.
    """
    match trigger:
        case SubscriptionTrigger.CHECKOUT_COMPLETED:
            return Status.ACTIVE

        case SubscriptionTrigger.PROVIDER_UPDATED:
            mapped = map_provider_status(provider_status)
            return mapped if mapped is not None else current

        case SubscriptionTrigger.PROVIDER_DELETED:
            return Status.CANCELED

        case SubscriptionTrigger.INVOICE_PAID:
            # Only recovers from a failed payment, never revives a cancellation
            if current == Status.PAST_DUE:
                return Status.ACTIVE
            return current

    return current
