"""
Fundraisers services - reconciling Stripe payments into purchases.

Handlers are called by the Stripe webhook router and must be safe to run
any number of times for the same event.
"""

import secrets
from typing import Any

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.billing.checkout import PURCHASE_TYPE_FOR_KIND
from apps.billing.config import BillingConfig, get_billing_config
from apps.billing.exceptions import FundraiserNotFoundError
from apps.billing.fees import compute_fee_breakdown, from_minor_units, resolve_platform_fee_percent
from apps.core.logging import get_logger
from apps.fundraisers.models import Fundraiser, Purchase
from apps.notifications.models import Notification
from apps.notifications.services import queue_notification_safely

logger = get_logger(__name__)

ANONYMOUS_PURCHASER = "Anonymous"
FULFILLMENT_TOKEN_PREFIX = "KC-"
UNPAID = "unpaid"


def generate_fulfillment_token() -> str:
    return f"{FULFILLMENT_TOKEN_PREFIX}{secrets.token_urlsafe(16)}"


def extract_purchaser_name(session: dict[str, Any]) -> str:
    """
    Purchaser name from a checkout session.

    Prefers the 'name' custom field, then the customer details, then
    'Anonymous'.
    """
    for custom_field in session.get("custom_fields") or []:
        if custom_field.get("key") == "name":
            value = (custom_field.get("text") or {}).get("value")
            if value:
                return value

    customer_name = (session.get("customer_details") or {}).get("name")
    return customer_name or ANONYMOUS_PURCHASER


def _parse_quantity(raw: Any) -> int:
    try:
        quantity = int(raw)
    except (TypeError, ValueError):
        return 1
    return max(quantity, 1)


def _get_fundraiser(fundraiser_id: str | None) -> Fundraiser:
    try:
        return Fundraiser.objects.select_related("organization").get(pk=fundraiser_id)
    except (Fundraiser.DoesNotExist, ValueError, ValidationError) as e:
        raise FundraiserNotFoundError(f"Fundraiser {fundraiser_id} not found") from e


def handle_fundraiser_purchase(
    session: dict[str, Any],
    config: BillingConfig | None = None,
) -> Purchase | None:
    """
    Record a completed fundraiser checkout as a Purchase.

    Keyed by the checkout session ID: a replayed event returns None
    without touching the fundraiser totals.

    Raises:
        FundraiserNotFoundError: metadata names no existing fundraiser
    """
    config = config or get_billing_config()
    session_id = session["id"]
    metadata = session.get("metadata") or {}

    if session.get("payment_status") == UNPAID:
        # Recorded when checkout.session.async_payment_succeeded arrives
        logger.info("purchase_awaiting_payment", checkout_session_id=session_id)
        return None

    if Purchase.objects.filter(stripe_checkout_session_id=session_id).exists():
        logger.info("purchase_already_recorded", checkout_session_id=session_id)
        return None

    fundraiser = _get_fundraiser(metadata.get("fundraiser_id"))
    org = fundraiser.organization

    # The fundraiser's kind decides the purchase type, not the metadata
    purchase_type = PURCHASE_TYPE_FOR_KIND[fundraiser.kind]
    if metadata.get("type") != purchase_type:
        logger.warning(
            "purchase_type_mismatch",
            checkout_session_id=session_id,
            fundraiser_id=str(fundraiser.pk),
            metadata_type=metadata.get("type"),
            purchase_type=purchase_type,
        )
    is_ticket = purchase_type == Purchase.Type.TICKET
    quantity = _parse_quantity(metadata.get("quantity")) if is_ticket else 1

    fees = compute_fee_breakdown(
        from_minor_units(session.get("amount_total")),
        resolve_platform_fee_percent(org, config),
    )
    customer_details = session.get("customer_details") or {}
    subscription_id = session.get("subscription") or ""

    with transaction.atomic():
        try:
            with transaction.atomic():
                purchase = Purchase.objects.create(
                    fundraiser=fundraiser,
                    purchase_type=purchase_type,
                    purchaser_name=extract_purchaser_name(session),
                    purchaser_email=customer_details.get("email") or "",
                    purchaser_phone=customer_details.get("phone") or "",
                    amount=fees.gross,
                    provider_fee=fees.provider_fee,
                    platform_fee=fees.platform_fee,
                    net_amount=fees.net,
                    quantity=quantity,
                    is_recurring=bool(subscription_id),
                    stripe_subscription_id=subscription_id,
                    stripe_checkout_session_id=session_id,
                    stripe_payment_intent_id=session.get("payment_intent") or "",
                    stripe_customer_id=session.get("customer") or "",
                    fulfillment_token=generate_fulfillment_token() if is_ticket else None,
                    metadata=dict(metadata),
                )
        except IntegrityError:
            if Purchase.objects.filter(stripe_checkout_session_id=session_id).exists():
                # Concurrent delivery of the same event won the insert
                logger.info("purchase_already_recorded", checkout_session_id=session_id)
                return None
            raise

        counters: dict[str, Any] = {"current_amount": F("current_amount") + fees.gross}
        if is_ticket:
            counters["tickets_sold"] = F("tickets_sold") + quantity
        Fundraiser.objects.filter(pk=fundraiser.pk).update(updated_at=timezone.now(), **counters)

        queue_notification_safely(
            Notification.Kind.PURCHASE_CONFIRMATION,
            purchase.purchaser_email,
            context={
                "fundraiser_name": fundraiser.name,
                "purchaser_name": purchase.purchaser_name,
                "purchase_type": purchase.purchase_type,
                "quantity": quantity,
                "amount": str(purchase.amount),
                "fulfillment_token": purchase.fulfillment_token or "",
            },
            organization=org,
        )

    logger.info(
        "purchase_recorded",
        purchase_id=purchase.pk,
        fundraiser_id=str(fundraiser.pk),
        organization_id=str(org.pk),
        purchase_type=purchase_type,
        quantity=quantity,
        amount=fees.gross,
        net_amount=fees.net,
    )
    return purchase


def handle_charge_refunded(charge: dict[str, Any]) -> int:
    """
    Mark purchases for a refunded charge as refunded.

    Partial refunds are treated the same as full ones. Returns the number
    of purchases updated; zero for untracked charges or repeated events.
    """
    payment_intent_id = charge.get("payment_intent")
    if not payment_intent_id:
        logger.info("refund_without_payment_intent", charge_id=charge.get("id"))
        return 0

    now = timezone.now()
    updated = Purchase.objects.filter(
        stripe_payment_intent_id=payment_intent_id,
        status=Purchase.Status.COMPLETED,
    ).update(status=Purchase.Status.REFUNDED, refunded_at=now, updated_at=now)

    if updated:
        logger.info("purchase_refunded", payment_intent_id=payment_intent_id, count=updated)
    else:
        logger.info("refund_no_matching_purchase", payment_intent_id=payment_intent_id)
    return updated
