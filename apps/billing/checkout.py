"""
Stripe Checkout session builders.

build_*_params() are pure: they validate the request and return the
keyword arguments for stripe.checkout.Session.create(). The create_*()
wrappers make the Stripe call. Nothing here writes to the database;
purchases are recorded only when the webhook confirms payment.
"""

from decimal import Decimal
from typing import Any
from uuid import UUID

from django.core.exceptions import ValidationError

from apps.billing.config import BillingConfig, get_billing_config
from apps.billing.exceptions import (
    CapacityExceededError,
    CheckoutValidationError,
    FundraiserNotFoundError,
    UnknownPlanError,
)
from apps.billing.fees import resolve_platform_fee_percent, to_minor_units
from apps.billing.stripe_client import get_stripe
from apps.core.logging import get_logger
from apps.fundraisers.models import Fundraiser, Purchase

logger = get_logger(__name__)

CHECKOUT_SESSION_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"

# Purchase type each fundraiser kind accepts
PURCHASE_TYPE_FOR_KIND = {
    Fundraiser.Kind.TICKETED_EVENT: Purchase.Type.TICKET,
    Fundraiser.Kind.DONATION_CAMPAIGN: Purchase.Type.DONATION,
}


def _validate_fundraiser_request(
    fundraiser: Fundraiser,
    purchase_type: str,
    amount: Decimal,
    quantity: int,
) -> int:
    """Validate a checkout request and return the effective quantity."""
    if not fundraiser.is_active:
        raise CheckoutValidationError("Fundraiser is not accepting payments")

    if PURCHASE_TYPE_FOR_KIND.get(fundraiser.kind) != purchase_type:
        raise CheckoutValidationError(
            f"Purchase type '{purchase_type}' is not valid for this fundraiser"
        )

    if amount <= 0:
        raise CheckoutValidationError("Amount must be greater than zero")

    if purchase_type == Purchase.Type.DONATION:
        return 1

    if quantity < 1:
        raise CheckoutValidationError("Quantity must be at least 1")

    if fundraiser.ticket_price is not None and amount != fundraiser.ticket_price:
        raise CheckoutValidationError("Amount does not match the ticket price")

    # Advisory only: the webhook increment is not coordinated with this read
    remaining = fundraiser.remaining_capacity
    if remaining is not None and quantity > remaining:
        raise CapacityExceededError(remaining)

    return quantity


def build_fundraiser_checkout_params(
    fundraiser: Fundraiser,
    purchase_type: str,
    amount: Decimal,
    quantity: int,
    is_recurring: bool,
    config: BillingConfig,
) -> dict[str, Any]:
    """
    Build Checkout Session parameters for a ticket purchase or donation.

    Args:
        fundraiser: Target fundraiser, with organization loaded
        purchase_type: 'ticket' or 'donation'
        amount: Unit amount in dollars
        quantity: Number of tickets; ignored for donations
        is_recurring: Monthly donation requested
        config: Billing configuration

    Raises:
        CheckoutValidationError: Request does not fit the fundraiser
        CapacityExceededError: Not enough tickets left
    """
    amount = Decimal(amount)
    quantity = _validate_fundraiser_request(fundraiser, purchase_type, amount, quantity)
    org = fundraiser.organization

    recurring = bool(is_recurring and fundraiser.allow_recurring)
    mode = "subscription" if recurring else "payment"

    fee_percent = resolve_platform_fee_percent(org, config)
    application_fee = to_minor_units(amount * quantity * fee_percent / 100)

    metadata = {
        "fundraiser_id": str(fundraiser.pk),
        "organization_id": str(org.pk),
        "type": purchase_type,
        "quantity": str(quantity),
    }

    if purchase_type == Purchase.Type.TICKET:
        product_name = f"{fundraiser.name} - Ticket"
    else:
        product_name = f"Donation to {fundraiser.name}"

    price_data: dict[str, Any] = {
        "currency": config.currency,
        "product_data": {
            "name": product_name,
            "description": org.name,
            "metadata": metadata,
        },
        "unit_amount": to_minor_units(amount),
    }
    if recurring:
        price_data["recurring"] = {"interval": "month"}

    page_path = f"{org.slug}/{fundraiser.slug}"
    params: dict[str, Any] = {
        "mode": mode,
        # Card only: a completed session is always a paid one
        "payment_method_types": ["card"],
        "line_items": [{"price_data": price_data, "quantity": quantity}],
        "success_url": config.url(f"{page_path}/success?session_id={CHECKOUT_SESSION_PLACEHOLDER}"),
        "cancel_url": config.url(page_path),
        "metadata": metadata,
        "custom_fields": [
            {
                "key": "name",
                "label": {"type": "custom", "custom": "Your name"},
                "type": "text",
            }
        ],
        "phone_number_collection": {"enabled": True},
        "billing_address_collection": "auto",
    }

    if org.stripe_account_id:
        transfer_data = {"destination": org.stripe_account_id}
        if mode == "subscription":
            params["subscription_data"] = {
                "application_fee_percent": float(fee_percent),
                "transfer_data": transfer_data,
                "metadata": metadata,
            }
        else:
            params["payment_intent_data"] = {
                "application_fee_amount": application_fee,
                "transfer_data": transfer_data,
                "metadata": metadata,
            }

    return params


def create_fundraiser_checkout(
    fundraiser_id: UUID | str,
    purchase_type: str,
    amount: Decimal,
    quantity: int = 1,
    is_recurring: bool = False,
    config: BillingConfig | None = None,
) -> str:
    """
    Create a Checkout Session for a fundraiser and return its URL.

    Raises:
        FundraiserNotFoundError: No such fundraiser
        CheckoutValidationError: Request does not fit the fundraiser
        stripe.StripeError: Stripe API failure
    """
    config = config or get_billing_config()

    try:
        fundraiser = Fundraiser.objects.select_related("organization").get(pk=fundraiser_id)
    except (Fundraiser.DoesNotExist, ValueError, ValidationError) as e:
        raise FundraiserNotFoundError(f"Fundraiser {fundraiser_id} not found") from e

    params = build_fundraiser_checkout_params(
        fundraiser, purchase_type, amount, quantity, is_recurring, config
    )

    stripe = get_stripe()
    session = stripe.checkout.Session.create(**params)

    logger.info(
        "fundraiser_checkout_created",
        checkout_session_id=session.id,
        fundraiser_id=str(fundraiser.pk),
        mode=params["mode"],
    )
    return session.url


def build_subscription_checkout_params(
    price_id: str,
    success_url: str,
    cancel_url: str,
    config: BillingConfig,
    client_reference_id: str | None = None,
    customer_email: str | None = None,
) -> dict[str, Any]:
    """Checkout Session parameters for a SaaS plan subscription."""
    plan = config.get_plan(price_id)
    if plan is None:
        raise UnknownPlanError(f"Unknown price: {price_id}")

    params: dict[str, Any] = {
        "mode": "subscription",
        "line_items": [{"price": plan.price_id, "quantity": 1}],
        "success_url": success_url,
        "cancel_url": cancel_url,
        "allow_promotion_codes": True,
        "billing_address_collection": "auto",
        "metadata": {"plan_name": plan.name},
    }
    if client_reference_id:
        params["client_reference_id"] = client_reference_id
    if customer_email:
        params["customer_email"] = customer_email
    return params


def create_subscription_checkout(
    price_id: str,
    success_url: str,
    cancel_url: str,
    client_reference_id: str | None = None,
    customer_email: str | None = None,
    config: BillingConfig | None = None,
) -> str:
    """Create a plan subscription Checkout Session and return its URL."""
    config = config or get_billing_config()
    params = build_subscription_checkout_params(
        price_id,
        success_url,
        cancel_url,
        config,
        client_reference_id=client_reference_id,
        customer_email=customer_email,
    )

    stripe = get_stripe()
    session = stripe.checkout.Session.create(**params)

    logger.info(
        "subscription_checkout_created",
        checkout_session_id=session.id,
        price_id=price_id,
    )
    return session.url
