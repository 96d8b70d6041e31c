"""
Shared pytest fixtures for all tests.

Factories
---------
Import factories directly from their modules:

    from tests.accounts.factories import UserFactory
    from tests.organizations.factories import OrganizationFactory
    from tests.fundraisers.factories import FundraiserFactory, PurchaseFactory
    from tests.notifications.factories import NotificationFactory

Billing configuration
---------------------
Handlers take an injected BillingConfig. Use the billing_config fixture
instead of patching settings:

    def test_fee(billing_config):
        handle_fundraiser_purchase(session, billing_config)
"""

import hashlib
import hmac
import time
from collections.abc import Callable
from decimal import Decimal
from typing import Any

import pytest

from apps.billing.config import BillingConfig, Plan

WEBHOOK_SECRET = "whsec_test_secret"
STARTER_PRICE_ID = "price_starter"
GROWTH_PRICE_ID = "price_growth"


@pytest.fixture
def billing_config() -> BillingConfig:
    """Billing configuration with a 3% default fee and two plans."""
    return BillingConfig(
        platform_fee_percent=Decimal("3"),
        app_base_url="https://kindercause.test",
        plans=(
            Plan(name="Starter", price_id=STARTER_PRICE_ID, platform_fee_percent=Decimal("3")),
            Plan(name="Growth", price_id=GROWTH_PRICE_ID, platform_fee_percent=Decimal("2")),
        ),
        webhook_secret=WEBHOOK_SECRET,
        webhook_tolerance=300,
    )


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header the way Stripe does."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload}".encode()
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def build_event(
    event_type: str,
    data_object: dict[str, Any],
    event_id: str = "evt_test_123",
    account: str | None = None,
) -> dict[str, Any]:
    """Build a Stripe webhook event payload."""
    event: dict[str, Any] = {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "data": {"object": data_object},
    }
    if account:
        event["account"] = account
    return event


@pytest.fixture
def checkout_session() -> Callable[..., dict[str, Any]]:
    """
    Factory for checkout.session.completed objects.

    Defaults to a single $20 ticket; pass fundraiser_id=None for a plan
    subscription session.
    """

    def _build(
        fundraiser_id: str | None = None,
        session_id: str = "cs_123",
        purchase_type: str = "ticket",
        quantity: int = 1,
        amount_total: int = 2000,
        **overrides: Any,
    ) -> dict[str, Any]:
        metadata: dict[str, str] = {}
        if fundraiser_id is not None:
            metadata = {
                "fundraiser_id": fundraiser_id,
                "type": purchase_type,
                "quantity": str(quantity),
            }
        session: dict[str, Any] = {
            "id": session_id,
            "object": "checkout.session",
            "amount_total": amount_total,
            "customer": "cus_test_123",
            "customer_details": {
                "email": "parent@example.com",
                "name": "Pat Parent",
                "phone": "+15555550100",
            },
            "custom_fields": [],
            "metadata": metadata,
            "mode": "payment",
            "payment_intent": "pi_test_123",
            "payment_status": "paid",
            "subscription": None,
        }
        session.update(overrides)
        return session

    return _build
