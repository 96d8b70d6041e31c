"""
Billing configuration.

Fee percentages, the plan catalog and redirect settings are collected into
one immutable object that is passed into the webhook router, the
reconciliation handlers and the checkout builders. Tests construct their
own instance instead of patching settings.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from config.settings.base import settings


@dataclass(frozen=True)
class Plan:
    """A SaaS subscription plan sold to organizations."""

    name: str
    price_id: str
    platform_fee_percent: Decimal


@dataclass(frozen=True)
class BillingConfig:
    """Immutable billing configuration."""

    platform_fee_percent: Decimal
    app_base_url: str
    plans: tuple[Plan, ...] = field(default_factory=tuple)
    webhook_secret: str = ""
    webhook_tolerance: int = 300
    currency: str = "usd"

    def get_plan(self, price_id: str | None) -> Plan | None:
        """Find a plan by its Stripe price ID."""
        if not price_id:
            return None
        for plan in self.plans:
            if plan.price_id == price_id:
                return plan
        return None

    def url(self, path: str) -> str:
        """Absolute app URL for a path."""
        return f"{self.app_base_url.rstrip('/')}/{path.lstrip('/')}"


def get_billing_config() -> BillingConfig:
    """Build the billing configuration from environment settings."""
    return BillingConfig(
        platform_fee_percent=settings.PLATFORM_FEE_PERCENT,
        app_base_url=settings.APP_BASE_URL,
        plans=(
            Plan(
                name="Starter",
                price_id=settings.STRIPE_STARTER_PRICE_ID,
                platform_fee_percent=Decimal("3"),
            ),
            Plan(
                name="Growth",
                price_id=settings.STRIPE_GROWTH_PRICE_ID,
                platform_fee_percent=Decimal("2"),
            ),
        ),
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        webhook_tolerance=settings.STRIPE_WEBHOOK_TOLERANCE,
    )
