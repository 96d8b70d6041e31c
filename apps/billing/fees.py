"""
Fee arithmetic for fundraiser payments.

All amounts are Decimal major units (dollars) rounded half-up to cents.
Stripe reports amounts in minor units (cents); convert at the edges with
from_minor_units() / to_minor_units().
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from apps.billing.config import BillingConfig
from apps.organizations.models import Organization

CENT = Decimal("0.01")

# Stripe's published card rate (2.9% + 30c). This is an estimate: the fee
# Stripe actually charges can differ (international cards, disputes, etc.)
# and is not read back from the balance transaction.
PROVIDER_FEE_PERCENT = Decimal("2.9")
PROVIDER_FEE_FIXED = Decimal("0.30")


def quantize_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def from_minor_units(amount: int | None) -> Decimal:
    """Convert a Stripe amount in cents to dollars."""
    return quantize_cents(Decimal(amount or 0) / 100)


def to_minor_units(amount: Decimal) -> int:
    """Convert dollars to a Stripe amount in cents."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def estimate_provider_fee(gross: Decimal) -> Decimal:
    """Estimated Stripe processing fee for a gross amount."""
    return quantize_cents(gross * PROVIDER_FEE_PERCENT / 100 + PROVIDER_FEE_FIXED)


def compute_platform_fee(gross: Decimal, fee_percent: Decimal) -> Decimal:
    """Platform fee: gross x percent / 100, rounded to cents."""
    return quantize_cents(gross * fee_percent / 100)


def resolve_platform_fee_percent(org: Organization, config: BillingConfig) -> Decimal:
    """
    Fee percent for an organization.

    Explicit override on the organization, else the fee of its plan, else
    the platform default.
    """
    if org.platform_fee_percent is not None:
        return Decimal(org.platform_fee_percent)

    plan = config.get_plan(org.price_id)
    if plan is not None:
        return plan.platform_fee_percent

    return config.platform_fee_percent


@dataclass(frozen=True)
class FeeBreakdown:
    gross: Decimal
    provider_fee: Decimal
    platform_fee: Decimal

    @property
    def net(self) -> Decimal:
        """Amount left for the organization. Can be negative for tiny payments."""
        return self.gross - self.provider_fee - self.platform_fee


def compute_fee_breakdown(gross: Decimal, fee_percent: Decimal) -> FeeBreakdown:
    gross = quantize_cents(gross)
    return FeeBreakdown(
        gross=gross,
        provider_fee=estimate_provider_fee(gross),
        platform_fee=compute_platform_fee(gross, fee_percent),
    )
