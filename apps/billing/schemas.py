"""
Billing schemas - API request/response types and the Stripe event envelope.
"""

from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from ninja import Schema
from pydantic import BaseModel, ConfigDict, Field


class StripeEventData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    obj: dict[str, Any] = Field(alias="object")


class StripeEvent(BaseModel):
    """
    Verified Stripe webhook envelope.

    Only the fields the router reads are typed; data.object stays a dict
    because its shape depends on the event type.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    type: str
    data: StripeEventData
    account: str | None = None  # Set for events from connected accounts

    @property
    def obj(self) -> dict[str, Any]:
        return self.data.obj


class FundraiserCheckoutRequest(Schema):
    """Request to pay for tickets or donate to a fundraiser."""

    fundraiser_id: UUID
    purchase_type: Literal["ticket", "donation"]
    amount: Decimal = Field(gt=0, description="Unit amount in dollars")
    quantity: int = Field(default=1, ge=1)
    is_recurring: bool = False


class SubscriptionCheckoutRequest(Schema):
    """
    Request to subscribe an organization to a plan.

    The buyer identity comes from the bearer token, never from the body.
    """

    price_id: str
    success_url: str
    cancel_url: str


class CheckoutSessionResponse(Schema):
    """Response with Checkout session URL."""

    checkout_url: str


class PortalSessionRequest(Schema):
    """Request to open the Stripe Customer Portal."""

    return_url: str


class RedirectUrlResponse(Schema):
    """Response with a Stripe-hosted URL to redirect to."""

    url: str
