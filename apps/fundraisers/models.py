"""
Fundraisers models - events, campaigns and the purchases made against them.
"""

import uuid
from decimal import Decimal

from django.db import models

from apps.core.models import TimestampedModel


class Fundraiser(TimestampedModel):
    """
    A ticketed event or a donation campaign run by an organization.

    tickets_sold and current_amount are running totals maintained by the
    purchase handler with atomic increments; nothing else writes them.
    """

    class Kind(models.TextChoices):
        TICKETED_EVENT = "ticketed_event", "Ticketed Event"
        DONATION_CAMPAIGN = "donation_campaign", "Donation Campaign"

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        ACTIVE = "active", "Active"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="fundraisers",
    )

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    kind = models.CharField(max_length=30, choices=Kind.choices)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
        db_index=True,
    )

    # Ticketed events
    ticket_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    capacity = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Maximum tickets; empty means unlimited",
    )
    tickets_sold = models.PositiveIntegerField(default=0)

    # Donation campaigns
    goal_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    current_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    allow_recurring = models.BooleanField(default=False)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name

    @property
    def is_ticketed(self) -> bool:
        return self.kind == self.Kind.TICKETED_EVENT

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    @property
    def remaining_capacity(self) -> int | None:
        """Tickets left, or None when capacity is unlimited."""
        if self.capacity is None:
            return None
        return max(self.capacity - self.tickets_sold, 0)


class Purchase(TimestampedModel):
    """
    A completed payment against a fundraiser.

    Created once per Stripe checkout session; stripe_checkout_session_id is
    the idempotency key. Only refunds mutate a purchase afterwards.
    """

    class Type(models.TextChoices):
        TICKET = "ticket", "Ticket"
        DONATION = "donation", "Donation"

    class Status(models.TextChoices):
        COMPLETED = "completed", "Completed"
        REFUNDED = "refunded", "Refunded"

    fundraiser = models.ForeignKey(
        Fundraiser,
        on_delete=models.PROTECT,
        related_name="purchases",
    )
    purchase_type = models.CharField(max_length=20, choices=Type.choices)

    # Purchaser as captured by Stripe Checkout
    purchaser_name = models.CharField(max_length=255)
    purchaser_email = models.EmailField(blank=True)
    purchaser_phone = models.CharField(max_length=50, blank=True)

    # Money, in dollars
    amount = models.DecimalField(max_digits=10, decimal_places=2, help_text="Gross amount")
    provider_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Estimated Stripe processing fee",
    )
    platform_fee = models.DecimalField(max_digits=10, decimal_places=2)
    net_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Gross minus fees; may be negative",
    )
    quantity = models.PositiveIntegerField(default=1)

    # Recurring donations
    is_recurring = models.BooleanField(default=False)
    stripe_subscription_id = models.CharField(max_length=255, blank=True)

    # Stripe references
    stripe_checkout_session_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Checkout session ID, e.g. 'cs_xxx'; idempotency key",
    )
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True, db_index=True)
    stripe_customer_id = models.CharField(max_length=255, blank=True)

    fulfillment_token = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="Unguessable ticket token for check-in",
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.COMPLETED,
        db_index=True,
    )
    refunded_at = models.DateTimeField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.purchase_type} {self.amount} ({self.stripe_checkout_session_id})"
