"""
Organizations models - multi-tenancy foundation.
"""

from django.db import models

from apps.core.models import TimestampedModel


class Organization(TimestampedModel):
    """
    A tenant account (one daycare).

    Subscription linkage lives directly on the organization and is
    reconciled from Stripe webhooks. Stripe is the source of truth.
    """

    class SubscriptionStatus(models.TextChoices):
        NONE = "none", "None"
        ACTIVE = "active", "Active"
        PAST_DUE = "past_due", "Past Due"
        CANCELED = "canceled", "Canceled"

    class AccountStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        ACTIVE = "active", "Active"

    owner = models.OneToOneField(
        "accounts.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="organization",
    )

    # Organization info
    name = models.CharField(max_length=255)
    slug = models.SlugField(
        max_length=255,
        unique=True,
        help_text="URL-safe public identifier, immutable once assigned",
    )
    is_nonprofit = models.BooleanField(default=False)

    # Stripe customer (populated on first subscription payment)
    stripe_customer_id = models.CharField(
        max_length=255,
        blank=True,
        db_index=True,
        help_text="Stripe customer ID, e.g. 'cus_xxx'",
    )

    # Stripe Connect payout account (populated by payout onboarding)
    stripe_account_id = models.CharField(
        max_length=255,
        blank=True,
        db_index=True,
        help_text="Stripe connected account ID, e.g. 'acct_xxx'",
    )
    stripe_account_status = models.CharField(
        max_length=20,
        choices=AccountStatus.choices,
        blank=True,
    )

    # SaaS subscription
    subscription_status = models.CharField(
        max_length=20,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.NONE,
        db_index=True,
    )
    price_id = models.CharField(
        max_length=255,
        blank=True,
        help_text="Stripe price ID of the current plan, e.g. 'price_xxx'",
    )
    plan_name = models.CharField(max_length=100, blank=True)

    # Fee category override; null falls back to the plan's fee
    platform_fee_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Platform fee in percent, overrides the plan default",
    )

    _loaded_slug: str | None = None

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        if "slug" in field_names:
            instance._loaded_slug = instance.slug
        return instance

    def save(self, *args, **kwargs) -> None:
        if self._loaded_slug and self.slug != self._loaded_slug:
            raise ValueError("Organization slug is immutable once assigned")
        super().save(*args, **kwargs)
        self._loaded_slug = self.slug

    @property
    def has_active_subscription(self) -> bool:
        return self.subscription_status == self.SubscriptionStatus.ACTIVE

    @property
    def can_receive_transfers(self) -> bool:
        """Payments route to the connected account whenever one exists."""
        return bool(self.stripe_account_id)
