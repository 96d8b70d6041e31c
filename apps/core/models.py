"""
Core models - shared base classes and the webhook event log.
"""

from django.db import models


class TimestampedModel(models.Model):
    """
    Abstract base model with created_at/updated_at timestamps.

    All business entities should inherit from this.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class WebhookEventLog(models.Model):
    """
    Append-only log of inbound provider events.

    One row per delivery, so redeliveries of the same event appear
    multiple times. Used for replay and debugging only; handlers never
    read it and idempotency does not depend on it.
    """

    class Outcome(models.TextChoices):
        PROCESSED = "processed", "Processed"
        IGNORED = "ignored", "Ignored"
        FAILED = "failed", "Failed"

    source = models.CharField(
        max_length=50,
        help_text="Webhook provider, e.g. 'stripe'",
    )
    event_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Provider event ID, e.g. 'evt_xxx'",
    )
    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Provider event type, e.g. 'checkout.session.completed'",
    )
    outcome = models.CharField(
        max_length=20,
        choices=Outcome.choices,
    )
    error = models.TextField(blank=True)
    received_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-received_at"]
        indexes = [
            models.Index(fields=["source", "event_id"], name="core_webhook_source_event_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.source}:{self.event_type} {self.event_id} ({self.outcome})"
