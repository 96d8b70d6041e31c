"""
Notifications models - outbox for transactional email.
"""

from django.db import models
from django.utils import timezone


class Notification(models.Model):
    """
    Pending outbound email.

    Rows are written in the same transaction as the business change that
    triggered them and sent later by the send_notifications worker, so a
    slow or failing email provider never blocks a webhook.
    """

    class Kind(models.TextChoices):
        WELCOME = "welcome", "Welcome"
        SUBSCRIPTION_CANCELED = "subscription_canceled", "Subscription Canceled"
        PURCHASE_CONFIRMATION = "purchase_confirmation", "Purchase Confirmation"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        SENT = "sent", "Sent"
        FAILED = "failed", "Failed"

    id = models.BigAutoField(primary_key=True)

    kind = models.CharField(max_length=50, choices=Kind.choices)
    recipient_email = models.EmailField()
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    context = models.JSONField(
        default=dict,
        blank=True,
        help_text="Template values, e.g. {'fundraiser_name': ...}",
    )

    # Delivery lifecycle
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    # Retry tracking
    attempts = models.PositiveIntegerField(default=0)
    next_attempt_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="When to retry sending (exponential backoff)",
    )
    last_error = models.TextField(blank=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            # Worker query: find notifications ready to send
            models.Index(fields=["status", "next_attempt_at"], name="notif_status_next_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.kind} to {self.recipient_email} ({self.status})"

    def mark_sent(self) -> None:
        self.status = self.Status.SENT
        self.sent_at = timezone.now()
        self.save(update_fields=["status", "sent_at"])

    def mark_failed(self, error: str, max_attempts: int = 10) -> None:
        """
        Record a failed send and schedule a retry with exponential backoff.

        After max_attempts, status becomes FAILED permanently.
        """
        self.attempts += 1
        self.last_error = error

        if self.attempts >= max_attempts:
            self.status = self.Status.FAILED
            self.next_attempt_at = None
        else:
            # 2s, 4s, 8s... up to 5 minutes
            delay_seconds = min(2**self.attempts, 300)
            self.next_attempt_at = timezone.now() + timezone.timedelta(seconds=delay_seconds)

        self.save(update_fields=["attempts", "last_error", "status", "next_attempt_at"])
