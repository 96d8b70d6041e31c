"""Tests for the webhook event log."""

from unittest.mock import patch

import pytest
from django.db import DatabaseError

from apps.core.models import WebhookEventLog
from apps.core.webhooks import record_webhook_event


@pytest.mark.django_db
class TestRecordWebhookEvent:
    """Tests for record_webhook_event function."""

    def test_creates_log_row(self) -> None:
        entry = record_webhook_event("stripe", "evt_123", "invoice.paid", WebhookEventLog.Outcome.PROCESSED)

        assert entry is not None
        assert entry.source == "stripe"
        assert entry.event_id == "evt_123"
        assert entry.outcome == WebhookEventLog.Outcome.PROCESSED
        assert entry.received_at is not None

    def test_redelivery_appends_another_row(self) -> None:
        """The log is append-only and does not dedupe."""
        record_webhook_event("stripe", "evt_123", "invoice.paid", WebhookEventLog.Outcome.PROCESSED)
        record_webhook_event("stripe", "evt_123", "invoice.paid", WebhookEventLog.Outcome.PROCESSED)

        assert WebhookEventLog.objects.filter(event_id="evt_123").count() == 2

    def test_error_detail_truncated(self) -> None:
        entry = record_webhook_event(
            "stripe", "evt_1", "charge.refunded", WebhookEventLog.Outcome.FAILED, error="x" * 5000
        )

        assert entry is not None
        assert len(entry.error) == 2000

    def test_database_error_is_swallowed(self) -> None:
        """A failed log write must not break webhook handling."""
        with patch.object(WebhookEventLog.objects, "create", side_effect=DatabaseError("down")):
            entry = record_webhook_event("stripe", "evt_1", "x", WebhookEventLog.Outcome.IGNORED)

        assert entry is None
