"""
Webhook utilities - operational event log.
"""

from django.db import DatabaseError, transaction

from apps.core.logging import get_logger
from apps.core.models import WebhookEventLog

logger = get_logger(__name__)


def record_webhook_event(
    source: str,
    event_id: str,
    event_type: str,
    outcome: str,
    error: str = "",
) -> WebhookEventLog | None:
    """
    Append a delivery to the webhook event log.

    The log is not a behavioral dependency: a failed write is logged and
    swallowed so it can never change the response sent to the provider.

    Args:
        source: Webhook provider (e.g., 'stripe')
        event_id: Unique event identifier from the provider
        event_type: Provider event type
        outcome: One of WebhookEventLog.Outcome
        error: Error detail for failed deliveries

    Returns:
        The created log row, or None if the write failed
    """
    try:
        with transaction.atomic():
            return WebhookEventLog.objects.create(
                source=source,
                event_id=event_id,
                event_type=event_type,
                outcome=outcome,
                error=error[:2000],
            )
    except DatabaseError:
        logger.warning(
            "webhook_event_log_write_failed",
            source=source,
            event_id=event_id,
            event_type=event_type,
            exc_info=True,
        )
        return None
