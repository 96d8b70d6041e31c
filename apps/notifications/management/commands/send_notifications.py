"""
Send notifications management command.

Polls the notification outbox and delivers pending emails through the
configured sender. Uses SELECT FOR UPDATE SKIP LOCKED for safe concurrent
execution.
"""

import random
import signal
import time

from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.logging import get_logger
from apps.notifications.models import Notification
from apps.notifications.senders import NotificationSender, get_sender
from apps.notifications.services import build_message

logger = get_logger(__name__)


class Command(BaseCommand):
    help = "Send pending notifications from the outbox"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._shutdown_requested = False

    def add_arguments(self, parser):
        parser.add_argument(
            "--once",
            action="store_true",
            help="Run once and exit (default: run continuously)",
        )
        parser.add_argument(
            "--batch-size",
            type=int,
            default=50,
            help="Number of notifications to process per batch (default: 50)",
        )
        parser.add_argument(
            "--poll-interval",
            type=float,
            default=5.0,
            help="Seconds between polls when idle (default: 5)",
        )
        parser.add_argument(
            "--max-attempts",
            type=int,
            default=10,
            help="Max send attempts before marking as failed (default: 10)",
        )

    def handle(self, *args, **options):
        self._setup_signal_handlers()

        once = options["once"]
        batch_size = options["batch_size"]
        poll_interval = options["poll_interval"]
        max_attempts = options["max_attempts"]

        sender = get_sender()
        logger.info(
            "notification_worker_started",
            sender=sender.__class__.__name__,
            batch_size=batch_size,
        )

        while not self._shutdown_requested:
            try:
                sent_count = self._send_batch(sender, batch_size, max_attempts)

                if sent_count > 0:
                    logger.info("notifications_sent", count=sent_count)
                    if not once:
                        continue

            except Exception:
                logger.exception("notification_worker_error")

            if once:
                break

            self._sleep_with_jitter(poll_interval)

        logger.info("notification_worker_shutdown")

    def _send_batch(self, sender: NotificationSender, batch_size: int, max_attempts: int) -> int:
        """
        Claim and send a batch of pending notifications.

        Rows stay locked until the batch finishes so concurrent workers skip
        them. Returns number of notifications sent.
        """
        now = timezone.now()
        sent_count = 0

        with transaction.atomic():
            notifications = list(
                Notification.objects.select_for_update(skip_locked=True)
                .filter(status=Notification.Status.PENDING)
                .filter(Q(next_attempt_at__isnull=True) | Q(next_attempt_at__lte=now))
                .order_by("created_at", "id")[:batch_size]
            )

            for notification in notifications:
                try:
                    sender.send(build_message(notification))
                except Exception as e:
                    notification.mark_failed(str(e), max_attempts)
                    logger.warning(
                        "notification_send_failed",
                        notification_id=notification.pk,
                        kind=notification.kind,
                        attempts=notification.attempts,
                        error=str(e),
                    )
                    continue

                notification.mark_sent()
                sent_count += 1

        return sent_count

    def _sleep_with_jitter(self, base_seconds: float) -> None:
        """Sleep with random jitter to avoid thundering herd."""
        jitter = base_seconds * 0.2 * random.random()
        time.sleep(base_seconds + jitter)

    def _setup_signal_handlers(self) -> None:
        """Setup graceful shutdown on SIGINT/SIGTERM."""
        for sig in (signal.SIGINT, signal.SIGTERM):
            signal.signal(sig, self._handle_signal)

    def _handle_signal(self, signum, frame) -> None:
        logger.info("notification_worker_signal_received", signal=signum)
        self._shutdown_requested = True
