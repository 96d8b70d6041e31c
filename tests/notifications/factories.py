"""
Factories for notifications app models.
"""

import factory
from factory.django import DjangoModelFactory

from apps.notifications.models import Notification


class NotificationFactory(DjangoModelFactory):
    """Factory for Notification model."""

    class Meta:
        model = Notification

    kind = Notification.Kind.WELCOME
    recipient_email = factory.Sequence(lambda n: f"owner{n}@example.com")
    context = factory.LazyFunction(lambda: {"organization_name": "Sunny Days", "plan_name": "Starter"})
    status = Notification.Status.PENDING
