"""
Accounts models - auth identities.
"""

from django.db import models

from apps.core.models import TimestampedModel


def normalize_email(email: str) -> str:
    """Lowercase and strip an email so identities correlate regardless of casing."""
    return email.strip().lower()


class UserManager(models.Manager):
    """Custom manager for User model."""

    def create_user(self, email: str, **extra_fields) -> "User":
        """Create and return a user."""
        if not email:
            raise ValueError("Email is required")

        return self.create(email=normalize_email(email), **extra_fields)


class User(TimestampedModel):
    """
    Auth identity, correlated by email.

    Authentication itself lives outside this service; this table only
    links a paying customer to the Organization they own.
    """

    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=255, blank=True)

    objects = UserManager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.email
