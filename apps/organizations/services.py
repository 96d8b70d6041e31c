"""
Organizations services - lookup and creation helpers used by billing reconciliation.
"""

import secrets

from django.db import IntegrityError, transaction

from apps.accounts.models import User
from apps.core.logging import get_logger
from apps.organizations.models import Organization

logger = get_logger(__name__)

DEFAULT_SLUG_PREFIX = "daycare"
SLUG_ATTEMPTS = 10


def generate_slug_candidate(prefix: str = DEFAULT_SLUG_PREFIX) -> str:
    """Random URL-safe slug, e.g. 'daycare-3f9a1c'."""
    return f"{prefix}-{secrets.token_hex(3)}"


def generate_unique_slug(prefix: str = DEFAULT_SLUG_PREFIX) -> str:
    """
    Generate a slug not yet used by any organization.

    The check is advisory; create_organization_for_owner() still relies on
    the unique constraint and retries on collision.
    """
    for _ in range(SLUG_ATTEMPTS):
        candidate = generate_slug_candidate(prefix)
        if not Organization.objects.filter(slug=candidate).exists():
            return candidate
    raise RuntimeError(f"Could not generate a unique organization slug after {SLUG_ATTEMPTS} attempts")


def default_organization_name(customer_name: str | None) -> str:
    if customer_name:
        return f"{customer_name}'s Daycare"
    return "My Daycare"


def create_organization_for_owner(owner: User, name: str, **fields) -> tuple[Organization, bool]:
    """
    Create the owner's Organization with a generated unique slug.

    If a concurrent request already created one for this owner, that row
    is returned instead.

    Returns:
        Tuple of (organization, created)
    """
    for _ in range(SLUG_ATTEMPTS):
        try:
            with transaction.atomic():
                org = Organization.objects.create(
                    owner=owner,
                    name=name,
                    slug=generate_unique_slug(),
                    **fields,
                )
            logger.info("organization_created", organization_id=str(org.pk), slug=org.slug)
            return org, True
        except IntegrityError:
            existing = Organization.objects.filter(owner=owner).first()
            if existing is not None:
                # Concurrent insert won the race, fetch the winner
                return existing, False
            logger.warning("organization_slug_collision", owner_id=str(owner.pk))

    raise RuntimeError(f"Could not create organization for user {owner.pk}")


def get_organization_for_customer(customer_id: str | None) -> Organization | None:
    """Find the organization linked to a Stripe customer."""
    if not customer_id:
        return None
    return Organization.objects.filter(stripe_customer_id=customer_id).first()


def get_organization_for_account(account_id: str | None) -> Organization | None:
    """Find the organization linked to a Stripe connected account."""
    if not account_id:
        return None
    return Organization.objects.filter(stripe_account_id=account_id).first()


def get_organization_for_owner(owner: User) -> Organization | None:
    return Organization.objects.filter(owner=owner).first()
