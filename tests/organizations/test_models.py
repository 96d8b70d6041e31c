"""
Tests for Organization model.
"""

import pytest

from apps.organizations.models import Organization

from .factories import OrganizationFactory


@pytest.mark.django_db
class TestOrganizationSlug:
    """Slugs are public URLs and never change once assigned."""

    def test_slug_change_rejected(self) -> None:
        org = Organization.objects.get(pk=OrganizationFactory(slug="daycare-abc123").pk)
        org.slug = "daycare-other"

        with pytest.raises(ValueError, match="immutable"):
            org.save()

    def test_other_fields_can_change(self) -> None:
        org = Organization.objects.get(pk=OrganizationFactory(slug="daycare-abc123").pk)
        org.name = "Little Sprouts"
        org.save()

        org.refresh_from_db()
        assert org.name == "Little Sprouts"
        assert org.slug == "daycare-abc123"


@pytest.mark.django_db
class TestOrganizationProperties:
    def test_has_active_subscription(self) -> None:
        assert OrganizationFactory(subscription_status="active").has_active_subscription
        assert not OrganizationFactory(subscription_status="past_due").has_active_subscription

    def test_can_receive_transfers_requires_account(self) -> None:
        assert OrganizationFactory(stripe_account_id="acct_123").can_receive_transfers
        assert not OrganizationFactory(stripe_account_id="").can_receive_transfers
