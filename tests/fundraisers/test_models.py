"""
Tests for fundraisers models.
"""

import pytest

from .factories import DonationCampaignFactory, FundraiserFactory


@pytest.mark.django_db
class TestFundraiser:
    def test_remaining_capacity(self) -> None:
        assert FundraiserFactory(capacity=10, tickets_sold=9).remaining_capacity == 1

    def test_remaining_capacity_never_negative(self) -> None:
        """Oversold events report zero, not a negative number."""
        assert FundraiserFactory(capacity=10, tickets_sold=12).remaining_capacity == 0

    def test_unlimited_capacity(self) -> None:
        assert FundraiserFactory(capacity=None).remaining_capacity is None

    def test_kind_helpers(self) -> None:
        assert FundraiserFactory().is_ticketed
        assert not DonationCampaignFactory().is_ticketed
