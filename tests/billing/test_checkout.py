"""
Tests for Checkout Session builders.

Parameter building is pure; Stripe is mocked where a session is created.
"""

from decimal import Decimal
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from apps.billing.checkout import (
    build_fundraiser_checkout_params,
    build_subscription_checkout_params,
    create_fundraiser_checkout,
    create_subscription_checkout,
)
from apps.billing.exceptions import (
    CapacityExceededError,
    CheckoutValidationError,
    FundraiserNotFoundError,
    UnknownPlanError,
)
from apps.fundraisers.models import Fundraiser
from tests.fundraisers.factories import DonationCampaignFactory, FundraiserFactory
from tests.organizations.factories import OrganizationFactory


@pytest.mark.django_db
class TestBuildFundraiserCheckoutParams:
    """Tests for build_fundraiser_checkout_params."""

    def test_ticket_payment_params(self, billing_config) -> None:
        org = OrganizationFactory(slug="daycare-abc123", name="Sunny Days")
        fundraiser = FundraiserFactory(organization=org, slug="spring-gala", name="Spring Gala")

        params = build_fundraiser_checkout_params(
            fundraiser, "ticket", Decimal("20.00"), 2, False, billing_config
        )

        assert params["mode"] == "payment"
        assert params["payment_method_types"] == ["card"]
        line_item = params["line_items"][0]
        assert line_item["quantity"] == 2
        assert line_item["price_data"]["unit_amount"] == 2000
        assert line_item["price_data"]["currency"] == "usd"
        assert line_item["price_data"]["product_data"]["name"] == "Spring Gala - Ticket"
        assert line_item["price_data"]["product_data"]["description"] == "Sunny Days"
        assert "recurring" not in line_item["price_data"]
        assert params["success_url"] == (
            "https://kindercause.test/daycare-abc123/spring-gala/success"
            "?session_id={CHECKOUT_SESSION_ID}"
        )
        assert params["cancel_url"] == "https://kindercause.test/daycare-abc123/spring-gala"
        assert params["metadata"] == {
            "fundraiser_id": str(fundraiser.pk),
            "organization_id": str(org.pk),
            "type": "ticket",
            "quantity": "2",
        }
        assert params["phone_number_collection"] == {"enabled": True}
        assert params["billing_address_collection"] == "auto"
        assert params["custom_fields"][0]["key"] == "name"

    def test_no_connected_account_means_no_transfer(self, billing_config) -> None:
        fundraiser = FundraiserFactory(organization__stripe_account_id="")

        params = build_fundraiser_checkout_params(
            fundraiser, "ticket", Decimal("20.00"), 1, False, billing_config
        )

        assert "payment_intent_data" not in params
        assert "subscription_data" not in params

    def test_connected_account_payment_routes_transfer(self, billing_config) -> None:
        """Application fee covers every ticket in the order."""
        fundraiser = FundraiserFactory(organization__stripe_account_id="acct_123")

        params = build_fundraiser_checkout_params(
            fundraiser, "ticket", Decimal("20.00"), 3, False, billing_config
        )

        intent_data = params["payment_intent_data"]
        # 20.00 x 3 x 3% = 1.80
        assert intent_data["application_fee_amount"] == 180
        assert intent_data["transfer_data"] == {"destination": "acct_123"}

    def test_application_fee_uses_plan_fee(self, billing_config) -> None:
        fundraiser = FundraiserFactory(
            organization__stripe_account_id="acct_123",
            organization__price_id="price_growth",
        )

        params = build_fundraiser_checkout_params(
            fundraiser, "ticket", Decimal("20.00"), 1, False, billing_config
        )

        assert params["payment_intent_data"]["application_fee_amount"] == 40

    def test_recurring_donation_uses_subscription_mode(self, billing_config) -> None:
        fundraiser = DonationCampaignFactory(
            allow_recurring=True,
            organization__stripe_account_id="acct_123",
        )

        params = build_fundraiser_checkout_params(
            fundraiser, "donation", Decimal("25.00"), 1, True, billing_config
        )

        assert params["mode"] == "subscription"
        price_data = params["line_items"][0]["price_data"]
        assert price_data["recurring"] == {"interval": "month"}
        assert price_data["product_data"]["name"] == f"Donation to {fundraiser.name}"
        assert params["subscription_data"]["application_fee_percent"] == 3.0
        assert params["subscription_data"]["transfer_data"] == {"destination": "acct_123"}
        assert "payment_intent_data" not in params

    def test_recurring_ignored_when_not_allowed(self, billing_config) -> None:
        fundraiser = DonationCampaignFactory(allow_recurring=False)

        params = build_fundraiser_checkout_params(
            fundraiser, "donation", Decimal("25.00"), 1, True, billing_config
        )

        assert params["mode"] == "payment"
        assert "recurring" not in params["line_items"][0]["price_data"]

    def test_donation_quantity_forced_to_one(self, billing_config) -> None:
        fundraiser = DonationCampaignFactory()

        params = build_fundraiser_checkout_params(
            fundraiser, "donation", Decimal("10.00"), 5, False, billing_config
        )

        assert params["line_items"][0]["quantity"] == 1
        assert params["metadata"]["quantity"] == "1"


@pytest.mark.django_db
class TestCheckoutValidation:
    """Requests that do not fit the fundraiser are rejected before Stripe."""

    def test_inactive_fundraiser_rejected(self, billing_config) -> None:
        fundraiser = FundraiserFactory(status=Fundraiser.Status.DRAFT)

        with pytest.raises(CheckoutValidationError):
            build_fundraiser_checkout_params(
                fundraiser, "ticket", Decimal("20.00"), 1, False, billing_config
            )

    def test_purchase_type_must_match_kind(self, billing_config) -> None:
        with pytest.raises(CheckoutValidationError):
            build_fundraiser_checkout_params(
                FundraiserFactory(), "donation", Decimal("20.00"), 1, False, billing_config
            )
        with pytest.raises(CheckoutValidationError):
            build_fundraiser_checkout_params(
                DonationCampaignFactory(), "ticket", Decimal("20.00"), 1, False, billing_config
            )

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_amount_must_be_positive(self, billing_config, amount) -> None:
        with pytest.raises(CheckoutValidationError):
            build_fundraiser_checkout_params(
                DonationCampaignFactory(), "donation", amount, 1, False, billing_config
            )

    def test_ticket_quantity_must_be_positive(self, billing_config) -> None:
        with pytest.raises(CheckoutValidationError):
            build_fundraiser_checkout_params(
                FundraiserFactory(), "ticket", Decimal("20.00"), 0, False, billing_config
            )

    def test_ticket_amount_must_match_price(self, billing_config) -> None:
        fundraiser = FundraiserFactory(ticket_price=Decimal("20.00"))

        with pytest.raises(CheckoutValidationError, match="ticket price"):
            build_fundraiser_checkout_params(
                fundraiser, "ticket", Decimal("1.00"), 1, False, billing_config
            )

    def test_capacity_exceeded(self, billing_config) -> None:
        fundraiser = FundraiserFactory(capacity=10, tickets_sold=8)

        with pytest.raises(CapacityExceededError) as exc_info:
            build_fundraiser_checkout_params(
                fundraiser, "ticket", Decimal("20.00"), 3, False, billing_config
            )

        assert exc_info.value.remaining == 2
        assert str(exc_info.value) == "Only 2 tickets remaining"

    def test_last_tickets_can_be_bought(self, billing_config) -> None:
        fundraiser = FundraiserFactory(capacity=10, tickets_sold=8)

        params = build_fundraiser_checkout_params(
            fundraiser, "ticket", Decimal("20.00"), 2, False, billing_config
        )

        assert params["line_items"][0]["quantity"] == 2

    def test_unlimited_capacity(self, billing_config) -> None:
        fundraiser = FundraiserFactory(capacity=None, tickets_sold=5000)

        params = build_fundraiser_checkout_params(
            fundraiser, "ticket", Decimal("20.00"), 50, False, billing_config
        )

        assert params["line_items"][0]["quantity"] == 50


@pytest.mark.django_db
class TestCreateFundraiserCheckout:
    """Tests for create_fundraiser_checkout."""

    @patch("apps.billing.checkout.get_stripe")
    def test_returns_session_url(self, mock_get_stripe, billing_config) -> None:
        mock_stripe = MagicMock()
        mock_get_stripe.return_value = mock_stripe
        mock_stripe.checkout.Session.create.return_value = MagicMock(
            id="cs_new", url="https://checkout.stripe.com/c/pay/cs_new"
        )
        fundraiser = FundraiserFactory()

        url = create_fundraiser_checkout(
            fundraiser.pk, "ticket", Decimal("20.00"), 1, config=billing_config
        )

        assert url == "https://checkout.stripe.com/c/pay/cs_new"
        call_kwargs = mock_stripe.checkout.Session.create.call_args[1]
        assert call_kwargs["metadata"]["fundraiser_id"] == str(fundraiser.pk)

    @patch("apps.billing.checkout.get_stripe")
    def test_unknown_fundraiser(self, mock_get_stripe, billing_config) -> None:
        with pytest.raises(FundraiserNotFoundError):
            create_fundraiser_checkout(uuid4(), "ticket", Decimal("20.00"), config=billing_config)

        mock_get_stripe.return_value.checkout.Session.create.assert_not_called()

    @patch("apps.billing.checkout.get_stripe")
    def test_validation_error_skips_stripe(self, mock_get_stripe, billing_config) -> None:
        fundraiser = FundraiserFactory(capacity=1, tickets_sold=1)

        with pytest.raises(CapacityExceededError):
            create_fundraiser_checkout(fundraiser.pk, "ticket", Decimal("20.00"), config=billing_config)

        mock_get_stripe.return_value.checkout.Session.create.assert_not_called()


class TestSubscriptionCheckout:
    """Tests for plan subscription checkout."""

    def test_params_for_known_plan(self, billing_config) -> None:
        params = build_subscription_checkout_params(
            "price_starter",
            "https://kindercause.test/welcome",
            "https://kindercause.test/pricing",
            billing_config,
            client_reference_id="42",
            customer_email="owner@example.com",
        )

        assert params["mode"] == "subscription"
        assert params["line_items"] == [{"price": "price_starter", "quantity": 1}]
        assert params["client_reference_id"] == "42"
        assert params["customer_email"] == "owner@example.com"

    def test_optional_identity_omitted(self, billing_config) -> None:
        params = build_subscription_checkout_params(
            "price_growth", "https://a.test/ok", "https://a.test/no", billing_config
        )

        assert "client_reference_id" not in params
        assert "customer_email" not in params

    def test_unknown_price_rejected(self, billing_config) -> None:
        with pytest.raises(UnknownPlanError):
            build_subscription_checkout_params(
                "price_unknown", "https://a.test/ok", "https://a.test/no", billing_config
            )

    @patch("apps.billing.checkout.get_stripe")
    def test_create_returns_url(self, mock_get_stripe, billing_config) -> None:
        mock_get_stripe.return_value.checkout.Session.create.return_value = MagicMock(
            id="cs_sub", url="https://checkout.stripe.com/c/pay/cs_sub"
        )

        url = create_subscription_checkout(
            "price_starter", "https://a.test/ok", "https://a.test/no", config=billing_config
        )

        assert url == "https://checkout.stripe.com/c/pay/cs_sub"
