"""Billing-specific exceptions."""


class BillingError(Exception):
    """Base exception for billing errors."""

    pass


class FundraiserNotFoundError(BillingError):
    """Raised when a fundraiser referenced by checkout or a webhook does not exist."""

    pass


class CheckoutValidationError(BillingError):
    """Raised when a checkout request is invalid for the fundraiser."""

    pass


class CapacityExceededError(CheckoutValidationError):
    """Raised when more tickets are requested than remain."""

    def __init__(self, remaining: int):
        super().__init__(f"Only {remaining} tickets remaining")
        self.remaining = remaining


class UnknownPlanError(BillingError):
    """Raised when a price ID is not in the plan catalog."""

    pass


class NoBillingAccountError(BillingError):
    """Raised when an organization has no Stripe customer yet."""

    pass


class NoConnectedAccountError(BillingError):
    """Raised when an organization has not started Stripe Connect onboarding."""

    pass
