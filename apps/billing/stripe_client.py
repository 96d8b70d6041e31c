"""
Stripe client configuration.

All Stripe access goes through get_stripe() so the SDK is configured
once and tests can patch a single seam.
"""

from types import ModuleType

import stripe

from config.settings.base import settings

# Pinned so webhook payload shapes do not change under us
STRIPE_API_VERSION = "2025-06-30.basil"

# Checkout session creation is idempotent on Stripe's side for SDK retries
STRIPE_MAX_NETWORK_RETRIES = 2


def configure_stripe() -> None:
    stripe.api_key = settings.STRIPE_SECRET_KEY
    stripe.api_version = STRIPE_API_VERSION
    stripe.max_network_retries = STRIPE_MAX_NETWORK_RETRIES


def get_stripe() -> ModuleType:
    """Get the configured Stripe module."""
    configure_stripe()
    return stripe
