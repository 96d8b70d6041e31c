"""
Billing API endpoints.

Creates Stripe Checkout sessions for fundraiser payments and plan
subscriptions, and the owner-only portal and Connect links. Payments are
recorded by the Stripe webhook, not here.
"""

import stripe
from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.billing.checkout import create_fundraiser_checkout, create_subscription_checkout
from apps.billing.exceptions import (
    CheckoutValidationError,
    FundraiserNotFoundError,
    NoBillingAccountError,
    NoConnectedAccountError,
    UnknownPlanError,
)
from apps.billing.schemas import (
    CheckoutSessionResponse,
    FundraiserCheckoutRequest,
    PortalSessionRequest,
    RedirectUrlResponse,
    SubscriptionCheckoutRequest,
)
from apps.billing.services import (
    create_connect_dashboard_link,
    create_connect_onboarding_link,
    create_customer_portal_session,
)
from apps.core.logging import get_logger
from apps.core.schemas import ErrorResponse
from apps.core.security import BearerAuth, get_optional_user
from apps.organizations.models import Organization
from apps.organizations.services import get_organization_for_owner

logger = get_logger(__name__)

router = Router(tags=["billing"])
bearer_auth = BearerAuth()


@router.post(
    "/checkout/fundraiser",
    response={
        200: CheckoutSessionResponse,
        400: ErrorResponse,
        404: ErrorResponse,
        500: ErrorResponse,
    },
    operation_id="createFundraiserCheckout",
    summary="Create Stripe Checkout session for a fundraiser",
)
def create_fundraiser_checkout_session(
    request: HttpRequest, payload: FundraiserCheckoutRequest
) -> CheckoutSessionResponse:
    """
    Start a ticket purchase or donation.

    Public endpoint. Returns URL to redirect the supporter to Stripe Checkout.
    """
    try:
        checkout_url = create_fundraiser_checkout(
            fundraiser_id=payload.fundraiser_id,
            purchase_type=payload.purchase_type,
            amount=payload.amount,
            quantity=payload.quantity,
            is_recurring=payload.is_recurring,
        )
    except FundraiserNotFoundError:
        raise HttpError(404, "Fundraiser not found")
    except CheckoutValidationError as e:
        raise HttpError(400, str(e))
    except stripe.StripeError:
        logger.exception("fundraiser_checkout_creation_failed", fundraiser_id=str(payload.fundraiser_id))
        raise HttpError(500, "Failed to create checkout session")

    return CheckoutSessionResponse(checkout_url=checkout_url)


@router.post(
    "/checkout/subscription",
    response={
        200: CheckoutSessionResponse,
        400: ErrorResponse,
        401: ErrorResponse,
        500: ErrorResponse,
    },
    operation_id="createSubscriptionCheckout",
    summary="Create Stripe Checkout session for a plan subscription",
)
def create_subscription_checkout_session(
    request: HttpRequest, payload: SubscriptionCheckoutRequest
) -> CheckoutSessionResponse:
    """
    Subscribe to a KinderCause plan. Unknown prices are rejected.

    Open to anonymous buyers. With a bearer token the session is tied to
    that user, otherwise the webhook matches the buyer by email.
    """
    user = get_optional_user(request)

    try:
        checkout_url = create_subscription_checkout(
            price_id=payload.price_id,
            success_url=payload.success_url,
            cancel_url=payload.cancel_url,
            client_reference_id=str(user.pk) if user else None,
            customer_email=user.email if user else None,
        )
    except UnknownPlanError:
        raise HttpError(400, "Unknown plan")
    except stripe.StripeError:
        logger.exception("subscription_checkout_creation_failed", price_id=payload.price_id)
        raise HttpError(500, "Failed to create checkout session")

    return CheckoutSessionResponse(checkout_url=checkout_url)


def _owned_organization(request: HttpRequest) -> Organization:
    org = get_organization_for_owner(request.auth)
    if org is None:
        raise HttpError(404, "Organization not found")
    return org


@router.post(
    "/portal",
    response={
        200: RedirectUrlResponse,
        400: ErrorResponse,
        401: ErrorResponse,
        404: ErrorResponse,
        500: ErrorResponse,
    },
    auth=bearer_auth,
    operation_id="createPortalSession",
    summary="Create Stripe Customer Portal session",
)
def create_portal(request: HttpRequest, payload: PortalSessionRequest) -> RedirectUrlResponse:
    """
    Create a Stripe Customer Portal session.

    Owner only. Returns URL to redirect the owner to manage their plan.
    """
    org = _owned_organization(request)

    try:
        portal_url = create_customer_portal_session(org=org, return_url=payload.return_url)
    except NoBillingAccountError:
        raise HttpError(400, "No billing account yet. Subscribe to a plan first.")
    except stripe.StripeError:
        logger.exception("portal_session_creation_failed", organization_id=str(org.pk))
        raise HttpError(500, "Failed to create portal session")

    return RedirectUrlResponse(url=portal_url)


@router.post(
    "/connect/onboarding",
    response={200: RedirectUrlResponse, 401: ErrorResponse, 404: ErrorResponse, 500: ErrorResponse},
    auth=bearer_auth,
    operation_id="createConnectOnboardingLink",
    summary="Start or resume Stripe Connect onboarding",
)
def create_connect_onboarding(request: HttpRequest) -> RedirectUrlResponse:
    """Owner only. Returns the Stripe-hosted onboarding URL."""
    org = _owned_organization(request)

    try:
        onboarding_url = create_connect_onboarding_link(org, email=request.auth.email)
    except stripe.StripeError:
        logger.exception("connect_onboarding_failed", organization_id=str(org.pk))
        raise HttpError(500, "Failed to create onboarding link")

    return RedirectUrlResponse(url=onboarding_url)


@router.post(
    "/connect/dashboard",
    response={200: RedirectUrlResponse, 401: ErrorResponse, 404: ErrorResponse, 500: ErrorResponse},
    auth=bearer_auth,
    operation_id="createConnectDashboardLink",
    summary="Create Stripe Express dashboard login link",
)
def create_connect_dashboard(request: HttpRequest) -> RedirectUrlResponse:
    """Owner only. Returns a single-use Express dashboard URL."""
    org = _owned_organization(request)

    try:
        dashboard_url = create_connect_dashboard_link(org)
    except NoConnectedAccountError:
        raise HttpError(404, "Stripe connection not found")
    except stripe.StripeError:
        logger.exception("connect_dashboard_link_failed", organization_id=str(org.pk))
        raise HttpError(500, "Failed to create dashboard link")

    return RedirectUrlResponse(url=dashboard_url)
