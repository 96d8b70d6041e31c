"""
Billing services - reconciling Stripe subscription events into organizations,
plus the owner-facing portal and Connect onboarding links.

Stripe is the source of truth. Handlers apply snapshots from webhook
payloads (last write wins) and are safe to replay. Stripe API calls are
made before any transaction is opened.
"""

from typing import Any

from django.db import transaction

from apps.accounts.services import find_or_create_user_by_email, get_user_by_reference
from apps.billing.config import BillingConfig, get_billing_config
from apps.billing.exceptions import NoBillingAccountError, NoConnectedAccountError
from apps.billing.stripe_client import get_stripe
from apps.billing.subscription_state import SubscriptionTrigger, next_status
from apps.core.logging import get_logger
from apps.notifications.models import Notification
from apps.notifications.services import queue_notification_safely
from apps.organizations.models import Organization
from apps.organizations.services import (
    create_organization_for_owner,
    default_organization_name,
    get_organization_for_account,
    get_organization_for_customer,
)

logger = get_logger(__name__)


def _get_checkout_price_id(session_id: str) -> str | None:
    """Price of the first line item of a checkout session."""
    stripe = get_stripe()
    line_items = stripe.checkout.Session.list_line_items(session_id, limit=1)
    if not line_items.data:
        return None
    price = line_items.data[0]["price"]
    return price["id"] if price else None


def _subscription_price_id(subscription: dict[str, Any]) -> str | None:
    items = (subscription.get("items") or {}).get("data") or []
    if not items:
        return None
    return (items[0].get("price") or {}).get("id")


def handle_subscription_checkout(
    session: dict[str, Any],
    config: BillingConfig | None = None,
) -> Organization | None:
    """
    Activate a plan subscription after checkout.session.completed.

    Resolves the buyer (client_reference_id, else email), then activates
    their organization, creating it on first purchase. Unknown prices and
    unresolvable buyers are logged and acknowledged.
    """
    config = config or get_billing_config()
    session_id = session["id"]

    price_id = _get_checkout_price_id(session_id)
    plan = config.get_plan(price_id)
    if plan is None:
        logger.warning(
            "subscription_checkout_unknown_plan",
            checkout_session_id=session_id,
            price_id=price_id,
        )
        return None

    customer_details = session.get("customer_details") or {}
    customer_name = customer_details.get("name") or ""
    email = customer_details.get("email") or session.get("customer_email")

    user = get_user_by_reference(session.get("client_reference_id"))
    if user is None and email:
        user, _ = find_or_create_user_by_email(email, name=customer_name)
    if user is None:
        logger.warning("subscription_checkout_no_identity", checkout_session_id=session_id)
        return None

    fields = {
        "stripe_customer_id": session.get("customer") or "",
        "price_id": plan.price_id,
        "plan_name": plan.name,
    }

    with transaction.atomic():
        org = Organization.objects.select_for_update().filter(owner=user).first()
        created = False
        was_active = (
            org is not None and org.subscription_status == Organization.SubscriptionStatus.ACTIVE
        )
        if org is None:
            org, created = create_organization_for_owner(
                user,
                default_organization_name(customer_name or user.name),
                subscription_status=next_status(
                    Organization.SubscriptionStatus.NONE,
                    SubscriptionTrigger.CHECKOUT_COMPLETED,
                ),
                **fields,
            )
        if not created:
            for name, value in fields.items():
                setattr(org, name, value)
            org.subscription_status = next_status(
                org.subscription_status, SubscriptionTrigger.CHECKOUT_COMPLETED
            )
            org.save(update_fields=[*fields, "subscription_status", "updated_at"])

        # A replayed checkout for an already-active org sends nothing
        if created or not was_active:
            queue_notification_safely(
                Notification.Kind.WELCOME,
                user.email,
                context={"organization_name": org.name, "plan_name": plan.name},
                organization=org,
            )

    logger.info(
        "subscription_activated",
        organization_id=str(org.pk),
        user_id=str(user.pk),
        plan_name=plan.name,
    )
    return org


def handle_subscription_updated(
    subscription: dict[str, Any],
    config: BillingConfig | None = None,
) -> Organization | None:
    """
    Apply a customer.subscription.updated snapshot.

    Status is mapped from the Stripe status. The price is overwritten;
    the plan name only changes when the price is in the catalog.
    """
    config = config or get_billing_config()
    customer_id = subscription.get("customer")

    org = get_organization_for_customer(customer_id)
    if org is None:
        logger.info("subscription_update_unknown_customer", customer_id=customer_id)
        return None

    old_status = org.subscription_status
    org.subscription_status = next_status(
        old_status,
        SubscriptionTrigger.PROVIDER_UPDATED,
        provider_status=subscription.get("status"),
    )

    price_id = _subscription_price_id(subscription)
    if price_id:
        org.price_id = price_id
        plan = config.get_plan(price_id)
        if plan is not None:
            org.plan_name = plan.name

    org.save(update_fields=["subscription_status", "price_id", "plan_name", "updated_at"])

    logger.info(
        "subscription_updated",
        organization_id=str(org.pk),
        old_status=old_status,
        new_status=org.subscription_status,
        provider_status=subscription.get("status"),
        price_id=org.price_id,
    )
    return org


def handle_subscription_deleted(subscription: dict[str, Any]) -> Organization | None:
    """Mark the organization's subscription canceled and notify the owner."""
    customer_id = subscription.get("customer")

    org = get_organization_for_customer(customer_id)
    if org is None:
        logger.info("subscription_delete_unknown_customer", customer_id=customer_id)
        return None

    with transaction.atomic():
        org.subscription_status = next_status(
            org.subscription_status, SubscriptionTrigger.PROVIDER_DELETED
        )
        org.save(update_fields=["subscription_status", "updated_at"])

        owner_email = org.owner.email if org.owner_id else None
        queue_notification_safely(
            Notification.Kind.SUBSCRIPTION_CANCELED,
            owner_email,
            context={"organization_name": org.name},
            organization=org,
        )

    logger.info("subscription_canceled", organization_id=str(org.pk))
    return org


def handle_invoice_paid(invoice: dict[str, Any]) -> Organization | None:
    """Recover a past-due organization once an invoice is paid."""
    customer_id = invoice.get("customer")

    org = get_organization_for_customer(customer_id)
    if org is None:
        logger.info("invoice_paid_unknown_customer", customer_id=customer_id)
        return None

    new_status = next_status(org.subscription_status, SubscriptionTrigger.INVOICE_PAID)
    if new_status != org.subscription_status:
        logger.info(
            "subscription_recovered",
            organization_id=str(org.pk),
            old_status=org.subscription_status,
            new_status=new_status,
        )
        org.subscription_status = new_status
        org.save(update_fields=["subscription_status", "updated_at"])

    logger.info("stripe_invoice_paid", invoice_id=invoice.get("id"), organization_id=str(org.pk))
    return org


def handle_account_updated(account: dict[str, Any], account_id: str | None = None) -> Organization | None:
    """
    Sync a connected account's payout readiness.

    The account is active only when it can both take charges and receive
    payouts.
    """
    account_id = account_id or account.get("id")

    org = get_organization_for_account(account_id)
    if org is None:
        logger.info("account_update_unknown_account", account_id=account_id)
        return None

    if account.get("charges_enabled") and account.get("payouts_enabled"):
        status = Organization.AccountStatus.ACTIVE
    else:
        status = Organization.AccountStatus.PENDING

    if org.stripe_account_status != status:
        org.stripe_account_status = status
        org.save(update_fields=["stripe_account_status", "updated_at"])

    logger.info("connected_account_synced", organization_id=str(org.pk), account_status=status)
    return org


def create_customer_portal_session(org: Organization, return_url: str) -> str:
    """
    Create a Stripe Customer Portal session for managing the plan.

    Returns the portal URL.
    """
    if not org.stripe_customer_id:
        raise NoBillingAccountError("Organization has no Stripe customer")

    stripe = get_stripe()

    session = stripe.billing_portal.Session.create(
        customer=org.stripe_customer_id,
        return_url=return_url,
    )

    return session.url


def create_connect_onboarding_link(
    org: Organization,
    email: str,
    config: BillingConfig | None = None,
) -> str:
    """
    Start or resume Stripe Connect onboarding for an organization.

    Creates an Express account on first use and marks it pending until
    account.updated reports it can take charges and receive payouts.
    Returns the onboarding URL.
    """
    config = config or get_billing_config()
    stripe = get_stripe()

    if not org.stripe_account_id:
        account = stripe.Account.create(
            type="express",
            email=email,
            capabilities={
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
            business_type="non_profit",
            company={"name": org.name},
            metadata={"organization_id": str(org.pk)},
        )
        org.stripe_account_id = account.id
        org.stripe_account_status = Organization.AccountStatus.PENDING
        org.save(update_fields=["stripe_account_id", "stripe_account_status", "updated_at"])

        logger.info(
            "connected_account_created",
            organization_id=str(org.pk),
            account_id=account.id,
        )

    account_link = stripe.AccountLink.create(
        account=org.stripe_account_id,
        refresh_url=config.url("dashboard/settings?connect=refresh"),
        return_url=config.url("dashboard/settings?connect=success"),
        type="account_onboarding",
    )
    return account_link.url


def create_connect_dashboard_link(org: Organization) -> str:
    """Single-use login link to the connected account's Express dashboard."""
    if not org.stripe_account_id:
        raise NoConnectedAccountError("Organization has no connected account")

    stripe = get_stripe()
    login_link = stripe.Account.create_login_link(org.stripe_account_id)
    return login_link.url
