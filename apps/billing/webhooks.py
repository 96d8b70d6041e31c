"""
Stripe webhook handler.

Handles incoming webhooks from Stripe for fundraiser payments, plan
subscriptions and connected accounts. This is a separate view (not
Django Ninja) for raw request handling needed to verify Stripe
signatures.
"""

import stripe
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST
from pydantic import ValidationError

from apps.billing.config import BillingConfig, get_billing_config
from apps.billing.schemas import StripeEvent
from apps.billing.services import (
    handle_account_updated,
    handle_invoice_paid,
    handle_subscription_checkout,
    handle_subscription_deleted,
    handle_subscription_updated,
)
from apps.billing.stripe_client import get_stripe
from apps.core.logging import bind_contextvars, get_logger
from apps.core.models import WebhookEventLog
from apps.core.webhooks import record_webhook_event
from apps.fundraisers.services import handle_charge_refunded, handle_fundraiser_purchase

logger = get_logger(__name__)

WEBHOOK_SOURCE = "stripe"

PROCESSED = WebhookEventLog.Outcome.PROCESSED
IGNORED = WebhookEventLog.Outcome.IGNORED


def dispatch_event(event: StripeEvent, config: BillingConfig) -> str:
    """
    Route a verified event to its handler.

    Returns the outcome recorded in the webhook log. Handler exceptions
    propagate so the view can answer 500 and Stripe retries.
    """
    obj = event.obj

    match event.type:
        case "checkout.session.completed" | "checkout.session.async_payment_succeeded":
            metadata = obj.get("metadata") or {}
            if metadata.get("fundraiser_id"):
                handle_fundraiser_purchase(obj, config)
            else:
                handle_subscription_checkout(obj, config)

        case "checkout.session.expired":
            logger.info("stripe_checkout_session_expired", checkout_session_id=obj.get("id"))

        case "checkout.session.async_payment_failed":
            logger.warning(
                "stripe_checkout_async_payment_failed", checkout_session_id=obj.get("id")
            )

        case "customer.subscription.updated":
            handle_subscription_updated(obj, config)

        case "customer.subscription.deleted":
            handle_subscription_deleted(obj)

        case "invoice.paid":
            handle_invoice_paid(obj)

        case "invoice.payment_failed":
            # Status moves to past_due through customer.subscription.updated
            logger.warning(
                "stripe_invoice_payment_failed",
                invoice_id=obj.get("id"),
                customer_id=obj.get("customer"),
            )

        case "charge.refunded":
            handle_charge_refunded(obj)

        case "account.updated":
            handle_account_updated(obj, account_id=event.account)

        case _:
            logger.info("stripe_webhook_unhandled_event", event_type=event.type)
            return IGNORED

    return PROCESSED


def verify_event(payload: bytes, sig_header: str, config: BillingConfig) -> StripeEvent:
    """
    Verify the Stripe signature, then parse the envelope.

    Raises:
        stripe.SignatureVerificationError: Bad or stale signature
        ValueError: Body is not a valid event
    """
    get_stripe()  # Ensure Stripe is configured
    body = payload.decode("utf-8")
    stripe.WebhookSignature.verify_header(
        body,
        sig_header,
        config.webhook_secret,
        config.webhook_tolerance,
    )
    return StripeEvent.model_validate_json(body)


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Handle Stripe webhook events.

    Verifies signature and dispatches to the router.
    """
    config = get_billing_config()
    sig_header = request.headers.get("Stripe-Signature")

    if not sig_header:
        logger.warning("stripe_webhook_missing_signature")
        return HttpResponse(status=400)

    if not config.webhook_secret:
        logger.error("stripe_webhook_secret_not_configured")
        return HttpResponse(status=500)

    try:
        event = verify_event(request.body, sig_header, config)
    except stripe.SignatureVerificationError as e:
        logger.warning("stripe_webhook_invalid_signature", error=str(e))
        return HttpResponse(status=400)
    except (ValidationError, ValueError) as e:
        logger.warning("stripe_webhook_invalid_payload", error=str(e))
        return HttpResponse(status=400)

    bind_contextvars(stripe_event_id=event.id, stripe_event_type=event.type)
    logger.info("stripe_webhook_received", event_id=event.id, event_type=event.type)

    try:
        outcome = dispatch_event(event, config)
    except Exception as e:
        logger.exception("stripe_webhook_handler_error")
        record_webhook_event(
            WEBHOOK_SOURCE, event.id, event.type, WebhookEventLog.Outcome.FAILED, error=str(e)
        )
        # Return 500 so Stripe will retry with exponential backoff
        return JsonResponse({"error": str(e)}, status=500)

    record_webhook_event(WEBHOOK_SOURCE, event.id, event.type, outcome)
    return JsonResponse({"received": True})
