from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from uuid import uuid4

import stripe
from django.conf import settings

from bookings.models import Booking
from payments.exceptions import GatewayError
from payments.models import Payment

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSessionStub:
    """
    Lightweight stand-in for stripe.checkout.Session when running in stub mode.

    Tests and local development do not hit Stripe; instead, we return predictable
    identifiers so the rest of the booking flow (payment records, links)
    behaves as if Stripe responded.
    """

    id: str
    payment_intent: str
    payment_status: str
    url: str


def build_checkout_preview_url(*, booking: Booking, amount_cents: int, session_id: str) -> str:
    return (
        f"{settings.FRONTEND_URL.rstrip('/')}/payments/preview?"
        f"booking={booking.id}&amount={amount_cents}&session={session_id}"
    )


def _stub_checkout_session(*, booking: Booking, amount_cents: int) -> CheckoutSessionStub:
    session_id = f"cs_test_{uuid4().hex}"
    payment_intent = f"pi_test_{uuid4().hex}"
    preview_url = build_checkout_preview_url(
        booking=booking,
        amount_cents=amount_cents,
        session_id=session_id,
    )
    return CheckoutSessionStub(
        id=session_id,
        payment_intent=payment_intent,
        payment_status="unpaid",
        url=preview_url,
    )


def _get_stripe_api_key() -> Optional[str]:
    key = getattr(settings, "STRIPE_SECRET_KEY", "")
    return key or None


def _should_use_stub() -> bool:
    if getattr(settings, "STRIPE_USE_STUB", False):
        return True
    return _get_stripe_api_key() is None


@lru_cache(maxsize=1)
def _apply_stripe_config(api_key: str, timeout: float, max_network_retries: int) -> None:
    stripe.api_key = api_key
    stripe.max_network_retries = max_network_retries
    stripe.default_http_client = stripe.RequestsClient(timeout=timeout)
    logger.info("Stripe client configured (timeout=%ss, retries=%s)", timeout, max_network_retries)


def configure_stripe():
    """Point the stripe module at our key and bounded HTTP client; rebuilt only when settings change."""
    api_key = _get_stripe_api_key()
    if not api_key:
        raise GatewayError("Stripe secret key is not configured.")
    _apply_stripe_config(api_key, settings.STRIPE_TIMEOUT_SECONDS, settings.STRIPE_MAX_NETWORK_RETRIES)


def idempotency_key_for(payment: Payment) -> str:
    return f"checkout:{payment.transaction_id}"


def create_checkout_session(
    *,
    booking: Booking,
    payment: Payment,
    description: str,
    customer_email: str = "",
):
    """
    Create a Stripe Checkout session (or stub equivalent) for a booking.

    Returns an object with the subset of attributes (`id`, `payment_intent`,
    `payment_status`, `url`) consumed by the booking workflow. Any provider
    failure, including timeouts, is raised as GatewayError.
    """

    amount_cents = payment.amount_cents
    if amount_cents <= 0:
        raise GatewayError("Payment amount must be positive.")

    if _should_use_stub():
        return _stub_checkout_session(booking=booking, amount_cents=amount_cents)

    configure_stripe()
    stripe_kwargs = {}
    if customer_email:
        stripe_kwargs["customer_email"] = customer_email

    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            payment_method_types=["card"],
            line_items=[
                {
                    "quantity": 1,
                    "price_data": {
                        "currency": payment.currency,
                        "unit_amount": amount_cents,
                        "product_data": {
                            "name": description,
                        },
                    },
                }
            ],
            success_url=settings.PAYMENT_SUCCESS_URL,
            cancel_url=settings.PAYMENT_CANCEL_URL,
            metadata={
                "bookingId": str(booking.id),
                "paymentId": str(payment.id),
            },
            idempotency_key=idempotency_key_for(payment),
            **stripe_kwargs,
        )
    except stripe.StripeError as exc:
        logger.exception("Failed to create Stripe checkout session for booking %s: %s", booking.id, exc)
        raise GatewayError() from exc

    if not getattr(session, "url", None):
        logger.error("Stripe checkout session %s for booking %s has no url", session.id, booking.id)
        raise GatewayError("Payment gateway did not return a checkout url.")
    return session


def get_latest_payment_preview_url(booking: Booking) -> str | None:
    """
    Recreate the stub preview link from the payment record when Stripe is stubbed.
    """

    if not _should_use_stub():
        return None

    payment: Payment | None = Payment.objects.filter(booking=booking).first()
    if not payment or not payment.stripe_checkout_session:
        return None

    return build_checkout_preview_url(
        booking=booking,
        amount_cents=payment.amount_cents,
        session_id=payment.stripe_checkout_session,
    )
