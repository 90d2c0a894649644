"""
Apply Stripe webhook events to booking/payment state.

Stripe delivers at least once, possibly concurrently and out of order. Each
event id is applied at most once: `Payment.stripe_event_id` is unique and acts
as the ledger, and the apply step is a compare-and-set on the payment row so a
concurrent duplicate that slipped past the ledger check updates nothing.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any, Callable

from django.db import IntegrityError, transaction
from django.utils import timezone

from bookings.models import Booking
from payments.models import Payment

logger = logging.getLogger(__name__)

ALREADY_PROCESSED = "Event already processed"
MISSING_EVENT_ID = "Missing event id"
MISSING_METADATA = "Missing metadata"
BOOKING_NOT_FOUND = "Booking not found"
PAYMENT_NOT_FOUND = "Payment not found"
STALE_EVENT = "Stale event ignored"
PROCESSED = "Webhook processed successfully"


@dataclass(frozen=True)
class WebhookOutcome:
    message: str
    applied: bool = False


def is_event_recorded(event_id: str) -> bool:
    return Payment.objects.filter(stripe_event_id=event_id).exists()


def _parse_uuid(value: Any) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _gateway_status(session: Mapping[str, Any]) -> str:
    return Payment.PAID if session.get("payment_status") == "paid" else Payment.UNPAID


def apply_checkout_result(
    *,
    event_id: str,
    session: Mapping[str, Any],
    booking: Booking,
    payment: Payment,
) -> WebhookOutcome:
    """
    Move `payment` and its booking to the status reported by a completed session.

    `payment` is the row as observed by this delivery; the update only lands if
    the row still has that status and event id when the write happens.
    """

    new_status = _gateway_status(session)

    if not Payment.can_transition(payment.status, new_status):
        if payment.status == Payment.PAID and new_status != Payment.PAID:
            logger.warning(
                "Ignoring stale %s event %s for paid payment %s",
                new_status,
                event_id,
                payment.id,
            )
            return WebhookOutcome(STALE_EVENT)
        logger.info("Event %s does not advance payment %s (%s); skipping", event_id, payment.id, payment.status)
        return WebhookOutcome(ALREADY_PROCESSED)

    now = timezone.now()
    try:
        with transaction.atomic():
            updated = Payment.objects.filter(
                pk=payment.pk,
                status=payment.status,
                stripe_event_id=payment.stripe_event_id,
            ).update(
                status=new_status,
                payment_gateway_data=dict(session),
                stripe_event_id=event_id,
                updated_at=now,
            )
            if not updated:
                logger.info("Payment %s changed concurrently; event %s treated as processed", payment.id, event_id)
                return WebhookOutcome(ALREADY_PROCESSED)

            Booking.all_objects.filter(pk=booking.pk).update(payment_status=new_status, updated_at=now)
    except IntegrityError:
        logger.info("Event %s was recorded by a concurrent delivery", event_id)
        return WebhookOutcome(ALREADY_PROCESSED)

    logger.info("Payment %s for booking %s marked %s by event %s", payment.id, booking.id, new_status, event_id)
    return WebhookOutcome(PROCESSED, applied=True)


def _handle_checkout_completed(event_id: str, data_object: Mapping[str, Any]) -> WebhookOutcome:
    metadata = data_object.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        logger.error("Malformed metadata in webhook event %s", event_id)
        return WebhookOutcome(MISSING_METADATA)

    booking_id = _parse_uuid(metadata.get("bookingId"))
    payment_id = _parse_uuid(metadata.get("paymentId"))

    if booking_id is None or payment_id is None:
        logger.error("Missing metadata in webhook event %s", event_id)
        return WebhookOutcome(MISSING_METADATA)

    # Soft-deleted bookings still converge; only a removed row is an orphan.
    booking = Booking.all_objects.filter(pk=booking_id).first()
    if booking is None:
        logger.error("Booking %s not found for event %s; checkout may belong to a removed booking", booking_id, event_id)
        return WebhookOutcome(BOOKING_NOT_FOUND)

    payment = Payment.objects.filter(pk=payment_id, booking_id=booking.pk).first()
    if payment is None:
        logger.error("Payment %s not found for booking %s (event %s)", payment_id, booking_id, event_id)
        return WebhookOutcome(PAYMENT_NOT_FOUND)

    return apply_checkout_result(
        event_id=event_id,
        session=data_object,
        booking=booking,
        payment=payment,
    )


def _handle_checkout_expired(event_id: str, data_object: Mapping[str, Any]) -> WebhookOutcome:
    # Abandoned bookings are cleaned up by a separate time-based job.
    logger.info("Checkout session expired: %s (event %s)", data_object.get("id"), event_id)
    return WebhookOutcome(PROCESSED)


def _handle_payment_failed(event_id: str, data_object: Mapping[str, Any]) -> WebhookOutcome:
    logger.warning("Payment failed: %s (event %s)", data_object.get("id"), event_id)
    return WebhookOutcome(PROCESSED)


EVENT_HANDLERS: dict[str, Callable[[str, Mapping[str, Any]], WebhookOutcome]] = {
    "checkout.session.completed": _handle_checkout_completed,
    "checkout.session.expired": _handle_checkout_expired,
    "payment_intent.payment_failed": _handle_payment_failed,
}


def handle_stripe_event(event: Mapping[str, Any]) -> WebhookOutcome:
    """
    Reconcile one Stripe event. Safe to call repeatedly with the same event.

    Business-level problems (duplicates, missing metadata, vanished bookings)
    come back as outcomes, never as exceptions; only store failures propagate.
    """

    event_id = event.get("id")
    event_type = event.get("type")
    if not event_id:
        logger.error("Received %s webhook event without an id", event_type)
        return WebhookOutcome(MISSING_EVENT_ID)

    if is_event_recorded(event_id):
        logger.info("Event %s already processed. Skipping.", event_id)
        return WebhookOutcome(ALREADY_PROCESSED)

    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.info("Unhandled event type: %s (event %s)", event_type, event_id)
        return WebhookOutcome(PROCESSED)

    data = event.get("data") or {}
    data_object = (data.get("object") or {}) if isinstance(data, Mapping) else None
    if not isinstance(data_object, Mapping):
        logger.error("Malformed data in %s webhook event %s", event_type, event_id)
        return WebhookOutcome(MISSING_METADATA)
    return handler(event_id, data_object)
