from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

from django.conf import settings
from django.db import DatabaseError, transaction
from rest_framework.exceptions import NotFound, ValidationError

from accounts.models import Guide, Tourist
from bookings.models import Booking
from bookings.services.payments import create_checkout_session
from listings.models import Listing
from payments.models import Payment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingResult:
    booking: Booking
    payment: Payment
    payment_url: str


def _get_live_guide(guide_id: int) -> Guide:
    guide = Guide.objects.filter(pk=guide_id).first()
    if guide is None:
        raise NotFound("Guide not found or is unavailable.")
    return guide


def _get_live_listing(listing_id: int, guide: Guide) -> Listing:
    listing = Listing.objects.filter(pk=listing_id).first()
    if listing is None:
        raise NotFound("Listing not found or is unavailable.")
    if listing.guide_id != guide.id:
        raise ValidationError({"listingId": ["Listing does not belong to the selected guide."]})
    return listing


def price_snapshot_cents(guide: Guide, listing: Listing | None) -> int:
    if listing is not None:
        return listing.price_cents
    return guide.fee_cents


def create_booking(
    *,
    tourist: Tourist,
    guide_id: int,
    booking_date: datetime,
    listing_id: int | None = None,
) -> BookingResult:
    """
    Reserve a guide (or one of their listings) for `tourist` and open a checkout session.

    Booking and payment ids are generated before anything is written so the
    gateway session can carry them in its metadata. Both rows are inserted in
    one transaction only after the gateway has answered; a gateway failure
    leaves the database untouched.
    """

    guide = _get_live_guide(guide_id)
    listing = _get_live_listing(listing_id, guide) if listing_id is not None else None

    booking = Booking(
        tourist=tourist,
        guide=guide,
        listing=listing,
        booking_date=booking_date,
        status=Booking.PENDING,
        payment_status=Booking.PAYMENT_PENDING,
    )
    payment = Payment(
        booking=booking,
        amount_cents=price_snapshot_cents(guide, listing),
        currency=settings.STRIPE_CURRENCY,
        transaction_id=uuid4().hex,
        status=Payment.PENDING,
    )

    description = f"Tour Booking: {listing.title}" if listing else f"Guide Booking: {guide.name}"
    session = create_checkout_session(
        booking=booking,
        payment=payment,
        description=description,
        customer_email=tourist.email,
    )
    payment.stripe_checkout_session = session.id

    try:
        with transaction.atomic():
            booking.save(force_insert=True)
            payment.save(force_insert=True)
    except DatabaseError:
        # The gateway session stays unreferenced and expires on its own; a late
        # webhook for it resolves to "booking not found".
        logger.exception(
            "Booking %s was not stored; checkout session %s is orphaned",
            booking.id,
            session.id,
        )
        raise

    logger.info(
        "Booking %s created for tourist %s (payment %s, %s cents)",
        booking.id,
        tourist.id,
        payment.id,
        payment.amount_cents,
    )
    return BookingResult(booking=booking, payment=payment, payment_url=session.url)


def update_booking_status(
    booking: Booking,
    *,
    status: str | None = None,
    payment_status: str | None = None,
) -> Booking:
    """
    Apply an administrative status change to `booking`.

    `booking` may be stale by the time this runs: the rows are re-read under
    lock (payment first, matching the webhook writer) and the paid check is
    made against what is actually stored. Returns the freshly written booking.
    """

    if not status and not payment_status:
        raise ValidationError("Either status or paymentStatus must be provided for update.")

    with transaction.atomic():
        payment = Payment.objects.select_for_update().filter(booking_id=booking.pk).first()
        current = Booking.all_objects.select_for_update().get(pk=booking.pk)

        stored_paid = current.payment_status == Booking.PAYMENT_PAID or (
            payment is not None and payment.status == Payment.PAID
        )
        if payment_status and payment_status != Booking.PAYMENT_PAID and stored_paid:
            raise ValidationError({"paymentStatus": ["A paid booking cannot be moved back to an unpaid state."]})

        update_fields = ["updated_at"]
        if status:
            current.status = status
            update_fields.append("status")
        if payment_status:
            current.payment_status = payment_status
            update_fields.append("payment_status")
        current.save(update_fields=update_fields)

        if payment_status and payment is not None and payment.status != payment_status:
            payment.status = payment_status
            payment.save(update_fields=["status", "updated_at"])

    logger.info(
        "Booking %s status updated (status=%s, payment_status=%s)",
        current.id,
        current.status,
        current.payment_status,
    )
    return current


def soft_delete_booking(booking: Booking) -> Booking:
    booking.soft_delete()
    logger.info("Booking %s soft deleted", booking.id)
    return booking


def delete_booking(booking: Booking) -> None:
    booking_id = booking.id
    with transaction.atomic():
        booking.delete()
    logger.info("Booking %s permanently deleted", booking_id)
