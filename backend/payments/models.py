import uuid

from django.db import models


class Payment(models.Model):
    """
    The single payment record created alongside a booking.

    `amount_cents` is a snapshot of the listing price (or guide fee) at booking
    time. `stripe_event_id` is unique across the table and holds the id of the
    last gateway event applied to this row; it is what makes webhook delivery
    idempotent.
    """

    PENDING = "PENDING"
    PAID = "PAID"
    UNPAID = "UNPAID"
    STATUSES = [
        (PENDING, "Pending"),
        (PAID, "Paid"),
        (UNPAID, "Unpaid"),
    ]

    # PAID is terminal; nothing moves back to PENDING.
    TRANSITIONS = {
        PENDING: {PAID, UNPAID},
        UNPAID: {PAID},
        PAID: set(),
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.OneToOneField("bookings.Booking", on_delete=models.CASCADE, related_name="payment")
    amount_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=10, default="usd")
    transaction_id = models.CharField(max_length=64, unique=True)
    stripe_checkout_session = models.CharField(max_length=200, blank=True)
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    stripe_event_id = models.CharField(max_length=255, null=True, blank=True, unique=True)
    payment_gateway_data = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.transaction_id} ({self.status})"

    @classmethod
    def can_transition(cls, current: str, new: str) -> bool:
        return new in cls.TRANSITIONS.get(current, set())
