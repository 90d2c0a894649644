import uuid

from django.db import models

from core.models import SoftDeleteModel


class Booking(SoftDeleteModel):
    """Reservation of a guide (optionally through one of their listings) by a tourist."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    STATUSES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (COMPLETED, "Completed"),
        (CANCELLED, "Cancelled"),
    ]

    PAYMENT_PENDING = "PENDING"
    PAYMENT_PAID = "PAID"
    PAYMENT_UNPAID = "UNPAID"
    PAYMENT_STATUSES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_UNPAID, "Unpaid"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tourist = models.ForeignKey("accounts.Tourist", on_delete=models.CASCADE, related_name="bookings")
    guide = models.ForeignKey("accounts.Guide", on_delete=models.CASCADE, related_name="bookings")
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.CASCADE,
        related_name="bookings",
        null=True,
        blank=True,
    )
    booking_date = models.DateTimeField()
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    payment_status = models.CharField(max_length=12, choices=PAYMENT_STATUSES, default=PAYMENT_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        target = self.listing.title if self.listing_id else self.guide.name
        return f"{target} on {self.booking_date:%Y-%m-%d}"
