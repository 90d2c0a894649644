from django.contrib import admin

from core.admin import SoftDeleteAdmin
from payments.models import Payment
from .models import Booking


class PaymentInline(admin.StackedInline):
    model = Payment
    extra = 0
    can_delete = False
    readonly_fields = ("amount_cents", "transaction_id", "status", "stripe_event_id", "payment_gateway_data")


@admin.register(Booking)
class BookingAdmin(SoftDeleteAdmin):
    list_display = ("id", "tourist", "guide", "listing", "booking_date", "status", "payment_status", "is_deleted")
    list_filter = ("status", "payment_status", "is_deleted")
    search_fields = ("tourist__email", "guide__name", "listing__title")
    inlines = [PaymentInline]
