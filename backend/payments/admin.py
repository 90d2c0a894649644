from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "booking", "amount_cents", "currency", "status", "stripe_event_id", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("transaction_id", "stripe_checkout_session", "stripe_event_id")
    readonly_fields = ("transaction_id", "stripe_event_id", "payment_gateway_data")
