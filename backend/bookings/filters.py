import django_filters

from bookings.models import Booking


class BookingFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Booking.STATUSES)
    paymentStatus = django_filters.ChoiceFilter(field_name="payment_status", choices=Booking.PAYMENT_STATUSES)
    touristId = django_filters.NumberFilter(field_name="tourist_id")
    guideId = django_filters.NumberFilter(field_name="guide_id")

    class Meta:
        model = Booking
        fields = ["status", "paymentStatus", "touristId", "guideId"]
