from rest_framework import serializers

from accounts.serializers import GuideSummarySerializer, TouristSummarySerializer
from bookings.models import Booking
from bookings.services.payments import get_latest_payment_preview_url
from listings.models import Listing
from payments.models import Payment


class BookingCreateSerializer(serializers.Serializer):
    guideId = serializers.IntegerField(min_value=1)
    listingId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    bookingDate = serializers.DateTimeField()


class BookingCreateResponseSerializer(serializers.Serializer):
    paymentUrl = serializers.CharField()


class BookingStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.STATUSES, required=False)
    paymentStatus = serializers.ChoiceField(choices=Booking.PAYMENT_STATUSES, required=False)

    def validate(self, attrs):
        if not attrs.get("status") and not attrs.get("paymentStatus"):
            raise serializers.ValidationError("Either status or paymentStatus must be provided for update.")
        return attrs


class ListingSummarySerializer(serializers.ModelSerializer):
    price = serializers.SerializerMethodField()

    class Meta:
        model = Listing
        fields = ["id", "title", "price", "location"]

    def get_price(self, obj: Listing) -> str:
        return f"{obj.price_cents / 100:.2f}"


class PaymentSummarySerializer(serializers.ModelSerializer):
    amount = serializers.SerializerMethodField()
    transactionId = serializers.CharField(source="transaction_id", read_only=True)

    class Meta:
        model = Payment
        fields = ["id", "amount", "currency", "status", "transactionId"]

    def get_amount(self, obj: Payment) -> str:
        return f"{obj.amount_cents / 100:.2f}"


class BookingSerializer(serializers.ModelSerializer):
    bookingDate = serializers.DateTimeField(source="booking_date", read_only=True)
    paymentStatus = serializers.CharField(source="payment_status", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    tourist = TouristSummarySerializer(read_only=True)
    guide = GuideSummarySerializer(read_only=True)
    listing = ListingSummarySerializer(read_only=True)
    payment = serializers.SerializerMethodField()
    paymentPreviewUrl = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "bookingDate",
            "status",
            "paymentStatus",
            "tourist",
            "guide",
            "listing",
            "payment",
            "paymentPreviewUrl",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_payment(self, obj: Booking):
        try:
            payment = obj.payment
        except Payment.DoesNotExist:
            return None
        return PaymentSummarySerializer(payment).data

    def get_paymentPreviewUrl(self, obj: Booking):
        if obj.payment_status != Booking.PAYMENT_PENDING:
            return None
        return get_latest_payment_preview_url(obj)
