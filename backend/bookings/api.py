from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from accounts.permissions import IsAdministrator, IsBookingManager, IsTourist
from accounts.roles import ActorMixin, TouristActor
from bookings.filters import BookingFilter
from bookings.models import Booking
from bookings.serializers import (
    BookingCreateResponseSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingStatusUpdateSerializer,
)
from bookings.services.bookings import (
    create_booking,
    delete_booking,
    soft_delete_booking,
    update_booking_status,
)
from bookings.services.visibility import visible_bookings


class BookingViewSet(
    ActorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = BookingFilter
    search_fields = ["listing__title", "tourist__name", "guide__name"]
    ordering_fields = ["booking_date", "created_at"]
    ordering = ["-created_at"]

    def get_permissions(self):
        if self.action == "create":
            return [permissions.IsAuthenticated(), IsTourist()]
        if self.action == "update_status":
            return [permissions.IsAuthenticated(), IsBookingManager()]
        if self.action in {"destroy", "soft_delete"}:
            return [permissions.IsAuthenticated(), IsAdministrator()]
        return super().get_permissions()

    def get_queryset(self):
        # Hard delete must also reach rows that were already soft deleted.
        manager = Booking.all_objects if self.action == "destroy" else Booking.objects
        queryset = manager.select_related("tourist", "guide", "listing", "payment")
        return visible_bookings(self.actor, queryset)

    def create(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if not isinstance(self.actor, TouristActor):
            raise PermissionDenied("Only tourists can create bookings.")

        data = serializer.validated_data
        result = create_booking(
            tourist=self.actor.tourist,
            guide_id=data["guideId"],
            listing_id=data.get("listingId"),
            booking_date=data["bookingDate"],
        )
        response_serializer = BookingCreateResponseSerializer({"paymentUrl": result.payment_url})
        return Response(response_serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):
        booking = self.get_object()
        serializer = BookingStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = update_booking_status(
            booking,
            status=serializer.validated_data.get("status"),
            payment_status=serializer.validated_data.get("paymentStatus"),
        )
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["patch"], url_path="soft-delete")
    def soft_delete(self, request, pk=None):
        booking = soft_delete_booking(self.get_object())
        return Response(BookingSerializer(booking).data)

    def perform_destroy(self, instance):
        delete_booking(instance)
