import logging
from rest_framework import viewsets, status, mixins
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from .serializers import BookingSerializer, BookingCreateSerializer
from .services import BookingService
from utils.booking_helpers import BookingHelpers
from utils.constants import BookingMessage
from utils.serializer_helpers import envelope

logger = logging.getLogger("bookingsystem")


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for a user's own bookings.

    Bookings of other users are invisible: retrieving one answers 404.
    Bookings are never edited or deleted through the API; they change
    status through payment confirmation or hold expiry.
    """

    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def get_queryset(self):
        return BookingService.list_for_user(self.request.user)

    def create(self, request, *args, **kwargs):
        """
        Books seats on a trip. The booking stays PENDING until paid.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = BookingService.create_booking(
            request.user,
            serializer.validated_data["trip_id"],
            serializer.validated_data["seat_numbers"],
        )
        return Response(
            envelope(BookingSerializer(booking).data, message=BookingMessage.BOOKING_CREATED),
            status=status.HTTP_201_CREATED,
        )

    def list(self, request, *args, **kwargs):
        """
        Lists the caller's bookings, newest first, with per-status counts.
        """
        queryset = self.get_queryset()
        serializer = self.get_serializer(queryset, many=True)
        stats = BookingHelpers.get_booking_statistics(queryset)

        return Response({**envelope(serializer.data), "stats": stats})

    def retrieve(self, request, *args, **kwargs):
        booking = BookingService.get_for_user(request.user, kwargs["pk"])
        return Response(envelope(self.get_serializer(booking).data))
