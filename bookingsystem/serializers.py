from rest_framework import serializers
from .models import Booking
from accounts.serializers import BookingUserSerializer
from trips.serializers import TripSerializer
from utils.constants import MAX_RECORD_ID
from utils.serializer_helpers import CamelCaseSerializerMixin


class BookingCreateSerializer(CamelCaseSerializerMixin, serializers.Serializer):
    """
    Validates a booking request: ``{"tripId": 7, "seatNumbers": [3, 4]}``.
    Seat accounting itself happens in BookingService.
    """

    trip_id = serializers.IntegerField(min_value=1, max_value=MAX_RECORD_ID)
    seat_numbers = serializers.ListField(child=serializers.IntegerField(min_value=1))


class BookingSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Serializes booking data for API usage, with the trip (route and bus)
    and the owning user expanded.
    """

    trip = TripSerializer(read_only=True)
    user = BookingUserSerializer(read_only=True)
    seat_count = serializers.IntegerField(read_only=True)
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "trip",
            "user",
            "seat_numbers",
            "seat_count",
            "total_amount",
            "status",
            "expiry_time",
            "is_expired",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
