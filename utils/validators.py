import logging
from datetime import datetime, time, timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework import serializers
from exceptions.handlers import (
    AlreadyExistsException,
    CapacityExceededException,
    InvalidInputException,
    NotFoundException,
)
from utils.constants import (
    BookingMessage,
    BookingStatus,
    BusMessage,
    PaymentMessage,
    RouteMessage,
    TripMessage,
)

logger = logging.getLogger("bookingsystem")


class RouteValidators:
    """
    Reusable validation logic for route operations.
    """

    @staticmethod
    def validate_positive_integer(value, field_name):
        """
        Validates that a numeric route attribute is strictly positive.

        Raises:
            serializers.ValidationError: If value is zero
        """
        if value < 1:
            raise serializers.ValidationError(f"{field_name} must be a positive integer.")
        return value

    @staticmethod
    def validate_city_pair(origin, destination):
        """
        Normalizes and validates an origin/destination pair.

        Returns:
            tuple: (origin, destination) stripped of surrounding whitespace

        Raises:
            InvalidInputException: If either city is blank or both are equal
        """
        origin = (origin or "").strip()
        destination = (destination or "").strip()
        if not origin or not destination:
            raise InvalidInputException(RouteMessage.ORIGIN_AND_DESTINATION_REQUIRED)
        if origin.lower() == destination.lower():
            raise InvalidInputException(RouteMessage.ORIGIN_AND_DESTINATION_SAME)
        return origin, destination

    @staticmethod
    def validate_route_unique(origin, destination, exclude_pk=None):
        """
        Validates that no other route serves the same city pair (case-insensitive).

        Raises:
            AlreadyExistsException: If the pair is already served
        """
        from routes.models import Route

        qs = Route.objects.filter(
            origin_city__iexact=origin, destination_city__iexact=destination
        )
        if exclude_pk:
            qs = qs.exclude(pk=exclude_pk)
        if qs.exists():
            logger.warning(f"Duplicate route rejected: {origin} -> {destination}")
            raise AlreadyExistsException(RouteMessage.ROUTE_ALREADY_EXISTS)

    @staticmethod
    def validate_route_for_deletion(route):
        """
        Validates that a route has no trips departing in the future.

        Raises:
            InvalidInputException: If upcoming trips exist
        """
        from trips.models import Trip

        if Trip.upcoming.filter(route=route).exists():
            raise InvalidInputException(RouteMessage.ROUTE_HAS_FUTURE_TRIPS)

    @staticmethod
    def validate_search_date(value):
        """
        Turns the optional search date into a departure window.

        Args:
            value (str): Date in YYYY-MM-DD format, or empty

        Returns:
            tuple: (window_start, window_end); window_end is None when no date
            was given, meaning "any upcoming departure"

        Raises:
            InvalidInputException: If the date is malformed
        """
        if not value:
            return timezone.now(), None
        try:
            day = datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            raise InvalidInputException(RouteMessage.INVALID_DATE)
        start = timezone.make_aware(datetime.combine(day, time.min))
        return start, start + timedelta(days=1)

    @staticmethod
    def validate_passengers(value):
        """
        Validates the requested passenger count of a search (1 to 10).

        Raises:
            InvalidInputException: If not an integer in range
        """
        try:
            passengers = int(value)
        except (TypeError, ValueError):
            raise InvalidInputException(RouteMessage.INVALID_PASSENGERS)
        if not 1 <= passengers <= 10:
            raise InvalidInputException(RouteMessage.INVALID_PASSENGERS)
        return passengers


class BusValidators:
    """
    Reusable validation logic for fleet records.
    """

    @staticmethod
    def validate_plate_number_unique(value, exclude_pk=None):
        """
        Validates plate number uniqueness, ignoring case and whitespace.

        Raises:
            AlreadyExistsException: If another bus carries the plate
        """
        from buses.models import Bus

        value = value.strip().upper()
        qs = Bus.objects.filter(plate_number__iexact=value)
        if exclude_pk:
            qs = qs.exclude(pk=exclude_pk)
        if qs.exists():
            raise AlreadyExistsException(BusMessage.BUS_ALREADY_EXISTS)
        return value

    @staticmethod
    def validate_capacity(value):
        if value < 1:
            raise serializers.ValidationError(BusMessage.INVALID_CAPACITY)
        return value


class TripValidators:
    """
    Reusable validation logic for trip scheduling.
    """

    @staticmethod
    def validate_price(value):
        if value <= Decimal("0"):
            raise serializers.ValidationError(TripMessage.INVALID_PRICE)
        return value

    @staticmethod
    def validate_schedule(departure_time, arrival_time):
        """
        Validates that a trip arrives after it departs.

        Raises:
            InvalidInputException: If arrival is not after departure
        """
        if arrival_time <= departure_time:
            raise InvalidInputException(TripMessage.ARRIVAL_BEFORE_DEPARTURE)

    @staticmethod
    def validate_route_exists(route_id):
        from routes.models import Route

        try:
            return Route.objects.get(pk=route_id)
        except Route.DoesNotExist:
            raise NotFoundException(RouteMessage.ROUTE_NOT_FOUND)

    @staticmethod
    def validate_bus_exists(bus_id):
        from buses.models import Bus

        try:
            return Bus.objects.get(pk=bus_id)
        except Bus.DoesNotExist:
            raise NotFoundException(BusMessage.BUS_NOT_FOUND)


class BookingValidators:
    """
    Reusable validation logic for booking operations.
    """

    @staticmethod
    def validate_seat_numbers(seat_numbers):
        """
        Validates the requested seat list.

        Seat numbers are not checked against the bus layout or against
        other bookings; only their count drives inventory.

        Raises:
            InvalidInputException: If the list is empty or holds non-positive numbers
        """
        if not seat_numbers:
            raise InvalidInputException(BookingMessage.SEAT_NUMBERS_REQUIRED)
        if any(isinstance(seat, bool) or not isinstance(seat, int) or seat < 1 for seat in seat_numbers):
            raise InvalidInputException(BookingMessage.SEAT_NUMBERS_INVALID)
        return list(seat_numbers)

    @staticmethod
    def validate_trip_for_booking(trip_id):
        """
        Loads the trip being booked with its route and bus.

        Raises:
            NotFoundException: If the trip does not exist
        """
        from trips.models import Trip

        try:
            return Trip.objects.select_related("route", "bus").get(pk=trip_id)
        except Trip.DoesNotExist:
            logger.warning(f"Booking rejected: trip {trip_id} not found")
            raise NotFoundException(TripMessage.TRIP_NOT_FOUND)

    @staticmethod
    def validate_capacity(trip, seat_count):
        """
        Checks the requested seat count against the trip's remaining seats.

        This is a fast pre-check on the value just read; the authoritative
        check is the conditional decrement in BookingService.

        Raises:
            CapacityExceededException: If not enough seats remain
        """
        if trip.available_seats < seat_count:
            logger.warning(
                f"Booking rejected: trip {trip.id} has {trip.available_seats} seats, {seat_count} requested"
            )
            raise CapacityExceededException(BookingMessage.NOT_ENOUGH_SEATS)


class PaymentValidators:
    """
    Reusable validation logic for payment operations.
    """

    @staticmethod
    def validate_booking_for_payment(booking_id, user):
        """
        Loads a booking owned by the user that can still be paid.

        A booking owned by someone else is reported exactly like a missing
        one so that booking ids cannot be guessed.

        Raises:
            NotFoundException: If booking is absent or owned by another user
            InvalidInputException: If the booking is no longer PENDING or its hold expired
        """
        from bookingsystem.models import Booking

        booking = Booking.objects.filter(pk=booking_id, user=user).first()
        if booking is None:
            logger.warning(f"Payment intent rejected: booking {booking_id} not found for user {user.id}")
            raise NotFoundException(BookingMessage.BOOKING_NOT_FOUND)
        if booking.status != BookingStatus.PENDING or booking.is_expired:
            logger.warning(
                f"Payment intent rejected: booking {booking.booking_code} is {booking.status}, "
                f"expired={booking.is_expired}"
            )
            raise InvalidInputException(PaymentMessage.BOOKING_NOT_PAYABLE)
        return booking

    @staticmethod
    def validate_payment_for_intent(payment_intent_id):
        """
        Loads the payment record opened for a processor intent.

        Raises:
            NotFoundException: If no payment references the intent
        """
        from payment.models import Payment

        payment = (
            Payment.objects.select_related("booking")
            .filter(stripe_intent_id=payment_intent_id)
            .order_by("-created_at")
            .first()
        )
        if payment is None:
            logger.warning(f"Payment confirmation rejected: no payment for intent {payment_intent_id}")
            raise NotFoundException(PaymentMessage.PAYMENT_NOT_FOUND)
        return payment
