import logging
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from bookingsystem.models import Booking
from trips.models import Trip
from exceptions.handlers import CapacityExceededException, NotFoundException
from utils.booking_helpers import BookingHelpers
from utils.constants import BookingMessage, BookingStatus
from utils.validators import BookingValidators

logger = logging.getLogger("bookingsystem")


class BookingService:
    """
    Seat inventory accounting for bookings.

    A trip's available_seats is only ever changed with conditional UPDATE
    statements, so two requests racing for the last seats cannot both win:
    the second one matches zero rows and is rejected.
    """

    @staticmethod
    def booking_queryset():
        return Booking.objects.select_related("trip__route", "trip__bus", "user")

    @staticmethod
    def create_booking(user, trip_id, seat_numbers):
        """
        Reserves seats on a trip for a user.

        The seat decrement and the booking insert run in one transaction:
        either both persist or neither does.

        Args:
            user: Authenticated user making the booking
            trip_id (int): Trip to book
            seat_numbers (list[int]): Requested seat numbers

        Returns:
            Booking: The PENDING booking with trip, route, bus and user loaded

        Raises:
            InvalidInputException: If the seat list is empty or malformed
            NotFoundException: If the trip does not exist
            CapacityExceededException: If fewer seats remain than requested
        """
        seat_numbers = BookingValidators.validate_seat_numbers(seat_numbers)
        seat_count = len(seat_numbers)

        trip = BookingValidators.validate_trip_for_booking(trip_id)
        BookingValidators.validate_capacity(trip, seat_count)

        total_amount = BookingHelpers.calculate_total_amount(trip.price, seat_count)

        with transaction.atomic():
            # Decrement only if enough seats are still there when the row is written
            reserved = Trip.objects.filter(
                pk=trip.pk, available_seats__gte=seat_count
            ).update(available_seats=F("available_seats") - seat_count)
            if not reserved:
                logger.warning(
                    f"Booking rejected: trip {trip.pk} sold out while booking {seat_count} seats for user {user.id}"
                )
                raise CapacityExceededException(BookingMessage.NOT_ENOUGH_SEATS)

            booking = Booking.objects.create(
                user=user,
                trip=trip,
                seat_numbers=seat_numbers,
                total_amount=total_amount,
                status=BookingStatus.PENDING,
                booking_code=BookingHelpers.generate_unique_booking_code(),
                expiry_time=BookingHelpers.calculate_expiry_time(),
            )

        logger.info(
            f"Booking created: code={booking.booking_code}, user={user.id}, trip={trip.pk}, "
            f"seats={seat_numbers}, total={total_amount}"
        )
        return BookingService.booking_queryset().get(pk=booking.pk)

    @staticmethod
    def list_for_user(user):
        """
        All bookings owned by the user, newest first.
        """
        return BookingService.booking_queryset().filter(user=user).order_by("-created_at")

    @staticmethod
    def get_for_user(user, booking_id):
        """
        One booking owned by the user.

        Raises:
            NotFoundException: If absent or owned by someone else
        """
        booking = BookingService.booking_queryset().filter(pk=booking_id, user=user).first()
        if booking is None:
            raise NotFoundException(BookingMessage.BOOKING_NOT_FOUND)
        return booking

    @staticmethod
    def release_expired_bookings(now=None):
        """
        Cancels unpaid bookings whose hold has expired and returns their seats.

        Each booking is released in its own transaction. The PENDING ->
        CANCELLED flip is conditional, so a booking confirmed concurrently is
        left alone and its seats stay taken.

        Args:
            now (datetime, optional): Reference instant, defaults to now

        Returns:
            int: Number of bookings released
        """
        now = now or timezone.now()
        expired = list(
            Booking.objects.filter(
                status=BookingStatus.PENDING, expiry_time__lt=now
            ).values_list("id", "trip_id", "seat_numbers")
        )

        released = 0
        for booking_id, trip_id, seat_numbers in expired:
            with transaction.atomic():
                cancelled = Booking.objects.filter(
                    pk=booking_id, status=BookingStatus.PENDING
                ).update(status=BookingStatus.CANCELLED, updated_at=now)
                if not cancelled:
                    continue
                Trip.objects.filter(pk=trip_id).update(
                    available_seats=F("available_seats") + len(seat_numbers)
                )
            released += 1
            logger.info(
                f"Booking {booking_id} expired unpaid: released {len(seat_numbers)} seats on trip {trip_id}"
            )

        return released
