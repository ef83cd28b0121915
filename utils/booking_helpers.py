import random
import string
import time
import logging
from datetime import timedelta
from decimal import Decimal
from django.conf import settings
from django.db.models import Count, Q
from django.utils import timezone
from utils.constants import BookingStatus

logger = logging.getLogger("bookingsystem")

BOOKING_CODE_PREFIX = "BUS"
BOOKING_CODE_SUFFIX_LENGTH = 5
BASE36_ALPHABET = string.digits + string.ascii_uppercase


class BookingHelpers:
    """
    Reusable helper methods for booking operations.
    Centralizes booking-related utilities to reduce redundancy.
    """

    @staticmethod
    def build_booking_code(now_ms=None):
        """
        Builds a booking code: "BUS" + millisecond timestamp + 5 uppercase base36 chars.

        Args:
            now_ms (int, optional): Millisecond timestamp, defaults to the current time

        Returns:
            str: Code such as "BUS1718035200123K7Q2Z"
        """
        if now_ms is None:
            now_ms = time.time_ns() // 1_000_000
        suffix = "".join(random.choices(BASE36_ALPHABET, k=BOOKING_CODE_SUFFIX_LENGTH))
        return f"{BOOKING_CODE_PREFIX}{now_ms}{suffix}"

    @staticmethod
    def generate_unique_booking_code():
        """
        Generate a booking code not yet used by any booking.

        The code is a human-facing label; the unique column backs this check.

        Returns:
            str: Unused booking code
        """
        from bookingsystem.models import Booking

        while True:
            code = BookingHelpers.build_booking_code()
            if not Booking.objects.filter(booking_code=code).exists():
                return code
            logger.warning(f"Booking code collision on {code}, drawing again")

    @staticmethod
    def calculate_total_amount(price, seat_count):
        """
        Calculate the amount due for a booking.

        Args:
            price (Decimal): Trip price per seat
            seat_count (int): Number of seats booked

        Returns:
            Decimal: price x seat_count, exact to the cent
        """
        return (Decimal(price) * seat_count).quantize(Decimal("0.01"))

    @staticmethod
    def calculate_expiry_time(booked_at=None):
        """
        Returns the instant a pending booking stops holding its seats.
        """
        booked_at = booked_at or timezone.now()
        return booked_at + timedelta(minutes=settings.BOOKING_HOLD_MINUTES)

    @staticmethod
    def get_booking_statistics(queryset):
        """
        Get booking statistics with a single aggregation query.

        Args:
            queryset: Booking queryset

        Returns:
            dict: Counts per status, camelCased for the client
        """
        stats = queryset.aggregate(
            total=Count("id"),
            pending=Count("id", filter=Q(status=BookingStatus.PENDING)),
            confirmed=Count("id", filter=Q(status=BookingStatus.CONFIRMED)),
            cancelled=Count("id", filter=Q(status=BookingStatus.CANCELLED)),
        )

        return {
            "totalBookings": stats["total"],
            "pendingBookings": stats["pending"],
            "confirmedBookings": stats["confirmed"],
            "cancelledBookings": stats["cancelled"],
        }
