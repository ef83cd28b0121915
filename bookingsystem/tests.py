import re
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Booking
from .services import BookingService
from buses.models import Bus
from exceptions.handlers import CapacityExceededException, InvalidInputException, NotFoundException
from routes.models import Route
from trips.models import Trip
from utils.booking_helpers import BookingHelpers
from utils.constants import BookingStatus, Role

User = get_user_model()

BOOKING_CODE_PATTERN = re.compile(r"^BUS\d+[A-Z0-9]{5}$")


def create_trip(available_seats=40, price="25.50", departure_in=timedelta(days=1), origin="Lisbon"):
    route = Route.objects.create(
        origin_city=origin,
        destination_city="Porto",
        distance=313,
        estimated_duration=210,
        base_price=Decimal("20.00"),
    )
    bus = Bus.objects.create(plate_number=f"{origin[:2]}-01-AA", model="Volvo 9700", capacity=40)
    departure = timezone.now() + departure_in
    return Trip.objects.create(
        route=route,
        bus=bus,
        departure_time=departure,
        arrival_time=departure + timedelta(hours=3, minutes=30),
        price=Decimal(price),
        available_seats=available_seats,
    )


class BookingHelpersTest(TestCase):
    """Test cases for booking helper utilities"""

    def test_booking_code_format(self):
        """Test that booking codes are BUS + timestamp + 5 base36 characters"""
        code = BookingHelpers.build_booking_code()
        self.assertRegex(code, BOOKING_CODE_PATTERN)

    def test_booking_code_uses_given_timestamp(self):
        """Test that the timestamp part of the code is the one provided"""
        code = BookingHelpers.build_booking_code(now_ms=1718035200123)
        self.assertTrue(code.startswith("BUS1718035200123"))
        self.assertEqual(len(code), len("BUS1718035200123") + 5)

    def test_total_amount_is_exact(self):
        """Test that the total is price times seat count with no float drift"""
        self.assertEqual(BookingHelpers.calculate_total_amount(Decimal("0.10"), 3), Decimal("0.30"))
        self.assertEqual(BookingHelpers.calculate_total_amount(Decimal("25.50"), 2), Decimal("51.00"))

    def test_expiry_time_uses_hold_minutes(self):
        """Test that the hold window comes from settings"""
        booked_at = timezone.now()
        with self.settings(BOOKING_HOLD_MINUTES=10):
            expiry = BookingHelpers.calculate_expiry_time(booked_at)
        self.assertEqual(expiry - booked_at, timedelta(minutes=10))


class BookingServiceTest(TestCase):
    """Test cases for seat accounting in BookingService"""

    def setUp(self):
        self.user = User.objects.create_user(email="rider@test.com", password="riderpass123")
        self.trip = create_trip(available_seats=10)

    def test_booking_decrements_seats_exactly(self):
        """Test that booking k seats leaves available seats reduced by exactly k"""
        booking = BookingService.create_booking(self.user, self.trip.id, [3, 4, 5])

        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 7)
        self.assertEqual(booking.status, BookingStatus.PENDING)
        self.assertEqual(booking.seat_numbers, [3, 4, 5])
        self.assertEqual(booking.total_amount, Decimal("76.50"))
        self.assertRegex(booking.booking_code, BOOKING_CODE_PATTERN)

    def test_booking_leaves_other_trip_fields_unchanged(self):
        """Test that only available_seats changes on the trip"""
        before = Trip.objects.values().get(pk=self.trip.pk)

        BookingService.create_booking(self.user, self.trip.id, [1])

        after = Trip.objects.values().get(pk=self.trip.pk)
        self.assertEqual(after.pop("available_seats"), before.pop("available_seats") - 1)
        self.assertEqual(after, before)

    def test_booking_over_capacity_is_rejected(self):
        """Test that requesting more seats than available changes nothing"""
        with self.assertRaises(CapacityExceededException):
            BookingService.create_booking(self.user, self.trip.id, list(range(1, 12)))

        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 10)
        self.assertFalse(Booking.objects.exists())

    def test_booking_all_remaining_seats(self):
        """Test that the last seats can be booked, leaving zero"""
        BookingService.create_booking(self.user, self.trip.id, list(range(1, 11)))

        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 0)

    def test_booking_missing_trip(self):
        """Test that booking a non-existent trip raises not found"""
        with self.assertRaises(NotFoundException):
            BookingService.create_booking(self.user, 999999, [1])
        self.assertFalse(Booking.objects.exists())

    def test_booking_requires_seats(self):
        """Test that an empty seat list is rejected"""
        with self.assertRaises(InvalidInputException):
            BookingService.create_booking(self.user, self.trip.id, [])

    def test_last_seat_race_with_stale_read(self):
        """Test that two bookings racing for the last seat cannot both succeed"""
        self.trip.available_seats = 1
        self.trip.save()
        stale_trip = Trip.objects.select_related("route", "bus").get(pk=self.trip.pk)

        BookingService.create_booking(self.user, self.trip.id, [1])

        # The second request read the trip before the first one wrote
        with mock.patch(
            "utils.validators.BookingValidators.validate_trip_for_booking",
            return_value=stale_trip,
        ):
            with self.assertRaises(CapacityExceededException):
                BookingService.create_booking(self.user, self.trip.id, [2])

        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 0)
        self.assertEqual(Booking.objects.count(), 1)

    def test_booking_rolls_back_seats_when_insert_fails(self):
        """Test that seats are restored if the booking row cannot be written"""
        with mock.patch.object(Booking.objects, "create", side_effect=RuntimeError("insert failed")):
            with self.assertRaises(RuntimeError):
                BookingService.create_booking(self.user, self.trip.id, [1, 2])

        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 10)

    def test_list_for_user_only_returns_own_bookings(self):
        """Test that bookings are scoped to their owner, newest first"""
        other = User.objects.create_user(email="other@test.com", password="otherpass123")
        first = BookingService.create_booking(self.user, self.trip.id, [1])
        second = BookingService.create_booking(self.user, self.trip.id, [2])
        BookingService.create_booking(other, self.trip.id, [3])

        bookings = list(BookingService.list_for_user(self.user))
        self.assertEqual([b.id for b in bookings], [second.id, first.id])


class BookingExpiryTest(TestCase):
    """Test cases for releasing unpaid bookings"""

    def setUp(self):
        self.user = User.objects.create_user(email="rider@test.com", password="riderpass123")
        self.trip = create_trip(available_seats=10)

    def test_expired_booking_returns_seats(self):
        """Test that an expired pending booking is cancelled and its seats released"""
        booking = BookingService.create_booking(self.user, self.trip.id, [1, 2, 3])
        later = booking.expiry_time + timedelta(seconds=1)

        released = BookingService.release_expired_bookings(now=later)

        self.assertEqual(released, 1)
        booking.refresh_from_db()
        self.trip.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.CANCELLED)
        self.assertEqual(self.trip.available_seats, 10)

    def test_unexpired_booking_is_kept(self):
        """Test that a booking still inside its hold is untouched"""
        booking = BookingService.create_booking(self.user, self.trip.id, [1])

        released = BookingService.release_expired_bookings(now=booking.expiry_time - timedelta(minutes=1))

        self.assertEqual(released, 0)
        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.PENDING)

    def test_confirmed_booking_is_never_released(self):
        """Test that a paid booking keeps its seats after the hold"""
        booking = BookingService.create_booking(self.user, self.trip.id, [1, 2])
        Booking.objects.filter(pk=booking.pk).update(status=BookingStatus.CONFIRMED)

        released = BookingService.release_expired_bookings(now=booking.expiry_time + timedelta(hours=1))

        self.assertEqual(released, 0)
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 8)

    def test_release_is_not_repeated(self):
        """Test that running the release twice returns seats only once"""
        booking = BookingService.create_booking(self.user, self.trip.id, [1, 2])
        later = booking.expiry_time + timedelta(seconds=1)

        BookingService.release_expired_bookings(now=later)
        BookingService.release_expired_bookings(now=later)

        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 10)

    def test_management_command(self):
        """Test the release_expired_bookings management command"""
        booking = BookingService.create_booking(self.user, self.trip.id, [4])
        Booking.objects.filter(pk=booking.pk).update(expiry_time=timezone.now() - timedelta(minutes=1))

        out = StringIO()
        call_command("release_expired_bookings", stdout=out)

        self.assertIn("Released 1 expired booking(s).", out.getvalue())
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 10)


class BookingAPITest(APITestCase):
    """Test cases for the bookings API"""

    def setUp(self):
        self.user = User.objects.create_user(email="rider@test.com", password="riderpass123")
        self.other_user = User.objects.create_user(email="other@test.com", password="otherpass123")
        self.admin_user = User.objects.create_user(
            email="admin@test.com", password="adminpass123", role=Role.ADMIN
        )
        self.trip = create_trip(available_seats=5)
        self.list_url = reverse("bookings-list")

    def test_create_booking(self):
        """Test booking seats returns the created booking in camelCase"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            self.list_url, {"tripId": self.trip.id, "seatNumbers": [1, 2]}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        data = response.data["data"]
        self.assertEqual(data["status"], BookingStatus.PENDING)
        self.assertEqual(data["seatNumbers"], [1, 2])
        self.assertEqual(data["totalAmount"], "51.00")
        self.assertRegex(data["bookingCode"], BOOKING_CODE_PATTERN)
        self.assertEqual(data["trip"]["id"], self.trip.id)
        self.assertEqual(data["trip"]["route"]["originCity"], "Lisbon")
        self.assertEqual(data["user"]["email"], "rider@test.com")

        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 3)

    def test_create_booking_over_capacity(self):
        """Test that overbooking answers 400 with the capacity message"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            self.list_url, {"tripId": self.trip.id, "seatNumbers": [1, 2, 3, 4, 5, 6]}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {"success": False, "message": "Not enough available seats"})
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 5)

    def test_create_booking_missing_trip(self):
        """Test that booking an unknown trip answers 404"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post(self.list_url, {"tripId": 999999, "seatNumbers": [1]}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"success": False, "message": "Trip not found"})

    def test_create_booking_invalid_payload(self):
        """Test that a missing trip id is a validation error"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post(self.list_url, {"seatNumbers": [1]}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertIn("trip_id", response.data["errors"])

    def test_create_booking_rejects_out_of_range_trip_id(self):
        """Test that a trip id beyond the 64-bit range is a validation error"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post(self.list_url, {"tripId": 2**63, "seatNumbers": [1]}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("trip_id", response.data["errors"])
        self.assertFalse(Booking.objects.exists())

    def test_create_booking_requires_authentication(self):
        """Test that booking without a token answers 401"""
        response = self.client.post(self.list_url, {"tripId": self.trip.id, "seatNumbers": [1]}, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 5)

    def test_list_bookings_with_stats(self):
        """Test that the list only shows the caller's bookings and their counts"""
        BookingService.create_booking(self.user, self.trip.id, [1])
        BookingService.create_booking(self.other_user, self.trip.id, [2])

        self.client.force_authenticate(user=self.user)
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(len(response.data["data"]), 1)
        self.assertEqual(response.data["stats"]["totalBookings"], 1)
        self.assertEqual(response.data["stats"]["pendingBookings"], 1)

    def test_retrieve_own_booking(self):
        """Test that the owner can read their booking"""
        booking = BookingService.create_booking(self.user, self.trip.id, [1])

        self.client.force_authenticate(user=self.user)
        response = self.client.get(reverse("bookings-detail", args=[booking.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["bookingCode"], booking.booking_code)

    def test_retrieve_other_users_booking(self):
        """Test that another user's booking looks like a missing one"""
        booking = BookingService.create_booking(self.other_user, self.trip.id, [1])

        self.client.force_authenticate(user=self.user)
        response = self.client.get(reverse("bookings-detail", args=[booking.id]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"success": False, "message": "Booking not found"})

    def test_bookings_cannot_be_deleted(self):
        """Test that bookings have no delete endpoint"""
        booking = BookingService.create_booking(self.user, self.trip.id, [1])

        self.client.force_authenticate(user=self.user)
        response = self.client.delete(reverse("bookings-detail", args=[booking.id]))

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertTrue(Booking.objects.filter(pk=booking.pk).exists())
