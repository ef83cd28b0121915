from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Trip
from buses.models import Bus
from routes.models import Route
from utils.constants import Role, TripStatus

User = get_user_model()


class TripModelTest(TestCase):
    """Test cases for Trip model and managers"""

    def setUp(self):
        self.route = Route.objects.create(
            origin_city="Lisbon",
            destination_city="Porto",
            distance=313,
            estimated_duration=210,
            base_price=Decimal("20.00"),
        )
        self.bus = Bus.objects.create(plate_number="AA-11-BB", model="Setra S 516", capacity=50)

    def create_trip(self, departure, seats=50):
        return Trip.objects.create(
            route=self.route,
            bus=self.bus,
            departure_time=departure,
            arrival_time=departure + timedelta(hours=3),
            price=Decimal("22.00"),
            available_seats=seats,
        )

    def test_upcoming_manager_excludes_past_trips(self):
        """Test that the upcoming manager only returns future departures"""
        future = self.create_trip(timezone.now() + timedelta(hours=1))
        past = self.create_trip(timezone.now() - timedelta(hours=1))

        self.assertIn(future, Trip.upcoming.all())
        self.assertNotIn(past, Trip.upcoming.all())
        self.assertIn(past, Trip.objects.all())

    def test_available_seats_cannot_go_negative(self):
        """Test that the database refuses a negative seat count"""
        trip = self.create_trip(timezone.now() + timedelta(days=1), seats=0)

        with self.assertRaises(IntegrityError), transaction.atomic():
            Trip.objects.filter(pk=trip.pk).update(available_seats=-1)


class TripAPITest(APITestCase):
    """Test cases for the trip catalog API"""

    def setUp(self):
        self.admin_user = User.objects.create_user(
            email="admin@test.com", password="adminpass123", role=Role.ADMIN
        )
        self.customer = User.objects.create_user(email="rider@test.com", password="riderpass123")
        self.route = Route.objects.create(
            origin_city="Lisbon",
            destination_city="Porto",
            distance=313,
            estimated_duration=210,
            base_price=Decimal("20.00"),
        )
        self.bus = Bus.objects.create(plate_number="AA-11-BB", model="Setra S 516", capacity=44)
        self.list_url = reverse("trips-list")
        self.departure = timezone.now() + timedelta(days=5)
        self.payload = {
            "routeId": self.route.id,
            "busId": self.bus.id,
            "departureTime": self.departure.isoformat(),
            "arrivalTime": (self.departure + timedelta(hours=3)).isoformat(),
            "price": "22.50",
        }

    def create_trip(self, departure):
        return Trip.objects.create(
            route=self.route,
            bus=self.bus,
            departure_time=departure,
            arrival_time=departure + timedelta(hours=3),
            price=Decimal("22.00"),
            available_seats=44,
        )

    def test_list_upcoming_trips(self):
        """Test that the public list shows future trips, earliest first"""
        later = self.create_trip(timezone.now() + timedelta(days=2))
        sooner = self.create_trip(timezone.now() + timedelta(days=1))
        self.create_trip(timezone.now() - timedelta(days=1))

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([trip["id"] for trip in response.data["data"]], [sooner.id, later.id])
        self.assertEqual(response.data["data"][0]["route"]["destinationCity"], "Porto")
        self.assertEqual(response.data["data"][0]["availableSeats"], 44)

    def test_retrieve_trip(self):
        """Test reading one trip"""
        trip = self.create_trip(timezone.now() + timedelta(days=1))

        response = self.client.get(reverse("trips-detail", args=[trip.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["busId"], self.bus.id)

    def test_admin_schedules_trip_with_bus_capacity(self):
        """Test that a new trip starts with all of the bus seats available"""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["availableSeats"], 44)
        self.assertEqual(response.data["data"]["status"], TripStatus.SCHEDULED)
        self.assertEqual(Trip.objects.get().available_seats, 44)

    def test_seat_count_is_not_accepted_from_input(self):
        """Test that availableSeats in the payload is ignored"""
        self.client.force_authenticate(user=self.admin_user)
        self.payload["availableSeats"] = 500
        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Trip.objects.get().available_seats, 44)

    def test_schedule_trip_missing_bus(self):
        """Test that scheduling on an unknown bus answers 404"""
        self.client.force_authenticate(user=self.admin_user)
        self.payload["busId"] = 999999

        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(Trip.objects.exists())

    def test_schedule_trip_arrival_before_departure(self):
        """Test that arrival must come after departure"""
        self.client.force_authenticate(user=self.admin_user)
        self.payload["arrivalTime"] = (self.departure - timedelta(hours=1)).isoformat()

        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_cannot_schedule_trip(self):
        """Test that customers cannot create trips"""
        self.client.force_authenticate(user=self.customer)
        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_updates_trip_status(self):
        """Test changing a trip's status keeps its seats"""
        trip = self.create_trip(timezone.now() + timedelta(days=1))
        self.client.force_authenticate(user=self.admin_user)

        response = self.client.patch(
            reverse("trips-detail", args=[trip.id]), {"status": TripStatus.DELAYED}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        trip.refresh_from_db()
        self.assertEqual(trip.status, TripStatus.DELAYED)
        self.assertEqual(trip.available_seats, 44)
