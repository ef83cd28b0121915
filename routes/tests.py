from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Route
from bookingsystem.services import BookingService
from buses.models import Bus
from trips.models import Trip
from utils.constants import Role, TripStatus

User = get_user_model()


class RouteModelTest(TestCase):
    """Test cases for Route model behavior"""

    def test_route_string_representation(self):
        """Test string representation of route"""
        route = Route.objects.create(
            origin_city="Lisbon",
            destination_city="Porto",
            distance=313,
            estimated_duration=210,
            base_price=Decimal("20.00"),
        )
        self.assertEqual(str(route), "Lisbon to Porto (313 km)")
        self.assertTrue(route.is_active)


class RouteAPITest(APITestCase):
    """Test cases for route browsing, search and administration"""

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
        self.inactive_route = Route.objects.create(
            origin_city="Faro",
            destination_city="Evora",
            distance=230,
            estimated_duration=170,
            base_price=Decimal("15.00"),
            is_active=False,
        )
        self.bus = Bus.objects.create(plate_number="AA-11-BB", model="Setra S 516", capacity=50)
        self.list_url = reverse("routes-list")
        self.payload = {
            "originCity": "Coimbra",
            "destinationCity": "Braga",
            "distance": 180,
            "estimatedDuration": 130,
            "basePrice": "14.50",
        }

    def schedule(self, departure, seats=50, status_value=TripStatus.SCHEDULED, route=None):
        return Trip.objects.create(
            route=route or self.route,
            bus=self.bus,
            departure_time=departure,
            arrival_time=departure + timedelta(hours=3),
            price=Decimal("22.00"),
            available_seats=seats,
            status=status_value,
        )

    def test_list_routes_is_public_and_hides_inactive(self):
        """Test that anyone can list active routes"""
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        cities = [route["originCity"] for route in response.data["data"]]
        self.assertEqual(cities, ["Lisbon"])

    def test_list_routes_filter_by_origin(self):
        """Test filtering routes with a partial origin"""
        response = self.client.get(self.list_url, {"origin": "lis"})
        self.assertEqual(len(response.data["data"]), 1)

        response = self.client.get(self.list_url, {"origin": "madrid"})
        self.assertEqual(response.data["data"], [])

    def test_retrieve_route_with_upcoming_trips(self):
        """Test that route detail includes only future trips"""
        upcoming = self.schedule(timezone.now() + timedelta(days=2))
        self.schedule(timezone.now() - timedelta(days=2))

        response = self.client.get(reverse("routes-detail", args=[self.route.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        trips = response.data["data"]["trips"]
        self.assertEqual([trip["id"] for trip in trips], [upcoming.id])
        self.assertEqual(trips[0]["bus"]["plateNumber"], "AA-11-BB")

    def test_retrieve_missing_route(self):
        """Test that an unknown route answers 404 in the error envelope"""
        response = self.client.get(reverse("routes-detail", args=[999999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["success"])

    def test_admin_creates_route(self):
        """Test that administrators can create routes"""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["originCity"], "Coimbra")
        self.assertTrue(Route.objects.filter(origin_city="Coimbra").exists())

    def test_customer_cannot_create_route(self):
        """Test that customers are forbidden from creating routes"""
        self.client.force_authenticate(user=self.customer)
        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_cannot_create_route(self):
        """Test that creating routes needs a token"""
        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_duplicate_route_conflicts(self):
        """Test that a city pair can only be served by one route"""
        self.client.force_authenticate(user=self.admin_user)
        self.payload.update({"originCity": "lisbon", "destinationCity": "PORTO"})

        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data["success"])

    def test_route_with_same_origin_and_destination(self):
        """Test that origin and destination must differ"""
        self.client.force_authenticate(user=self.admin_user)
        self.payload["destinationCity"] = "Coimbra"

        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_route(self):
        """Test partial updates by administrators"""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.patch(
            reverse("routes-detail", args=[self.route.id]), {"basePrice": "25.00"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.route.refresh_from_db()
        self.assertEqual(self.route.base_price, Decimal("25.00"))

    def test_delete_route_with_future_trips_is_refused(self):
        """Test that routes with upcoming departures cannot be deleted"""
        self.schedule(timezone.now() + timedelta(days=1))
        self.client.force_authenticate(user=self.admin_user)

        response = self.client.delete(reverse("routes-detail", args=[self.route.id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Route.objects.filter(pk=self.route.pk).exists())

    def test_delete_route_without_trips(self):
        """Test deleting a route with no trips"""
        self.client.force_authenticate(user=self.admin_user)

        response = self.client.delete(reverse("routes-detail", args=[self.inactive_route.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Route deleted successfully.")
        self.assertFalse(Route.objects.filter(pk=self.inactive_route.pk).exists())

    def test_search_routes(self):
        """Test search returns routes with bookable trips on the requested day"""
        departure = timezone.now() + timedelta(days=3)
        trip = self.schedule(departure)
        self.schedule(departure, seats=1)
        self.schedule(departure, status_value=TripStatus.CANCELLED)

        response = self.client.get(
            reverse("routes-search"),
            {
                "origin": "lisbon",
                "destination": "porto",
                "date": timezone.localtime(departure).date().isoformat(),
                "passengers": 2,
            },
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]), 1)
        self.assertEqual([t["id"] for t in response.data["data"][0]["trips"]], [trip.id])
        self.assertEqual(response.data["searchParams"]["passengers"], 2)

    def test_search_without_matching_trips(self):
        """Test that routes with no bookable trips are left out"""
        response = self.client.get(reverse("routes-search"), {"origin": "Lisbon", "destination": "Porto"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"], [])

    def test_search_requires_both_cities(self):
        """Test that search needs an origin and a destination"""
        response = self.client.get(reverse("routes-search"), {"origin": "Lisbon"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])

    def test_search_rejects_bad_date(self):
        """Test that a malformed date is a client error"""
        response = self.client.get(
            reverse("routes-search"), {"origin": "Lisbon", "destination": "Porto", "date": "03/05/2030"}
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_popular_routes_ranked_by_bookings(self):
        """Test that popular routes are ordered by booking count with trip totals"""
        quiet_route = Route.objects.create(
            origin_city="Coimbra",
            destination_city="Braga",
            distance=180,
            estimated_duration=130,
            base_price=Decimal("14.50"),
        )
        departure = timezone.now() + timedelta(days=2)
        busy_trip = self.schedule(departure)
        self.schedule(departure + timedelta(days=1))
        quiet_trip = self.schedule(departure, route=quiet_route)
        BookingService.create_booking(self.customer, busy_trip.id, [1, 2])
        BookingService.create_booking(self.customer, busy_trip.id, [3])
        BookingService.create_booking(self.customer, quiet_trip.id, [1])

        response = self.client.get(reverse("routes-popular"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        ranking = [
            (route["id"], route["totalBookings"], route["totalTrips"]) for route in response.data["data"]
        ]
        self.assertEqual(
            ranking,
            [(self.route.id, 2, 2), (quiet_route.id, 1, 1), (self.inactive_route.id, 0, 0)],
        )

    def test_popular_routes_limited_to_top_ten(self):
        """Test that at most ten routes are ranked"""
        for number in range(11):
            Route.objects.create(
                origin_city=f"Town {number}",
                destination_city="Porto",
                distance=100,
                estimated_duration=60,
                base_price=Decimal("10.00"),
            )

        response = self.client.get(reverse("routes-popular"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]), 10)
