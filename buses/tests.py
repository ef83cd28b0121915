from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Bus
from utils.constants import Role

User = get_user_model()


class BusModelTest(TestCase):
    """Test cases for Bus model behavior"""

    def test_plate_number_uppercase_conversion(self):
        """Test that plate numbers are stored upper case"""
        bus = Bus.objects.create(plate_number=" aa-11-bb ", model="Setra S 516", capacity=50)
        self.assertEqual(bus.plate_number, "AA-11-BB")

    def test_bus_string_representation(self):
        """Test string representation of an inactive bus"""
        bus = Bus.objects.create(plate_number="AA-11-BB", model="Setra S 516", capacity=50, is_active=False)
        self.assertEqual(str(bus), "Setra S 516 (AA-11-BB) (Inactive)")


class BusAPITest(APITestCase):
    """Test cases for fleet administration"""

    def setUp(self):
        self.admin_user = User.objects.create_user(
            email="admin@test.com", password="adminpass123", role=Role.ADMIN
        )
        self.customer = User.objects.create_user(email="rider@test.com", password="riderpass123")
        self.bus = Bus.objects.create(plate_number="AA-11-BB", model="Setra S 516", capacity=50)
        self.list_url = reverse("buses-list")

    def test_admin_lists_buses(self):
        """Test that administrators see the fleet"""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"][0]["plateNumber"], "AA-11-BB")

    def test_customer_cannot_list_buses(self):
        """Test that the fleet is hidden from customers"""
        self.client.force_authenticate(user=self.customer)
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["success"])

    def test_admin_creates_bus(self):
        """Test registering a bus with amenities"""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(
            self.list_url,
            {"plateNumber": "cc-22-dd", "model": "Volvo 9700", "capacity": 42, "amenities": ["wifi", "usb"]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["plateNumber"], "CC-22-DD")
        self.assertEqual(Bus.objects.get(plate_number="CC-22-DD").amenities, ["wifi", "usb"])

    def test_duplicate_plate_number_conflicts(self):
        """Test that plate numbers are unique regardless of case"""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(
            self.list_url, {"plateNumber": "aa-11-bb", "model": "Volvo 9700", "capacity": 42}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_zero_capacity_is_rejected(self):
        """Test that a bus needs at least one seat"""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(
            self.list_url, {"plateNumber": "EE-33-FF", "model": "Volvo 9700", "capacity": 0}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("capacity", response.data["errors"])

    def test_admin_updates_bus(self):
        """Test deactivating a bus"""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.patch(
            reverse("buses-detail", args=[self.bus.id]), {"isActive": False}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.bus.refresh_from_db()
        self.assertFalse(self.bus.is_active)
