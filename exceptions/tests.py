from django.core.exceptions import ObjectDoesNotExist
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import ValidationError

from .handlers import (
    CapacityExceededException,
    NotFoundException,
    UpstreamFailureException,
    custom_exception_handler,
)


class ExceptionHandlerTest(SimpleTestCase):
    """Test cases for the error envelope produced by the exception handler"""

    def handle(self, exc):
        return custom_exception_handler(exc, {"view": None})

    def test_custom_exception_keeps_status_and_message(self):
        """Test that API exceptions map to their status with their message"""
        response = self.handle(NotFoundException("Trip not found"))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"success": False, "message": "Trip not found"})

    def test_capacity_exceeded_default_message(self):
        """Test the default capacity message"""
        response = self.handle(CapacityExceededException())

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Not enough available seats")

    def test_upstream_failure_is_bad_gateway(self):
        """Test that processor failures answer 502"""
        response = self.handle(UpstreamFailureException())

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertFalse(response.data["success"])

    def test_validation_error_keeps_field_errors(self):
        """Test that field errors are flattened into the message and kept under errors"""
        response = self.handle(ValidationError({"seat_numbers": ["A valid integer is required."]}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "A valid integer is required.")
        self.assertIn("seat_numbers", response.data["errors"])

    def test_does_not_exist_is_not_found(self):
        """Test that a leaked DoesNotExist answers 404"""
        response = self.handle(ObjectDoesNotExist())

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["success"])

    def test_unexpected_error_is_opaque(self):
        """Test that unexpected errors answer 500 without leaking details"""
        with self.assertLogs("request", level="ERROR"):
            response = self.handle(RuntimeError("database password is hunter2"))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {"success": False, "message": "Server error"})


class HealthCheckTest(TestCase):
    """Test cases for the health endpoint"""

    def test_health_is_public(self):
        """Test that the health check needs no token"""
        response = self.client.get(reverse("health"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["status"], "OK")
        self.assertIn("X-Trace-Id", response)
