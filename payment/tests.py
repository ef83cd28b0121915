from datetime import timedelta
from decimal import Decimal
from unittest import mock

import stripe
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .gateway import PaymentGateway, PaymentIntentResult
from .models import Payment
from .services import PaymentService
from .views import PaymentViewSet
from bookingsystem.models import Booking
from bookingsystem.services import BookingService
from bookingsystem.tests import create_trip
from exceptions.handlers import InvalidInputException, NotFoundException, UpstreamFailureException
from utils.constants import BookingStatus, PaymentStatus
from utils.payment_helpers import PaymentHelpers

User = get_user_model()


class FakePaymentGateway:
    """In-memory stand-in for the Stripe gateway."""

    def __init__(self, status="requires_payment_method", fail=False):
        self.status = status
        self.fail = fail
        self.created = []
        self.retrieved = []

    def create_intent(self, amount_minor, currency, metadata):
        if self.fail:
            raise UpstreamFailureException()
        intent_id = f"pi_test_{len(self.created) + 1}"
        self.created.append(
            {"id": intent_id, "amount_minor": amount_minor, "currency": currency, "metadata": metadata}
        )
        return PaymentIntentResult(id=intent_id, status="requires_payment_method", client_secret=f"{intent_id}_secret")

    def retrieve_intent(self, payment_intent_id):
        if self.fail:
            raise UpstreamFailureException()
        self.retrieved.append(payment_intent_id)
        return PaymentIntentResult(id=payment_intent_id, status=self.status)


class PaymentHelpersTest(TestCase):
    """Test cases for payment helper utilities"""

    def test_minor_units(self):
        """Test conversion of amounts to cents"""
        self.assertEqual(PaymentHelpers.to_minor_units(Decimal("25.50")), 2550)
        self.assertEqual(PaymentHelpers.to_minor_units(Decimal("0.10")), 10)
        self.assertEqual(PaymentHelpers.to_minor_units(Decimal("19.99")), 1999)

    def test_minor_units_rounds_half_up(self):
        """Test that sub-cent amounts round half up"""
        self.assertEqual(PaymentHelpers.to_minor_units(Decimal("1.005")), 101)


class PaymentGatewayTest(TestCase):
    """Test cases for the Stripe gateway wrapper"""

    def setUp(self):
        self.gateway = PaymentGateway("sk_test_key", "2023-10-16")

    @mock.patch("payment.gateway.stripe.PaymentIntent.create")
    def test_create_intent_passes_request_options(self, create):
        """Test that key and API version are sent with the call"""
        create.return_value = {
            "id": "pi_1",
            "status": "requires_payment_method",
            "client_secret": "pi_1_secret",
        }

        result = self.gateway.create_intent(2550, "usd", {"bookingId": "1"})

        create.assert_called_once_with(
            amount=2550,
            currency="usd",
            metadata={"bookingId": "1"},
            api_key="sk_test_key",
            stripe_version="2023-10-16",
        )
        self.assertEqual(result, PaymentIntentResult(id="pi_1", status="requires_payment_method", client_secret="pi_1_secret"))

    @mock.patch("payment.gateway.stripe.PaymentIntent.create")
    def test_create_intent_stripe_error(self, create):
        """Test that Stripe errors become upstream failures"""
        create.side_effect = stripe.APIConnectionError("network down")

        with self.assertRaises(UpstreamFailureException):
            self.gateway.create_intent(2550, "usd", {})

    @mock.patch("payment.gateway.stripe.PaymentIntent.retrieve")
    def test_retrieve_intent(self, retrieve):
        """Test reading an intent's status"""
        retrieve.return_value = {"id": "pi_1", "status": "succeeded", "latest_charge": "ch_1"}

        result = self.gateway.retrieve_intent("pi_1")

        retrieve.assert_called_once_with("pi_1", api_key="sk_test_key", stripe_version="2023-10-16")
        self.assertEqual(result, PaymentIntentResult(id="pi_1", status="succeeded"))


class PaymentServiceTest(TestCase):
    """Test cases for payment intent creation and confirmation"""

    def setUp(self):
        self.user = User.objects.create_user(email="rider@test.com", password="riderpass123")
        self.other_user = User.objects.create_user(email="other@test.com", password="otherpass123")
        self.trip = create_trip(available_seats=10, price="25.50")
        self.booking = BookingService.create_booking(self.user, self.trip.id, [1])
        self.gateway = FakePaymentGateway()
        self.service = PaymentService(self.gateway)

    def test_create_intent(self):
        """Test that an intent is opened for the booking total and a pending payment recorded"""
        result = self.service.create_intent(self.user, self.booking.id)

        self.assertEqual(self.gateway.created[0]["amount_minor"], 2550)
        self.assertEqual(self.gateway.created[0]["currency"], "usd")
        self.assertEqual(self.gateway.created[0]["metadata"]["bookingId"], str(self.booking.id))
        self.assertEqual(result["paymentIntentId"], "pi_test_1")
        self.assertEqual(result["clientSecret"], "pi_test_1_secret")

        payment = Payment.objects.get(pk=result["paymentId"])
        self.assertEqual(payment.status, PaymentStatus.PENDING)
        self.assertEqual(payment.amount, Decimal("25.50"))
        self.assertEqual(payment.stripe_intent_id, "pi_test_1")
        self.assertEqual(payment.user, self.user)

    def test_create_intent_for_other_users_booking(self):
        """Test that paying someone else's booking is reported as not found"""
        with self.assertRaises(NotFoundException):
            self.service.create_intent(self.other_user, self.booking.id)

        self.assertEqual(self.gateway.created, [])
        self.assertFalse(Payment.objects.exists())

    def test_create_intent_gateway_failure_persists_nothing(self):
        """Test that no payment row is written when the processor fails"""
        service = PaymentService(FakePaymentGateway(fail=True))

        with self.assertRaises(UpstreamFailureException):
            service.create_intent(self.user, self.booking.id)

        self.assertFalse(Payment.objects.exists())

    def test_create_intent_for_expired_booking(self):
        """Test that a booking released by the expiry sweep cannot be paid"""
        BookingService.release_expired_bookings(now=self.booking.expiry_time + timedelta(seconds=1))

        with self.assertRaises(InvalidInputException):
            self.service.create_intent(self.user, self.booking.id)

        self.assertEqual(self.gateway.created, [])
        self.assertFalse(Payment.objects.exists())
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, BookingStatus.CANCELLED)

    def test_create_intent_for_lapsed_hold_before_sweep(self):
        """Test that a hold past its expiry time is refused even before it is released"""
        Booking.objects.filter(pk=self.booking.pk).update(expiry_time=timezone.now() - timedelta(minutes=1))

        with self.assertRaises(InvalidInputException):
            self.service.create_intent(self.user, self.booking.id)

        self.assertEqual(self.gateway.created, [])
        self.assertFalse(Payment.objects.exists())

    def test_create_intent_for_confirmed_booking(self):
        """Test that a booking that is already paid cannot be charged again"""
        Booking.objects.filter(pk=self.booking.pk).update(status=BookingStatus.CONFIRMED)

        with self.assertRaises(InvalidInputException):
            self.service.create_intent(self.user, self.booking.id)

        self.assertEqual(self.gateway.created, [])

    def test_confirm_not_succeeded_writes_nothing(self):
        """Test that confirming an unfinished intent leaves payment and booking as they were"""
        intent = self.service.create_intent(self.user, self.booking.id)

        with self.assertRaises(InvalidInputException):
            self.service.confirm(intent["paymentIntentId"])

        payment = Payment.objects.get(pk=intent["paymentId"])
        self.booking.refresh_from_db()
        self.assertEqual(payment.status, PaymentStatus.PENDING)
        self.assertIsNone(payment.processed_at)
        self.assertEqual(self.booking.status, BookingStatus.PENDING)

    def test_confirm_succeeded(self):
        """Test that a succeeded intent completes the payment and confirms the booking"""
        intent = self.service.create_intent(self.user, self.booking.id)
        self.gateway.status = "succeeded"

        self.service.confirm(intent["paymentIntentId"])

        payment = Payment.objects.get(pk=intent["paymentId"])
        self.booking.refresh_from_db()
        self.assertEqual(payment.status, PaymentStatus.COMPLETED)
        self.assertEqual(payment.stripe_payment_id, "pi_test_1")
        self.assertIsNotNone(payment.processed_at)
        self.assertEqual(self.booking.status, BookingStatus.CONFIRMED)

    def test_confirm_twice_is_idempotent(self):
        """Test that confirming the same intent again changes nothing"""
        intent = self.service.create_intent(self.user, self.booking.id)
        self.gateway.status = "succeeded"

        self.service.confirm(intent["paymentIntentId"])
        first = Payment.objects.get(pk=intent["paymentId"])
        self.service.confirm(intent["paymentIntentId"])
        second = Payment.objects.get(pk=intent["paymentId"])

        self.assertEqual(second.status, PaymentStatus.COMPLETED)
        self.assertEqual(second.stripe_payment_id, first.stripe_payment_id)
        self.assertEqual(second.processed_at, first.processed_at)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, BookingStatus.CONFIRMED)
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 9)

    def test_confirm_unknown_intent(self):
        """Test that confirming an intent with no payment is not found"""
        self.gateway.status = "succeeded"

        with self.assertRaises(NotFoundException):
            self.service.confirm("pi_unknown")

    def test_confirm_after_expiry_keeps_booking_cancelled(self):
        """Test that a late payment does not revive an expired booking"""
        intent = self.service.create_intent(self.user, self.booking.id)
        BookingService.release_expired_bookings(now=self.booking.expiry_time + timedelta(seconds=1))
        self.gateway.status = "succeeded"

        self.service.confirm(intent["paymentIntentId"])

        self.booking.refresh_from_db()
        payment = Payment.objects.get(pk=intent["paymentId"])
        self.assertEqual(payment.status, PaymentStatus.COMPLETED)
        self.assertEqual(self.booking.status, BookingStatus.CANCELLED)
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.available_seats, 10)


class PaymentAPITest(APITestCase):
    """Test cases for the payments API"""

    def setUp(self):
        self.user = User.objects.create_user(email="rider@test.com", password="riderpass123")
        self.other_user = User.objects.create_user(email="other@test.com", password="otherpass123")
        self.trip = create_trip(available_seats=10, price="12.00")
        self.booking = BookingService.create_booking(self.user, self.trip.id, [1, 2])
        self.gateway = FakePaymentGateway()

        patcher = mock.patch.object(
            PaymentViewSet, "get_payment_service", lambda view: PaymentService(self.gateway)
        )
        patcher.start()
        self.addCleanup(patcher.stop)

        self.create_intent_url = reverse("payments-create-intent")
        self.confirm_url = reverse("payments-confirm")
        self.list_url = reverse("payments-list")

    def test_create_intent(self):
        """Test opening an intent returns the client secret in the envelope"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post(self.create_intent_url, {"bookingId": self.booking.id}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["data"]["clientSecret"], "pi_test_1_secret")
        self.assertEqual(response.data["data"]["paymentIntentId"], "pi_test_1")
        self.assertEqual(self.gateway.created[0]["amount_minor"], 2400)

    def test_create_intent_for_other_users_booking(self):
        """Test that another user's booking answers 404 with no payment"""
        self.client.force_authenticate(user=self.other_user)
        response = self.client.post(self.create_intent_url, {"bookingId": self.booking.id}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"success": False, "message": "Booking not found"})
        self.assertFalse(Payment.objects.exists())

    def test_create_intent_requires_booking_id(self):
        """Test that the booking id is required"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post(self.create_intent_url, {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Booking id is required.")

    def test_create_intent_for_expired_booking(self):
        """Test that a cancelled booking answers 400 and opens no intent"""
        BookingService.release_expired_bookings(now=self.booking.expiry_time + timedelta(seconds=1))
        self.client.force_authenticate(user=self.user)

        response = self.client.post(self.create_intent_url, {"bookingId": self.booking.id}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data, {"success": False, "message": "Booking is no longer awaiting payment"}
        )
        self.assertEqual(self.gateway.created, [])
        self.assertFalse(Payment.objects.exists())

    def test_create_intent_rejects_out_of_range_booking_id(self):
        """Test that booking ids outside the 64-bit range are client errors"""
        self.client.force_authenticate(user=self.user)

        for booking_id in (2**63, 0):
            response = self.client.post(self.create_intent_url, {"bookingId": booking_id}, format="json")

            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertFalse(response.data["success"])
        self.assertEqual(self.gateway.created, [])

    def test_create_intent_gateway_failure(self):
        """Test that a processor outage answers 502"""
        self.gateway.fail = True
        self.client.force_authenticate(user=self.user)
        response = self.client.post(self.create_intent_url, {"bookingId": self.booking.id}, format="json")

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertFalse(response.data["success"])
        self.assertFalse(Payment.objects.exists())

    def test_confirm_not_completed(self):
        """Test confirming an unfinished intent answers 400 Payment not completed"""
        self.client.force_authenticate(user=self.user)
        intent = self.client.post(self.create_intent_url, {"bookingId": self.booking.id}, format="json")

        response = self.client.post(
            self.confirm_url, {"paymentIntentId": intent.data["data"]["paymentIntentId"]}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {"success": False, "message": "Payment not completed"})

    def test_confirm_succeeded(self):
        """Test confirming a succeeded intent confirms the booking"""
        self.client.force_authenticate(user=self.user)
        intent = self.client.post(self.create_intent_url, {"bookingId": self.booking.id}, format="json")
        self.gateway.status = "succeeded"

        response = self.client.post(
            self.confirm_url, {"paymentIntentId": intent.data["data"]["paymentIntentId"]}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"success": True, "message": "Payment confirmed successfully"})
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, BookingStatus.CONFIRMED)

    def test_list_payments(self):
        """Test that users only see their own payments"""
        other_booking = BookingService.create_booking(self.other_user, self.trip.id, [3])
        PaymentService(self.gateway).create_intent(self.user, self.booking.id)
        PaymentService(self.gateway).create_intent(self.other_user, other_booking.id)

        self.client.force_authenticate(user=self.user)
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]), 1)
        self.assertEqual(response.data["data"][0]["bookingCode"], self.booking.booking_code)
        self.assertEqual(response.data["data"][0]["status"], PaymentStatus.PENDING)

    def test_payments_require_authentication(self):
        """Test that the payment endpoints answer 401 without a token"""
        response = self.client.post(self.create_intent_url, {"bookingId": self.booking.id}, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(Booking.objects.get(pk=self.booking.pk).status, BookingStatus.PENDING)
