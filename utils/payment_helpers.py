import logging
from decimal import Decimal, ROUND_HALF_UP
from django.utils import timezone
from utils.constants import BookingStatus, PaymentStatus

logger = logging.getLogger("payment")


class PaymentHelpers:
    """
    Reusable helper methods for payment operations.
    Centralizes payment-related utilities to reduce redundancy.
    """

    @staticmethod
    def to_minor_units(amount):
        """
        Converts a decimal amount to the processor's minor unit.

        Args:
            amount (Decimal): Amount such as Decimal("25.50")

        Returns:
            int: Amount in cents, rounded half up (2550)
        """
        return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @staticmethod
    def build_intent_metadata(booking, user):
        """
        Metadata attached to a payment intent so it can be traced back
        from the processor dashboard.
        """
        return {
            "bookingId": str(booking.id),
            "bookingCode": booking.booking_code,
            "userId": str(user.id),
        }

    @staticmethod
    def mark_payment_completed(payment, processor_payment_id):
        """
        Records a payment as completed.

        Args:
            payment: Payment object to update
            processor_payment_id (str): Charge id reported by the processor

        Returns:
            Payment: The updated payment
        """
        payment.status = PaymentStatus.COMPLETED
        payment.stripe_payment_id = processor_payment_id
        payment.processed_at = payment.processed_at or timezone.now()
        payment.save(update_fields=["status", "stripe_payment_id", "processed_at", "updated_at"])
        return payment

    @staticmethod
    def confirm_booking(booking):
        """
        Moves a PENDING booking to CONFIRMED.

        The update is conditional on the status, so a booking already
        confirmed stays as it is and a booking cancelled by expiry is
        not revived.

        Returns:
            str: The booking status after the call
        """
        from bookingsystem.models import Booking

        updated = Booking.objects.filter(pk=booking.pk, status=BookingStatus.PENDING).update(
            status=BookingStatus.CONFIRMED, updated_at=timezone.now()
        )
        booking.refresh_from_db(fields=["status", "updated_at"])
        if not updated and booking.status == BookingStatus.CANCELLED:
            logger.warning(
                f"Payment confirmed for booking {booking.booking_code} which had already expired; booking stays CANCELLED"
            )
        return booking.status
