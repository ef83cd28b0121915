import logging
from django.conf import settings
from django.db import transaction
from .models import Payment
from exceptions.handlers import InvalidInputException
from utils.constants import PROCESSOR_SUCCEEDED, PaymentMessage, PaymentStatus
from utils.payment_helpers import PaymentHelpers
from utils.validators import PaymentValidators

logger = logging.getLogger("payment")


class PaymentService:
    """
    Payment intent creation and confirmation for bookings.

    The processor client is injected so the flow can run against a fake
    gateway in tests.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    def create_intent(self, user, booking_id):
        """
        Opens a processor payment intent for a booking and records a PENDING payment.

        Args:
            user: Authenticated user paying
            booking_id (int): Booking to pay for; must belong to the user

        Returns:
            dict: clientSecret, paymentId and paymentIntentId

        Raises:
            NotFoundException: If the booking is absent or owned by another user
            InvalidInputException: If the booking is not PENDING or its hold expired
            UpstreamFailureException: If the processor call fails; nothing is persisted
        """
        booking = PaymentValidators.validate_booking_for_payment(booking_id, user)
        currency = settings.PAYMENT_CURRENCY

        intent = self.gateway.create_intent(
            amount_minor=PaymentHelpers.to_minor_units(booking.total_amount),
            currency=currency,
            metadata=PaymentHelpers.build_intent_metadata(booking, user),
        )

        payment = Payment.objects.create(
            booking=booking,
            user=user,
            amount=booking.total_amount,
            currency=currency,
            stripe_intent_id=intent.id,
            status=PaymentStatus.PENDING,
        )
        logger.info(
            f"Payment intent {intent.id} opened: payment={payment.id}, booking={booking.booking_code}, "
            f"amount={booking.total_amount} {currency}, user={user.id}"
        )
        return {
            "clientSecret": intent.client_secret,
            "paymentId": payment.id,
            "paymentIntentId": intent.id,
        }

    def confirm(self, payment_intent_id):
        """
        Completes a payment once the processor reports its intent succeeded.

        Nothing is written unless the intent succeeded. On success the payment
        and its booking are updated in one transaction; calling again for the
        same intent leaves them in the same state.

        Returns:
            Payment: The completed payment

        Raises:
            InvalidInputException: If the intent has not succeeded
            NotFoundException: If no payment references the intent
            UpstreamFailureException: If the processor call fails
        """
        intent = self.gateway.retrieve_intent(payment_intent_id)
        if intent.status != PROCESSOR_SUCCEEDED:
            logger.info(f"Payment intent {payment_intent_id} not succeeded yet (status={intent.status})")
            raise InvalidInputException(PaymentMessage.PAYMENT_NOT_COMPLETED)

        payment = PaymentValidators.validate_payment_for_intent(payment_intent_id)

        with transaction.atomic():
            PaymentHelpers.mark_payment_completed(payment, intent.id)
            booking_status = PaymentHelpers.confirm_booking(payment.booking)

        logger.info(
            f"Payment {payment.id} completed for intent {payment_intent_id}: "
            f"booking {payment.booking.booking_code} is {booking_status}"
        )
        return payment

    @staticmethod
    def list_for_user(user):
        """
        All payments made by the user, newest first.
        """
        return Payment.objects.select_related("booking").filter(user=user).order_by("-created_at")
