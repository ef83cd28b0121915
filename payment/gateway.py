import logging
from dataclasses import dataclass
from typing import Optional

import stripe
from django.conf import settings

from exceptions.handlers import UpstreamFailureException

logger = logging.getLogger("payment")


@dataclass(frozen=True)
class PaymentIntentResult:
    """The parts of a processor payment intent the booking flow relies on."""

    id: str
    status: str
    client_secret: Optional[str] = None


class PaymentGateway:
    """
    Thin client for Stripe payment intents.

    The API key and API version are passed on every call instead of being
    set on the ``stripe`` module, so concurrent requests never share
    mutable SDK state. Every Stripe error surfaces as UpstreamFailureException.
    """

    def __init__(self, api_key, api_version):
        self.api_key = api_key
        self.api_version = api_version

    def _request_options(self):
        return {"api_key": self.api_key, "stripe_version": self.api_version}

    @staticmethod
    def _to_result(intent):
        return PaymentIntentResult(
            id=intent["id"],
            status=intent["status"],
            client_secret=intent.get("client_secret"),
        )

    def create_intent(self, amount_minor, currency, metadata):
        """
        Opens a payment intent.

        Args:
            amount_minor (int): Amount in the currency's minor unit (cents)
            currency (str): ISO currency code, lower case
            metadata (dict): String key/values attached to the intent

        Returns:
            PaymentIntentResult: The new intent, with its client secret

        Raises:
            UpstreamFailureException: If Stripe rejects the call or is unreachable
        """
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor,
                currency=currency,
                metadata=metadata,
                **self._request_options(),
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe create payment intent failed: {e}")
            raise UpstreamFailureException()
        return self._to_result(intent)

    def retrieve_intent(self, payment_intent_id):
        """
        Fetches the current state of a payment intent.

        Raises:
            UpstreamFailureException: If Stripe rejects the call or is unreachable
        """
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id, **self._request_options())
        except stripe.StripeError as e:
            logger.error(f"Stripe retrieve payment intent {payment_intent_id} failed: {e}")
            raise UpstreamFailureException()
        return self._to_result(intent)


def get_payment_gateway():
    """Builds the gateway from settings."""
    return PaymentGateway(settings.STRIPE_SECRET_KEY, settings.STRIPE_API_VERSION)
