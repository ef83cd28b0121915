from rest_framework import serializers
from .models import Payment
from utils.constants import MAX_RECORD_ID, PaymentMessage
from utils.serializer_helpers import CamelCaseSerializerMixin


class PaymentSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Read representation of a payment for its owner.
    """

    booking_code = serializers.CharField(source="booking.booking_code", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking_id",
            "booking_code",
            "amount",
            "currency",
            "stripe_intent_id",
            "stripe_payment_id",
            "status",
            "processed_at",
            "created_at",
        ]
        read_only_fields = fields


class CreateIntentSerializer(CamelCaseSerializerMixin, serializers.Serializer):
    booking_id = serializers.IntegerField(
        min_value=1, max_value=MAX_RECORD_ID, error_messages={"required": PaymentMessage.BOOKING_REQUIRED}
    )


class ConfirmPaymentSerializer(CamelCaseSerializerMixin, serializers.Serializer):
    payment_intent_id = serializers.CharField(
        max_length=255, error_messages={"required": PaymentMessage.PAYMENT_INTENT_REQUIRED}
    )
