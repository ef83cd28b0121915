import logging
from rest_framework import viewsets, mixins
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from .gateway import get_payment_gateway
from .serializers import PaymentSerializer, CreateIntentSerializer, ConfirmPaymentSerializer
from .services import PaymentService
from utils.constants import PaymentMessage
from utils.serializer_helpers import envelope

logger = logging.getLogger("payment")


class PaymentViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    ViewSet for paying bookings.

    The client opens an intent, completes the card flow with the processor
    using the returned client secret, then calls confirm. Payments are
    never edited or deleted through the API.
    """

    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]

    def get_serializer_class(self):
        if self.action == "create_intent":
            return CreateIntentSerializer
        if self.action == "confirm":
            return ConfirmPaymentSerializer
        return PaymentSerializer

    def get_queryset(self):
        return PaymentService.list_for_user(self.request.user)

    def get_payment_service(self):
        return PaymentService(get_payment_gateway())

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response(envelope(serializer.data))

    @action(detail=False, methods=["post"], url_path="create-intent")
    def create_intent(self, request):
        """
        Opens a payment intent for one of the caller's bookings.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        intent = self.get_payment_service().create_intent(
            request.user, serializer.validated_data["booking_id"]
        )
        return Response(envelope(intent, message=PaymentMessage.PAYMENT_INTENT_CREATED))

    @action(detail=False, methods=["post"], url_path="confirm")
    def confirm(self, request):
        """
        Confirms a payment whose intent the processor reports as succeeded.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment_intent_id = serializer.validated_data["payment_intent_id"]
        self.get_payment_service().confirm(payment_intent_id)
        logger.info(f"Payment confirmation for intent {payment_intent_id} accepted from {request.user.email}")
        return Response(envelope(message=PaymentMessage.PAYMENT_CONFIRMED))
