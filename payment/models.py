from django.conf import settings
from django.db import models
from utils.constants import Choices, PaymentStatus


class Payment(models.Model):
    """
    A payment attempt for a booking, backed by a processor payment intent.

    Created PENDING when the intent is opened; becomes COMPLETED once the
    processor reports the intent succeeded and the client confirms it.
    """

    booking = models.ForeignKey(
        "bookingsystem.Booking", on_delete=models.CASCADE, related_name="payments"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payments"
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="usd")
    stripe_intent_id = models.CharField(max_length=255, db_index=True)
    stripe_payment_id = models.CharField(max_length=255, null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Choices.PAYMENT_STATUS_CHOICES,
        default=PaymentStatus.PENDING,
        db_index=True,
    )
    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "payments"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.booking.booking_code} - {self.amount} {self.currency.upper()} - {self.status}"
