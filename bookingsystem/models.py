from django.db import models
from django.conf import settings
from django.utils import timezone
from utils.constants import BookingStatus, Choices


class Booking(models.Model):
    """
    A user's reservation of one or more seats on a trip.

    Created PENDING with its seats already taken from the trip. Moves to
    CONFIRMED when a payment for it is confirmed, or to CANCELLED when the
    hold expires unpaid and its seats go back to the trip.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bookings"
    )
    trip = models.ForeignKey("trips.Trip", on_delete=models.PROTECT, related_name="bookings")
    seat_numbers = models.JSONField(default=list)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(
        max_length=20,
        choices=Choices.BOOKING_STATUS_CHOICES,
        default=BookingStatus.PENDING,
        db_index=True,
    )
    booking_code = models.CharField(max_length=40, unique=True)
    expiry_time = models.DateTimeField(db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def seat_count(self):
        return len(self.seat_numbers)

    @property
    def is_expired(self):
        return self.status == BookingStatus.PENDING and timezone.now() > self.expiry_time

    def __str__(self):
        return f"Booking code: {self.booking_code} - {self.status} - {self.user.email}"

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Booking"
        verbose_name_plural = "Bookings"
        db_table = "bookings"
        indexes = [
            models.Index(fields=["user", "-created_at"], name="bookings_user_id_5c7e1d_idx"),
            models.Index(fields=["status", "expiry_time"], name="bookings_status_a9b4f0_idx"),
        ]
