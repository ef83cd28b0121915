from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from utils.constants import Choices, TripStatus


class UpcomingTripManager(models.Manager):
    """Manager that returns only trips departing in the future"""

    def get_queryset(self):
        return super().get_queryset().filter(departure_time__gte=timezone.now())


class Trip(models.Model):
    """
    A scheduled, priced departure of one bus on one route.

    available_seats is the remaining unreserved capacity. It starts at the
    bus capacity, is decremented by booking creation and incremented when an
    unpaid booking expires. It never goes below zero.
    """

    route = models.ForeignKey(
        "routes.Route", on_delete=models.PROTECT, related_name="trips"
    )
    bus = models.ForeignKey("buses.Bus", on_delete=models.PROTECT, related_name="trips")
    departure_time = models.DateTimeField(db_index=True)
    arrival_time = models.DateTimeField()
    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    available_seats = models.PositiveIntegerField()
    status = models.CharField(
        max_length=20,
        choices=Choices.TRIP_STATUS_CHOICES,
        default=TripStatus.SCHEDULED,
        db_index=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = models.Manager()
    upcoming = UpcomingTripManager()

    class Meta:
        db_table = "trips"
        ordering = ["departure_time"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(available_seats__gte=0),
                name="trip_available_seats_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["route", "departure_time"], name="trips_route_i_3f1c2a_idx"),
            models.Index(fields=["status", "departure_time"], name="trips_status_8d2e4b_idx"),
        ]

    def __str__(self):
        return f"{self.route} departing {self.departure_time:%Y-%m-%d %H:%M} ({self.available_seats} seats left)"
