from django.core.validators import MinValueValidator
from django.db import models


class Route(models.Model):
    """
    A city pair served by the bus network.
    Trips are scheduled departures on a route.
    """

    origin_city = models.CharField(max_length=100, db_index=True)
    destination_city = models.CharField(max_length=100, db_index=True)
    distance = models.PositiveIntegerField(help_text="Distance in kilometres")
    estimated_duration = models.PositiveIntegerField(help_text="Estimated duration in minutes")
    base_price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "routes"
        ordering = ["origin_city", "destination_city"]
        constraints = [
            models.UniqueConstraint(
                fields=["origin_city", "destination_city"],
                name="unique_route_city_pair",
            )
        ]

    def __str__(self):
        return f"{self.origin_city} to {self.destination_city} ({self.distance} km)"
