from django.core.validators import MinValueValidator
from django.db import models


class Bus(models.Model):
    """
    A vehicle of the fleet.
    Its capacity seeds the available seat count of every trip it runs.
    """

    plate_number = models.CharField(max_length=20, unique=True, db_index=True)
    model = models.CharField(max_length=100)
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    amenities = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "buses"
        verbose_name = "Bus"
        verbose_name_plural = "Buses"
        ordering = ["plate_number"]

    def save(self, *args, **kwargs):
        self.plate_number = self.plate_number.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        status = " (Inactive)" if not self.is_active else ""
        return f"{self.model} ({self.plate_number}){status}"
