from django.contrib import admin
from .models import Trip


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = ["id", "route", "bus", "departure_time", "arrival_time", "price", "available_seats", "status"]
    list_filter = ["status", "departure_time"]
    search_fields = ["route__origin_city", "route__destination_city", "bus__plate_number"]
    readonly_fields = ["created_at", "updated_at"]
    ordering = ["departure_time"]

    def get_readonly_fields(self, request, obj=None):
        # Seats move only through bookings once the trip exists
        if obj is not None:
            return self.readonly_fields + ["available_seats"]
        return self.readonly_fields
