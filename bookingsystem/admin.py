from django.contrib import admin
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ["booking_code", "user", "trip", "seat_numbers", "total_amount", "status", "expiry_time", "created_at"]
    list_filter = ["status", "created_at"]
    search_fields = ["booking_code", "user__email"]
    readonly_fields = ["booking_code", "seat_numbers", "total_amount", "created_at", "updated_at"]
    ordering = ["-created_at"]
