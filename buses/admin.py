from django.contrib import admin
from .models import Bus


@admin.register(Bus)
class BusAdmin(admin.ModelAdmin):
    list_display = ["plate_number", "model", "capacity", "is_active", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["plate_number", "model"]
    ordering = ["plate_number"]
