from django.contrib import admin
from .models import Route


@admin.register(Route)
class RouteAdmin(admin.ModelAdmin):
    list_display = ["origin_city", "destination_city", "distance", "estimated_duration", "base_price", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["origin_city", "destination_city"]
    ordering = ["origin_city", "destination_city"]
