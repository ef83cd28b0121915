from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ["id", "booking", "user", "amount", "currency", "status", "stripe_intent_id", "processed_at", "created_at"]
    list_filter = ["status", "currency", "created_at"]
    search_fields = ["stripe_intent_id", "stripe_payment_id", "booking__booking_code", "user__email"]
    readonly_fields = ["stripe_intent_id", "stripe_payment_id", "processed_at", "created_at", "updated_at"]
    ordering = ["-created_at"]
