from django.contrib import admin
from django.urls import path, include
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.utils import timezone


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """Liveness check."""
    return Response(
        {
            "status": "OK",
            "message": "Bus Ticket API is running",
            "timestamp": timezone.now().isoformat(),
        }
    )


urlpatterns = [
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health"),
    path("", include("accounts.urls")),
    path("", include("routes.urls")),
    path("", include("buses.urls")),
    path("", include("trips.urls")),
    path("", include("bookingsystem.urls")),
    path("", include("payment.urls")),
]
