from rest_framework import serializers
from .models import Route
from utils.serializer_helpers import CamelCaseSerializerMixin
from utils.validators import RouteValidators


class RouteSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Serializes route data for API representation and validation.
    Duplicate city pairs are rejected with a conflict, not a field error.
    """

    class Meta:
        model = Route
        fields = [
            "id",
            "origin_city",
            "destination_city",
            "distance",
            "estimated_duration",
            "base_price",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        validators = []

    def validate_distance(self, value):
        return RouteValidators.validate_positive_integer(value, "distance")

    def validate_estimated_duration(self, value):
        return RouteValidators.validate_positive_integer(value, "estimatedDuration")

    def validate(self, data):
        origin = data.get("origin_city", getattr(self.instance, "origin_city", ""))
        destination = data.get("destination_city", getattr(self.instance, "destination_city", ""))
        origin, destination = RouteValidators.validate_city_pair(origin, destination)
        RouteValidators.validate_route_unique(
            origin, destination, exclude_pk=getattr(self.instance, "pk", None)
        )
        if "origin_city" in data:
            data["origin_city"] = origin
        if "destination_city" in data:
            data["destination_city"] = destination
        return data


class PopularRouteSerializer(RouteSerializer):
    """
    Route with its booking and trip counts, for the popularity ranking.
    """

    total_bookings = serializers.IntegerField(read_only=True)
    total_trips = serializers.IntegerField(read_only=True)

    class Meta(RouteSerializer.Meta):
        fields = RouteSerializer.Meta.fields + ["total_bookings", "total_trips"]
