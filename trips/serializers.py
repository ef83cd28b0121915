from rest_framework import serializers
from .models import Trip
from buses.serializers import BusSerializer
from routes.serializers import RouteSerializer
from utils.serializer_helpers import CamelCaseSerializerMixin
from utils.validators import TripValidators


class TripSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Read representation of a trip with its route and bus expanded.
    """

    route = RouteSerializer(read_only=True)
    bus = BusSerializer(read_only=True)

    class Meta:
        model = Trip
        fields = [
            "id",
            "route_id",
            "bus_id",
            "route",
            "bus",
            "departure_time",
            "arrival_time",
            "price",
            "available_seats",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RouteTripSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Trip nested under its route: the bus is expanded, the route is not repeated.
    """

    bus = BusSerializer(read_only=True)

    class Meta:
        model = Trip
        fields = [
            "id",
            "bus",
            "departure_time",
            "arrival_time",
            "price",
            "available_seats",
            "status",
        ]
        read_only_fields = fields


class RouteDetailSerializer(RouteSerializer):
    """
    Route with its upcoming trips, as prefetched into ``upcoming_trips``.
    """

    trips = RouteTripSerializer(many=True, read_only=True, source="upcoming_trips")

    class Meta(RouteSerializer.Meta):
        fields = RouteSerializer.Meta.fields + ["trips"]


class TripCreateSerializer(CamelCaseSerializerMixin, serializers.Serializer):
    """
    Validates trip scheduling input from administrators.
    The seat count is not accepted: it is taken from the bus capacity.
    """

    route_id = serializers.IntegerField()
    bus_id = serializers.IntegerField()
    departure_time = serializers.DateTimeField()
    arrival_time = serializers.DateTimeField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)

    def validate_price(self, value):
        return TripValidators.validate_price(value)

    def validate(self, data):
        TripValidators.validate_schedule(data["departure_time"], data["arrival_time"])
        data["route"] = TripValidators.validate_route_exists(data.pop("route_id"))
        data["bus"] = TripValidators.validate_bus_exists(data.pop("bus_id"))
        return data

    def create(self, validated_data):
        bus = validated_data["bus"]
        return Trip.objects.create(available_seats=bus.capacity, **validated_data)


class TripStatusSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Status and schedule changes by administrators. Seats are never editable here.
    """

    class Meta:
        model = Trip
        fields = ["status", "departure_time", "arrival_time", "price"]

    def validate_price(self, value):
        return TripValidators.validate_price(value)

    def validate(self, data):
        departure = data.get("departure_time", self.instance.departure_time)
        arrival = data.get("arrival_time", self.instance.arrival_time)
        TripValidators.validate_schedule(departure, arrival)
        return data
