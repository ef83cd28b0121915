import logging
from rest_framework import viewsets, status, mixins
from rest_framework.response import Response
from .models import Trip
from .serializers import TripSerializer, TripCreateSerializer, TripStatusSerializer
from utils.permission_helpers import PublicReadAdminWriteMixin
from utils.serializer_helpers import envelope

logger = logging.getLogger("trips")


class TripViewSet(
    PublicReadAdminWriteMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Trip catalog.

    Anyone can browse upcoming departures; administrators schedule trips
    and change their status. Trips are never deleted through the API.
    """

    queryset = Trip.objects.select_related("route", "bus")
    serializer_class = TripSerializer

    def get_serializer_class(self):
        if self.action == "create":
            return TripCreateSerializer
        if self.action in ("update", "partial_update"):
            return TripStatusSerializer
        return TripSerializer

    def list(self, request, *args, **kwargs):
        """
        Lists trips departing from now on, earliest first.
        """
        trips = Trip.upcoming.select_related("route", "bus").order_by("departure_time")
        return Response(envelope(TripSerializer(trips, many=True).data))

    def retrieve(self, request, *args, **kwargs):
        return Response(envelope(TripSerializer(self.get_object()).data))

    def create(self, request, *args, **kwargs):
        """
        Schedules a trip. Its available seats start at the bus capacity.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        trip = serializer.save()
        logger.info(
            f"Trip scheduled: id={trip.id}, route={trip.route_id}, bus={trip.bus_id}, "
            f"departure={trip.departure_time.isoformat()}, seats={trip.available_seats} by {request.user.email}"
        )
        trip = self.get_queryset().get(pk=trip.pk)
        return Response(envelope(TripSerializer(trip).data), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        trip = self.get_object()
        serializer = self.get_serializer(trip, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(f"Trip updated: id={trip.id}, status={trip.status} by {request.user.email}")
        return Response(envelope(TripSerializer(trip).data))
