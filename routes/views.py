from django.db.models import Count, Prefetch
from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from .models import Route
from .serializers import PopularRouteSerializer, RouteSerializer
from trips.models import Trip
from trips.serializers import RouteDetailSerializer
from utils.permission_helpers import PublicReadAdminWriteMixin
from utils.queryset_helpers import FilterableQuerysetMixin
from utils.validators import RouteValidators
from utils.constants import POPULAR_ROUTES_LIMIT, RouteMessage, TripStatus
from utils.serializer_helpers import envelope
from exceptions.handlers import InvalidInputException
import logging

logger = logging.getLogger("routes")


class RouteViewSet(PublicReadAdminWriteMixin, FilterableQuerysetMixin, viewsets.ModelViewSet):
    """
    ViewSet for managing routes.

    Browsing is public. Creating, editing and deleting routes is limited to
    administrators. The list hides inactive routes and can be narrowed with
    the ``origin`` and ``destination`` query parameters.
    """

    queryset = Route.objects.all()
    serializer_class = RouteSerializer
    filter_fields = {"origin": "origin_city", "destination": "destination_city"}

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action == "list":
            qs = qs.filter(is_active=True)
        if self.action == "retrieve":
            upcoming = Trip.upcoming.select_related("bus").order_by("departure_time")
            qs = qs.prefetch_related(Prefetch("trips", queryset=upcoming, to_attr="upcoming_trips"))
        return qs

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response(envelope(serializer.data))

    def retrieve(self, request, *args, **kwargs):
        """
        Returns a route together with its upcoming trips.
        """
        return Response(envelope(RouteDetailSerializer(self.get_object()).data))

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        logger.info(f"Route created: {serializer.instance} by {request.user.email}")
        return Response(envelope(serializer.data), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        logger.info(f"Route updated: {serializer.instance} by {request.user.email}")
        return Response(envelope(serializer.data))

    def destroy(self, request, *args, **kwargs):
        """
        Deletes a route that has no upcoming trips.
        """
        instance = self.get_object()
        RouteValidators.validate_route_for_deletion(instance)
        logger.info(f"Route removed: {instance} by {request.user.email}")
        instance.delete()
        return Response(envelope(message=RouteMessage.ROUTE_DELETED))

    @action(detail=False, methods=["get"], url_path="popular")
    def popular(self, request):
        """
        Ranks routes by how many bookings their trips have received.

        Returns the top POPULAR_ROUTES_LIMIT routes, each with totalBookings
        and totalTrips. Bookings of every status are counted.
        """
        routes = Route.objects.annotate(
            total_bookings=Count("trips__bookings", distinct=True),
            total_trips=Count("trips", distinct=True),
        ).order_by("-total_bookings", "id")[:POPULAR_ROUTES_LIMIT]

        return Response(envelope(PopularRouteSerializer(routes, many=True).data))

    @action(detail=False, methods=["get"], url_path="search")
    def search(self, request):
        """
        Finds active routes between two cities with bookable trips.

        Query parameters:
            origin, destination: required, case-insensitive partial match
            date: optional YYYY-MM-DD; only trips departing that day
            passengers: optional, trips must have at least this many seats
        """
        origin = request.query_params.get("origin", "").strip()
        destination = request.query_params.get("destination", "").strip()
        if not origin or not destination:
            raise InvalidInputException(RouteMessage.ORIGIN_AND_DESTINATION_REQUIRED)

        window_start, window_end = RouteValidators.validate_search_date(
            request.query_params.get("date")
        )
        passengers = RouteValidators.validate_passengers(
            request.query_params.get("passengers", "1")
        )

        trips = Trip.objects.filter(
            status=TripStatus.SCHEDULED,
            available_seats__gte=passengers,
            departure_time__gte=window_start,
        )
        if window_end is not None:
            trips = trips.filter(departure_time__lt=window_end)
        trips = trips.select_related("bus").order_by("departure_time")

        routes = (
            Route.objects.filter(
                origin_city__icontains=origin,
                destination_city__icontains=destination,
                is_active=True,
            )
            .prefetch_related(Prefetch("trips", queryset=trips, to_attr="upcoming_trips"))
        )
        available = [route for route in routes if route.upcoming_trips]

        logger.info(
            f"Route search: origin={origin}, destination={destination}, "
            f"date={request.query_params.get('date')}, passengers={passengers}, found={len(available)}"
        )
        return Response(
            {
                **envelope(RouteDetailSerializer(available, many=True).data),
                "searchParams": {
                    "origin": origin,
                    "destination": destination,
                    "date": request.query_params.get("date") or timezone.localdate().isoformat(),
                    "passengers": passengers,
                },
            }
        )
