import logging
from rest_framework import viewsets, status, mixins
from rest_framework.response import Response
from .models import Bus
from .serializers import BusSerializer
from utils.permission_helpers import AdminOnlyPermissionMixin
from utils.serializer_helpers import envelope

logger = logging.getLogger("buses")


class BusViewSet(
    AdminOnlyPermissionMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Fleet records, visible to administrators only.
    """

    queryset = Bus.objects.all().order_by("plate_number")
    serializer_class = BusSerializer

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response(envelope(serializer.data))

    def retrieve(self, request, *args, **kwargs):
        return Response(envelope(self.get_serializer(self.get_object()).data))

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        bus = serializer.save()
        logger.info(f"Bus created: {bus.plate_number} (capacity {bus.capacity}) by {request.user.email}")
        return Response(envelope(serializer.data), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        bus = serializer.save()
        logger.info(f"Bus updated: {bus.plate_number} by {request.user.email}")
        return Response(envelope(serializer.data))
