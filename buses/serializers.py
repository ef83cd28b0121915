from rest_framework import serializers
from .models import Bus
from utils.serializer_helpers import CamelCaseSerializerMixin
from utils.validators import BusValidators


class BusSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Serializes fleet records.
    """

    amenities = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False
    )

    class Meta:
        model = Bus
        fields = [
            "id",
            "plate_number",
            "model",
            "capacity",
            "amenities",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {"plate_number": {"validators": []}}

    def validate_plate_number(self, value):
        return BusValidators.validate_plate_number_unique(
            value, exclude_pk=getattr(self.instance, "pk", None)
        )

    def validate_capacity(self, value):
        return BusValidators.validate_capacity(value)
