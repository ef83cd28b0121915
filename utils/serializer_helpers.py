import re

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_camel(name):
    """
    Converts a snake_case field name to camelCase.

    Args:
        name (str): Field name such as "seat_numbers"

    Returns:
        str: camelCase name such as "seatNumbers"
    """
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_snake(name):
    """
    Converts a camelCase field name to snake_case.

    Args:
        name (str): Field name such as "tripId"

    Returns:
        str: snake_case name such as "trip_id"
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()


class CamelCaseSerializerMixin:
    """
    Mixin exposing serializer fields in camelCase on the wire.

    The web client speaks camelCase (tripId, seatNumbers, totalAmount) while
    models and serializers keep snake_case names. Incoming keys are converted
    before validation and outgoing keys after representation. Nested
    serializers using this mixin convert their own keys.
    """

    def to_internal_value(self, data):
        if hasattr(data, "items"):
            data = {to_snake(key): value for key, value in data.items()}
        return super().to_internal_value(data)

    def to_representation(self, instance):
        representation = super().to_representation(instance)
        return {to_camel(key): value for key, value in representation.items()}


def envelope(data=None, message=None):
    """
    Builds the success envelope shared by every endpoint.

    Args:
        data: Serialized payload, omitted when None
        message (str, optional): Human readable message for the client

    Returns:
        dict: {"success": True, "data": ..., "message": ...}
    """
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body
