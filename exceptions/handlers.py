from rest_framework.exceptions import APIException
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from django.core.exceptions import (
    ObjectDoesNotExist,
    ValidationError as DjangoValidationError,
)
from rest_framework.exceptions import ValidationError as DRFValidationError
from utils.constants import (
    GeneralMessage,
)
import logging

logger = logging.getLogger("request")


def _message_from_detail(detail, default):
    """
    Flattens a DRF error detail into the single message string of the envelope.
    """
    if isinstance(detail, str):
        return str(detail)
    if isinstance(detail, list) and detail:
        return _message_from_detail(detail[0], default)
    if isinstance(detail, dict) and detail:
        if "detail" in detail:
            return _message_from_detail(detail["detail"], default)
        # First field error, e.g. {"trip_id": ["This field is required."]}
        return _message_from_detail(next(iter(detail.values())), default)
    return default


def custom_exception_handler(exc, context):
    # Handle Django's DoesNotExist as 404
    if isinstance(exc, ObjectDoesNotExist):
        return Response(
            {"success": False, "message": GeneralMessage.NOT_FOUND},
            status=status.HTTP_404_NOT_FOUND
        )

    if isinstance(exc, DjangoValidationError):
        errors = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        return Response(
            {
                "success": False,
                "message": _message_from_detail(errors, GeneralMessage.INVALID_INPUT),
                "errors": errors,
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    # Field-level detail is kept under "errors" for the client forms
    if isinstance(exc, DRFValidationError):
        return Response(
            {
                "success": False,
                "message": _message_from_detail(exc.detail, GeneralMessage.INVALID_INPUT),
                "errors": exc.detail,
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    # Handle all APIException (including the custom ones below and simplejwt's)
    if isinstance(exc, APIException):
        response = exception_handler(exc, context)
        message = _message_from_detail(exc.detail, str(exc.default_detail))
        if response.status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {message}")
        response.data = {"success": False, "message": message}
        return response

    # Fallback to DRF's default handler (Http404, Django PermissionDenied)
    response = exception_handler(exc, context)
    if response is not None:
        response.data = {
            "success": False,
            "message": _message_from_detail(response.data, GeneralMessage.INVALID_INPUT),
        }
        return response

    # Catch-all for any other exception
    view = context.get("view")
    logger.exception(
        f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
    )
    return Response(
        {
            "success": False,
            "message": GeneralMessage.SERVER_ERROR,
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

class AlreadyExistsException(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "already_exists"


class NotFoundException(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = GeneralMessage.NOT_FOUND
    default_code = "not_found"


class PermissionDeniedException(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = GeneralMessage.PERMISSION_DENIED
    default_code = "permission_denied"


class UnauthorizedAccessException(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication credentials were not provided."
    default_code = "unauthorized_access"


class InvalidInputException(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = GeneralMessage.INVALID_INPUT
    default_code = "invalid_input"


class CapacityExceededException(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Not enough available seats"
    default_code = "capacity_exceeded"


class UpstreamFailureException(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = GeneralMessage.UPSTREAM_FAILURE
    default_code = "upstream_failure"
