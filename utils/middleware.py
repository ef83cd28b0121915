import logging
import uuid
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger("request")


class RequestResponseLoggingMiddleware(MiddlewareMixin):
    """
    Middleware to log incoming requests and outgoing responses.
    Each request is tagged with a trace id echoed in the X-Trace-Id header.
    Bodies are never logged, so card and token data stays out of the logs.
    """

    def process_request(self, request):
        """Log the basic info of the incoming request."""
        trace_id = str(uuid.uuid4())
        request.trace_id = trace_id
        logger.info(
            f"Trace ID: {trace_id} | Request: {request.method} {request.path}"
        )
        return None

    def process_response(self, request, response):
        """Log the response status for the same request."""
        trace_id = getattr(request, "trace_id", "N/A")
        # JWT users are resolved inside DRF, after this middleware ran
        user = getattr(request, "user", None)
        user_info = (
            f"{user.email} (ID: {user.id})"
            if user is not None and user.is_authenticated
            else "anonymous"
        )

        logger.info(
            f"Trace ID: {trace_id} | Response: {response.status_code} | User: {user_info}"
        )
        response["X-Trace-Id"] = trace_id
        return response
