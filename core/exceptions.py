# core/exceptions.py
import logging
import uuid

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.utils import timezone

logger = logging.getLogger(__name__)


class APIError(Exception):
    """
    Base class for business logic errors.

    Every error carries a machine readable ``code`` (its kind), a message, an
    HTTP status and optional details, so callers always receive a structured
    result instead of a bare exception string.
    """

    default_code = "API_ERROR"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, code=None, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status
        self.details = details

    @property
    def kind(self):
        return self.code

    def as_dict(self):
        return {"kind": self.code, "message": self.message, "details": self.details}


class ValidationError(APIError):
    """Malformed input rejected before any write (e.g. clock-out before clock-in)"""

    default_code = "VALIDATION_ERROR"
    default_status = status.HTTP_400_BAD_REQUEST


class ConflictError(APIError):
    """Write refused because of the current state of the record"""

    default_code = "CONFLICT"
    default_status = status.HTTP_409_CONFLICT


class DependencyError(APIError):
    """An external store could not be reached or refused the operation"""

    default_code = "DEPENDENCY_ERROR"
    default_status = status.HTTP_503_SERVICE_UNAVAILABLE


class NotFoundError(APIError):
    default_code = "RESOURCE_NOT_FOUND"
    default_status = status.HTTP_404_NOT_FOUND


class PermissionError(APIError):
    """
    Specific exception for permission-related errors
    """

    default_code = "PERMISSION_ERROR"
    default_status = status.HTTP_403_FORBIDDEN


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns consistent error format
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    # Generate unique error ID for tracking
    error_id = str(uuid.uuid4())[:8]

    request = context.get("request")
    path = getattr(request, "path", "unknown")
    method = getattr(request, "method", "unknown")

    if response is not None:
        # Standard DRF exceptions
        response.data = {
            "error": True,
            "code": get_error_code(exc),
            "message": get_error_message(response.data),
            "details": format_error_details(response.data),
            "error_id": error_id,
            "timestamp": timezone.now().isoformat(),
        }
        logger.warning(
            f"API Error [{error_id}]: {exc.__class__.__name__} - "
            f"{method} {path} - Status: {response.status_code}"
        )
        return response

    if isinstance(exc, APIError):
        response = Response(
            {
                "error": True,
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
                "error_id": error_id,
                "timestamp": timezone.now().isoformat(),
            },
            status=exc.status_code,
        )
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"Business Error [{error_id}]: {exc.code} - {method} {path} - "
            f"Status: {exc.status_code}"
        )
        return response

    if isinstance(exc, Http404):
        response = Response(
            {
                "error": True,
                "code": "RESOURCE_NOT_FOUND",
                "message": "The requested resource was not found.",
                "details": None,
                "error_id": error_id,
                "timestamp": timezone.now().isoformat(),
            },
            status=status.HTTP_404_NOT_FOUND,
        )
    elif isinstance(exc, DjangoValidationError):
        response = Response(
            {
                "error": True,
                "code": "VALIDATION_ERROR",
                "message": "Validation failed.",
                "details": (
                    exc.message_dict if hasattr(exc, "message_dict") else exc.messages
                ),
                "error_id": error_id,
                "timestamp": timezone.now().isoformat(),
            },
            status=status.HTTP_400_BAD_REQUEST,
        )
    else:
        response = Response(
            {
                "error": True,
                "code": "INTERNAL_SERVER_ERROR",
                "message": "An internal server error occurred.",
                "details": None,
                "error_id": error_id,
                "timestamp": timezone.now().isoformat(),
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    logger.error(
        f"Unhandled Exception [{error_id}]: {exc.__class__.__name__} - {method} {path}",
        exc_info=True,
    )
    return response


def get_error_code(exc):
    """
    Generate appropriate error code based on exception type
    """
    error_codes = {
        "ValidationError": "VALIDATION_ERROR",
        "PermissionDenied": "PERMISSION_DENIED",
        "NotAuthenticated": "AUTHENTICATION_REQUIRED",
        "AuthenticationFailed": "AUTHENTICATION_FAILED",
        "NotFound": "RESOURCE_NOT_FOUND",
        "Http404": "RESOURCE_NOT_FOUND",
        "MethodNotAllowed": "METHOD_NOT_ALLOWED",
        "ParseError": "PARSE_ERROR",
        "UnsupportedMediaType": "UNSUPPORTED_MEDIA_TYPE",
        "Throttled": "RATE_LIMIT_EXCEEDED",
    }
    return error_codes.get(exc.__class__.__name__, "UNKNOWN_ERROR")


def get_error_message(data):
    """
    Extract human-readable error message from DRF error data
    """
    if isinstance(data, dict):
        if "detail" in data:
            return str(data["detail"])
        if "non_field_errors" in data:
            return (
                str(data["non_field_errors"][0])
                if data["non_field_errors"]
                else "Validation error"
            )
        for key, value in data.items():
            if isinstance(value, list) and value:
                return str(value[0])
            if isinstance(value, str):
                return value
        return "Validation error"
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def format_error_details(data):
    """
    Format error details for consistent structure
    """
    if isinstance(data, dict):
        # 'detail' already travels as the message
        details = {k: v for k, v in data.items() if k != "detail"}
        return details if details else None
    if isinstance(data, list):
        return data
    return None
