# core/middleware.py
import json
import logging
import time

from django.utils.deprecation import MiddlewareMixin

from core.logging_utils import get_client_ip, hash_user_id

logger = logging.getLogger(__name__)


def _user_hash(request):
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return hash_user_id(user.id)
    return "anonymous"


class APIResponseMiddleware(MiddlewareMixin):
    """
    Stamp API responses with processing time
    """

    def process_request(self, request):
        request._start_time = time.monotonic()
        return None

    def process_response(self, request, response):
        if request.path.startswith("/api/") and hasattr(request, "_start_time"):
            elapsed_ms = round((time.monotonic() - request._start_time) * 1000, 2)
            response["X-Processing-Time-Ms"] = str(elapsed_ms)
        return response


class APILoggingMiddleware(MiddlewareMixin):
    """
    Middleware for API request/response logging without PII
    """

    def process_request(self, request):
        if request.path.startswith("/api/"):
            log_data = {
                "method": request.method,
                "path": request.path,
                "user_hash": _user_hash(request),
                "ip": get_client_ip(request),
            }
            if request.GET:
                log_data["query_params"] = sorted(request.GET.keys())

            logger.info(f"API Request: {json.dumps(log_data)}")

        return None

    def process_response(self, request, response):
        """
        Log API responses with error status codes
        """
        if request.path.startswith("/api/") and response.status_code >= 400:
            log_data = {
                "method": request.method,
                "path": request.path,
                "status_code": response.status_code,
                "user_hash": _user_hash(request),
                "ip": get_client_ip(request),
            }

            if response.status_code >= 500:
                logger.error(f"API Server Error: {json.dumps(log_data)}")
            else:
                logger.warning(f"API Client Error: {json.dumps(log_data)}")

        return response
