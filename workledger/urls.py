# workledger/urls.py
from rest_framework.decorators import (
    api_view,
    authentication_classes,
    permission_classes,
)
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from django.contrib import admin
from django.urls import include, path
from django.utils import timezone
from django.views.generic import RedirectView

from .health import health_check as detailed_health_check


@api_view(["GET"])
@permission_classes([AllowAny])
@authentication_classes([])
def health_check(request):
    """Public health check endpoint"""
    return Response(
        {
            "status": "online",
            "message": "API is connected successfully!",
            "version": "1.0",
            "timestamp": timezone.now().isoformat(),
        }
    )


@api_view(["GET"])
@permission_classes([AllowAny])
@authentication_classes([])
def api_root(request):
    """API root endpoint showing available endpoints"""
    return Response(
        {
            "message": "WorkLedger API",
            "version": "1.0",
            "api_versions": {"current": "v1", "supported": ["v1"], "deprecated": []},
            "endpoints": {
                "admin": request.build_absolute_uri("/admin/"),
                "current_api": request.build_absolute_uri("/api/v1/"),
                "v1_timesheets": request.build_absolute_uri(
                    "/api/v1/timesheets/entries/"
                ),
                "v1_payroll_summary": request.build_absolute_uri(
                    "/api/v1/payroll/summary/"
                ),
            },
        }
    )


urlpatterns = [
    path("", RedirectView.as_view(url="/api/", permanent=False)),
    path("admin/", admin.site.urls),
    # Health check endpoints (public)
    path("api/health/", health_check, name="health-check"),
    path("health/", detailed_health_check, name="detailed-health-check"),
    # API root
    path("api/", api_root, name="api-root"),
    path("api/v1/", api_root, name="api-v1-root"),
    path("api/v1/timesheets/", include("timesheets.urls")),
    path("api/v1/payroll/", include("payroll.urls")),
]
