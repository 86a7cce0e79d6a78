from rest_framework.routers import DefaultRouter

from django.urls import include, path

from .views import TimesheetEntryViewSet

router = DefaultRouter()
router.register(r"entries", TimesheetEntryViewSet, basename="timesheet-entry")

urlpatterns = [
    path("", include(router.urls)),
]
