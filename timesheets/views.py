import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.logging_utils import public_emp_id
from users.permissions import HasEmployeeProfile

from .access import GLOBAL_PERMISSION, RequestAccess
from .collaborators import get_employee_directory
from .filters import TimesheetEntryFilter
from .models import TimesheetEntry
from .serializers import TimesheetEntrySerializer, TimesheetSubmitSerializer
from .services import approve_timesheet, reject_timesheet, submit_timesheet

logger = logging.getLogger(__name__)


class TimesheetEntryViewSet(
    mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet
):
    """
    Timesheet ledger endpoints

    Entries are created and changed only through submit, approve and reject;
    there is no direct update or delete.
    """

    queryset = TimesheetEntry.objects.select_related("employee")
    serializer_class = TimesheetEntrySerializer
    permission_classes = [IsAuthenticated, HasEmployeeProfile]
    filter_backends = [DjangoFilterBackend]
    filterset_class = TimesheetEntryFilter

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.access = RequestAccess(request)

    def get_queryset(self):
        """Company-scoped; callers holding only read_own see their own entries"""
        access = self.access
        queryset = super().get_queryset()
        if not access.can(GLOBAL_PERMISSION):
            queryset = queryset.for_company(access.caller.company_id)

        if access.can("timesheets.read"):
            return queryset
        if access.can("timesheets.read_own"):
            return queryset.filter(employee_id=access.caller.employee_id)

        access.require("timesheets.read", "timesheets.read_own")
        return queryset.none()

    def create(self, request, *args, **kwargs):
        """Submit (or resubmit) one work day for an employee"""
        access = self.access
        access.require("timesheets.create")

        serializer = TimesheetSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        employee_id = data.get("employee_id") or access.caller.employee_id
        if not access.is_self(employee_id):
            access.require("timesheets.update")
        access.require_company(get_employee_directory().get_company_id(employee_id))

        entry = submit_timesheet(
            employee_id,
            data["date"],
            data["clock_in"],
            clock_out=data.get("clock_out"),
            break_minutes=data["break_minutes"],
            assignment_id=data.get("assignment_id"),
        )
        return Response(
            TimesheetEntrySerializer(entry).data, status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        """PENDING -> APPROVED; accrues the labour cost to the project"""
        self.access.require("timesheets.approve")
        entry = self.get_object()

        entry = approve_timesheet(entry.pk)
        logger.info(
            "Timesheet approved via API",
            extra={
                "entry_id": entry.pk,
                "employee_tag": public_emp_id(entry.employee_id),
                "actor_tag": public_emp_id(self.access.caller.employee_id),
            },
        )
        return Response(TimesheetEntrySerializer(entry).data)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        """PENDING -> REJECTED"""
        self.access.require("timesheets.approve")
        entry = self.get_object()

        entry = reject_timesheet(entry.pk)
        logger.info(
            "Timesheet rejected via API",
            extra={
                "entry_id": entry.pk,
                "employee_tag": public_emp_id(entry.employee_id),
                "actor_tag": public_emp_id(self.access.caller.employee_id),
            },
        )
        return Response(TimesheetEntrySerializer(entry).data)
