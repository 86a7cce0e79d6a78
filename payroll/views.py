from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from timesheets.access import RequestAccess
from timesheets.collaborators import get_employee_directory
from timesheets.services import get_payroll_summary
from users.permissions import HasEmployeeProfile

from .serializers import PayrollPeriodSummarySerializer, PayrollSummaryQuerySerializer


@api_view(["GET"])
@permission_classes([IsAuthenticated, HasEmployeeProfile])
def payroll_summary(request):
    """
    Payroll totals of one employee over an inclusive date range

    Query: start_date, end_date (YYYY-MM-DD), employee_id (defaults to the
    caller).
    """
    access = RequestAccess(request)

    query = PayrollSummaryQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    params = query.validated_data

    employee_id = params.get("employee_id") or access.caller.employee_id
    company_id = get_employee_directory().get_company_id(employee_id)
    access.require_read(employee_id, company_id, scope="payroll")

    summary = get_payroll_summary(
        employee_id, params["start_date"], params["end_date"]
    )
    return Response(PayrollPeriodSummarySerializer(summary).data)
