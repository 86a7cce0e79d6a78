"""
Authorization checks shared by the timesheet and payroll endpoints.

Who may do what is decided by the access-control collaborator; these
helpers only turn its answers into PermissionError.
"""

import logging

from core.exceptions import PermissionError
from core.logging_utils import public_emp_id

from .collaborators import get_access_control

logger = logging.getLogger(__name__)

GLOBAL_PERMISSION = "*"


class RequestAccess:
    """Caller of one request plus the checks the views need"""

    def __init__(self, request, access_control=None):
        self.access_control = access_control or get_access_control()
        self.caller = self.access_control.verify_caller(request)

    def can(self, action) -> bool:
        return self.access_control.has_permission(self.caller, action)

    def require(self, *actions):
        """Pass if the caller holds any of ``actions``"""
        if any(self.can(action) for action in actions):
            return
        logger.warning(
            "Permission denied",
            extra={
                "employee_tag": public_emp_id(self.caller.employee_id),
                "actions": ",".join(actions),
            },
        )
        raise PermissionError(
            "You do not have permission to perform this action",
            details={"required": list(actions)},
        )

    def is_self(self, employee_id) -> bool:
        return str(self.caller.employee_id) == str(employee_id)

    def require_company(self, company_id):
        """Callers only reach employees of their own company"""
        if self.caller.company_id == company_id or self.can(GLOBAL_PERMISSION):
            return
        logger.warning(
            "Cross-company access denied",
            extra={"employee_tag": public_emp_id(self.caller.employee_id)},
        )
        raise PermissionError("Access denied to this company's records")

    def require_read(self, employee_id, company_id, scope):
        """
        Full ``<scope>.read`` inside the caller's company, or
        ``timesheets.read_own`` for the caller's own records
        """
        if self.is_self(employee_id) and self.can("timesheets.read_own"):
            return
        self.require(f"{scope}.read")
        self.require_company(company_id)
