"""
Collaborators the timesheet engine talks to: access control, the employee
directory and the project store.

Default implementations read the local Django models. Each one can be
replaced through ``settings.TIMESHEET_COLLABORATORS`` with a dotted path.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import FrozenSet, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils.module_loading import import_string

from core.exceptions import DependencyError, NotFoundError, PermissionError
from core.logging_utils import err_tag, public_emp_id
from projects.models import Project, ProjectAssignment
from users.models import Employee
from users.permissions import permission_matches, permissions_for_role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    """Authenticated principal as the timesheet engine sees it"""

    employee_id: Optional[int]
    company_id: Optional[str]
    permissions: FrozenSet[str] = field(default_factory=frozenset)


class DjangoAccessControl:
    """Maps Django users to employees and employee roles to permissions"""

    def verify_caller(self, request) -> Caller:
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            raise PermissionError("Authentication required", code="AUTHENTICATION_REQUIRED")

        try:
            employee = user.employees.filter(is_active=True).first()
        except DatabaseError as exc:
            logger.error("Caller lookup failed", extra={"err": err_tag(exc)})
            raise DependencyError("Identity store unavailable") from exc

        if employee is None:
            raise PermissionError("An active employee profile is required")

        return Caller(
            employee_id=employee.pk,
            company_id=employee.company_id,
            permissions=permissions_for_role(employee.role),
        )

    def has_permission(self, caller: Caller, action: str) -> bool:
        return permission_matches(caller.permissions, action)


class DjangoEmployeeDirectory:
    def _get(self, employee_id) -> Employee:
        try:
            return Employee.objects.get(pk=employee_id)
        except (Employee.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(
                "Employee not found", details={"employee_id": employee_id}
            )
        except DatabaseError as exc:
            logger.error(
                "Employee lookup failed",
                extra={"employee_tag": public_emp_id(employee_id), "err": err_tag(exc)},
            )
            raise DependencyError("Employee directory unavailable") from exc

    def get_hourly_rate(self, employee_id) -> Decimal:
        employee = self._get(employee_id)
        if employee.hourly_rate is None:
            raise DependencyError(
                "Employee has no hourly rate on record",
                details={"employee_id": employee_id},
            )
        return employee.hourly_rate

    def get_company_id(self, employee_id) -> str:
        return self._get(employee_id).company_id


class DjangoProjectStore:
    def get_project_for_assignment(self, assignment_id):
        try:
            return (
                ProjectAssignment.objects.values_list("project_id", flat=True).get(
                    pk=assignment_id
                )
            )
        except ProjectAssignment.DoesNotExist:
            raise NotFoundError(
                "Project assignment not found",
                details={"assignment_id": assignment_id},
            )
        except DatabaseError as exc:
            logger.error("Assignment lookup failed", extra={"err": err_tag(exc)})
            raise DependencyError("Project store unavailable") from exc

    def add_actual_cost(self, project_id, amount: Decimal) -> None:
        """Atomically add ``amount`` to the project's actual cost"""
        try:
            with transaction.atomic():
                updated = Project.objects.filter(pk=project_id).update(
                    actual_cost=F("actual_cost") + amount
                )
        except DatabaseError as exc:
            logger.error(
                "Project cost update failed",
                extra={"project_id": project_id, "err": err_tag(exc)},
            )
            raise DependencyError("Project store unavailable") from exc

        if not updated:
            raise DependencyError(
                "Project not found in project store",
                details={"project_id": project_id},
            )


def _load(name):
    path = getattr(settings, "TIMESHEET_COLLABORATORS", {}).get(name)
    if not path:
        raise DependencyError(f"No {name} collaborator configured")
    return import_string(path)()


def get_access_control():
    return _load("access_control")


def get_employee_directory():
    return _load("employee_directory")


def get_project_store():
    return _load("project_store")
