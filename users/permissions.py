# users/permissions.py
from rest_framework.permissions import BasePermission

# Role -> granted permission patterns. "*" grants everything, "timesheets.*"
# grants every timesheets action.
ROLE_PERMISSIONS = {
    "super_admin": frozenset({"*"}),
    "admin": frozenset(
        {
            "employees.*",
            "timesheets.*",
            "payroll.*",
            "reports.*",
            "clients.*",
            "projects.*",
        }
    ),
    "hr_manager": frozenset(
        {
            "employees.read",
            "employees.create",
            "employees.update",
            "timesheets.*",
            "payroll.*",
            "leaves.*",
        }
    ),
    "project_manager": frozenset(
        {"projects.*", "timesheets.read", "timesheets.approve", "reports.project"}
    ),
    "employee": frozenset(
        {
            "timesheets.create",
            "timesheets.read_own",
            "leaves.create",
            "leaves.read_own",
            "profile.read",
            "profile.update",
        }
    ),
}


def permissions_for_role(role):
    return ROLE_PERMISSIONS.get(role, frozenset())


def permission_matches(granted, action):
    """True if one granted pattern covers ``action``"""
    for pattern in granted:
        if pattern == "*" or pattern == action:
            return True
        if pattern.endswith(".*") and action.startswith(pattern[:-1]):
            return True
    return False


class HasEmployeeProfile(BasePermission):
    """
    Caller must be authenticated and linked to an active employee record
    """

    message = "An active employee profile is required"

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and user.employees.filter(is_active=True).exists()
        )
