# users/models.py
from django.contrib.auth.models import User
from django.db import models


class EmployeeQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def for_company(self, company_id):
        return self.filter(company_id=company_id)


class Employee(models.Model):
    """
    Employee reference data the ledger reads: company, role and hourly rate.

    Master data (personal details, contracts, leave) lives in the HR records
    service; only what the timesheet engine consumes is mirrored here.
    """

    objects = EmployeeQuerySet.as_manager()

    # Link to Django user (null for employees without portal access)
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="employees",
        null=True,
        blank=True,
        help_text="Django user account used to authenticate API calls",
    )

    company_id = models.CharField(
        max_length=64, db_index=True, help_text="Owning company (tenant) identifier"
    )
    employee_code = models.CharField(max_length=32, blank=True)
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)

    ROLE_CHOICES = [
        ("super_admin", "Super Admin"),
        ("admin", "Administrator"),
        ("hr_manager", "HR Manager"),
        ("project_manager", "Project Manager"),
        ("employee", "Employee"),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="employee")

    hourly_rate = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Base hourly rate used for timesheet pay",
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["last_name", "first_name"]
        verbose_name = "Employee"
        verbose_name_plural = "Employees"
        indexes = [
            models.Index(fields=["company_id", "is_active"], name="emp_company_active_idx"),
        ]

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return f"{self.get_full_name()} ({self.employee_code or self.pk})"
