from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from users.models import Employee


class Project(models.Model):
    """Client project whose actual cost accrues from approved timesheets"""

    STATUS_CHOICES = [
        ("PLANNING", "Planning"),
        ("IN_PROGRESS", "In Progress"),
        ("ON_HOLD", "On Hold"),
        ("COMPLETED", "Completed"),
        ("CANCELLED", "Cancelled"),
    ]

    company_id = models.CharField(max_length=64, db_index=True)
    client_name = models.CharField(max_length=200, blank=True)
    name = models.CharField(max_length=200)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="PLANNING")
    estimated_cost = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    actual_cost = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Accrued labour cost of approved timesheets",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class ProjectAssignment(models.Model):
    """An employee's assignment to a project; timesheets link to it"""

    project = models.ForeignKey(
        Project, on_delete=models.PROTECT, related_name="assignments"
    )
    employee = models.ForeignKey(
        Employee, on_delete=models.CASCADE, related_name="project_assignments"
    )
    role = models.CharField(max_length=100, blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["project", "employee"], name="unique_project_employee"
            ),
        ]

    def __str__(self):
        return f"{self.employee} @ {self.project}"
