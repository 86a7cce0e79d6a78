from decimal import Decimal

from django.db import models

from projects.models import ProjectAssignment
from users.models import Employee

from .enums import AccrualStatus, TimesheetStatus
from .tiers import quantize_money


class TimesheetEntryQuerySet(models.QuerySet):
    def approved(self):
        return self.filter(status=TimesheetStatus.APPROVED.value)

    def for_company(self, company_id):
        return self.filter(company_id=company_id)

    def in_period(self, start_date, end_date):
        """Inclusive on both ends"""
        return self.filter(date__gte=start_date, date__lte=end_date)


class TimesheetEntry(models.Model):
    """
    One employee's classified work day.

    There is at most one entry per (employee, date); resubmitting the day
    overwrites the hour fields while the entry is not yet approved. Hours
    and pay are derived from the clock events and never edited directly.
    """

    objects = TimesheetEntryQuerySet.as_manager()

    employee = models.ForeignKey(
        Employee, on_delete=models.PROTECT, related_name="timesheet_entries"
    )
    company_id = models.CharField(
        max_length=64, db_index=True, help_text="Employee's company at submission"
    )
    date = models.DateField()
    clock_in = models.DateTimeField()
    clock_out = models.DateTimeField()
    break_minutes = models.PositiveIntegerField(default=0)

    normal_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0"))
    evening_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0"))
    night_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0"))
    total_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0"))
    evening_pay = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    night_pay = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    overtime_pay = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        help_text="evening_pay + night_pay",
    )
    hourly_rate = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        help_text="Rate in force when the entry was last submitted",
    )

    status = models.CharField(
        max_length=10,
        choices=TimesheetStatus.choices(),
        default=TimesheetStatus.PENDING.value,
    )
    version = models.PositiveIntegerField(
        default=1, help_text="Incremented on every write; compare-and-swap token"
    )
    project_assignment = models.ForeignKey(
        ProjectAssignment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="timesheet_entries",
    )

    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-clock_in"]
        verbose_name = "Timesheet Entry"
        verbose_name_plural = "Timesheet Entries"
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "date"], name="unique_timesheet_employee_date"
            ),
        ]
        indexes = [
            models.Index(fields=["company_id", "date"], name="ts_company_date_idx"),
            models.Index(fields=["employee", "status", "date"], name="ts_emp_status_date_idx"),
        ]

    def __str__(self):
        return f"{self.employee} {self.date} [{self.status}]"

    @property
    def normal_pay(self) -> Decimal:
        return quantize_money(self.normal_hours * self.hourly_rate)

    @property
    def labor_cost(self) -> Decimal:
        """Amount an approval adds to the project's actual cost"""
        return self.normal_pay + self.overtime_pay


class CostAccrual(models.Model):
    """
    Pending project cost created by an approval.

    Written in the same transaction as the PENDING -> APPROVED transition, so
    an approval whose project update failed can be replayed later.
    """

    entry = models.OneToOneField(
        TimesheetEntry, on_delete=models.PROTECT, related_name="cost_accrual"
    )
    project_id = models.CharField(max_length=64)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(
        max_length=10,
        choices=AccrualStatus.choices(),
        default=AccrualStatus.PENDING.value,
        db_index=True,
    )
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.CharField(max_length=255, blank=True)
    applied_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"Accrual {self.amount} -> project {self.project_id} [{self.status}]"
