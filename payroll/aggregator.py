"""
Payroll period aggregation over approved timesheet entries
"""

import logging
from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from django.db import DatabaseError

from core.exceptions import DependencyError, ValidationError
from core.logging_utils import err_tag, public_emp_id
from timesheets.models import TimesheetEntry

from .cache import PayrollSummaryCache

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class PayrollPeriodSummary:
    """
    Totals of one employee's APPROVED entries over an inclusive date range.

    ``total_payable`` (normal pay + overtime pay) is the wage figure handed
    to statutory contribution calculations downstream.
    """

    employee_id: int
    period_start: date
    period_end: date
    entry_count: int = 0
    normal_hours: Decimal = ZERO
    evening_hours: Decimal = ZERO
    night_hours: Decimal = ZERO
    total_hours: Decimal = ZERO
    normal_pay: Decimal = ZERO
    evening_pay: Decimal = ZERO
    night_pay: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    total_payable: Decimal = ZERO

    def as_dict(self) -> dict:
        return asdict(self)


class PayrollPeriodAggregator:
    def __init__(self, cache=None):
        self.cache = cache or PayrollSummaryCache()

    def summarize(self, employee_id, start_date: date, end_date: date) -> PayrollPeriodSummary:
        """
        Sum APPROVED entries dated within [start_date, end_date].

        Each entry is priced with its own hourly-rate snapshot. No matching
        entries is a zero summary, not an error.
        """
        if start_date is None or end_date is None:
            raise ValidationError("Both start and end dates are required")
        if start_date > end_date:
            raise ValidationError(
                "Period start must not be after period end",
                details={
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                },
            )

        # Version is read before the query; an approval committed after this
        # point retires whatever this call writes to the cache
        version = self.cache.version(employee_id)
        cached = self.cache.get(employee_id, start_date, end_date, version)
        if cached is not None:
            return cached

        try:
            entries = list(
                TimesheetEntry.objects.approved()
                .filter(employee_id=employee_id)
                .in_period(start_date, end_date)
                .only(
                    "normal_hours",
                    "evening_hours",
                    "night_hours",
                    "total_hours",
                    "evening_pay",
                    "night_pay",
                    "overtime_pay",
                    "hourly_rate",
                )
            )
        except DatabaseError as exc:
            logger.error(
                "Payroll period query failed",
                extra={"employee_tag": public_emp_id(employee_id), "err": err_tag(exc)},
            )
            raise DependencyError("Timesheet store unavailable") from exc

        totals = {
            "normal_hours": ZERO,
            "evening_hours": ZERO,
            "night_hours": ZERO,
            "total_hours": ZERO,
            "normal_pay": ZERO,
            "evening_pay": ZERO,
            "night_pay": ZERO,
            "overtime_pay": ZERO,
        }
        for entry in entries:
            totals["normal_hours"] += entry.normal_hours
            totals["evening_hours"] += entry.evening_hours
            totals["night_hours"] += entry.night_hours
            totals["total_hours"] += entry.total_hours
            totals["normal_pay"] += entry.normal_pay
            totals["evening_pay"] += entry.evening_pay
            totals["night_pay"] += entry.night_pay
            totals["overtime_pay"] += entry.overtime_pay

        summary = PayrollPeriodSummary(
            employee_id=employee_id,
            period_start=start_date,
            period_end=end_date,
            entry_count=len(entries),
            total_payable=totals["normal_pay"] + totals["overtime_pay"],
            **totals,
        )
        self.cache.set(summary, version)

        logger.info(
            "Payroll period summarized",
            extra={
                "employee_tag": public_emp_id(employee_id),
                "period_start": start_date.isoformat(),
                "period_end": end_date.isoformat(),
                "entry_count": summary.entry_count,
            },
        )
        return summary
