"""
Service API of the timesheet engine.

These functions are the boundary used by the HTTP views, the management
command and the Celery tasks. Each call builds its collaborators from
settings, so a configured replacement is picked up everywhere.
"""

from datetime import date, datetime
from typing import Optional

from payroll.aggregator import PayrollPeriodAggregator, PayrollPeriodSummary

from .cost_propagation import CostPropagationListener
from .ledger import TimesheetLedger
from .models import TimesheetEntry


def submit_timesheet(
    employee_id,
    work_date: date,
    clock_in: datetime,
    clock_out: Optional[datetime] = None,
    break_minutes: int = 0,
    assignment_id=None,
) -> TimesheetEntry:
    return TimesheetLedger().submit(
        employee_id,
        work_date,
        clock_in,
        clock_out=clock_out,
        break_minutes=break_minutes,
        assignment_id=assignment_id,
    )


def approve_timesheet(entry_id) -> TimesheetEntry:
    return TimesheetLedger().approve(entry_id)


def reject_timesheet(entry_id) -> TimesheetEntry:
    return TimesheetLedger().reject(entry_id)


def get_payroll_summary(employee_id, start_date: date, end_date: date) -> PayrollPeriodSummary:
    return PayrollPeriodAggregator().summarize(employee_id, start_date, end_date)


def replay_cost_accruals(limit=None) -> dict:
    """Re-apply approved cost that did not reach the project store"""
    return CostPropagationListener().replay_pending(limit=limit)
