"""
Timesheet ledger: idempotent submission and the approval state machine.

Writes to one (employee, date) key are serialized with a row lock and a
version compare-and-swap. Status transitions are conditional UPDATEs on the
current status, so of two concurrent approvals exactly one observes the
transition and accrues project cost.
"""

import logging
from datetime import date, datetime
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from core.exceptions import ConflictError, NotFoundError
from core.logging_utils import public_emp_id, safe_log_entry

from .aggregator import DailyBreakdown, WorkInterval, build_daily_breakdown
from .collaborators import get_employee_directory, get_project_store
from .cost_propagation import CostPropagationListener
from .enums import TimesheetStatus
from .models import CostAccrual, TimesheetEntry
from .signals import timesheet_approved, timesheet_rejected
from .tiers import TierSchedule

logger = logging.getLogger(__name__)

PENDING = TimesheetStatus.PENDING.value
APPROVED = TimesheetStatus.APPROVED.value
REJECTED = TimesheetStatus.REJECTED.value

# A lost first-insert race is retried once as an update
MAX_WRITE_ATTEMPTS = 2


class TimesheetLedger:
    def __init__(
        self,
        employee_directory=None,
        project_store=None,
        schedule: Optional[TierSchedule] = None,
        listener: Optional[CostPropagationListener] = None,
        clock=None,
    ):
        self.employee_directory = employee_directory or get_employee_directory()
        self.project_store = project_store or get_project_store()
        self.schedule = schedule or TierSchedule.from_settings()
        self.listener = listener or CostPropagationListener(self.project_store)
        self.clock = clock or timezone.now

    # Reads

    def get(self, entry_id) -> TimesheetEntry:
        try:
            return TimesheetEntry.objects.select_related("employee").get(pk=entry_id)
        except (TimesheetEntry.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(
                "Timesheet entry not found", details={"entry_id": entry_id}
            )

    # Submission

    def submit(
        self,
        employee_id,
        work_date: date,
        clock_in: datetime,
        clock_out: Optional[datetime] = None,
        break_minutes: int = 0,
        assignment_id=None,
    ) -> TimesheetEntry:
        """
        Classify one work day and upsert it as a PENDING entry.

        Resubmitting a PENDING or REJECTED day overwrites its hours; an
        APPROVED day is immutable and raises ConflictError.
        """
        company_id = self.employee_directory.get_company_id(employee_id)
        hourly_rate = self.employee_directory.get_hourly_rate(employee_id)
        if assignment_id is not None:
            # Raises NotFoundError for unknown assignments
            self.project_store.get_project_for_assignment(assignment_id)

        breakdown = build_daily_breakdown(
            WorkInterval(
                employee_id=employee_id,
                date=work_date,
                clock_in=clock_in,
                clock_out=clock_out,
                break_minutes=break_minutes,
            ),
            hourly_rate,
            schedule=self.schedule,
            now=self.clock(),
        )

        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                entry, action = self._write(breakdown, company_id, assignment_id)
            except IntegrityError:
                if attempt == MAX_WRITE_ATTEMPTS:
                    raise ConflictError(
                        "Timesheet entry is being written concurrently",
                        details={"date": work_date.isoformat()},
                    )
                logger.info(
                    "Concurrent first submission, retrying as update",
                    extra={"employee_tag": public_emp_id(employee_id)},
                )
                continue

            logger.info("Timesheet submitted", extra=safe_log_entry(entry, action))
            return entry

    def _write(self, breakdown: DailyBreakdown, company_id, assignment_id):
        fields = breakdown.as_entry_fields()
        with transaction.atomic():
            entry = (
                TimesheetEntry.objects.select_for_update()
                .filter(employee_id=breakdown.employee_id, date=breakdown.date)
                .first()
            )
            if entry is None:
                entry = TimesheetEntry.objects.create(
                    employee_id=breakdown.employee_id,
                    date=breakdown.date,
                    company_id=company_id,
                    project_assignment_id=assignment_id,
                    status=PENDING,
                    **fields,
                )
                return entry, "created"

            if entry.status == APPROVED:
                raise ConflictError(
                    "Approved timesheet entries cannot be resubmitted",
                    details={"entry_id": entry.pk, "status": entry.status},
                )

            if self._is_unchanged(entry, fields, company_id, assignment_id):
                return entry, "unchanged"

            updated = (
                TimesheetEntry.objects.filter(pk=entry.pk, version=entry.version)
                .exclude(status=APPROVED)
                .update(
                    status=PENDING,
                    version=F("version") + 1,
                    company_id=company_id,
                    project_assignment_id=assignment_id,
                    rejected_at=None,
                    updated_at=timezone.now(),
                    **fields,
                )
            )
            if not updated:
                raise ConflictError(
                    "Timesheet entry was modified concurrently",
                    details={"entry_id": entry.pk},
                )
            entry.refresh_from_db()
            return entry, "resubmitted"

    @staticmethod
    def _is_unchanged(entry, fields, company_id, assignment_id) -> bool:
        if entry.status != PENDING:
            return False
        if entry.company_id != company_id:
            return False
        if entry.project_assignment_id != assignment_id:
            return False
        return all(getattr(entry, name) == value for name, value in fields.items())

    # Transitions

    def approve(self, entry_id) -> TimesheetEntry:
        """
        PENDING -> APPROVED.

        The transition and its cost accrual commit together; the accrual is
        applied afterwards. If the project store fails the approval stays in
        place and DependencyError is raised.
        """
        now = self.clock()
        with transaction.atomic():
            self._transition(entry_id, APPROVED, approved_at=now)
            entry = self.get(entry_id)

            accrual = None
            if entry.project_assignment_id is not None:
                project_id = self.project_store.get_project_for_assignment(
                    entry.project_assignment_id
                )
                accrual = CostAccrual.objects.create(
                    entry=entry, project_id=str(project_id), amount=entry.labor_cost
                )

        logger.info("Timesheet approved", extra=safe_log_entry(entry, "approved"))
        timesheet_approved.send(sender=TimesheetEntry, entry=entry)

        if accrual is not None:
            self.listener.apply(accrual.pk)
        return entry

    def reject(self, entry_id) -> TimesheetEntry:
        """PENDING -> REJECTED; no side effects"""
        with transaction.atomic():
            self._transition(entry_id, REJECTED, rejected_at=self.clock())
            entry = self.get(entry_id)

        logger.info("Timesheet rejected", extra=safe_log_entry(entry, "rejected"))
        timesheet_rejected.send(sender=TimesheetEntry, entry=entry)
        return entry

    def _transition(self, entry_id, target, **stamps):
        updated = TimesheetEntry.objects.filter(pk=entry_id, status=PENDING).update(
            status=target,
            version=F("version") + 1,
            updated_at=timezone.now(),
            **stamps,
        )
        if updated:
            return

        # Lost the race or wrong state; report the state we found
        entry = self.get(entry_id)
        raise ConflictError(
            f"Only pending entries can be {target.lower()}, entry is {entry.status}",
            details={"entry_id": entry.pk, "status": entry.status},
        )
