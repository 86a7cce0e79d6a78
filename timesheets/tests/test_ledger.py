"""
Tests for the timesheet ledger: idempotent submission, state machine and
exactly-once cost propagation
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.db import IntegrityError

from core.exceptions import ConflictError, DependencyError, NotFoundError, ValidationError
from projects.models import Project
from tests.base import BaseTestCase, create_employee, local_dt
from timesheets.collaborators import DjangoProjectStore
from timesheets.cost_propagation import CostPropagationListener
from timesheets.enums import AccrualStatus, TimesheetStatus
from timesheets.ledger import TimesheetLedger
from timesheets.models import CostAccrual, TimesheetEntry

WORK_DATE = date(2025, 3, 3)


class LedgerTestCase(BaseTestCase):
    def setUp(self):
        super().setUp()
        self.ledger = TimesheetLedger()

    def submit(self, end_hour=19, break_minutes=60, assignment=True, ledger=None):
        return (ledger or self.ledger).submit(
            self.employee.pk,
            WORK_DATE,
            local_dt(2025, 3, 3, 9),
            clock_out=local_dt(2025, 3, 3, end_hour),
            break_minutes=break_minutes,
            assignment_id=self.assignment.pk if assignment else None,
        )

    def mock_project_store(self):
        store = MagicMock()
        store.get_project_for_assignment.return_value = self.project.pk
        return store


class TimesheetSubmissionTest(LedgerTestCase):
    def test_first_submission_creates_pending_entry(self):
        entry = self.submit()

        self.assertEqual(entry.status, TimesheetStatus.PENDING.value)
        self.assertEqual(entry.version, 1)
        self.assertEqual(entry.company_id, "acme")
        self.assertEqual(entry.hourly_rate, Decimal("20.00"))
        self.assertEqual(entry.normal_hours, Decimal("7.00"))
        self.assertEqual(entry.evening_hours, Decimal("2.00"))
        self.assertEqual(entry.total_hours, Decimal("9.00"))
        self.assertEqual(entry.overtime_pay, Decimal("60.00"))
        self.assertEqual(entry.project_assignment_id, self.assignment.pk)

    def test_identical_resubmission_is_a_no_op(self):
        first = self.submit()
        second = self.submit()

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(second.version, 1)
        self.assertEqual(TimesheetEntry.objects.count(), 1)
        for field in ("normal_hours", "evening_hours", "night_hours", "total_hours", "overtime_pay"):
            self.assertEqual(getattr(first, field), getattr(second, field))

    def test_resubmission_overwrites_pending_hours(self):
        first = self.submit(end_hour=19)
        second = self.submit(end_hour=18)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(second.version, 2)
        self.assertEqual(second.evening_hours, Decimal("1.00"))
        self.assertEqual(second.overtime_pay, Decimal("30.00"))
        self.assertEqual(TimesheetEntry.objects.count(), 1)

    def test_resubmission_reopens_rejected_entry(self):
        entry = self.submit()
        self.ledger.reject(entry.pk)

        resubmitted = self.submit(end_hour=18)

        self.assertEqual(resubmitted.status, TimesheetStatus.PENDING.value)
        self.assertIsNone(resubmitted.rejected_at)
        self.assertEqual(resubmitted.evening_hours, Decimal("1.00"))

    def test_resubmitting_identical_rejected_entry_reopens_it(self):
        entry = self.submit()
        self.ledger.reject(entry.pk)

        resubmitted = self.submit()

        self.assertEqual(resubmitted.status, TimesheetStatus.PENDING.value)

    def test_resubmitting_approved_entry_conflicts_and_leaves_it_unchanged(self):
        entry = self.submit()
        approved = self.ledger.approve(entry.pk)

        with self.assertRaises(ConflictError):
            self.submit(end_hour=21)

        entry.refresh_from_db()
        self.assertEqual(entry.status, TimesheetStatus.APPROVED.value)
        self.assertEqual(entry.version, approved.version)
        self.assertEqual(entry.clock_out, local_dt(2025, 3, 3, 19))
        self.assertEqual(entry.evening_hours, Decimal("2.00"))

    def test_invalid_interval_writes_nothing(self):
        with self.assertRaises(ValidationError):
            self.submit(end_hour=8)

        self.assertFalse(TimesheetEntry.objects.exists())

    def test_work_date_far_from_clock_in_rejected(self):
        with self.assertRaises(ValidationError):
            self.ledger.submit(
                self.employee.pk,
                date(2025, 3, 10),
                local_dt(2025, 3, 3, 9),
                local_dt(2025, 3, 3, 17),
            )

        self.assertFalse(TimesheetEntry.objects.exists())

    def test_night_shift_booked_to_next_day(self):
        entry = self.ledger.submit(
            self.employee.pk,
            date(2025, 3, 4),
            local_dt(2025, 3, 3, 22),
            local_dt(2025, 3, 4, 6),
        )

        self.assertEqual(entry.date, date(2025, 3, 4))
        self.assertEqual(entry.night_hours, Decimal("6.00"))

    def test_unknown_employee(self):
        with self.assertRaises(NotFoundError):
            self.ledger.submit(
                999999, WORK_DATE, local_dt(2025, 3, 3, 9), local_dt(2025, 3, 3, 17)
            )

    def test_employee_without_rate(self):
        employee = create_employee(hourly_rate=None)

        with self.assertRaises(DependencyError):
            self.ledger.submit(
                employee.pk, WORK_DATE, local_dt(2025, 3, 3, 9), local_dt(2025, 3, 3, 17)
            )

    def test_unknown_assignment(self):
        with self.assertRaises(NotFoundError):
            self.ledger.submit(
                self.employee.pk,
                WORK_DATE,
                local_dt(2025, 3, 3, 9),
                local_dt(2025, 3, 3, 17),
                assignment_id=999999,
            )

    def test_open_interval_uses_ledger_clock(self):
        ledger = TimesheetLedger(clock=lambda: local_dt(2025, 3, 3, 12, 30))

        entry = ledger.submit(self.employee.pk, WORK_DATE, local_dt(2025, 3, 3, 9))

        self.assertEqual(entry.clock_out, local_dt(2025, 3, 3, 12, 30))
        self.assertEqual(entry.normal_hours, Decimal("3.50"))

    def test_rate_snapshot_taken_at_submission(self):
        entry = self.submit()
        self.employee.hourly_rate = Decimal("30.00")
        self.employee.save()

        entry.refresh_from_db()
        self.assertEqual(entry.hourly_rate, Decimal("20.00"))

        resubmitted = self.submit(end_hour=18)
        self.assertEqual(resubmitted.hourly_rate, Decimal("30.00"))

    def test_lost_insert_race_is_retried_as_update(self):
        original_write = TimesheetLedger._write
        calls = []

        def competing_insert_first(ledger, breakdown, company_id, assignment_id):
            if not calls:
                calls.append("raced")
                # Another request inserted the same (employee, date) first
                TimesheetEntry.objects.create(
                    employee=self.employee,
                    date=WORK_DATE,
                    company_id="acme",
                    clock_in=local_dt(2025, 3, 3, 9),
                    clock_out=local_dt(2025, 3, 3, 17),
                    hourly_rate=Decimal("20.00"),
                    normal_hours=Decimal("8.00"),
                    total_hours=Decimal("8.00"),
                )
                raise IntegrityError("duplicate key value violates unique constraint")
            return original_write(ledger, breakdown, company_id, assignment_id)

        with patch.object(
            TimesheetLedger, "_write", autospec=True, side_effect=competing_insert_first
        ):
            entry = self.submit()

        self.assertEqual(calls, ["raced"])
        self.assertEqual(TimesheetEntry.objects.count(), 1)
        self.assertEqual(entry.version, 2)
        self.assertEqual(entry.evening_hours, Decimal("2.00"))

    def test_repeated_integrity_errors_surface_as_conflict(self):
        with patch.object(
            TimesheetLedger, "_write", side_effect=IntegrityError("duplicate")
        ):
            with self.assertRaises(ConflictError):
                self.submit()


class TimesheetApprovalTest(LedgerTestCase):
    def test_approval_accrues_project_cost(self):
        entry = self.submit()

        approved = self.ledger.approve(entry.pk)

        self.assertEqual(approved.status, TimesheetStatus.APPROVED.value)
        self.assertIsNotNone(approved.approved_at)
        self.assertEqual(approved.version, 2)

        self.project.refresh_from_db()
        # 7 x 20 + 2 x 20 x 1.5
        self.assertEqual(self.project.actual_cost, Decimal("200.00"))

        accrual = CostAccrual.objects.get(entry=entry)
        self.assertEqual(accrual.status, AccrualStatus.APPLIED.value)
        self.assertEqual(accrual.amount, Decimal("200.00"))
        self.assertEqual(accrual.attempts, 1)
        self.assertEqual(accrual.project_id, str(self.project.pk))

    def test_double_approval_accrues_once(self):
        store = self.mock_project_store()
        ledger = TimesheetLedger(project_store=store)
        entry = self.submit(ledger=ledger)

        ledger.approve(entry.pk)
        with self.assertRaises(ConflictError):
            ledger.approve(entry.pk)

        store.add_actual_cost.assert_called_once_with(
            str(self.project.pk), Decimal("200.00")
        )
        self.assertEqual(CostAccrual.objects.count(), 1)

    def test_losing_concurrent_approval_does_not_accrue(self):
        store = self.mock_project_store()
        ledger = TimesheetLedger(project_store=store)
        entry = self.submit(ledger=ledger)
        # Another approver's conditional update committed first
        TimesheetEntry.objects.filter(pk=entry.pk).update(
            status=TimesheetStatus.APPROVED.value
        )

        with self.assertRaises(ConflictError) as ctx:
            ledger.approve(entry.pk)

        self.assertEqual(ctx.exception.details["status"], "APPROVED")
        store.add_actual_cost.assert_not_called()
        self.assertFalse(CostAccrual.objects.exists())

    def test_approval_without_assignment_has_no_accrual(self):
        entry = self.submit(assignment=False)

        self.ledger.approve(entry.pk)

        self.assertFalse(CostAccrual.objects.exists())
        self.project.refresh_from_db()
        self.assertEqual(self.project.actual_cost, Decimal("0.00"))

    def test_rejection_has_no_side_effects(self):
        entry = self.submit()

        rejected = self.ledger.reject(entry.pk)

        self.assertEqual(rejected.status, TimesheetStatus.REJECTED.value)
        self.assertIsNotNone(rejected.rejected_at)
        self.assertFalse(CostAccrual.objects.exists())
        self.project.refresh_from_db()
        self.assertEqual(self.project.actual_cost, Decimal("0.00"))

    def test_only_pending_entries_transition(self):
        entry = self.submit()
        self.ledger.reject(entry.pk)

        with self.assertRaises(ConflictError):
            self.ledger.approve(entry.pk)
        with self.assertRaises(ConflictError):
            self.ledger.reject(entry.pk)

    def test_unknown_entry(self):
        with self.assertRaises(NotFoundError):
            self.ledger.approve(999999)
        with self.assertRaises(NotFoundError):
            self.ledger.reject(999999)

    def test_project_store_failure_keeps_approval_and_is_replayed(self):
        store = self.mock_project_store()
        store.add_actual_cost.side_effect = DependencyError("project store down")
        ledger = TimesheetLedger(project_store=store)
        entry = self.submit(ledger=ledger)

        with self.assertRaises(DependencyError) as ctx:
            ledger.approve(entry.pk)

        self.assertEqual(ctx.exception.details["entry_id"], entry.pk)
        entry.refresh_from_db()
        self.assertEqual(entry.status, TimesheetStatus.APPROVED.value)
        accrual = CostAccrual.objects.get(entry=entry)
        self.assertEqual(accrual.status, AccrualStatus.FAILED.value)
        self.assertEqual(accrual.attempts, 1)
        self.assertIn("project store down", accrual.last_error)

        result = CostPropagationListener(project_store=DjangoProjectStore()).replay_pending()

        self.assertEqual(result, {"applied": 1, "failed": 0, "skipped": 0})
        accrual.refresh_from_db()
        self.assertEqual(accrual.status, AccrualStatus.APPLIED.value)
        self.assertEqual(accrual.attempts, 2)
        self.project.refresh_from_db()
        self.assertEqual(self.project.actual_cost, Decimal("200.00"))

    def test_replay_skips_applied_accruals(self):
        entry = self.submit()
        self.ledger.approve(entry.pk)
        accrual = CostAccrual.objects.get(entry=entry)

        listener = CostPropagationListener(project_store=DjangoProjectStore())
        listener.apply(accrual.pk)
        result = listener.replay_pending()

        self.assertEqual(result, {"applied": 0, "failed": 0, "skipped": 0})
        self.project.refresh_from_db()
        self.assertEqual(self.project.actual_cost, Decimal("200.00"))

    def test_replay_counts_failures(self):
        store = self.mock_project_store()
        store.add_actual_cost.side_effect = DependencyError("down")
        ledger = TimesheetLedger(project_store=store)
        entry = self.submit(ledger=ledger)
        with self.assertRaises(DependencyError):
            ledger.approve(entry.pk)

        result = CostPropagationListener(project_store=store).replay_pending()

        self.assertEqual(result, {"applied": 0, "failed": 1, "skipped": 0})
        self.assertEqual(CostAccrual.objects.get(entry=entry).attempts, 2)

    def test_later_approvals_add_to_current_project_cost(self):
        other_employee = create_employee(company_id="acme")
        entry = self.submit()
        self.ledger.approve(entry.pk)
        Project.objects.filter(pk=self.project.pk).update(actual_cost=Decimal("50.00"))

        # Later approvals keep adding on top of the current value
        other_entry = self.ledger.submit(
            other_employee.pk,
            WORK_DATE,
            local_dt(2025, 3, 3, 9),
            local_dt(2025, 3, 3, 17),
            assignment_id=self.assignment.pk,
        )
        self.ledger.approve(other_entry.pk)

        self.project.refresh_from_db()
        # 8 x 20 on top of 50
        self.assertEqual(self.project.actual_cost, Decimal("210.00"))
