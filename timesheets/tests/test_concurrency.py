"""
Tests for concurrent ledger writes from separate database connections
"""

import threading
from datetime import date
from unittest.mock import MagicMock

from django.db import OperationalError, connection
from django.test import TransactionTestCase

from core.exceptions import ConflictError
from tests.base import create_assignment, create_employee, local_dt
from timesheets.enums import TimesheetStatus
from timesheets.ledger import TimesheetLedger
from timesheets.models import CostAccrual, TimesheetEntry

WORK_DATE = date(2025, 3, 3)


class LedgerRaceConditionTest(TransactionTestCase):
    """Two workers racing on the same (employee, date) key"""

    def setUp(self):
        self.employee = create_employee(hourly_rate="20.00")
        self.assignment = create_assignment(self.employee)
        self.project = self.assignment.project

        self.store = MagicMock()
        self.store.get_project_for_assignment.return_value = self.project.pk

    def run_concurrently(self, work):
        """Run ``work`` in two threads; returns (results, errors)"""
        results = []
        errors = []
        barrier = threading.Barrier(2)

        def worker():
            try:
                barrier.wait(timeout=5)
                results.append(work())
            except (ConflictError, OperationalError) as exc:
                # OperationalError can occur with SQLite database locking in tests
                errors.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results) + len(errors), 2)
        return results, errors

    def submit(self, end_hour=17):
        return TimesheetLedger(project_store=self.store).submit(
            self.employee.pk,
            WORK_DATE,
            local_dt(2025, 3, 3, 9),
            local_dt(2025, 3, 3, end_hour),
            assignment_id=self.assignment.pk,
        )

    def test_concurrent_approvals_accrue_cost_once(self):
        entry = self.submit()

        results, errors = self.run_concurrently(
            lambda: TimesheetLedger(project_store=self.store).approve(entry.pk)
        )

        self.assertLessEqual(len(results), 1)
        self.assertLessEqual(self.store.add_actual_cost.call_count, 1)
        self.assertLessEqual(CostAccrual.objects.filter(entry_id=entry.pk).count(), 1)
        if not any(isinstance(exc, OperationalError) for exc in errors):
            self.assertEqual(len(results), 1)
            self.assertIsInstance(errors[0], ConflictError)
            self.store.add_actual_cost.assert_called_once()

        entry.refresh_from_db()
        if results:
            self.assertEqual(entry.status, TimesheetStatus.APPROVED.value)
            # one submit, one approval
            self.assertEqual(entry.version, 2)

    def test_concurrent_first_submissions_write_one_entry(self):
        results, errors = self.run_concurrently(lambda: self.submit(end_hour=17))

        self.assertEqual(
            TimesheetEntry.objects.filter(employee=self.employee, date=WORK_DATE).count(),
            1 if results else 0,
        )
        self.assertEqual(len({entry.pk for entry in results}), min(len(results), 1))
        if not errors:
            self.assertEqual(len(results), 2)

    def test_concurrent_resubmissions_keep_one_pending_entry(self):
        self.submit(end_hour=17)

        results, errors = self.run_concurrently(lambda: self.submit(end_hour=19))

        entries = TimesheetEntry.objects.filter(employee=self.employee, date=WORK_DATE)
        self.assertEqual(entries.count(), 1)
        entry = entries.get()
        self.assertEqual(entry.status, TimesheetStatus.PENDING.value)
        if results:
            self.assertEqual(entry.clock_out, local_dt(2025, 3, 3, 19))
