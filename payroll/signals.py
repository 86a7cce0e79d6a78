from django.dispatch import receiver

from timesheets.signals import timesheet_approved

from .cache import PayrollSummaryCache


@receiver(timesheet_approved)
def invalidate_payroll_summaries(sender, entry, **kwargs):
    """A new approved entry changes every cached period of its employee"""
    PayrollSummaryCache().invalidate(entry.employee_id)
