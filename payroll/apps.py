from django.apps import AppConfig


class PayrollConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payroll"

    def ready(self):
        """Connect summary cache invalidation to timesheet approvals"""
        from . import signals  # noqa: F401
