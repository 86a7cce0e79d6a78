from django.apps import AppConfig


class TimesheetsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "timesheets"
    verbose_name = "Timesheets"

    def ready(self):
        # Fail at startup, not on the first submission, if the tier
        # schedule is misconfigured
        from .tiers import TierSchedule

        TierSchedule.from_settings()
