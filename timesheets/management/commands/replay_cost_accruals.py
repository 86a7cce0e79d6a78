from django.core.management.base import BaseCommand

from timesheets.services import replay_cost_accruals


class Command(BaseCommand):
    help = "Re-apply project cost accruals of approved timesheets that did not reach the project store"

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=None,
            help="Maximum number of accruals to process",
        )

    def handle(self, *args, **options):
        result = replay_cost_accruals(limit=options["limit"])

        self.stdout.write(
            f"Applied: {result['applied']}, "
            f"failed: {result['failed']}, "
            f"skipped: {result['skipped']}"
        )
        if result["failed"]:
            self.stdout.write(
                self.style.WARNING("Some accruals failed and remain queued for replay")
            )
        else:
            self.stdout.write(self.style.SUCCESS("Cost accrual replay complete"))
