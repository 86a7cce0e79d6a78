"""
Propagation of approved labour cost into project actual cost
"""

import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import DependencyError
from core.logging_utils import err_tag, public_emp_id

from .collaborators import get_project_store
from .enums import AccrualStatus
from .models import CostAccrual

logger = logging.getLogger(__name__)


class CostPropagationListener:
    """
    Applies CostAccrual records to the project store.

    The ledger creates one accrual per approved entry in the same
    transaction as the approval, then hands it to ``apply``. A record is
    applied at most once: it is locked while applied and APPLIED records are
    skipped, so the replay can safely run next to live approvals.
    """

    def __init__(self, project_store=None):
        self.project_store = project_store or get_project_store()

    def apply(self, accrual_id) -> CostAccrual:
        return self._apply(accrual_id)[0]

    def _apply(self, accrual_id):
        """Returns (accrual, applied_now)"""
        failure = None
        with transaction.atomic():
            accrual = CostAccrual.objects.select_for_update().get(pk=accrual_id)
            if accrual.status == AccrualStatus.APPLIED.value:
                return accrual, False

            accrual.attempts += 1
            try:
                with transaction.atomic():
                    self.project_store.add_actual_cost(
                        accrual.project_id, accrual.amount
                    )
            except DependencyError as exc:
                failure = exc
                accrual.status = AccrualStatus.FAILED.value
                accrual.last_error = err_tag(exc)
            else:
                accrual.status = AccrualStatus.APPLIED.value
                accrual.applied_at = timezone.now()
                accrual.last_error = ""

            accrual.save(
                update_fields=[
                    "status",
                    "attempts",
                    "last_error",
                    "applied_at",
                    "updated_at",
                ]
            )

        log_extra = {
            "accrual_id": accrual.pk,
            "entry_id": accrual.entry_id,
            "employee_tag": public_emp_id(accrual.entry.employee_id),
            "project_id": accrual.project_id,
            "attempts": accrual.attempts,
        }
        if failure is not None:
            logger.error(
                "Project cost accrual failed",
                extra={**log_extra, "err": err_tag(failure)},
            )
            raise DependencyError(
                "Project cost could not be updated; the accrual will be replayed",
                details={"entry_id": accrual.entry_id, "accrual_id": accrual.pk},
            ) from failure

        logger.info("Project cost accrual applied", extra=log_extra)
        return accrual, True

    def replay_pending(self, limit=None) -> dict:
        """
        Re-apply every PENDING or FAILED accrual.

        Failures are counted and logged, not raised.
        """
        queryset = CostAccrual.objects.filter(
            status__in=[AccrualStatus.PENDING.value, AccrualStatus.FAILED.value]
        ).order_by("created_at")
        accrual_ids = list(queryset.values_list("pk", flat=True)[:limit])

        result = {"applied": 0, "failed": 0, "skipped": 0}
        for accrual_id in accrual_ids:
            try:
                _, applied_now = self._apply(accrual_id)
            except CostAccrual.DoesNotExist:
                result["skipped"] += 1
                continue
            except DependencyError:
                result["failed"] += 1
                continue

            result["applied" if applied_now else "skipped"] += 1

        logger.info("Cost accrual replay finished", extra=result)
        return result
