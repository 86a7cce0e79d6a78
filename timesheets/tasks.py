"""
Celery tasks for the timesheet engine
"""

import logging

from celery import shared_task

from django.db import OperationalError
from django.utils import timezone

from .services import replay_cost_accruals as replay_pending_accruals

logger = logging.getLogger(__name__)

# Errors worth retrying the whole task for
TRANSIENT_ERRORS = (
    OperationalError,
    ConnectionError,
)


@shared_task(
    bind=True,
    autoretry_for=TRANSIENT_ERRORS,
    retry_backoff=True,
    retry_backoff_max=60,
    retry_jitter=True,
    max_retries=3,
    name="timesheets.tasks.replay_cost_accruals",
)
def replay_cost_accruals(self, limit=None):
    """
    Re-apply project cost accruals left PENDING or FAILED
    Scheduled by celery beat
    """
    logger.info("Starting cost accrual replay", extra={"task_id": self.request.id})

    result = replay_pending_accruals(limit=limit)
    result["completed_at"] = timezone.now().isoformat()

    if result["failed"]:
        logger.warning("Cost accrual replay left failures", extra=result)
    return result
