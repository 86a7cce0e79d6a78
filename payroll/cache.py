"""
Cache for payroll period summaries.

Keys carry a per-employee version; approving a timesheet bumps the version,
which retires every cached period of that employee at once. A summary is
stored under the version read before its query ran, so a summary computed
across an approval lands under a retired key.
"""

import logging
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django_redis.exceptions import ConnectionInterrupted
from redis.exceptions import RedisError

from core.logging_utils import err_tag, public_emp_id
from workledger.redis_settings import CACHE_KEYS

logger = logging.getLogger(__name__)

CACHE_ERRORS = (ConnectionInterrupted, RedisError)


class PayrollSummaryCache:
    def __init__(self, ttl=None):
        self.ttl = ttl if ttl is not None else getattr(
            settings, "PAYROLL_SUMMARY_CACHE_TTL", 300
        )

    def version(self, employee_id) -> Optional[int]:
        """
        Current summary version of an employee.

        None when caching is disabled or the cache is unreachable; get and
        set are no-ops for a None version.
        """
        if not self.ttl:
            return None
        key = CACHE_KEYS["payroll_version"].format(employee_id=employee_id)
        try:
            return cache.get(key) or 1
        except CACHE_ERRORS as exc:
            logger.warning(
                "Payroll summary cache unavailable",
                extra={"employee_tag": public_emp_id(employee_id), "err": err_tag(exc)},
            )
            return None

    def _key(self, employee_id, start_date, end_date, version) -> str:
        return CACHE_KEYS["payroll_summary"].format(
            employee_id=employee_id,
            start=start_date.isoformat(),
            end=end_date.isoformat(),
            version=version,
        )

    def get(self, employee_id, start_date, end_date, version):
        if version is None:
            return None
        try:
            return cache.get(self._key(employee_id, start_date, end_date, version))
        except CACHE_ERRORS as exc:
            logger.warning(
                "Payroll summary cache unavailable",
                extra={"employee_tag": public_emp_id(employee_id), "err": err_tag(exc)},
            )
            return None

    def set(self, summary, version) -> None:
        """Store ``summary`` under the version read before it was computed"""
        if version is None:
            return
        key = self._key(
            summary.employee_id, summary.period_start, summary.period_end, version
        )
        try:
            cache.set(key, summary, self.ttl)
        except CACHE_ERRORS as exc:
            logger.warning(
                "Payroll summary cache write failed",
                extra={
                    "employee_tag": public_emp_id(summary.employee_id),
                    "err": err_tag(exc),
                },
            )

    def invalidate(self, employee_id) -> None:
        key = CACHE_KEYS["payroll_version"].format(employee_id=employee_id)
        try:
            cache.add(key, 1, None)
            cache.incr(key)
        except CACHE_ERRORS as exc:
            logger.warning(
                "Payroll summary cache invalidation failed",
                extra={"employee_tag": public_emp_id(employee_id), "err": err_tag(exc)},
            )
