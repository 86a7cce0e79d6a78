"""
Overtime aggregation: one work interval -> one day's ledger breakdown
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.utils import timezone

from core.exceptions import ValidationError

from .enums import CrossMidnightPolicy, RateTier
from .tiers import (
    TierSchedule,
    TierSeconds,
    classify_seconds,
    hours_from_seconds,
    quantize_money,
    split_at_midnight,
)

logger = logging.getLogger(__name__)

MAX_WORK_DATE_DRIFT_DAYS = 1


@dataclass(frozen=True)
class WorkInterval:
    """Raw clock events of one employee for one calendar day"""

    employee_id: int
    date: date
    clock_in: datetime
    clock_out: Optional[datetime] = None
    break_minutes: int = 0

    @property
    def is_open(self) -> bool:
        return self.clock_out is None


@dataclass(frozen=True)
class DailyBreakdown:
    """Classified, break-adjusted hours and pay for one ledger day"""

    employee_id: int
    date: date
    clock_in: datetime
    clock_out: datetime
    break_minutes: int
    hourly_rate: Decimal
    normal_hours: Decimal
    evening_hours: Decimal
    night_hours: Decimal
    total_hours: Decimal
    normal_excess_hours: Decimal
    normal_pay: Decimal
    evening_pay: Decimal
    night_pay: Decimal
    overtime_pay: Decimal

    @property
    def labor_cost(self) -> Decimal:
        return self.normal_pay + self.overtime_pay

    def as_entry_fields(self) -> dict:
        """Fields written onto a TimesheetEntry"""
        return {
            "clock_in": self.clock_in,
            "clock_out": self.clock_out,
            "break_minutes": self.break_minutes,
            "hourly_rate": self.hourly_rate,
            "normal_hours": self.normal_hours,
            "evening_hours": self.evening_hours,
            "night_hours": self.night_hours,
            "total_hours": self.total_hours,
            "evening_pay": self.evening_pay,
            "night_pay": self.night_pay,
            "overtime_pay": self.overtime_pay,
        }


def _validate(clock_in, clock_out, break_minutes) -> int:
    if clock_out <= clock_in:
        raise ValidationError(
            "Clock-out time must be after clock-in time",
            details={"field": "clock_out"},
        )

    elapsed = int((clock_out - clock_in).total_seconds())

    max_hours = getattr(settings, "TIMESHEET_MAX_SHIFT_HOURS", 24)
    if elapsed > max_hours * 3600:
        raise ValidationError(
            f"Shift cannot exceed {max_hours} hours",
            details={"field": "clock_out", "max_hours": max_hours},
        )

    if break_minutes is None or break_minutes < 0:
        raise ValidationError(
            "Break minutes cannot be negative", details={"field": "break_minutes"}
        )
    if break_minutes * 60 > elapsed:
        raise ValidationError(
            "Break cannot be longer than the shift",
            details={"field": "break_minutes"},
        )
    return elapsed


def _check_work_date(work_date, clock_in, schedule: TierSchedule) -> None:
    # A shift may be booked to the day before or after its local clock-in day
    clock_in_date = clock_in.astimezone(schedule.tz).date()
    if abs((clock_in_date - work_date).days) > MAX_WORK_DATE_DRIFT_DAYS:
        raise ValidationError(
            "Work date must be within one day of the clock-in date",
            details={
                "field": "date",
                "date": work_date.isoformat(),
                "clock_in_date": clock_in_date.isoformat(),
            },
        )


def _classify(clock_in, clock_out, schedule: TierSchedule) -> TierSeconds:
    if schedule.cross_midnight_policy == CrossMidnightPolicy.ANCHOR_DAY:
        return classify_seconds(clock_in, clock_out, schedule)

    seconds = TierSeconds()
    for day, start, end in split_at_midnight(clock_in, clock_out, schedule.tz):
        seconds += classify_seconds(start, end, schedule, anchor_day=day)

    # The cap is per ledger day, not per calendar piece
    cap = schedule.normal_cap_seconds
    if seconds.normal > cap:
        seconds = TierSeconds(
            normal=cap,
            evening=seconds.evening,
            night=seconds.night,
            normal_excess=seconds.normal_excess + seconds.normal - cap,
        )
    return seconds


def _deduct_break(seconds: TierSeconds, break_seconds: int) -> TierSeconds:
    """Take the break out of NORMAL first, then EVENING, then NIGHT"""
    remaining = break_seconds
    buckets = {}
    for name in ("normal", "evening", "night"):
        available = getattr(seconds, name)
        taken = min(available, remaining)
        buckets[name] = available - taken
        remaining -= taken

    return TierSeconds(normal_excess=seconds.normal_excess, **buckets)


def build_daily_breakdown(
    interval: WorkInterval,
    hourly_rate: Decimal,
    schedule: Optional[TierSchedule] = None,
    now: Optional[datetime] = None,
) -> DailyBreakdown:
    """
    Classify a work interval into tier hours and pay.

    An open interval is closed at ``now`` before classification. Raises
    ValidationError for a non-positive span, a negative break, a break
    longer than the span, a span above TIMESHEET_MAX_SHIFT_HOURS or a
    work date more than a day away from the local clock-in date.
    """
    schedule = schedule or TierSchedule.from_settings()
    clock_out = interval.clock_out
    if clock_out is None:
        clock_out = now or timezone.now()

    interval_clock_in = interval.clock_in
    if interval_clock_in is None:
        raise ValidationError("clock_in is required", details={"field": "clock_in"})
    if timezone.is_naive(interval_clock_in):
        interval_clock_in = schedule.tz.localize(interval_clock_in)
    if timezone.is_naive(clock_out):
        clock_out = schedule.tz.localize(clock_out)

    _validate(interval_clock_in, clock_out, interval.break_minutes)
    _check_work_date(interval.date, interval_clock_in, schedule)

    seconds = _classify(interval_clock_in, clock_out, schedule)
    seconds = _deduct_break(seconds, interval.break_minutes * 60)

    normal = hours_from_seconds(seconds.normal)
    evening = hours_from_seconds(seconds.evening)
    night = hours_from_seconds(seconds.night)
    rate = Decimal(hourly_rate)

    normal_pay = quantize_money(normal * rate)
    # Overtime is the sum of the rounded tier amounts
    evening_pay = quantize_money(evening * rate * schedule.multiplier(RateTier.EVENING))
    night_pay = quantize_money(night * rate * schedule.multiplier(RateTier.NIGHT))
    overtime_pay = evening_pay + night_pay

    breakdown = DailyBreakdown(
        employee_id=interval.employee_id,
        date=interval.date,
        clock_in=interval_clock_in,
        clock_out=clock_out,
        break_minutes=interval.break_minutes,
        hourly_rate=quantize_money(rate),
        normal_hours=normal,
        evening_hours=evening,
        night_hours=night,
        total_hours=normal + evening + night,
        normal_excess_hours=hours_from_seconds(seconds.normal_excess),
        normal_pay=normal_pay,
        evening_pay=evening_pay,
        night_pay=night_pay,
        overtime_pay=overtime_pay,
    )

    if seconds.normal_excess:
        logger.debug(
            "Normal hours capped",
            extra={
                "work_date": interval.date.isoformat(),
                "normal_excess_hours": str(breakdown.normal_excess_hours),
            },
        )
    return breakdown
