"""
Rate tier windows and the time window classifier.

A TierSchedule partitions the local calendar day into rate tiers
(NIGHT 00:00-08:00, NORMAL 08:00-17:00, EVENING 17:00-24:00 by default).
The classifier maps an interval to the number of seconds worked in each tier
of one anchor day. All arithmetic happens in whole seconds; conversion to
Decimal hours is done once, at the boundary, with ROUND_HALF_UP to 0.01.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Tuple

import pytz

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .enums import CrossMidnightPolicy, RateTier

SECONDS_PER_DAY = 24 * 3600
HOURS_QUANTUM = Decimal("0.01")
MONEY_QUANTUM = Decimal("0.01")


def hours_from_seconds(seconds: int) -> Decimal:
    """Convert whole seconds to hours rounded half-up to 0.01"""
    return (Decimal(seconds) / Decimal(3600)).quantize(
        HOURS_QUANTUM, rounding=ROUND_HALF_UP
    )


def quantize_money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _parse_clock(value: str) -> int:
    """'HH:MM' -> seconds after local midnight; '24:00' closes the day"""
    try:
        hours, minutes = (int(part) for part in str(value).split(":"))
    except ValueError:
        raise ImproperlyConfigured(f"Invalid tier clock time: {value!r}")

    seconds = hours * 3600 + minutes * 60
    if not 0 <= minutes < 60 or not 0 <= seconds <= SECONDS_PER_DAY:
        raise ImproperlyConfigured(f"Invalid tier clock time: {value!r}")
    return seconds


@dataclass(frozen=True)
class TierWindow:
    """[start, end) in seconds after local midnight"""

    tier: RateTier
    start: int
    end: int

    def bounds_on(self, day, tz) -> Tuple[datetime, datetime]:
        midnight = datetime(day.year, day.month, day.day)
        start = tz.localize(midnight + timedelta(seconds=self.start))
        end = tz.localize(midnight + timedelta(seconds=self.end))
        return start, end


@dataclass(frozen=True)
class TierSchedule:
    """
    Immutable tier configuration

    Windows must cover the 24-hour day exactly once; a schedule that leaves
    a gap or overlaps is rejected when it is built.
    """

    windows: Tuple[TierWindow, ...]
    multipliers: Dict[RateTier, Decimal] = field(hash=False)
    normal_hours_cap: Decimal = Decimal("8")
    timezone_name: str = "UTC"
    cross_midnight_policy: CrossMidnightPolicy = CrossMidnightPolicy.SPLIT

    def __post_init__(self):
        ordered = sorted(self.windows, key=lambda w: w.start)
        cursor = 0
        for window in ordered:
            if window.start != cursor or window.end <= window.start:
                raise ImproperlyConfigured(
                    "Tier windows must partition the day without gaps or overlaps"
                )
            cursor = window.end
        if cursor != SECONDS_PER_DAY:
            raise ImproperlyConfigured("Tier windows must end at 24:00")

        missing = [tier for tier in RateTier if tier not in self.multipliers]
        if missing:
            raise ImproperlyConfigured(
                f"Missing multiplier for tiers: {', '.join(map(str, missing))}"
            )
        if self.normal_hours_cap <= 0:
            raise ImproperlyConfigured("normal_hours_cap must be positive")

        object.__setattr__(self, "windows", tuple(ordered))

    @property
    def tz(self):
        return pytz.timezone(self.timezone_name)

    @property
    def normal_cap_seconds(self) -> int:
        return int(self.normal_hours_cap * 3600)

    def multiplier(self, tier: RateTier) -> Decimal:
        return self.multipliers[tier]

    @classmethod
    def from_dict(cls, conf: dict) -> "TierSchedule":
        windows = []
        multipliers = {}
        for item in conf.get("tiers", []):
            try:
                tier = RateTier(item["tier"])
            except (KeyError, ValueError):
                raise ImproperlyConfigured(f"Unknown rate tier: {item.get('tier')!r}")

            windows.append(
                TierWindow(tier, _parse_clock(item["start"]), _parse_clock(item["end"]))
            )
            multiplier = Decimal(str(item.get("multiplier", "1.0")))
            if multipliers.setdefault(tier, multiplier) != multiplier:
                raise ImproperlyConfigured(
                    f"Conflicting multipliers configured for tier {tier}"
                )

        try:
            policy = CrossMidnightPolicy(
                conf.get("cross_midnight_policy", CrossMidnightPolicy.SPLIT.value)
            )
        except ValueError:
            raise ImproperlyConfigured(
                f"Unknown cross midnight policy: {conf.get('cross_midnight_policy')!r}"
            )

        timezone_name = conf.get("timezone") or settings.TIME_ZONE
        try:
            pytz.timezone(timezone_name)
        except pytz.UnknownTimeZoneError:
            raise ImproperlyConfigured(f"Unknown tier timezone: {timezone_name!r}")

        return cls(
            windows=tuple(windows),
            multipliers=multipliers,
            normal_hours_cap=Decimal(str(conf.get("normal_hours_cap", "8"))),
            timezone_name=timezone_name,
            cross_midnight_policy=policy,
        )

    @classmethod
    def from_settings(cls) -> "TierSchedule":
        return cls.from_dict(getattr(settings, "TIMESHEET_TIER_SCHEDULE", {}))


@dataclass(frozen=True)
class TierSeconds:
    """Seconds per tier for one classified interval"""

    normal: int = 0
    evening: int = 0
    night: int = 0
    normal_excess: int = 0

    @property
    def total(self) -> int:
        return self.normal + self.evening + self.night

    def __add__(self, other: "TierSeconds") -> "TierSeconds":
        return TierSeconds(
            normal=self.normal + other.normal,
            evening=self.evening + other.evening,
            night=self.night + other.night,
            normal_excess=self.normal_excess + other.normal_excess,
        )


@dataclass(frozen=True)
class TierHours:
    normal: Decimal
    evening: Decimal
    night: Decimal
    normal_excess: Decimal

    @property
    def total(self) -> Decimal:
        return self.normal + self.evening + self.night

    @classmethod
    def from_seconds(cls, seconds: TierSeconds) -> "TierHours":
        return cls(
            normal=hours_from_seconds(seconds.normal),
            evening=hours_from_seconds(seconds.evening),
            night=hours_from_seconds(seconds.night),
            normal_excess=hours_from_seconds(seconds.normal_excess),
        )


def _overlap_seconds(start, end, window_start, window_end) -> int:
    overlap = (min(end, window_end) - max(start, window_start)).total_seconds()
    return max(0, int(overlap))


def classify_seconds(
    clock_in: datetime,
    clock_out: datetime,
    schedule: TierSchedule,
    anchor_day=None,
) -> TierSeconds:
    """
    Seconds of [clock_in, clock_out) inside each tier window of one day.

    Windows are taken from ``anchor_day`` (clock_in's local date by default);
    parts of the interval outside that day contribute nothing. NORMAL is
    capped at the schedule's cap and the cut is reported as normal_excess.
    Unordered or empty intervals yield zeros.
    """
    if clock_in is None or clock_out is None:
        return TierSeconds()

    tz = schedule.tz
    clock_in, clock_out = _localize(clock_in, tz), _localize(clock_out, tz)
    if clock_out <= clock_in:
        return TierSeconds()

    if anchor_day is None:
        anchor_day = clock_in.date()

    totals = {tier: 0 for tier in RateTier}
    for window in schedule.windows:
        window_start, window_end = window.bounds_on(anchor_day, tz)
        totals[window.tier] += _overlap_seconds(
            clock_in, clock_out, window_start, window_end
        )

    normal = min(totals[RateTier.NORMAL], schedule.normal_cap_seconds)
    return TierSeconds(
        normal=normal,
        evening=totals[RateTier.EVENING],
        night=totals[RateTier.NIGHT],
        normal_excess=totals[RateTier.NORMAL] - normal,
    )


def classify_interval(
    clock_in: datetime, clock_out: datetime, schedule: Optional[TierSchedule] = None
) -> TierHours:
    """Hours per tier of an interval against its clock-in day's windows"""
    schedule = schedule or TierSchedule.from_settings()
    return TierHours.from_seconds(classify_seconds(clock_in, clock_out, schedule))


def split_at_midnight(clock_in: datetime, clock_out: datetime, tz):
    """Yield (local_day, start, end) pieces of an interval cut at local midnight"""
    cursor, clock_out = _localize(clock_in, tz), _localize(clock_out, tz)
    while cursor < clock_out:
        day = _localize(cursor, tz).date()
        next_day = day + timedelta(days=1)
        midnight = tz.localize(datetime(next_day.year, next_day.month, next_day.day))
        piece_end = min(midnight, clock_out)
        yield day, cursor, piece_end
        cursor = piece_end


def _localize(value: datetime, tz) -> datetime:
    if value.tzinfo is None:
        return tz.localize(value)
    return value.astimezone(tz)
