"""
Enumerations for the timesheet engine.
"""

from enum import Enum


class TimesheetStatus(Enum):
    """Lifecycle of a timesheet entry"""

    PENDING = "PENDING"
    """Initial state and the state after any resubmission"""

    APPROVED = "APPROVED"
    """Terminal; the entry can no longer be overwritten"""

    REJECTED = "REJECTED"
    """Terminal until the employee submits the day again"""

    def __str__(self):
        return self.value

    @classmethod
    def choices(cls):
        return [(member.value, member.value.title()) for member in cls]


class RateTier(Enum):
    """Pay tiers a worked second can fall into"""

    NORMAL = "normal"
    EVENING = "evening"
    NIGHT = "night"

    def __str__(self):
        return self.value


class CrossMidnightPolicy(Enum):
    """How a shift crossing local midnight is classified"""

    SPLIT = "split"
    """Cut at each local midnight; classify every piece against its own day"""

    ANCHOR_DAY = "anchor_day"
    """Classify the whole shift against the clock-in day's windows only"""

    def __str__(self):
        return self.value


class AccrualStatus(Enum):
    """State of a project cost accrual produced by an approval"""

    PENDING = "PENDING"
    APPLIED = "APPLIED"
    FAILED = "FAILED"

    def __str__(self):
        return self.value

    @classmethod
    def choices(cls):
        return [(member.value, member.value.title()) for member in cls]
