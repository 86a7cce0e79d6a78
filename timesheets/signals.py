"""
Signals sent by the timesheet ledger after a committed status transition
"""

from django.dispatch import Signal

# Sent once per PENDING -> APPROVED transition; kwargs: entry
timesheet_approved = Signal()

# Sent once per PENDING -> REJECTED transition; kwargs: entry
timesheet_rejected = Signal()
