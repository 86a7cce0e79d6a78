"""
Utilities for safe logging of ledger activity without leaking PII or pay data
"""

import hashlib
import re
from typing import Any, Dict, Optional, Union

from django.conf import settings


def _salt(kind: str) -> str:
    return f"{getattr(settings, 'LOG_HASH_SALT', 'workledger')}:{kind}"


def hash_user_id(user_id: Union[int, str, None]) -> str:
    """
    Creates hash from user ID for safe logging

    Returns:
        Hashed ID (e.g. usr_1a2b3c4d)
    """
    if not user_id:
        return "[no_id]"

    hash_obj = hashlib.sha256(f"{_salt('usr')}:{user_id}".encode())
    return f"usr_{hash_obj.hexdigest()[:8]}"


def public_emp_id(employee_id: Optional[int]) -> str:
    """
    Create safe public employee identifier for logging

    The same employee always maps to the same tag, so log lines for one
    person's timesheets can be correlated without exposing the database id.
    """
    if not employee_id:
        return "emp_anon"

    hash_obj = hashlib.blake2b(
        f"{_salt('emp')}:{employee_id}".encode(), digest_size=6
    )
    return f"emp_{hash_obj.hexdigest()}"


def safe_log_entry(entry, action: str = "action") -> Dict[str, Any]:
    """
    Structured, PII-free view of a timesheet entry for ``extra={...}``

    Hour buckets are safe to log; rates and pay are not.
    """
    if entry is None:
        return {"action": action, "entry": "none"}

    return {
        "action": action,
        "entry_id": entry.pk,
        "employee_tag": public_emp_id(entry.employee_id),
        "work_date": entry.date.isoformat() if entry.date else None,
        "status": entry.status,
        "version": entry.version,
        "normal_hours": str(entry.normal_hours),
        "evening_hours": str(entry.evening_hours),
        "night_hours": str(entry.night_hours),
    }


def err_tag(exc: BaseException) -> str:
    """
    Extract safe error tag from exception for logging

    Returns:
        Sanitized message, capped at 120 characters
    """
    for attr in ("safe_message", "message"):
        msg = getattr(exc, attr, None)
        if isinstance(msg, str) and msg:
            text = msg
            break
    else:
        text = str(exc)

    text = re.sub(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}", "***@***", text)
    text = re.sub(r"\b(?:Bearer\s+)?[A-Za-z0-9._-]{16,}\b", "****", text)

    return text[:120] if text.strip() else exc.__class__.__name__


def get_client_ip(request) -> str:
    """
    Get client IP address from request safely
    """
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "unknown")
