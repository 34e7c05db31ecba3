"""
Session identifiers.
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime

_BASE36 = string.digits + string.ascii_uppercase


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rest = divmod(number, 36)
        digits.append(_BASE36[rest])
    return "".join(reversed(digits))


def new_session_id() -> str:
    """ps_ + 32 hex chars."""
    return f"ps_{secrets.token_hex(16)}"


def new_reference(now: datetime) -> str:
    """
    Human-friendly reference, e.g. NEB-LXK3Q2A1-7F3K9Q.

    Millisecond timestamp plus a random suffix: unique for the lifetime of
    a session.
    """
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"NEB-{_base36(millis)}-{suffix}"


__all__ = ("new_session_id", "new_reference")
