"""Booking status rules."""
from __future__ import annotations

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"

BOOKING_STATUSES = (CONFIRMED, PENDING, CANCELLED)

_TRANSITIONS = {
    PENDING: {PENDING, CONFIRMED, CANCELLED},
    CONFIRMED: {CONFIRMED, PENDING, CANCELLED},
    CANCELLED: {CANCELLED},
}

# Fields a plain update may not touch.
PROTECTED_FIELDS = ("id", "userId", "createdAt", "confirmedAt", "status", "confirmationCode")


def is_valid_status(value: str | None) -> bool:
    return value in BOOKING_STATUSES


def can_transition(current: str | None, target: str) -> bool:
    """Cancelled is terminal; every other move between known statuses is allowed."""
    allowed = _TRANSITIONS.get(current or PENDING)
    return allowed is not None and target in allowed
