"""Promotion status and discount rules."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from vacations_api.core.utils import parse_datetime, to_number

DISCOUNT_TYPES = ("percentage", "fixed")
PROMOTION_STATUSES = ("active", "expired", "upcoming")


def derive_status(start: str | None, end: str | None, now: datetime) -> str:
    start_at = parse_datetime(start)
    end_at = parse_datetime(end)
    # A date-only end covers the whole day.
    if end_at is not None and end and len(str(end)) <= 10:
        end_at = end_at.replace(hour=23, minute=59, second=59)
    if start_at is not None and now < start_at:
        return "upcoming"
    if end_at is not None and now > end_at:
        return "expired"
    return "active"


def discount_for(promotion: dict, total_price: float) -> float:
    """Discount amount for total_price, capped so the price never goes below zero."""
    value = to_number(promotion.get("discountValue"), 0.0) or 0.0
    if promotion.get("discountType") == "percentage":
        amount = total_price * value / 100.0
    else:
        amount = value
    return round(max(0.0, min(amount, total_price)), 2)


def ineligibility_reason(promotion: dict, destination: Optional[str], total_price: Optional[float]) -> Optional[str]:
    """Return why promotion cannot apply, or None when it can."""
    if promotion.get("status") != "active":
        return f"Promotion is {promotion.get('status')}"
    eligible = promotion.get("eligibleDestinations") or []
    if eligible and destination is not None:
        if destination.lower() not in {d.lower() for d in eligible}:
            return "Promotion is not valid for this destination"
    minimum = to_number(promotion.get("minBookingValue"))
    if minimum and total_price is not None and total_price < minimum:
        return f"Minimum booking value is {minimum:g}"
    return None
