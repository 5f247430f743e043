"""
Booking use cases: create, list, status changes, edits and removal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import logging

from vacations_api.core.security import confirmation_code
from vacations_api.core.utils import new_id, now_iso, to_int, to_number, without
from vacations_api.domain.bookings import (
    CANCELLED,
    CONFIRMED,
    PENDING,
    PROTECTED_FIELDS,
    can_transition,
    is_valid_status,
)
from vacations_api.domain.promotions import discount_for
from vacations_api.repositories.json_storage import JsonStore, get_store
from vacations_api.services.activity_service import track_user_action
from vacations_api.services.notification_service import notify
from vacations_api.services.promotion_service import PromotionError, PromotionService

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("tripId", "fullName", "email", "startDate")
SORT_FIELDS = ("createdAt", "startDate", "totalPrice")
# Derived at creation time; client values are ignored.
CREATE_DERIVED_FIELDS = ("travelers", "totalPrice", "discountCode", "discountAmount", "updatedAt")


class BookingError(Exception):
    """Base exception for booking workflows."""


class BookingNotFoundError(BookingError):
    pass


class TripNotFoundError(BookingError):
    pass


class InvalidBookingError(BookingError):
    pass


class InvalidStatusTransitionError(BookingError):
    pass


class BookingForbiddenError(BookingError):
    pass


@dataclass
class BookingQuery:
    status: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    search: Optional[str] = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    limit: Optional[int] = None


def _sort_value(booking: dict, field: str):
    if field == "totalPrice":
        return to_number(booking.get("totalPrice"), 0.0)
    return booking.get(field) or ""


@dataclass
class BookingService:
    """Every booking mutation goes through here so activity and notifications stay in step."""

    @property
    def store(self) -> JsonStore:
        return get_store()

    def get(self, booking_id: str) -> dict:
        booking = self.store.get("bookings").find({"id": booking_id}).value()
        if not booking:
            raise BookingNotFoundError("Booking not found")
        return booking

    # -------------------------------------- listing --------------------------------------
    def list_bookings(self, query: BookingQuery) -> list[dict]:
        bookings = list(self.store.get("bookings").value())
        if query.status:
            bookings = [b for b in bookings if b.get("status") == query.status]
        if query.start_date:
            bookings = [b for b in bookings if (b.get("startDate") or "") >= query.start_date]
        if query.end_date:
            bookings = [b for b in bookings if (b.get("startDate") or "") <= query.end_date]
        if query.search:
            term = query.search.lower()
            fields = ("fullName", "email", "confirmationCode", "id")
            bookings = [b for b in bookings if any(term in str(b.get(f) or "").lower() for f in fields)]
        sort_by = query.sort_by if query.sort_by in SORT_FIELDS else "createdAt"
        bookings.sort(key=lambda b: _sort_value(b, sort_by), reverse=query.sort_order != "asc")
        if query.limit and query.limit > 0:
            bookings = bookings[: query.limit]
        return bookings

    # -------------------------------------- create --------------------------------------
    def create(self, user_id: str, payload: dict, *, ip_address: str | None = None,
               user_agent: str | None = None) -> dict:
        missing = [name for name in REQUIRED_FIELDS if not payload.get(name)]
        if missing:
            raise InvalidBookingError(f"Missing required fields: {', '.join(missing)}")
        if not all(isinstance(payload[name], str) for name in REQUIRED_FIELDS):
            raise InvalidBookingError(f"{', '.join(REQUIRED_FIELDS)} must be strings")
        trip = self.store.get("trips").find({"id": payload["tripId"]}).value()
        if not trip:
            raise TripNotFoundError("Trip not found")
        travelers = to_int(payload.get("travelers"), 1)
        if travelers < 1:
            raise InvalidBookingError("travelers must be at least 1")

        total_price = to_number(payload.get("totalPrice"))
        if total_price is None:
            total_price = to_number(trip.get("price"), 0.0) * travelers
        if total_price < 0:
            raise InvalidBookingError("totalPrice cannot be negative")

        discount_amount = 0.0
        code = payload.get("discountCode") or ""
        if not isinstance(code, str):
            raise InvalidBookingError("discountCode must be a string")
        code = code.strip()
        if code:
            try:
                result = PromotionService().validate(code, destination=trip.get("destination"), total_price=total_price)
            except PromotionError as exc:
                raise InvalidBookingError(f"Invalid discount code: {exc}") from exc
            discount_amount = discount_for(result["promotion"], total_price)
            code = result["promotion"]["code"]

        booking = {
            **without(payload, *PROTECTED_FIELDS, *CREATE_DERIVED_FIELDS),
            "id": new_id(),
            "userId": user_id,
            "tripId": payload["tripId"],
            "travelers": travelers,
            "tripType": payload.get("tripType") or "roundtrip",
            "totalPrice": round(max(0.0, total_price - discount_amount), 2),
            "status": PENDING,
            "confirmationCode": confirmation_code(),
            "confirmedAt": "",
            "createdAt": now_iso(),
        }
        if code:
            booking["discountCode"] = code
            booking["discountAmount"] = discount_amount
        self.store.get("bookings").push(booking).write()
        logger.info("Booking %s created for trip %s", booking["id"], booking["tripId"])
        track_user_action(
            user_id,
            "complete_booking",
            f"Booked {trip.get('destination')}",
            {"bookingId": booking["id"], "tripId": trip["id"], "totalPrice": booking["totalPrice"]},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return booking

    # -------------------------------------- status --------------------------------------
    def change_status(self, booking_id: str, status: str, *, actor: dict, actor_is_employee: bool) -> dict:
        if not is_valid_status(status):
            raise InvalidBookingError("Invalid status. Must be one of: confirmed, pending, cancelled")
        booking = self.get(booking_id)
        if not actor_is_employee and (status != CANCELLED or booking.get("userId") != actor.get("id")):
            raise BookingForbiddenError("You can only cancel your own bookings")
        current = booking.get("status") or PENDING
        if not can_transition(current, status):
            raise InvalidStatusTransitionError(f"Cannot change status from {current} to {status}")

        updates = {"status": status, "updatedAt": now_iso()}
        if status == CONFIRMED and not booking.get("confirmedAt"):
            updates["confirmedAt"] = now_iso()
        booking = self.store.get("bookings").find({"id": booking_id}).assign(updates).write()

        if current != status:
            self._after_status_change(booking, status, actor)
        return booking

    def _after_status_change(self, booking: dict, status: str, actor: dict) -> None:
        owner = booking.get("userId")
        code = booking.get("confirmationCode")
        if status == CONFIRMED:
            notify(
                owner,
                "Booking confirmed",
                f"Your booking {code} has been confirmed.",
                "booking",
                priority="high",
                related_id=booking["id"],
            )
        elif status == CANCELLED:
            track_user_action(
                actor.get("id"),
                "cancel_booking",
                f"Cancelled booking {code}",
                {"bookingId": booking["id"], "ownerId": owner},
            )
            notify(
                owner,
                "Booking cancelled",
                f"Your booking {code} has been cancelled.",
                "booking",
                priority="high",
                related_id=booking["id"],
            )

    # -------------------------------------- edit / delete --------------------------------------
    def update(self, booking_id: str, payload: dict) -> dict:
        self.get(booking_id)
        updates = without(payload, *PROTECTED_FIELDS)
        if "travelers" in updates:
            travelers = to_int(updates["travelers"], 0)
            if travelers < 1:
                raise InvalidBookingError("travelers must be at least 1")
            updates["travelers"] = travelers
        if "totalPrice" in updates:
            price = to_number(updates["totalPrice"])
            if price is None or price < 0:
                raise InvalidBookingError("totalPrice must be a positive number")
            updates["totalPrice"] = price
        updates["updatedAt"] = now_iso()
        return self.store.get("bookings").find({"id": booking_id}).assign(updates).write()

    def delete(self, booking_id: str) -> dict:
        booking = self.get(booking_id)
        self.store.get("bookings").remove({"id": booking_id}).write()
        return booking
