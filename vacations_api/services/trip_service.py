"""
Trip catalogue use cases: listing, search, details with booking stats and
employee maintenance of trip records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from vacations_api.core.utils import new_id, now_iso, to_int, to_number, without
from vacations_api.repositories.json_storage import JsonStore, get_store

SORT_FIELDS = ("price", "destination", "duration")
DEFAULT_LIST_LIMIT = 100


class TripError(Exception):
    """Base exception for trip workflows."""


class TripNotFoundError(TripError):
    pass


class InvalidTripError(TripError):
    pass


@dataclass
class TripFilters:
    destination: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    availability: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    sort_by: str = "price"
    sort_order: str = "asc"
    limit: Optional[int] = DEFAULT_LIST_LIMIT


def _sort_key(sort_by: str):
    if sort_by == "destination":
        return lambda trip: str(trip.get("destination") or "").lower()
    if sort_by == "duration":
        return lambda trip: to_number(trip.get("duration"), 0.0)
    return lambda trip: to_number(trip.get("price"), 0.0)


def _dates(trip: dict) -> list[str]:
    return [d for d in trip.get("datesAvailable") or [] if isinstance(d, str)]


def _check_fields(payload: dict) -> None:
    if "duration" in payload:
        duration = payload["duration"]
        if isinstance(duration, bool) or not isinstance(duration, (int, float)) or duration < 0:
            raise InvalidTripError("Duration must be a non-negative number")
    dates = payload.get("datesAvailable")
    if dates is not None and (not isinstance(dates, list) or not all(isinstance(d, str) for d in dates)):
        raise InvalidTripError("datesAvailable must be a list of date strings")


def apply_filters(trips: list[dict], filters: TripFilters) -> list[dict]:
    result = list(trips)
    if filters.category and filters.category != "all":
        result = [t for t in result if t.get("category") == filters.category]
    if filters.destination:
        term = filters.destination.lower()
        result = [t for t in result if term in str(t.get("destination") or "").lower()]
    if filters.min_price is not None:
        result = [t for t in result if to_number(t.get("price"), 0.0) >= filters.min_price]
    if filters.max_price is not None:
        result = [t for t in result if to_number(t.get("price"), 0.0) <= filters.max_price]
    if filters.availability:
        result = [t for t in result if filters.availability in (t.get("datesAvailable") or [])]
    if filters.start_date:
        result = [t for t in result if any(d >= filters.start_date for d in _dates(t))]
    if filters.end_date:
        result = [t for t in result if any(d <= filters.end_date for d in _dates(t))]
    return result


def booking_stats(bookings: list[dict]) -> dict:
    total = len(bookings)
    return {
        "totalBookings": total,
        "confirmedBookings": sum(1 for b in bookings if b.get("status") == "confirmed"),
        "pendingBookings": sum(1 for b in bookings if b.get("status") == "pending"),
        "cancelledBookings": sum(1 for b in bookings if b.get("status") == "cancelled"),
        "totalRevenue": sum(to_number(b.get("totalPrice"), 0.0) for b in bookings),
        "averageGroupSize": (sum(to_int(b.get("travelers"), 1) for b in bookings) / total) if total else 0,
    }


@dataclass
class TripService:
    """Reads and maintains the trip catalogue."""

    @property
    def store(self) -> JsonStore:
        return get_store()

    def get(self, trip_id: str) -> Optional[dict]:
        return self.store.get("trips").find({"id": trip_id}).value()

    def require(self, trip_id: str) -> dict:
        trip = self.get(trip_id)
        if not trip:
            raise TripNotFoundError("Trip not found")
        return trip

    # -------------------------------------- reads --------------------------------------
    def list_trips(self, filters: TripFilters) -> list[dict]:
        trips = apply_filters(self.store.get("trips").value(), filters)
        sort_by = filters.sort_by if filters.sort_by in SORT_FIELDS else "price"
        trips.sort(key=_sort_key(sort_by), reverse=filters.sort_order == "desc")
        if filters.limit:
            trips = trips[: filters.limit]
        return [
            {**without(trip, "datesAvailable"), "hasAvailability": bool(trip.get("datesAvailable"))}
            for trip in trips
        ]

    def search(self, filters: TripFilters, *, travelers: int = 1, include_hotels: bool = True,
               include_car_rentals: bool = True) -> list[dict]:
        travelers = max(1, travelers)
        results = []
        for trip in apply_filters(self.store.get("trips").value(), filters):
            price = to_number(trip.get("price"), 0.0)
            item = {**trip, "totalPrice": price * travelers, "pricePerPerson": trip.get("price"), "travelers": travelers}
            if not include_hotels:
                item.pop("hotels", None)
            if not include_car_rentals:
                item.pop("carRentals", None)
            results.append(item)
        return results

    def details(self, trip_id: str, *, include_booking_stats: bool = False, date: Optional[str] = None) -> dict:
        trip = self.require(trip_id)
        if not include_booking_stats:
            return trip
        bookings = self.store.get("bookings").filter({"tripId": trip_id}).value()
        dates = _dates(trip)
        return {
            **trip,
            "stats": booking_stats(bookings),
            "datesAvailable": [d for d in dates if d >= date] if date else dates,
        }

    # -------------------------------------- writes --------------------------------------
    def create(self, payload: dict) -> dict:
        if not payload.get("destination") or not payload.get("price"):
            raise InvalidTripError("Missing required fields")
        if to_number(payload.get("price")) is None or to_number(payload.get("price")) < 0:
            raise InvalidTripError("Price must be a positive number")
        _check_fields(payload)
        trip = {
            "id": new_id(),
            **without(payload, "id"),
            "datesAvailable": payload.get("datesAvailable") or [],
            "createdAt": now_iso(),
        }
        self.store.get("trips").push(trip).write()
        return trip

    def update(self, trip_id: str, payload: dict) -> dict:
        self.require(trip_id)
        if "price" in payload and to_number(payload.get("price")) is None:
            raise InvalidTripError("Price must be a number")
        _check_fields(payload)
        updates = {**without(payload, "id", "createdAt"), "updatedAt": now_iso()}
        return self.store.get("trips").find({"id": trip_id}).assign(updates).write()

    def delete(self, trip_id: str) -> int:
        """Remove the trip and the favorites pointing at it; returns favorites removed."""
        self.require(trip_id)
        self.store.get("trips").remove({"id": trip_id})
        removed = self.store.get("favorites").remove({"tripId": trip_id}).value()
        self.store.write()
        return len(removed)


def filters_from_query(params: dict) -> TripFilters:
    return TripFilters(
        destination=params.get("destination") or None,
        category=params.get("category") or None,
        min_price=to_number(params.get("minPrice")),
        max_price=to_number(params.get("maxPrice")),
        availability=params.get("availability") or None,
        start_date=params.get("startDate") or None,
        end_date=params.get("endDate") or None,
        sort_by=params.get("sortBy") or "price",
        sort_order=params.get("sortOrder") or "asc",
        limit=max(0, to_int(params.get("limit"), DEFAULT_LIST_LIMIT)),
    )


