from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from vacations_api.core.utils import to_bool, to_int
from vacations_api.routers.deps import client_meta, get_optional_user, require_admin, require_employee
from vacations_api.services.activity_service import track_user_action
from vacations_api.services.trip_service import (
    InvalidTripError,
    TripNotFoundError,
    TripService,
    filters_from_query,
)

router = APIRouter(prefix="/api/trips", tags=["trips"])
trip_service = TripService()


@router.get("")
def list_trips(request: Request):
    filters = filters_from_query(dict(request.query_params))
    return trip_service.list_trips(filters)


@router.get("/search")
def search_trips(request: Request, user: Optional[dict] = Depends(get_optional_user)):
    params = dict(request.query_params)
    filters = filters_from_query(params)
    results = trip_service.search(
        filters,
        travelers=to_int(params.get("travelers"), 1),
        include_hotels=to_bool(params.get("includeHotels"), True),
        include_car_rentals=to_bool(params.get("includeCarRentals"), True),
    )
    if user:
        ip, user_agent = client_meta(request)
        track_user_action(
            user["id"],
            "search",
            f"Searched trips ({len(results)} results)",
            {"filters": params, "resultCount": len(results)},
            ip_address=ip,
            user_agent=user_agent,
        )
    return results


@router.get("/{trip_id}")
def trip_details(trip_id: str, request: Request, user: Optional[dict] = Depends(get_optional_user)):
    params = request.query_params
    try:
        trip = trip_service.details(
            trip_id,
            include_booking_stats=to_bool(params.get("includeBookingStats"), False),
            date=params.get("date") or None,
        )
    except TripNotFoundError:
        raise HTTPException(404, "Trip not found")
    if user:
        ip, user_agent = client_meta(request)
        track_user_action(
            user["id"],
            "view_trip",
            f"Viewed {trip.get('destination')}",
            {"tripId": trip_id},
            ip_address=ip,
            user_agent=user_agent,
        )
    return trip


@router.post("", status_code=201)
def create_trip(payload: dict, user: dict = Depends(require_employee)):
    try:
        return trip_service.create(payload)
    except InvalidTripError as exc:
        raise HTTPException(400, str(exc))


@router.put("/{trip_id}")
def update_trip(trip_id: str, payload: dict, user: dict = Depends(require_employee)):
    try:
        return trip_service.update(trip_id, payload)
    except TripNotFoundError:
        raise HTTPException(404, "Trip not found")
    except InvalidTripError as exc:
        raise HTTPException(400, str(exc))


@router.delete("/{trip_id}")
def delete_trip(trip_id: str, user: dict = Depends(require_admin)):
    try:
        removed = trip_service.delete(trip_id)
    except TripNotFoundError:
        raise HTTPException(404, "Trip not found")
    return {"message": "Trip deleted successfully", "favoritesRemoved": removed}
