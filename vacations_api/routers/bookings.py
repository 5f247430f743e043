from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from vacations_api.core.utils import to_int
from vacations_api.domain.roles import is_employee
from vacations_api.routers.deps import client_meta, get_current_user, require_employee
from vacations_api.services import audit_service
from vacations_api.services.booking_service import (
    BookingForbiddenError,
    BookingNotFoundError,
    BookingQuery,
    BookingService,
    InvalidBookingError,
    InvalidStatusTransitionError,
    TripNotFoundError,
)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])
booking_service = BookingService()


def _visible_booking(booking_id: str, user: dict) -> dict:
    try:
        booking = booking_service.get(booking_id)
    except BookingNotFoundError:
        raise HTTPException(404, "Booking not found")
    if booking.get("userId") != user["id"] and not is_employee(user):
        raise HTTPException(403, "You do not have access to this booking")
    return booking


@router.get("")
def list_bookings(request: Request, user: dict = Depends(require_employee)):
    params = request.query_params
    query = BookingQuery(
        status=params.get("status") or None,
        start_date=params.get("startDate") or None,
        end_date=params.get("endDate") or None,
        search=params.get("search") or None,
        sort_by=params.get("sortBy") or "createdAt",
        sort_order=params.get("sortOrder") or "desc",
        limit=max(0, to_int(params.get("limit"), 0)) or None,
    )
    return booking_service.list_bookings(query)


@router.get("/{booking_id}")
def get_booking(booking_id: str, user: dict = Depends(get_current_user)):
    return _visible_booking(booking_id, user)


@router.post("", status_code=201)
def create_booking(request: Request, payload: dict, user: dict = Depends(get_current_user)):
    ip, user_agent = client_meta(request)
    try:
        return booking_service.create(user["id"], payload, ip_address=ip, user_agent=user_agent)
    except TripNotFoundError:
        raise HTTPException(404, "Trip not found")
    except InvalidBookingError as exc:
        raise HTTPException(400, str(exc))


@router.put("/{booking_id}/status")
def update_status(booking_id: str, payload: dict, user: dict = Depends(get_current_user)):
    try:
        return booking_service.change_status(
            booking_id,
            payload.get("status"),
            actor=user,
            actor_is_employee=is_employee(user),
        )
    except InvalidBookingError as exc:
        raise HTTPException(400, str(exc))
    except BookingNotFoundError:
        raise HTTPException(404, "Booking not found")
    except BookingForbiddenError as exc:
        raise HTTPException(403, str(exc))
    except InvalidStatusTransitionError as exc:
        raise HTTPException(409, str(exc))


@router.put("/{booking_id}")
def update_booking(booking_id: str, payload: dict, user: dict = Depends(get_current_user)):
    _visible_booking(booking_id, user)
    try:
        return booking_service.update(booking_id, payload)
    except InvalidBookingError as exc:
        raise HTTPException(400, str(exc))


@router.delete("/{booking_id}", status_code=204)
def delete_booking(booking_id: str, request: Request, user: dict = Depends(require_employee)):
    try:
        booking = booking_service.delete(booking_id)
    except BookingNotFoundError:
        raise HTTPException(404, "Booking not found")
    ip, user_agent = client_meta(request)
    audit_service.record(
        user["id"],
        "delete",
        "booking",
        booking_id,
        details={"confirmationCode": booking.get("confirmationCode"), "ownerId": booking.get("userId")},
        ip_address=ip,
        user_agent=user_agent,
    )
    return Response(status_code=204)
