from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from vacations_api.routers.deps import get_current_user, require_admin
from vacations_api.services.notification_service import (
    InvalidNotificationError,
    NotificationNotFoundError,
    NotificationService,
    parse_limit,
)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
notification_service = NotificationService()


@router.get("")
def list_notifications(
    status: Optional[str] = None,
    type_: Optional[str] = Query(None, alias="type"),
    limit: Optional[str] = None,
    user: dict = Depends(get_current_user),
):
    return notification_service.list_for(user["id"], status=status, type_=type_, limit=parse_limit(limit))


@router.get("/count")
def notification_count(user: dict = Depends(get_current_user)):
    return notification_service.counts(user["id"])


@router.get("/preferences")
def get_preferences(user: dict = Depends(get_current_user)):
    return notification_service.preferences(user["id"])


@router.put("/preferences")
def update_preferences(payload: dict, user: dict = Depends(get_current_user)):
    try:
        return notification_service.update_preferences(user["id"], payload)
    except InvalidNotificationError as exc:
        raise HTTPException(400, str(exc))


@router.put("/mark-all-read")
def mark_all_read(user: dict = Depends(get_current_user)):
    updated = notification_service.mark_all_read(user["id"])
    return {"success": True, "message": "All notifications marked as read", "updated": updated}


@router.post("", status_code=201)
def create_notification(payload: dict, admin: dict = Depends(require_admin)):
    try:
        return notification_service.create(payload.get("userId"), payload)
    except InvalidNotificationError as exc:
        raise HTTPException(400, str(exc))


@router.get("/{notification_id}")
def get_notification(notification_id: str, user: dict = Depends(get_current_user)):
    try:
        return notification_service.get(user["id"], notification_id)
    except NotificationNotFoundError:
        raise HTTPException(404, "Notification not found")


@router.put("/{notification_id}/read")
def mark_read(notification_id: str, user: dict = Depends(get_current_user)):
    try:
        return notification_service.mark_read(user["id"], notification_id)
    except NotificationNotFoundError:
        raise HTTPException(404, "Notification not found")


@router.delete("/{notification_id}")
def delete_notification(notification_id: str, user: dict = Depends(get_current_user)):
    try:
        notification_service.delete(user["id"], notification_id)
    except NotificationNotFoundError:
        raise HTTPException(404, "Notification not found")
    return {"success": True}
