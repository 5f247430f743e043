from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from vacations_api.routers.deps import client_meta, require_admin
from vacations_api.services import audit_service
from vacations_api.services.admin_service import AdminService
from vacations_api.services.auth_service import AccountExistsError, RegistrationError, UserNotFoundError

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])
admin_service = AdminService()


def _audit(request: Request, actor: dict, action: str, user_id: str, details: dict | None = None) -> None:
    ip, user_agent = client_meta(request)
    audit_service.record(actor["id"], action, "user", user_id, details=details, ip_address=ip, user_agent=user_agent)


@router.get("/stats")
def stats():
    return admin_service.stats()


@router.get("/analytics/users")
def user_analytics():
    return admin_service.user_analytics()


@router.get("/bookings/recent")
def recent_bookings():
    return admin_service.recent_bookings()


@router.get("/users")
def list_users():
    return admin_service.list_users()


@router.post("/users", status_code=201)
def create_user(request: Request, payload: dict, actor: dict = Depends(require_admin)):
    try:
        user = admin_service.create_user(payload)
    except AccountExistsError as exc:
        raise HTTPException(409, str(exc))
    except RegistrationError as exc:
        raise HTTPException(400, exc.message)
    _audit(request, actor, "create", user["id"], {"role": user.get("role")})
    return user


@router.put("/users/{user_id}")
def update_user(user_id: str, request: Request, payload: dict, actor: dict = Depends(require_admin)):
    try:
        user = admin_service.update_user(user_id, payload)
    except UserNotFoundError:
        raise HTTPException(404, "User not found")
    except AccountExistsError as exc:
        raise HTTPException(409, str(exc))
    except RegistrationError as exc:
        raise HTTPException(400, exc.message)
    _audit(request, actor, "update", user_id, {"fields": sorted(payload.keys())})
    return user


@router.post("/users/{user_id}/reset-password")
def reset_password(user_id: str, request: Request, payload: dict | None = None,
                   actor: dict = Depends(require_admin)):
    payload = payload or {}
    try:
        temporary = admin_service.reset_password(user_id, payload.get("newPassword"))
    except UserNotFoundError:
        raise HTTPException(404, "User not found")
    except RegistrationError as exc:
        raise HTTPException(400, exc.message)
    _audit(request, actor, "reset_password", user_id)
    body = {"message": "Password reset successfully"}
    if temporary:
        body["temporaryPassword"] = temporary
    return body


@router.delete("/users/{user_id}")
def delete_user(user_id: str, request: Request, actor: dict = Depends(require_admin)):
    if user_id == actor["id"]:
        raise HTTPException(400, "You cannot delete your own account")
    try:
        admin_service.delete_user(user_id)
    except UserNotFoundError:
        raise HTTPException(404, "User not found")
    _audit(request, actor, "delete", user_id)
    return {"message": "User deleted successfully"}
