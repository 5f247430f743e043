from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from vacations_api.routers.deps import get_current_user, require_role, role_of
from vacations_api.services.role_service import (
    InvalidAssignmentError,
    PermissionNotFoundError,
    RoleNotFoundError,
    RoleService,
    UserNotFoundError,
)

router = APIRouter(prefix="/api/roles", tags=["roles"])
role_service = RoleService()


def require_self_or_admin(user: dict, user_id: str) -> None:
    if user["id"] != user_id and role_of(user) != "admin":
        raise HTTPException(403, "Insufficient permissions")


@router.get("/permissions")
def list_permissions(user: dict = Depends(get_current_user)):
    require_role(user, "admin", "supervisor")
    return role_service.permissions()


@router.get("")
def list_roles(user: dict = Depends(get_current_user)):
    require_role(user, "admin")
    return role_service.roles()


@router.get("/users/{user_id}")
def user_role(user_id: str, user: dict = Depends(get_current_user)):
    require_self_or_admin(user, user_id)
    try:
        return role_service.user_role(user_id)
    except UserNotFoundError:
        raise HTTPException(404, "User not found")


@router.post("/users/{user_id}")
def assign_role(user_id: str, payload: dict, user: dict = Depends(get_current_user)):
    require_role(user, "admin")
    try:
        return role_service.assign(user_id, payload.get("roleId"), user["id"], payload.get("expiresAt"))
    except InvalidAssignmentError as exc:
        raise HTTPException(400, str(exc))
    except RoleNotFoundError:
        raise HTTPException(404, "Role not found")
    except UserNotFoundError:
        raise HTTPException(404, "User not found")


@router.get("/users/{user_id}/has-permission/{permission_name}")
def has_permission(user_id: str, permission_name: str, user: dict = Depends(get_current_user)):
    require_self_or_admin(user, user_id)
    try:
        return {"hasPermission": role_service.has_permission(user_id, permission_name)}
    except PermissionNotFoundError:
        raise HTTPException(404, "Permission not found")
    except UserNotFoundError:
        raise HTTPException(404, "User not found")


@router.get("/{role_id}")
def role_details(role_id: str, user: dict = Depends(get_current_user)):
    require_role(user, "admin")
    try:
        return role_service.role(role_id)
    except RoleNotFoundError:
        raise HTTPException(404, "Role not found")
