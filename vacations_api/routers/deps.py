"""Request dependencies shared by the routers (current user, role gates)."""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request

from vacations_api.core.rate_limiter import client_ip
from vacations_api.domain.roles import is_admin, is_employee
from vacations_api.repositories.json_storage import get_store
from vacations_api.services.role_service import RoleService
from vacations_api.services.session_service import bearer_token, resolve_session


def _load_user(request: Request) -> Optional[dict]:
    token = bearer_token(request)
    if not token:
        return None
    user_id = resolve_session(token)
    if not user_id:
        raise HTTPException(401, "Invalid or expired token")
    user = get_store().get("users").find({"id": user_id}).value()
    if not user:
        raise HTTPException(404, "User not found")
    if (user.get("status") or "active") != "active":
        raise HTTPException(403, "Account is not active")
    request.state.user = user
    return user


def get_current_user(request: Request) -> dict:
    user = _load_user(request)
    if user is None:
        raise HTTPException(401, "Authentication required")
    return user


def get_optional_user(request: Request) -> Optional[dict]:
    """Current user when a valid bearer token is present, else None."""
    try:
        return _load_user(request)
    except HTTPException:
        return None


def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if not is_admin(user):
        raise HTTPException(403, "Admin access required")
    return user


def require_employee(user: dict = Depends(get_current_user)) -> dict:
    if not is_employee(user):
        raise HTTPException(403, "Employee access required")
    return user


def client_meta(request: Request) -> tuple[str, str]:
    """(ip address, user agent) of the caller."""
    return client_ip(request), request.headers.get("user-agent") or "unknown"


def role_of(user: dict) -> str:
    """Effective access-control role name (customer, agent, supervisor, admin, system)."""
    return "admin" if is_admin(user) else RoleService().role_name(user)


def require_role(user: dict, *names: str) -> None:
    if role_of(user) not in names:
        raise HTTPException(403, "Insufficient permissions")
