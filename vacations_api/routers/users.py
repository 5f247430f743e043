from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from vacations_api.core.rate_limiter import limit_credential_attempts
from vacations_api.domain.roles import is_admin
from vacations_api.routers.deps import client_meta, get_current_user
from vacations_api.services.auth_service import (
    AccountDisabledError,
    AccountExistsError,
    AuthService,
    InvalidCredentialsError,
    RegistrationError,
    UserNotFoundError,
)
from vacations_api.services.session_service import bearer_token

router = APIRouter(prefix="/api/users", tags=["users"])
auth_service = AuthService()


@router.post("/register", status_code=201)
def register(request: Request, payload: dict):
    limit_credential_attempts(request, "users:register")
    try:
        user = auth_service.register(payload.get("username"), payload.get("email"), payload.get("password"))
    except AccountExistsError as exc:
        raise HTTPException(400, str(exc))
    except RegistrationError as exc:
        raise HTTPException(400, exc.message)
    return {"id": user["id"], "username": user["username"], "email": user["email"], "createdAt": user["createdAt"]}


@router.post("/login")
def login(request: Request, payload: dict):
    limit_credential_attempts(request, "users:login")
    email = payload.get("email")
    password = payload.get("password")
    if not email or not password:
        raise HTTPException(400, "Missing email or password")
    if not isinstance(email, str) or not isinstance(password, str):
        raise HTTPException(400, "Email and password must be strings")
    ip, user_agent = client_meta(request)
    try:
        result = auth_service.login(email, password, ip_address=ip, user_agent=user_agent)
    except InvalidCredentialsError:
        raise HTTPException(401, "Invalid credentials")
    except AccountDisabledError as exc:
        raise HTTPException(403, str(exc))
    return {"token": result.token, "user": result.user}


@router.post("/logout")
def logout(request: Request, user: dict = Depends(get_current_user)):
    auth_service.logout(bearer_token(request), user["id"])
    return {"message": "Logged out successfully"}


@router.get("/me")
def me(user: dict = Depends(get_current_user)):
    try:
        return auth_service.profile(user["id"])
    except UserNotFoundError:
        raise HTTPException(404, "User not found")


@router.put("/me")
def update_me(payload: dict, user: dict = Depends(get_current_user)):
    try:
        return auth_service.update_profile(user["id"], payload)
    except UserNotFoundError:
        raise HTTPException(404, "User not found")
    except RegistrationError as exc:
        raise HTTPException(400, exc.message)


@router.get("/{user_id}/bookings")
def user_bookings(user_id: str, user: dict = Depends(get_current_user)):
    if user["id"] != user_id and not is_admin(user):
        raise HTTPException(401, "Unauthorized")
    return auth_service.bookings_for_user(user_id)
