"""
Authentication and identity related use cases.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from vacations_api.core.security import hash_password, verify_password
from vacations_api.core.utils import now_iso, without
from vacations_api.domain.seed import build_user
from vacations_api.repositories.json_storage import JsonStore, get_store
from vacations_api.services.activity_service import track_user_action
from vacations_api.services.session_service import delete_session, issue_session

MIN_PASSWORD_LENGTH = 6
PROFILE_FIELDS = ("username", "preferences")


class AuthError(Exception):
    """Base class for authentication-related exceptions."""


class RegistrationError(AuthError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class AccountDisabledError(AuthError):
    pass


class UserNotFoundError(AuthError):
    pass


@dataclass
class LoginSuccess:
    token: str
    user: dict


def public_user(user: dict) -> dict:
    """User record as returned over the API (never the password hash)."""
    return without(user, "passwordHash")


def normalize_email(value: str | None) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


@dataclass
class AuthService:
    """Handles registration, login, logout and profile reads/updates."""

    @property
    def store(self) -> JsonStore:
        return get_store()

    # -------------------------------------- helpers --------------------------------------
    def find_user_by_email(self, email: str) -> Optional[dict]:
        target = normalize_email(email)
        if not target:
            return None
        return self.store.get("users").find(lambda u: normalize_email(u.get("email")) == target).value()

    def get_user(self, user_id: str | None) -> Optional[dict]:
        if not user_id:
            return None
        return self.store.get("users").find({"id": user_id}).value()

    # -------------------------------------- registration --------------------------------------
    def register(self, username: str, email: str, password: str, role: str = "user") -> dict:
        if any(v is not None and not isinstance(v, str) for v in (username, email, password)):
            raise RegistrationError("username, email and password must be strings")
        username = (username or "").strip()
        raw_email = (email or "").strip()
        if not username or not raw_email or not password:
            raise RegistrationError("Missing required fields")
        if "@" not in raw_email:
            raise RegistrationError("Invalid email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if self.find_user_by_email(raw_email):
            raise AccountExistsError("User already exists with this email")
        user = build_user(username, raw_email, hash_password(password), role)
        self.store.get("users").push(user).write()
        return user

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str, *, ip_address: str | None = None,
              user_agent: str | None = None) -> LoginSuccess:
        if not isinstance(email, str) or not isinstance(password, str):
            raise InvalidCredentialsError("Invalid credentials")
        user = self.find_user_by_email(email)
        if not user or not verify_password(password or "", user.get("passwordHash")):
            raise InvalidCredentialsError("Invalid credentials")
        if (user.get("status") or "active") != "active":
            raise AccountDisabledError("Account is not active")
        self.store.get("users").find({"id": user["id"]}).assign({"lastLoginAt": now_iso()}).write()
        token = issue_session(user["id"])
        track_user_action(
            user["id"],
            "login",
            "User logged in",
            {"email": user.get("email")},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return LoginSuccess(token=token, user=public_user(user))

    def logout(self, token: str, user_id: str | None) -> None:
        delete_session(token)
        if user_id:
            track_user_action(user_id, "logout", "User logged out")

    # -------------------------------------- profile --------------------------------------
    def profile(self, user_id: str) -> dict:
        user = self.get_user(user_id)
        if not user:
            raise UserNotFoundError("User not found")
        return public_user(user)

    def update_profile(self, user_id: str, payload: dict) -> dict:
        user = self.get_user(user_id)
        if not user:
            raise UserNotFoundError("User not found")
        updates: dict = {}
        username = payload.get("username")
        if username is not None:
            username = str(username).strip()
            if not username:
                raise RegistrationError("Username cannot be empty")
            updates["username"] = username
        preferences = payload.get("preferences")
        if preferences is not None:
            if not isinstance(preferences, dict):
                raise RegistrationError("Preferences must be an object")
            updates["preferences"] = {**(user.get("preferences") or {}), **preferences}
        if updates:
            updates["updatedAt"] = now_iso()
            self.store.get("users").find({"id": user_id}).assign(updates).write()
        return public_user(user)

    def bookings_for_user(self, user_id: str) -> list[dict]:
        """Bookings joined with the trip fields the manage-vacations page shows."""
        trips = self.store.get("trips")
        result = []
        for booking in self.store.get("bookings").filter({"userId": user_id}).value():
            trip = trips.find({"id": booking.get("tripId")}).value()
            result.append(
                {
                    **booking,
                    "destination": trip["destination"] if trip else "Unknown Destination",
                    "imageUrl": trip.get("imageUrl", "") if trip else "",
                    "duration": (trip.get("duration") or 0) if trip else 0,
                }
            )
        return result
