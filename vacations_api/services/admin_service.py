"""
Back-office use cases: dashboard stats, user analytics and user management.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
import logging
import secrets

from vacations_api.core.security import hash_password
from vacations_api.core.utils import now_iso, parse_datetime, to_number, utcnow
from vacations_api.domain.bookings import BOOKING_STATUSES
from vacations_api.domain.roles import ACCOUNT_ROLES, EMPLOYEE_ROLES
from vacations_api.repositories.json_storage import JsonStore, get_store
from vacations_api.services.auth_service import (
    MIN_PASSWORD_LENGTH,
    AccountExistsError,
    AuthService,
    RegistrationError,
    UserNotFoundError,
    normalize_email,
    public_user,
)
from vacations_api.services.session_service import delete_user_sessions

logger = logging.getLogger(__name__)

ACTIVE_WINDOW_DAYS = 30
RECENT_BOOKINGS = 20
POPULAR_DESTINATIONS = 5


class InvalidRoleError(RegistrationError):
    pass


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _revenue_since(bookings: list[dict], since: datetime) -> float:
    total = 0.0
    for booking in bookings:
        created = parse_datetime(booking.get("createdAt"))
        if created is not None and created >= since:
            total += to_number(booking.get("totalPrice"), 0.0)
    return round(total, 2)


@dataclass
class AdminService:
    @property
    def store(self) -> JsonStore:
        return get_store()

    def _require_user(self, user_id: str) -> dict:
        user = self.store.get("users").find({"id": user_id}).value()
        if not user:
            raise UserNotFoundError("User not found")
        return user

    # -------------------------------------- dashboard --------------------------------------
    def stats(self, now: Optional[datetime] = None) -> dict:
        now = now or utcnow()
        users = self.store.get("users").value()
        bookings = self.store.get("bookings").value()
        activities = self.store.get("activities").value()

        active_since = now - timedelta(days=ACTIVE_WINDOW_DAYS)
        active_users = 0
        for user in users:
            last_login = parse_datetime(user.get("lastLoginAt"))
            if last_login is not None and last_login >= active_since:
                active_users += 1

        today = _start_of_day(now)
        # Weeks start on Sunday.
        week_start = today - timedelta(days=(today.weekday() + 1) % 7)
        month_start = today.replace(day=1)

        trip_counts = Counter(b.get("tripId") for b in bookings if b.get("tripId"))
        trips = self.store.get("trips")
        popular = []
        for trip_id, count in trip_counts.most_common(POPULAR_DESTINATIONS):
            trip = trips.find({"id": trip_id}).value()
            popular.append({
                "tripId": trip_id,
                "destination": trip["destination"] if trip else "Unknown Destination",
                "count": count,
            })

        views = sum(1 for a in activities if a.get("actionType") == "view_trip")
        by_status = {status: 0 for status in BOOKING_STATUSES}
        for booking in bookings:
            status = booking.get("status") or "pending"
            by_status[status] = by_status.get(status, 0) + 1

        return {
            "totalUsers": len(users),
            "activeUsers": active_users,
            "totalBookings": len(bookings),
            "revenueToday": _revenue_since(bookings, today),
            "revenueThisWeek": _revenue_since(bookings, week_start),
            "revenueThisMonth": _revenue_since(bookings, month_start),
            "popularDestinations": popular,
            "conversionRate": len(bookings) / max(1, views),
            "bookingsByStatus": by_status,
        }

    def user_analytics(self) -> list[dict]:
        bookings = self.store.get("bookings").value()
        activities = self.store.get("activities").value()
        result = []
        for user in self.store.get("users").value():
            mine = [b for b in bookings if b.get("userId") == user["id"]]
            actions = [a for a in activities if a.get("userId") == user["id"]]
            summary = Counter(a.get("actionType") for a in actions)
            last = max((a.get("timestamp") or "" for a in actions), default=None)
            result.append({
                "userId": user["id"],
                "username": user.get("username"),
                "email": user.get("email"),
                "totalBookings": len(mine),
                "totalSpent": round(sum(to_number(b.get("totalPrice"), 0.0) for b in mine), 2),
                "lastActivity": last or user.get("lastLoginAt"),
                "registrationDate": user.get("createdAt"),
                "activitySummary": dict(summary),
            })
        return result

    def recent_bookings(self, limit: int = RECENT_BOOKINGS) -> list[dict]:
        bookings = sorted(self.store.get("bookings").value(), key=lambda b: b.get("createdAt") or "", reverse=True)
        return bookings[:limit]

    # -------------------------------------- users --------------------------------------
    def list_users(self) -> list[dict]:
        return [public_user(u) for u in self.store.get("users").value()]

    def create_user(self, payload: dict) -> dict:
        role = payload.get("role") or "user"
        if role not in ACCOUNT_ROLES:
            raise InvalidRoleError("Invalid role")
        user = AuthService().register(payload.get("username"), payload.get("email"), payload.get("password"), role)
        return public_user(user)

    def update_user(self, user_id: str, payload: dict) -> dict:
        self._require_user(user_id)
        updates: dict = {}
        if payload.get("username") is not None:
            username = str(payload["username"]).strip()
            if not username:
                raise RegistrationError("Username cannot be empty")
            updates["username"] = username
        if payload.get("email") is not None:
            email = str(payload["email"]).strip()
            if "@" not in email:
                raise RegistrationError("Invalid email address")
            clash = self.store.get("users").find(
                lambda u: normalize_email(u.get("email")) == normalize_email(email) and u.get("id") != user_id
            )
            if clash.value():
                raise AccountExistsError("User already exists with this email")
            updates["email"] = email
        if payload.get("role") is not None:
            role = payload["role"]
            if role not in ACCOUNT_ROLES:
                raise InvalidRoleError("Invalid role")
            updates.update({"role": role, "isAdmin": role == "admin", "isEmployee": role in EMPLOYEE_ROLES})
        if payload.get("status") is not None:
            if payload["status"] not in ("active", "inactive", "suspended"):
                raise RegistrationError("Invalid status")
            updates["status"] = payload["status"]
        updates["updatedAt"] = now_iso()
        if updates.get("status", "active") != "active":
            delete_user_sessions(user_id)
        user = self.store.get("users").find({"id": user_id}).assign(updates).write()
        return public_user(user)

    def reset_password(self, user_id: str, new_password: Optional[str] = None) -> Optional[str]:
        """Set a new password; returns the generated temporary one when none was given."""
        self._require_user(user_id)
        temporary = None
        if not new_password:
            temporary = secrets.token_urlsafe(9)
            new_password = temporary
        elif len(new_password) < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        self.store.get("users").find({"id": user_id}).assign(
            {"passwordHash": hash_password(new_password), "updatedAt": now_iso()}
        )
        # Existing sessions stop working once the password changes.
        delete_user_sessions(user_id)
        self.store.write()
        return temporary

    def delete_user(self, user_id: str) -> dict:
        user = self._require_user(user_id)
        self.store.get("users").remove({"id": user_id})
        for name in ("favorites", "roleAssignments", "twoFactorSetups", "twoFactorCodes", "notificationPreferences"):
            self.store.get(name).remove({"userId": user_id})
        delete_user_sessions(user_id)
        self.store.write()
        logger.info("Deleted user %s and dependent records", user_id)
        return public_user(user)
