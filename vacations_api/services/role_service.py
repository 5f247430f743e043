"""
Role-based access control: roles, permissions and per-user role assignments.

A user's effective role is their stored assignment when one exists and has
not expired; otherwise it follows the account role (see domain.roles).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from vacations_api.core.utils import now_iso, parse_datetime, utcnow
from vacations_api.domain.roles import access_role_name
from vacations_api.repositories.json_storage import JsonStore, get_store


class RoleError(Exception):
    pass


class RoleNotFoundError(RoleError):
    pass


class PermissionNotFoundError(RoleError):
    pass


class UserNotFoundError(RoleError):
    pass


class InvalidAssignmentError(RoleError):
    pass


@dataclass
class RoleService:
    @property
    def store(self) -> JsonStore:
        return get_store()

    def permissions(self) -> list[dict]:
        return self.store.get("permissions").value()

    def roles(self) -> list[dict]:
        return self.store.get("roles").value()

    def role(self, role_id) -> dict:
        role = self.store.get("roles").find({"id": str(role_id)}).value()
        if not role:
            raise RoleNotFoundError("Role not found")
        return role

    def _role_by_name(self, name: str) -> Optional[dict]:
        return self.store.get("roles").find({"name": name}).value()

    def _live_assignment(self, user_id: str) -> Optional[dict]:
        assignment = self.store.get("roleAssignments").find({"userId": user_id}).value()
        if not assignment:
            return None
        expires_at = parse_datetime(assignment.get("expiresAt"))
        if expires_at is not None and expires_at < utcnow():
            return None
        return assignment

    def user_role(self, user_id: str) -> dict:
        """Effective role of a user as {userId, role, assignedAt, assignedBy, expiresAt}."""
        user = self.store.get("users").find({"id": user_id}).value()
        if not user:
            raise UserNotFoundError("User not found")
        assignment = self._live_assignment(user_id)
        role = None
        if assignment:
            role = self.store.get("roles").find({"id": str(assignment.get("roleId"))}).value()
        if role:
            return {
                "userId": user_id,
                "role": role,
                "assignedAt": assignment.get("assignedAt"),
                "assignedBy": assignment.get("assignedBy"),
                "expiresAt": assignment.get("expiresAt"),
            }
        return {
            "userId": user_id,
            "role": self._role_by_name(access_role_name(user.get("role"))),
            "assignedAt": user.get("createdAt"),
            "assignedBy": "system",
            "expiresAt": None,
        }

    def role_name(self, user: dict) -> str:
        role = self.user_role(user["id"])["role"]
        return role["name"] if role else access_role_name(user.get("role"))

    def assign(self, user_id: str, role_id, assigned_by: str, expires_at: Optional[str] = None) -> dict:
        if not role_id:
            raise InvalidAssignmentError("roleId is required")
        if expires_at and parse_datetime(expires_at) is None:
            raise InvalidAssignmentError("expiresAt must be an ISO date")
        role = self.role(role_id)
        if not self.store.get("users").find({"id": user_id}).value():
            raise UserNotFoundError("User not found")
        assignment = {
            "userId": user_id,
            "roleId": role["id"],
            "assignedAt": now_iso(),
            "assignedBy": assigned_by,
            "expiresAt": expires_at or None,
        }
        assignments = self.store.get("roleAssignments")
        if assignments.find({"userId": user_id}).value():
            assignments.find({"userId": user_id}).assign(assignment).write()
        else:
            assignments.push(assignment).write()
        return {**assignment, "role": role}

    def has_permission(self, user_id: str, permission_name: str) -> bool:
        permission = self.store.get("permissions").find({"name": permission_name}).value()
        if not permission:
            raise PermissionNotFoundError("Permission not found")
        role = self.user_role(user_id)["role"]
        return bool(role) and permission["id"] in (role.get("permissions") or [])
