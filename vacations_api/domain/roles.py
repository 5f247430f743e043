"""Role names and how account roles map onto access-control roles."""
from __future__ import annotations

ACCOUNT_ROLES = ("user", "manager", "admin", "agent")
EMPLOYEE_ROLES = {"manager", "admin", "agent"}

ACCESS_ROLE_FOR_ACCOUNT = {
    "admin": "admin",
    "manager": "supervisor",
    "agent": "agent",
}


def access_role_name(account_role: str | None) -> str:
    return ACCESS_ROLE_FOR_ACCOUNT.get((account_role or "").lower(), "customer")


def is_admin(user: dict | None) -> bool:
    if not user:
        return False
    return bool(user.get("isAdmin")) or user.get("role") == "admin"


def is_employee(user: dict | None) -> bool:
    if not user:
        return False
    return bool(user.get("isEmployee")) or is_admin(user) or user.get("role") in EMPLOYEE_ROLES
