"""Audit trail for sensitive operations."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
import logging

from vacations_api.core.utils import new_id, now_iso, parse_datetime
from vacations_api.repositories.json_storage import JsonStore, StorageError, get_store

logger = logging.getLogger(__name__)

AUDIT_STATUSES = ("success", "failure")


class AuditError(Exception):
    pass


class InvalidAuditEntryError(AuditError):
    pass


def record(
    user_id: Optional[str],
    action: str,
    resource: str,
    resource_id: Optional[str],
    *,
    details: Optional[dict[str, Any]] = None,
    status: str = "success",
    reason: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Optional[dict]:
    """Append an audit entry. A failed write is logged; the caller's action stands."""
    entry = {
        "id": new_id(),
        "userId": user_id,
        "action": action,
        "resource": resource,
        "resourceId": resource_id,
        "timestamp": now_iso(),
        "ipAddress": ip_address or "unknown",
        "userAgent": user_agent or "unknown",
        "details": details or {},
        "status": status if status in AUDIT_STATUSES else "success",
    }
    if reason:
        entry["reason"] = reason
    try:
        get_store().get("auditLogs").push(entry).write()
    except StorageError:
        logger.exception("Could not write audit entry %s %s/%s", action, resource, resource_id)
        return None
    return entry


@dataclass
class AuditQuery:
    user_id: Optional[str] = None
    action: Optional[str] = None
    resource: Optional[str] = None
    resource_id: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


@dataclass
class AuditService:
    @property
    def store(self) -> JsonStore:
        return get_store()

    def log(self, user_id: str, payload: dict, *, ip_address: str, user_agent: str) -> dict:
        action = payload.get("action")
        resource = payload.get("resource")
        resource_id = payload.get("resourceId")
        if not action or not resource or not resource_id:
            raise InvalidAuditEntryError("action, resource and resourceId are required")
        status = payload.get("status") or "success"
        if status not in AUDIT_STATUSES:
            raise InvalidAuditEntryError("status must be success or failure")
        details = payload.get("details")
        if details is not None and not isinstance(details, dict):
            raise InvalidAuditEntryError("details must be an object")
        entry = record(
            user_id,
            action,
            resource,
            str(resource_id),
            details=details,
            status=status,
            reason=payload.get("reason"),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        if entry is None:
            raise AuditError("Could not write audit entry")
        return entry

    def search(self, query: AuditQuery, *, limit: int = 50, offset: int = 0) -> dict:
        start = parse_datetime(query.start_date)
        end = parse_datetime(query.end_date)

        def matches(entry: dict) -> bool:
            if query.user_id and entry.get("userId") != query.user_id:
                return False
            if query.action and entry.get("action") != query.action:
                return False
            if query.resource and entry.get("resource") != query.resource:
                return False
            if query.resource_id and entry.get("resourceId") != query.resource_id:
                return False
            if query.status and entry.get("status") != query.status:
                return False
            stamp = parse_datetime(entry.get("timestamp"))
            if start and (stamp is None or stamp < start):
                return False
            if end and (stamp is None or stamp > end):
                return False
            return True

        logs = sorted(
            self.store.get("auditLogs").filter(matches).value(),
            key=lambda e: e.get("timestamp") or "",
            reverse=True,
        )
        limit = max(0, limit)
        offset = max(0, offset)
        return {"total": len(logs), "limit": limit, "offset": offset, "logs": logs[offset : offset + limit]}

    def for_resource(self, resource: str, resource_id: str, *, limit: int = 10) -> list[dict]:
        return self.search(AuditQuery(resource=resource, resource_id=resource_id), limit=limit)["logs"]

    def for_user(self, user_id: str, *, limit: int = 50) -> list[dict]:
        return self.search(AuditQuery(user_id=user_id), limit=limit)["logs"]
