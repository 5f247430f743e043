"""
In-app notifications and per-user notification preferences.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import logging

from vacations_api.core.utils import new_id, now_iso, to_int, without
from vacations_api.repositories.json_storage import JsonStore, StorageError, get_store

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("booking", "system", "policy", "promotion", "training")
PRIORITIES = ("low", "medium", "high")
EMAIL_FREQUENCIES = ("immediate", "daily", "weekly")
DEFAULT_LIMIT = 10


class NotificationError(Exception):
    """Base exception for notification workflows."""


class NotificationNotFoundError(NotificationError):
    pass


class InvalidNotificationError(NotificationError):
    pass


def default_preferences(user_id: str) -> dict:
    return {
        "userId": user_id,
        "emailEnabled": True,
        "inAppEnabled": True,
        "categories": {name: True for name in NOTIFICATION_TYPES},
        "emailFrequency": "immediate",
    }


@dataclass
class NotificationService:
    @property
    def store(self) -> JsonStore:
        return get_store()

    def _owned(self, user_id: str, notification_id: str) -> dict:
        notification = self.store.get("notifications").find(
            {"id": notification_id, "userId": user_id}
        ).value()
        if not notification:
            raise NotificationNotFoundError("Notification not found")
        return notification

    # -------------------------------------- reads --------------------------------------
    def list_for(self, user_id: str, *, status: Optional[str] = None, type_: Optional[str] = None,
                 limit: Optional[int] = DEFAULT_LIMIT) -> list[dict]:
        def matches(n: dict) -> bool:
            if n.get("userId") != user_id:
                return False
            if status and n.get("status") != status:
                return False
            return not type_ or n.get("type") == type_

        items = self.store.get("notifications").filter(matches).value()
        items = sorted(items, key=lambda n: n.get("createdAt") or "", reverse=True)
        return items[:limit] if limit else items

    def counts(self, user_id: str) -> dict:
        items = self.store.get("notifications").filter({"userId": user_id}).value()
        unread = sum(1 for n in items if n.get("status") == "unread")
        return {"total": len(items), "unread": unread, "read": len(items) - unread}

    def get(self, user_id: str, notification_id: str) -> dict:
        return self._owned(user_id, notification_id)

    # -------------------------------------- writes --------------------------------------
    def create(self, user_id: str, payload: dict) -> dict:
        title = (payload.get("title") or "").strip()
        content = (payload.get("content") or "").strip()
        if not user_id or not title or not content:
            raise InvalidNotificationError("userId, title and content are required")
        type_ = payload.get("type") or "system"
        if type_ not in NOTIFICATION_TYPES:
            raise InvalidNotificationError("Invalid notification type")
        priority = payload.get("priority") or "medium"
        if priority not in PRIORITIES:
            raise InvalidNotificationError("Invalid priority")
        notification = {
            "id": new_id(),
            "userId": user_id,
            "title": title,
            "content": content,
            "type": type_,
            "status": "unread",
            "priority": priority,
            "createdAt": now_iso(),
            "actions": payload.get("actions") or [],
        }
        if payload.get("relatedId"):
            notification["relatedId"] = payload["relatedId"]
        self.store.get("notifications").insert(notification).write()
        return notification

    def mark_read(self, user_id: str, notification_id: str) -> dict:
        self._owned(user_id, notification_id)
        return self.store.get("notifications").find(
            {"id": notification_id, "userId": user_id}
        ).assign({"status": "read", "readAt": now_iso()}).write()

    def mark_all_read(self, user_id: str) -> int:
        unread = self.store.get("notifications").filter({"userId": user_id, "status": "unread"}).value()
        stamp = now_iso()
        for notification in unread:
            notification.update({"status": "read", "readAt": stamp})
        if unread:
            self.store.write()
        return len(unread)

    def delete(self, user_id: str, notification_id: str) -> None:
        self._owned(user_id, notification_id)
        self.store.get("notifications").remove({"id": notification_id, "userId": user_id}).write()

    # -------------------------------------- preferences --------------------------------------
    def preferences(self, user_id: str) -> dict:
        stored = self.store.get("notificationPreferences").find({"userId": user_id}).value()
        if not stored:
            return default_preferences(user_id)
        merged = {**default_preferences(user_id), **stored}
        merged["categories"] = {**default_preferences(user_id)["categories"], **(stored.get("categories") or {})}
        return merged

    def update_preferences(self, user_id: str, payload: dict) -> dict:
        frequency = payload.get("emailFrequency")
        if frequency is not None and frequency not in EMAIL_FREQUENCIES:
            raise InvalidNotificationError("Invalid email frequency")
        categories = payload.get("categories")
        if categories is not None and not isinstance(categories, dict):
            raise InvalidNotificationError("categories must be an object")
        current = self.preferences(user_id)
        updated = {**current, **without(payload, "userId", "categories"), "userId": user_id}
        if categories is not None:
            updated["categories"] = {**current["categories"], **categories}
        prefs = self.store.get("notificationPreferences")
        if prefs.find({"userId": user_id}).value():
            prefs.find({"userId": user_id}).assign(updated).write()
        else:
            prefs.push(updated).write()
        return updated


def notify(
    user_id: str,
    title: str,
    content: str,
    type_: str = "system",
    *,
    priority: str = "medium",
    related_id: Optional[str] = None,
    actions: Optional[list] = None,
) -> Optional[dict]:
    """
    Deliver an in-app notification unless the user turned in-app delivery or
    the category off. Delivery problems are logged and never raised.
    """
    service = NotificationService()
    prefs = service.preferences(user_id)
    if not prefs.get("inAppEnabled", True) or not prefs.get("categories", {}).get(type_, True):
        logger.debug("Notification %r for %s suppressed by preferences", title, user_id)
        return None
    payload = {"title": title, "content": content, "type": type_, "priority": priority, "actions": actions}
    if related_id:
        payload["relatedId"] = related_id
    try:
        return service.create(user_id, payload)
    except (NotificationError, StorageError):
        logger.exception("Could not notify %s", user_id)
        return None


def parse_limit(value, default: int = DEFAULT_LIMIT) -> int:
    return max(0, to_int(value, default))
