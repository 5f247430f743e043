"""User activity tracking (searches, trip views, favorites, bookings)."""
from __future__ import annotations

from typing import Any, Optional
import logging

from vacations_api.core.utils import new_id, now_iso
from vacations_api.repositories.json_storage import StorageError, get_store

logger = logging.getLogger(__name__)

ACTION_TYPES = (
    "login",
    "logout",
    "search",
    "view_trip",
    "add_favorite",
    "remove_favorite",
    "start_booking",
    "complete_booking",
    "cancel_booking",
)


def track_user_action(
    user_id: str,
    action_type: str,
    details: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
    *,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> bool:
    """Append an activity record. Tracking never fails the calling request."""
    if action_type not in ACTION_TYPES:
        logger.warning("Ignoring unknown activity type %r", action_type)
        return False
    activity = {
        "id": new_id(),
        "userId": user_id,
        "actionType": action_type,
        "timestamp": now_iso(),
        "details": details,
        "metadata": metadata or {},
    }
    if ip_address:
        activity["ipAddress"] = ip_address
    if user_agent:
        activity["userAgent"] = user_agent
    try:
        get_store().get("activities").push(activity).write()
    except StorageError:
        logger.exception("Could not record %s activity for %s", action_type, user_id)
        return False
    return True
