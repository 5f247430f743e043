"""Session helpers (issue tokens, bearer lookup, revocation)."""
from __future__ import annotations

import secrets
from datetime import timedelta

from fastapi import Request

from vacations_api.core.config import get_settings
from vacations_api.core.utils import parse_datetime, to_iso, utcnow
from vacations_api.repositories.json_storage import get_store


def issue_session(user_id: str) -> str:
    """Create a new session token and persist it in the JSON store."""
    token = secrets.token_urlsafe(32)
    settings = get_settings()
    ttl = max(60, settings.session_ttl_seconds)
    now = utcnow()
    store = get_store()
    store.get("sessions").push(
        {
            "token": token,
            "userId": user_id,
            "createdAt": to_iso(now),
            "expiresAt": to_iso(now + timedelta(seconds=ttl)),
        }
    ).write()
    return token


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_session(token: str | None) -> str | None:
    """Return the user id for a live session token; expired sessions are dropped."""
    if not token:
        return None
    store = get_store()
    session = store.get("sessions").find({"token": token}).value()
    if not session:
        return None
    expires_at = parse_datetime(session.get("expiresAt"))
    if expires_at is not None and expires_at < utcnow():
        store.get("sessions").remove({"token": token}).write()
        return None
    return session.get("userId")


def delete_session(token: str) -> None:
    """Remove a session token from the store."""
    if not token:
        return
    get_store().get("sessions").remove({"token": token}).write()


def delete_user_sessions(user_id: str) -> int:
    removed = get_store().get("sessions").remove({"userId": user_id}).value()
    return len(removed)
