"""
Per-client attempt limits for the credential endpoints (login, register).

Counts are kept in process memory in fixed windows keyed by scope and client IP.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
import threading
import time

from fastapi import HTTPException, Request

from vacations_api.core.config import get_settings


class AttemptLimitExceeded(Exception):
    def __init__(self, retry_after: float):
        super().__init__(f"retry in {retry_after:.0f}s")
        self.retry_after = retry_after


@dataclass
class AttemptWindow:
    opened_at: float
    attempts: int = 0


@dataclass
class AttemptCounter:
    windows: dict[str, AttemptWindow] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def hit(self, key: str, *, limit: int, window_seconds: int, now: float | None = None) -> int:
        """Count one attempt for key; raises AttemptLimitExceeded past the limit."""
        now = time.time() if now is None else now
        with self._lock:
            window = self.windows.get(key)
            if window is None or now - window.opened_at >= window_seconds:
                window = self.windows[key] = AttemptWindow(opened_at=now)
            window.attempts += 1
            if window.attempts > limit:
                raise AttemptLimitExceeded(window.opened_at + window_seconds - now)
            return limit - window.attempts

    def clear(self) -> None:
        with self._lock:
            self.windows.clear()


_counter = AttemptCounter()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def limit_credential_attempts(request: Request, scope: str) -> None:
    """429 once the caller exceeds LOGIN_RATE_LIMIT attempts in the current window (0 disables)."""
    settings = get_settings()
    if settings.login_rate_limit <= 0:
        return
    try:
        _counter.hit(
            f"{scope}:{client_ip(request)}",
            limit=settings.login_rate_limit,
            window_seconds=settings.login_rate_window_seconds,
        )
    except AttemptLimitExceeded as exc:
        raise HTTPException(
            429,
            "Too many attempts. Please try again shortly.",
            headers={"Retry-After": str(max(1, math.ceil(exc.retry_after)))},
        )


def reset_limits() -> None:
    _counter.clear()
