"""
Two-factor authentication: per-user setup, one-time codes and backup codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
import logging

from vacations_api.core.config import get_settings
from vacations_api.core.mailer import send_email, smtp_configured
from vacations_api.core.security import numeric_code
from vacations_api.core.utils import now_iso, parse_datetime, to_iso, utcnow
from vacations_api.repositories.json_storage import JsonStore, get_store

logger = logging.getLogger(__name__)

METHODS = ("email", "sms", "authenticator")
BACKUP_CODE_COUNT = 5


class TwoFactorError(Exception):
    """Raised for any rejected two-factor request; the message is user facing."""


def default_setup(user_id: str) -> dict:
    return {
        "userId": user_id,
        "isEnabled": False,
        "preferredMethod": "email",
        "backupCodes": [],
        "lastUpdated": None,
    }


def generate_backup_codes(count: int = BACKUP_CODE_COUNT) -> list[str]:
    return [numeric_code(6) for _ in range(count)]


@dataclass
class SendCodeResult:
    method: str
    message: str
    delivered: bool
    dev_code: Optional[str] = None


@dataclass
class TwoFactorService:
    @property
    def settings(self):
        return get_settings()

    @property
    def store(self) -> JsonStore:
        return get_store()

    def _stored(self, user_id: str) -> Optional[dict]:
        return self.store.get("twoFactorSetups").find({"userId": user_id}).value()

    def setup(self, user_id: str) -> dict:
        return self._stored(user_id) or default_setup(user_id)

    def _save(self, user_id: str, updates: dict) -> dict:
        updates = {**updates, "userId": user_id, "lastUpdated": now_iso()}
        setups = self.store.get("twoFactorSetups")
        if self._stored(user_id):
            return setups.find({"userId": user_id}).assign(updates).write()
        return setups.push({**default_setup(user_id), **updates}).write()

    def update_setup(self, user_id: str, payload: dict) -> dict:
        current = self.setup(user_id)
        method = payload.get("preferredMethod") or current.get("preferredMethod") or "email"
        if method not in METHODS:
            raise TwoFactorError("preferredMethod must be email, sms or authenticator")
        phone = payload.get("phone", current.get("phone"))
        if method == "sms" and not phone:
            raise TwoFactorError("Phone number is required for SMS verification")
        enabled = bool(payload.get("isEnabled", current.get("isEnabled")))
        updates = {"isEnabled": enabled, "preferredMethod": method}
        if phone:
            updates["phone"] = phone
        if enabled and not current.get("isEnabled"):
            updates["backupCodes"] = generate_backup_codes()
        return self._save(user_id, updates)

    # -------------------------------------- codes --------------------------------------
    def send_code(self, user: dict) -> SendCodeResult:
        setup = self.setup(user["id"])
        if not setup.get("isEnabled"):
            raise TwoFactorError("Two-factor authentication is not enabled")
        code = numeric_code(6)
        ttl = max(30, self.settings.two_factor_code_ttl_seconds)
        codes = self.store.get("twoFactorCodes")
        codes.remove({"userId": user["id"]})
        codes.push({"userId": user["id"], "code": code, "expiresAt": to_iso(utcnow() + timedelta(seconds=ttl))}).write()

        method = setup.get("preferredMethod") or "email"
        delivered = False
        if method == "email" and smtp_configured():
            minutes = max(1, ttl // 60)
            delivered = send_email(
                "Your verification code",
                user.get("email"),
                f"<p>Your verification code is <strong>{code}</strong>. It expires in {minutes} minutes.</p>",
                f"Your verification code is {code}. It expires in {minutes} minutes.",
            )
        if not delivered:
            logger.info("Verification code for %s not delivered via %s", user["id"], method)
        return SendCodeResult(
            method=method,
            message=f"Verification code sent via {method}",
            delivered=delivered,
            dev_code=code if self.settings.app_env == "dev" and not delivered else None,
        )

    def verify_code(self, user_id: str, code: Optional[str]) -> None:
        if not code:
            raise TwoFactorError("Verification code is required")
        codes = self.store.get("twoFactorCodes")
        pending = codes.find({"userId": user_id}).value()
        if not pending:
            raise TwoFactorError("No verification code was requested")
        expires_at = parse_datetime(pending.get("expiresAt"))
        if expires_at is None or expires_at < utcnow():
            codes.remove({"userId": user_id}).write()
            raise TwoFactorError("Verification code has expired")
        if str(code).strip() != pending.get("code"):
            raise TwoFactorError("Invalid verification code")
        codes.remove({"userId": user_id}).write()

    def verify_backup_code(self, user_id: str, code: Optional[str]) -> int:
        """Consume a backup code; returns how many remain."""
        if not code:
            raise TwoFactorError("Backup code is required")
        setup = self._stored(user_id)
        if not setup or not setup.get("isEnabled"):
            raise TwoFactorError("Two-factor authentication is not enabled")
        remaining = list(setup.get("backupCodes") or [])
        if str(code).strip() not in remaining:
            raise TwoFactorError("Invalid backup code")
        remaining.remove(str(code).strip())
        self._save(user_id, {"backupCodes": remaining})
        return len(remaining)

    def regenerate_backup_codes(self, user_id: str) -> list[str]:
        setup = self._stored(user_id)
        if not setup or not setup.get("isEnabled"):
            raise TwoFactorError("Two-factor authentication is not enabled")
        codes = generate_backup_codes()
        self._save(user_id, {"backupCodes": codes})
        return codes

    def disable(self, user_id: str) -> dict:
        setup = self._stored(user_id)
        if not setup:
            raise TwoFactorError("Two-factor authentication is not set up")
        if not setup.get("isEnabled"):
            raise TwoFactorError("Two-factor authentication is already disabled")
        self.store.get("twoFactorCodes").remove({"userId": user_id})
        return self._save(user_id, {"isEnabled": False, "backupCodes": []})
