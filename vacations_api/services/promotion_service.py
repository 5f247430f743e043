"""
Promotion codes: listing, validation against a booking and admin CRUD.

Status is never trusted from the stored record; it is re-derived from the
start and end dates every time a promotion is read or written.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from vacations_api.core.utils import new_id, now_iso, to_number, utcnow, without
from vacations_api.domain.promotions import (
    DISCOUNT_TYPES,
    derive_status,
    discount_for,
    ineligibility_reason,
)
from vacations_api.repositories.json_storage import JsonStore, get_store

REQUIRED_FIELDS = ("code", "description", "discountType", "discountValue", "startDate", "endDate")


class PromotionError(Exception):
    """Base exception for promotion workflows."""


class PromotionNotFoundError(PromotionError):
    pass


class InvalidPromotionError(PromotionError):
    pass


class PromotionExistsError(PromotionError):
    pass


class PromotionNotApplicableError(PromotionError):
    pass


def _normalize_code(code) -> str:
    return str(code or "").strip().upper()


@dataclass
class PromotionService:
    @property
    def store(self) -> JsonStore:
        return get_store()

    def _with_status(self, promotion: dict) -> dict:
        status = derive_status(promotion.get("startDate"), promotion.get("endDate"), utcnow())
        if promotion.get("status") != status:
            promotion["status"] = status
        return promotion

    def list_promotions(self, status: Optional[str] = None) -> list[dict]:
        promotions = [self._with_status(p) for p in self.store.get("promotions").value()]
        if status:
            promotions = [p for p in promotions if p.get("status") == status]
        return promotions

    def by_code(self, code: str) -> dict:
        target = _normalize_code(code)
        promotion = self.store.get("promotions").find(lambda p: _normalize_code(p.get("code")) == target).value()
        if not promotion:
            raise PromotionNotFoundError("Promotion not found")
        return self._with_status(promotion)

    def validate(self, code: str, *, destination: Optional[str] = None, total_price=None) -> dict:
        if not _normalize_code(code):
            raise InvalidPromotionError("Promotion code is required")
        promotion = self.by_code(code)
        price = to_number(total_price)
        reason = ineligibility_reason(promotion, destination, price)
        if reason:
            raise PromotionNotApplicableError(reason)
        return {
            "valid": True,
            "promotion": promotion,
            "discountAmount": discount_for(promotion, price) if price is not None else 0,
        }

    # -------------------------------------- admin --------------------------------------
    def _check_fields(self, payload: dict) -> None:
        if "discountType" in payload and payload["discountType"] not in DISCOUNT_TYPES:
            raise InvalidPromotionError("discountType must be percentage or fixed")
        if "discountValue" in payload:
            value = to_number(payload["discountValue"])
            if value is None or value < 0:
                raise InvalidPromotionError("discountValue must be a positive number")

    def create(self, payload: dict, created_by: str) -> dict:
        missing = [name for name in REQUIRED_FIELDS if payload.get(name) in (None, "")]
        if missing:
            raise InvalidPromotionError(f"Missing required fields: {', '.join(missing)}")
        self._check_fields(payload)
        code = _normalize_code(payload["code"])
        if self.store.get("promotions").find(lambda p: _normalize_code(p.get("code")) == code).value():
            raise PromotionExistsError("Promotion code already exists")
        promotion = {
            "id": new_id(),
            **without(payload, "id", "status", "createdAt", "createdBy"),
            "code": code,
            "discountValue": to_number(payload["discountValue"]),
            "restrictions": payload.get("restrictions") or "",
            "createdAt": now_iso(),
            "createdBy": created_by,
        }
        self._with_status(promotion)
        self.store.get("promotions").push(promotion).write()
        return promotion

    def update(self, promotion_id: str, payload: dict, updated_by: str) -> dict:
        promotions = self.store.get("promotions")
        if not promotions.find({"id": promotion_id}).value():
            raise PromotionNotFoundError("Promotion not found")
        self._check_fields(payload)
        updates = without(payload, "id", "status", "createdAt", "createdBy")
        if "code" in updates:
            code = _normalize_code(updates["code"])
            clash = promotions.find(lambda p: _normalize_code(p.get("code")) == code and p.get("id") != promotion_id)
            if clash.value():
                raise PromotionExistsError("Promotion code already exists")
            updates["code"] = code
        if "discountValue" in updates:
            updates["discountValue"] = to_number(updates["discountValue"])
        updates.update({"updatedAt": now_iso(), "updatedBy": updated_by})
        promotion = promotions.find({"id": promotion_id}).assign(updates).value()
        self._with_status(promotion)
        self.store.write()
        return promotion

    def delete(self, promotion_id: str) -> None:
        removed = self.store.get("promotions").remove({"id": promotion_id}).value()
        if not removed:
            raise PromotionNotFoundError("Promotion not found")
        self.store.write()
