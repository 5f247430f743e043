from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from vacations_api.routers.deps import require_admin
from vacations_api.services.promotion_service import (
    InvalidPromotionError,
    PromotionExistsError,
    PromotionNotApplicableError,
    PromotionNotFoundError,
    PromotionService,
)

router = APIRouter(prefix="/api/promotions", tags=["promotions"])
promotion_service = PromotionService()


@router.get("")
def list_promotions(status: Optional[str] = None):
    return promotion_service.list_promotions(status)


@router.get("/code/{code}")
def promotion_by_code(code: str):
    try:
        return promotion_service.by_code(code)
    except PromotionNotFoundError:
        raise HTTPException(404, "Promotion not found")


@router.post("/validate")
def validate_promotion(payload: dict):
    try:
        return promotion_service.validate(
            payload.get("code"),
            destination=payload.get("destination"),
            total_price=payload.get("totalPrice"),
        )
    except PromotionNotFoundError:
        raise HTTPException(404, "Promotion not found")
    except (InvalidPromotionError, PromotionNotApplicableError) as exc:
        raise HTTPException(400, str(exc))


@router.post("", status_code=201)
def create_promotion(payload: dict, user: dict = Depends(require_admin)):
    try:
        return promotion_service.create(payload, created_by=user["id"])
    except InvalidPromotionError as exc:
        raise HTTPException(400, str(exc))
    except PromotionExistsError as exc:
        raise HTTPException(409, str(exc))


@router.put("/{promotion_id}")
def update_promotion(promotion_id: str, payload: dict, user: dict = Depends(require_admin)):
    try:
        return promotion_service.update(promotion_id, payload, updated_by=user["id"])
    except PromotionNotFoundError:
        raise HTTPException(404, "Promotion not found")
    except InvalidPromotionError as exc:
        raise HTTPException(400, str(exc))
    except PromotionExistsError as exc:
        raise HTTPException(409, str(exc))


@router.delete("/{promotion_id}")
def delete_promotion(promotion_id: str, user: dict = Depends(require_admin)):
    try:
        promotion_service.delete(promotion_id)
    except PromotionNotFoundError:
        raise HTTPException(404, "Promotion not found")
    return {"message": "Promotion deleted successfully"}
