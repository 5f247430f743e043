from fastapi import APIRouter, Depends, HTTPException

from vacations_api.routers.deps import get_current_user
from vacations_api.services.two_factor_service import TwoFactorError, TwoFactorService

router = APIRouter(prefix="/api/two-factor", tags=["two-factor"])
two_factor_service = TwoFactorService()


@router.get("/setup")
def get_setup(user: dict = Depends(get_current_user)):
    return two_factor_service.setup(user["id"])


@router.put("/setup")
def update_setup(payload: dict, user: dict = Depends(get_current_user)):
    try:
        return two_factor_service.update_setup(user["id"], payload)
    except TwoFactorError as exc:
        raise HTTPException(400, str(exc))


@router.post("/send-code")
def send_code(user: dict = Depends(get_current_user)):
    try:
        result = two_factor_service.send_code(user)
    except TwoFactorError as exc:
        raise HTTPException(400, str(exc))
    body = {"success": True, "method": result.method, "message": result.message}
    if result.dev_code:
        body["devCode"] = result.dev_code
    return body


@router.post("/verify-code")
def verify_code(payload: dict, user: dict = Depends(get_current_user)):
    try:
        two_factor_service.verify_code(user["id"], payload.get("code"))
    except TwoFactorError as exc:
        raise HTTPException(400, str(exc))
    return {"success": True, "message": "Verification successful"}


@router.post("/verify-backup-code")
def verify_backup_code(payload: dict, user: dict = Depends(get_current_user)):
    try:
        remaining = two_factor_service.verify_backup_code(user["id"], payload.get("code"))
    except TwoFactorError as exc:
        raise HTTPException(400, str(exc))
    return {"success": True, "message": "Backup code accepted", "remainingCodes": remaining}


@router.post("/generate-backup-codes")
def generate_backup_codes(user: dict = Depends(get_current_user)):
    try:
        codes = two_factor_service.regenerate_backup_codes(user["id"])
    except TwoFactorError as exc:
        raise HTTPException(400, str(exc))
    return {"success": True, "backupCodes": codes}


@router.post("/disable")
def disable(user: dict = Depends(get_current_user)):
    try:
        two_factor_service.disable(user["id"])
    except TwoFactorError as exc:
        raise HTTPException(400, str(exc))
    return {"success": True, "message": "Two-factor authentication disabled"}
