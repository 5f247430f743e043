from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from vacations_api.core.utils import to_int
from vacations_api.routers.deps import client_meta, get_current_user, require_role, role_of
from vacations_api.services.audit_service import AuditError, AuditQuery, AuditService, InvalidAuditEntryError

router = APIRouter(prefix="/api/audit", tags=["audit"])
audit_service = AuditService()


@router.post("", status_code=201)
def log_entry(request: Request, payload: dict, user: dict = Depends(get_current_user)):
    ip, user_agent = client_meta(request)
    try:
        return audit_service.log(user["id"], payload, ip_address=ip, user_agent=user_agent)
    except InvalidAuditEntryError as exc:
        raise HTTPException(400, str(exc))
    except AuditError as exc:
        raise HTTPException(500, str(exc))


@router.get("")
def search_logs(request: Request, user: dict = Depends(get_current_user)):
    require_role(user, "admin", "supervisor")
    params = request.query_params
    query = AuditQuery(
        user_id=params.get("userId") or None,
        action=params.get("action") or None,
        resource=params.get("resource") or None,
        resource_id=params.get("resourceId") or None,
        status=params.get("status") or None,
        start_date=params.get("startDate") or None,
        end_date=params.get("endDate") or None,
    )
    return audit_service.search(query, limit=to_int(params.get("limit"), 50), offset=to_int(params.get("offset"), 0))


@router.get("/resource/{resource}/{resource_id}")
def resource_logs(resource: str, resource_id: str, request: Request, user: dict = Depends(get_current_user)):
    require_role(user, "admin", "supervisor")
    return audit_service.for_resource(resource, resource_id, limit=to_int(request.query_params.get("limit"), 10))


@router.get("/user/{user_id}")
def user_logs(user_id: str, request: Request, user: dict = Depends(get_current_user)):
    if user["id"] != user_id and role_of(user) not in ("admin", "supervisor"):
        raise HTTPException(403, "Insufficient permissions")
    return audit_service.for_user(user_id, limit=to_int(request.query_params.get("limit"), 50))
