"""
Settings API Routes - lookup master data
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import LookupCreate, LookupUpdate
from tourdesk.services.settings_service import SettingsService, LOOKUPS
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import columns_dict

router = APIRouter(prefix="/settings", tags=["Settings"])


def get_service(kind: str, db: Session) -> SettingsService:
    try:
        return SettingsService(db, kind)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown settings type '{kind}'")


@router.get("")
async def list_lookup_kinds(
    current_user = Depends(get_current_active_user)
):
    """Available lookup types"""
    return {"kinds": sorted(LOOKUPS.keys())}


@router.get("/{kind}")
async def list_lookups(
    kind: str,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = get_service(kind, db)
    return [columns_dict(record) for record in service.get_all(include_inactive)]


@router.get("/{kind}/{record_id}")
async def get_lookup(
    kind: str,
    record_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    record = get_service(kind, db).get_by_id(record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Record not found")
    return columns_dict(record)


@router.post("/{kind}", dependencies=[Depends(PermissionChecker(["settings:create"]))])
async def create_lookup(
    kind: str,
    data: LookupCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = get_service(kind, db)
    try:
        record = service.create(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, service.model.__name__, record.id,
        f"Created {kind} '{record.name}'"
    )
    db.commit()
    db.refresh(record)
    return columns_dict(record)


@router.patch("/{kind}/{record_id}", dependencies=[Depends(PermissionChecker(["settings:edit"]))])
async def update_lookup(
    kind: str,
    record_id: int,
    data: LookupUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        record = get_service(kind, db).update(record_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not record:
        raise HTTPException(status_code=404, detail="Record not found")
    db.commit()
    db.refresh(record)
    return columns_dict(record)


@router.delete("/{kind}/{record_id}", dependencies=[Depends(PermissionChecker(["settings:delete"]))])
async def delete_lookup(
    kind: str,
    record_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Delete a lookup; one still referenced elsewhere is deactivated instead"""
    service = get_service(kind, db)
    outcome = service.delete(record_id)
    if outcome is None:
        raise HTTPException(status_code=404, detail="Record not found")
    AuditService(db).log_request(
        request, current_user, AuditAction.DELETE, service.model.__name__, record_id,
        f"{outcome.capitalize()} {kind} {record_id}"
    )
    db.commit()
    if outcome == "deactivated":
        return {"message": "Record is in use and has been deactivated", "status": outcome}
    return {"message": "Record deleted successfully", "status": outcome}
