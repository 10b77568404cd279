"""
Locations API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import LocationCreate, LocationUpdate
from tourdesk.services.location_service import LocationService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import location_dict

router = APIRouter(prefix="/locations", tags=["Locations"])


@router.get("")
async def list_locations(
    search: str = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List destinations"""
    return [location_dict(loc) for loc in LocationService(db).get_all(search, include_inactive)]


@router.get("/{location_id}")
async def get_location(
    location_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    location = LocationService(db).get_by_id(location_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    return location_dict(location)


@router.post("", dependencies=[Depends(PermissionChecker(["locations:create"]))])
async def create_location(
    location_data: LocationCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    location = LocationService(db).create(location_data)
    db.commit()
    db.refresh(location)
    return location_dict(location)


@router.patch("/{location_id}", dependencies=[Depends(PermissionChecker(["locations:edit"]))])
async def update_location(
    location_id: int,
    location_data: LocationUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    location = LocationService(db).update(location_id, location_data)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    db.commit()
    db.refresh(location)
    return location_dict(location)


@router.delete("/{location_id}", dependencies=[Depends(PermissionChecker(["locations:delete"]))])
async def delete_location(
    location_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        deleted = LocationService(db).delete(location_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Location not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "Location", location_id)
    db.commit()
    return {"message": "Location deleted successfully"}
