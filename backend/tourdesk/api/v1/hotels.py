"""
Hotels API Routes - hotels and their seasonal room rates
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import HotelCreate, HotelUpdate, HotelPricingCreate, HotelPricingUpdate
from tourdesk.services.location_service import HotelService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import hotel_dict, hotel_pricing_dict

router = APIRouter(prefix="/hotels", tags=["Hotels"])


@router.get("")
async def list_hotels(
    location_id: int = None,
    search: str = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    hotels = HotelService(db).get_all(location_id, search, include_inactive)
    return [hotel_dict(h) for h in hotels]


@router.get("/{hotel_id}")
async def get_hotel(
    hotel_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    hotel = HotelService(db).get_by_id(hotel_id)
    if not hotel:
        raise HTTPException(status_code=404, detail="Hotel not found")
    return hotel_dict(hotel)


@router.post("", dependencies=[Depends(PermissionChecker(["locations:create"]))])
async def create_hotel(
    hotel_data: HotelCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        hotel = HotelService(db).create(hotel_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(hotel)
    return hotel_dict(hotel)


@router.patch("/{hotel_id}", dependencies=[Depends(PermissionChecker(["locations:edit"]))])
async def update_hotel(
    hotel_id: int,
    hotel_data: HotelUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        hotel = HotelService(db).update(hotel_id, hotel_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not hotel:
        raise HTTPException(status_code=404, detail="Hotel not found")
    db.commit()
    db.refresh(hotel)
    return hotel_dict(hotel)


@router.delete("/{hotel_id}", dependencies=[Depends(PermissionChecker(["locations:delete"]))])
async def delete_hotel(
    hotel_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        deleted = HotelService(db).delete(hotel_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Hotel not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "Hotel", hotel_id)
    db.commit()
    return {"message": "Hotel deleted successfully"}


# ==================== HOTEL PRICING ====================

@router.get("/{hotel_id}/pricing")
async def list_hotel_pricing(
    hotel_id: int,
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = HotelService(db)
    if not service.get_by_id(hotel_id):
        raise HTTPException(status_code=404, detail="Hotel not found")
    return [hotel_pricing_dict(p) for p in service.get_pricings(hotel_id, active_only)]


@router.post("/{hotel_id}/pricing", dependencies=[Depends(PermissionChecker(["locations:create"]))])
async def create_hotel_pricing(
    hotel_id: int,
    pricing_data: HotelPricingCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = HotelService(db)
    if not service.get_by_id(hotel_id):
        raise HTTPException(status_code=404, detail="Hotel not found")
    try:
        pricing = service.create_pricing(hotel_id, pricing_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(pricing)
    return hotel_pricing_dict(pricing)


@router.patch("/{hotel_id}/pricing/{pricing_id}", dependencies=[Depends(PermissionChecker(["locations:edit"]))])
async def update_hotel_pricing(
    hotel_id: int,
    pricing_id: int,
    pricing_data: HotelPricingUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        pricing = HotelService(db).update_pricing(hotel_id, pricing_id, pricing_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not pricing:
        raise HTTPException(status_code=404, detail="Hotel pricing not found")
    db.commit()
    db.refresh(pricing)
    return hotel_pricing_dict(pricing)


@router.delete("/{hotel_id}/pricing/{pricing_id}", dependencies=[Depends(PermissionChecker(["locations:delete"]))])
async def delete_hotel_pricing(
    hotel_id: int,
    pricing_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    if not HotelService(db).delete_pricing(hotel_id, pricing_id):
        raise HTTPException(status_code=404, detail="Hotel pricing not found")
    db.commit()
    return {"message": "Hotel pricing deleted successfully"}
