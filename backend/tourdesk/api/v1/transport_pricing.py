"""
Transport Pricing API Routes
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import TransportPricingCreate, TransportPricingUpdate
from tourdesk.services.location_service import TransportPricingService
from tourdesk.api.v1.serializers import transport_pricing_dict

router = APIRouter(prefix="/transport-pricing", tags=["Transport Pricing"])


@router.get("")
async def list_transport_pricing(
    location_id: int = None,
    vehicle_type_id: int = None,
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    pricings = TransportPricingService(db).get_all(location_id, vehicle_type_id, active_only)
    return [transport_pricing_dict(p) for p in pricings]


@router.get("/{pricing_id}")
async def get_transport_pricing(
    pricing_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    pricing = TransportPricingService(db).get_by_id(pricing_id)
    if not pricing:
        raise HTTPException(status_code=404, detail="Transport pricing not found")
    return transport_pricing_dict(pricing)


@router.post("", dependencies=[Depends(PermissionChecker(["locations:create"]))])
async def create_transport_pricing(
    pricing_data: TransportPricingCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        pricing = TransportPricingService(db).create(pricing_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(pricing)
    return transport_pricing_dict(pricing)


@router.patch("/{pricing_id}", dependencies=[Depends(PermissionChecker(["locations:edit"]))])
async def update_transport_pricing(
    pricing_id: int,
    pricing_data: TransportPricingUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        pricing = TransportPricingService(db).update(pricing_id, pricing_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not pricing:
        raise HTTPException(status_code=404, detail="Transport pricing not found")
    db.commit()
    db.refresh(pricing)
    return transport_pricing_dict(pricing)


@router.delete("/{pricing_id}", dependencies=[Depends(PermissionChecker(["locations:delete"]))])
async def delete_transport_pricing(
    pricing_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    if not TransportPricingService(db).delete(pricing_id):
        raise HTTPException(status_code=404, detail="Transport pricing not found")
    db.commit()
    return {"message": "Transport pricing deleted successfully"}
