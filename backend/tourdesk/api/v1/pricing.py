"""
Pricing API Routes - tour cost, variant, package price and line item calculators
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import (
    PricingCalculateRequest, VariantPricingCalculateRequest, PackagePriceRequest, LineItemsRequest
)
from tourdesk.services.pricing_service import PricingService

router = APIRouter(
    prefix="/pricing",
    tags=["Pricing"],
    dependencies=[Depends(PermissionChecker(["pricing:view"]))]
)


@router.post("/calculate")
async def calculate_price(
    data: PricingCalculateRequest,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Price a tour from hotel and transport rate cards"""
    try:
        return PricingService(db).calculate(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/calculate-variant")
async def calculate_variant_price(
    data: VariantPricingCalculateRequest,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        return PricingService(db).calculate_variant(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/package-price")
async def get_package_price(
    data: PackagePriceRequest,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Price from the single pricing period matching date, meal plan and rooms"""
    try:
        result = PricingService(db).package_price(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail="Tour package not found")
    return result


@router.post("/line-items")
async def calculate_line_items(
    data: LineItemsRequest,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        return PricingService(db).line_items(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
