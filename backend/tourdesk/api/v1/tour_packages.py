"""
Tour Packages API Routes - reusable package templates, their pricing periods and variants
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import (
    TourPackageCreate, TourPackageUpdate,
    TourPackagePricingCreate, TourPackagePricingUpdate,
    PackageVariantCreate, PackageVariantUpdate
)
from tourdesk.services.tour_package_service import TourPackageService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import (
    tour_package_dict, tour_package_summary, package_pricing_dict, variant_dict
)

router = APIRouter(prefix="/tour-packages", tags=["Tour Packages"])


def get_package_or_404(service: TourPackageService, package_id: int):
    package = service.get_by_id(package_id)
    if not package:
        raise HTTPException(status_code=404, detail="Tour package not found")
    return package


# ==================== PACKAGES ====================

@router.get("")
async def list_tour_packages(
    location_id: int = None,
    tour_package_type: str = None,
    tour_category: str = None,
    archived: bool = None,
    search: str = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List package templates"""
    packages = TourPackageService(db).get_all(location_id, tour_package_type, tour_category, archived, search)
    return [tour_package_summary(p) for p in packages]


@router.get("/{package_id}")
async def get_tour_package(
    package_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    return tour_package_dict(get_package_or_404(TourPackageService(db), package_id))


@router.post("", dependencies=[Depends(PermissionChecker(["tour_packages:create"]))])
async def create_tour_package(
    package_data: TourPackageCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageService(db)
    try:
        package = service.create(package_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "TourPackage", package.id,
        f"Created tour package '{package.tour_package_name}'"
    )
    db.commit()
    return tour_package_dict(get_package_or_404(service, package.id))


@router.patch("/{package_id}", dependencies=[Depends(PermissionChecker(["tour_packages:edit"]))])
async def update_tour_package(
    package_id: int,
    package_data: TourPackageUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageService(db)
    try:
        package = service.update(package_id, package_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not package:
        raise HTTPException(status_code=404, detail="Tour package not found")
    db.commit()
    db.expire_all()
    return tour_package_dict(get_package_or_404(service, package_id))


@router.delete("/{package_id}", dependencies=[Depends(PermissionChecker(["tour_packages:delete"]))])
async def delete_tour_package(
    package_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    if not TourPackageService(db).delete(package_id):
        raise HTTPException(status_code=404, detail="Tour package not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "TourPackage", package_id)
    db.commit()
    return {"message": "Tour package deleted successfully"}


@router.post("/{package_id}/duplicate", dependencies=[Depends(PermissionChecker(["tour_packages:create"]))])
async def duplicate_tour_package(
    package_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Copy a package with its itineraries, variants and pricing periods"""
    service = TourPackageService(db)
    copy = service.duplicate(package_id)
    if not copy:
        raise HTTPException(status_code=404, detail="Tour package not found")
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "TourPackage", copy.id,
        f"Duplicated tour package {package_id}"
    )
    db.commit()
    return tour_package_dict(get_package_or_404(service, copy.id))


# ==================== PRICING PERIODS ====================

@router.get("/{package_id}/pricing")
async def list_package_pricing(
    package_id: int,
    package_variant_id: int = None,
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageService(db)
    get_package_or_404(service, package_id)
    return [package_pricing_dict(p) for p in service.get_pricings(package_id, package_variant_id, active_only)]


@router.get("/{package_id}/pricing/{pricing_id}")
async def get_package_pricing(
    package_id: int,
    pricing_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    pricing = TourPackageService(db).get_pricing(package_id, pricing_id)
    if not pricing:
        raise HTTPException(status_code=404, detail="Package pricing not found")
    return package_pricing_dict(pricing)


@router.post("/{package_id}/pricing", dependencies=[Depends(PermissionChecker(["tour_packages:create"]))])
async def create_package_pricing(
    package_id: int,
    pricing_data: TourPackagePricingCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageService(db)
    try:
        pricing = service.create_pricing(package_id, pricing_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not pricing:
        raise HTTPException(status_code=404, detail="Tour package not found")
    db.commit()
    return package_pricing_dict(service.get_pricing(package_id, pricing.id))


@router.patch("/{package_id}/pricing/{pricing_id}", dependencies=[Depends(PermissionChecker(["tour_packages:edit"]))])
async def update_package_pricing(
    package_id: int,
    pricing_id: int,
    pricing_data: TourPackagePricingUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageService(db)
    try:
        pricing = service.update_pricing(package_id, pricing_id, pricing_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not pricing:
        raise HTTPException(status_code=404, detail="Package pricing not found")
    db.commit()
    db.expire_all()
    return package_pricing_dict(service.get_pricing(package_id, pricing_id))


@router.delete("/{package_id}/pricing/{pricing_id}", dependencies=[Depends(PermissionChecker(["tour_packages:delete"]))])
async def delete_package_pricing(
    package_id: int,
    pricing_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    if not TourPackageService(db).delete_pricing(package_id, pricing_id):
        raise HTTPException(status_code=404, detail="Package pricing not found")
    db.commit()
    return {"message": "Package pricing deleted successfully"}


# ==================== VARIANTS ====================

@router.get("/{package_id}/variants")
async def list_package_variants(
    package_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageService(db)
    get_package_or_404(service, package_id)
    return [variant_dict(v) for v in service.get_variants(package_id)]


@router.post("/{package_id}/variants", dependencies=[Depends(PermissionChecker(["tour_packages:create"]))])
async def create_package_variant(
    package_id: int,
    variant_data: PackageVariantCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageService(db)
    try:
        variant = service.create_variant(package_id, variant_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not variant:
        raise HTTPException(status_code=404, detail="Tour package not found")
    db.commit()
    db.refresh(variant)
    return variant_dict(variant)


@router.patch("/{package_id}/variants/{variant_id}", dependencies=[Depends(PermissionChecker(["tour_packages:edit"]))])
async def update_package_variant(
    package_id: int,
    variant_id: int,
    variant_data: PackageVariantUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageService(db)
    try:
        variant = service.update_variant(package_id, variant_id, variant_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not variant:
        raise HTTPException(status_code=404, detail="Package variant not found")
    db.commit()
    db.refresh(variant)
    return variant_dict(variant)


@router.delete("/{package_id}/variants/{variant_id}", dependencies=[Depends(PermissionChecker(["tour_packages:delete"]))])
async def delete_package_variant(
    package_id: int,
    variant_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    if not TourPackageService(db).delete_variant(package_id, variant_id):
        raise HTTPException(status_code=404, detail="Package variant not found")
    db.commit()
    return {"message": "Package variant deleted successfully"}
