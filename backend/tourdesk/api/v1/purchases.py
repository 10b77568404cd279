"""
Purchases API Routes - Purchases and Purchase Returns
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import PurchaseDetailCreate, PurchaseDetailUpdate, PurchaseReturnCreate, PurchaseReturnUpdate
from tourdesk.services.purchase_service import PurchaseService
from tourdesk.services.document_service import DocumentService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import purchase_dict, purchase_return_dict, columns_dict, attachment

router = APIRouter(tags=["Purchases"])


# ==================== PURCHASES ====================

@router.get("/purchases")
async def list_purchases(
    tour_package_query_id: int = None,
    supplier_id: int = None,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List supplier purchases, newest first"""
    purchases = PurchaseService(db).get_all(tour_package_query_id, supplier_id, start_date, end_date)
    return [purchase_dict(s) for s in purchases]


@router.get("/purchases/{purchase_id}")
async def get_purchase(
    purchase_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    purchase = PurchaseService(db).get_by_id(purchase_id)
    if not purchase:
        raise HTTPException(status_code=404, detail="Purchase not found")
    return purchase_dict(purchase)


@router.post("/purchases", dependencies=[Depends(PermissionChecker(["purchases:create"]))])
async def create_purchase(
    purchase_data: PurchaseDetailCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        purchase = PurchaseService(db).create(purchase_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "PurchaseDetail", purchase.id,
        f"Created purchase of {purchase.price}", new_values=columns_dict(purchase)
    )
    db.commit()
    db.refresh(purchase)
    return purchase_dict(purchase)


@router.patch("/purchases/{purchase_id}", dependencies=[Depends(PermissionChecker(["purchases:edit"]))])
async def update_purchase(
    purchase_id: int,
    purchase_data: PurchaseDetailUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Update a purchase; supplied items replace the existing ones"""
    service = PurchaseService(db)
    purchase = service.get_by_id(purchase_id)
    if not purchase:
        raise HTTPException(status_code=404, detail="Purchase not found")
    old_values = columns_dict(purchase)
    try:
        purchase = service.update(purchase_id, purchase_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "PurchaseDetail", purchase_id,
        old_values=old_values, new_values=columns_dict(purchase)
    )
    db.commit()
    db.refresh(purchase)
    return purchase_dict(purchase)


@router.delete("/purchases/{purchase_id}", dependencies=[Depends(PermissionChecker(["purchases:delete"]))])
async def delete_purchase(
    purchase_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = PurchaseService(db)
    purchase = service.get_by_id(purchase_id)
    if not purchase:
        raise HTTPException(status_code=404, detail="Purchase not found")
    old_values = columns_dict(purchase)
    service.delete(purchase_id)
    AuditService(db).log_request(
        request, current_user, AuditAction.DELETE, "PurchaseDetail", purchase_id, old_values=old_values
    )
    db.commit()
    return {"message": "Purchase deleted successfully"}


@router.get("/purchases/{purchase_id}/voucher")
async def download_purchase_voucher(
    purchase_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    purchase = PurchaseService(db).get_by_id(purchase_id)
    if not purchase:
        raise HTTPException(status_code=404, detail="Purchase not found")
    documents = DocumentService()
    content = documents.render_voucher(documents.purchase_voucher(purchase))
    return attachment(content, f"purchase_voucher_{purchase.bill_number or purchase.id}.pdf", "application/pdf")


# ==================== PURCHASE RETURNS ====================

@router.get("/purchase-returns")
async def list_purchase_returns(
    purchase_detail_id: int = None,
    tour_package_query_id: int = None,
    supplier_id: int = None,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    returns = PurchaseService(db).get_returns(purchase_detail_id, tour_package_query_id, supplier_id, start_date, end_date)
    return [purchase_return_dict(r) for r in returns]


@router.get("/purchase-returns/{return_id}")
async def get_purchase_return(
    return_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    purchase_return = PurchaseService(db).get_return(return_id)
    if not purchase_return:
        raise HTTPException(status_code=404, detail="Purchase return not found")
    return purchase_return_dict(purchase_return)


@router.post("/purchase-returns", dependencies=[Depends(PermissionChecker(["purchases:create"]))])
async def create_purchase_return(
    return_data: PurchaseReturnCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        purchase_return = PurchaseService(db).create_return(return_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "PurchaseReturn", purchase_return.id,
        f"Created return of {purchase_return.amount} against purchase {purchase_return.purchase_detail_id}",
        new_values=columns_dict(purchase_return)
    )
    db.commit()
    db.refresh(purchase_return)
    return purchase_return_dict(purchase_return)


@router.patch("/purchase-returns/{return_id}", dependencies=[Depends(PermissionChecker(["purchases:edit"]))])
async def update_purchase_return(
    return_id: int,
    return_data: PurchaseReturnUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = PurchaseService(db)
    purchase_return = service.get_return(return_id)
    if not purchase_return:
        raise HTTPException(status_code=404, detail="Purchase return not found")
    old_values = columns_dict(purchase_return)
    purchase_return = service.update_return(return_id, return_data)
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "PurchaseReturn", return_id,
        old_values=old_values, new_values=columns_dict(purchase_return)
    )
    db.commit()
    db.refresh(purchase_return)
    return purchase_return_dict(purchase_return)


@router.delete("/purchase-returns/{return_id}", dependencies=[Depends(PermissionChecker(["purchases:delete"]))])
async def delete_purchase_return(
    return_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = PurchaseService(db)
    purchase_return = service.get_return(return_id)
    if not purchase_return:
        raise HTTPException(status_code=404, detail="Purchase return not found")
    old_values = columns_dict(purchase_return)
    service.delete_return(return_id)
    AuditService(db).log_request(
        request, current_user, AuditAction.DELETE, "PurchaseReturn", return_id, old_values=old_values
    )
    db.commit()
    return {"message": "Purchase return deleted successfully"}


@router.get("/purchase-returns/{return_id}/voucher")
async def download_purchase_return_voucher(
    return_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    purchase_return = PurchaseService(db).get_return(return_id)
    if not purchase_return:
        raise HTTPException(status_code=404, detail="Purchase return not found")
    documents = DocumentService()
    content = documents.render_voucher(documents.purchase_return_voucher(purchase_return))
    return attachment(content, f"purchase_return_voucher_{purchase_return.id}.pdf", "application/pdf")
