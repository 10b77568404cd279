"""
Receipts API Routes - money received from customers
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import ReceiptCreate, ReceiptUpdate
from tourdesk.services.receipt_service import ReceiptService
from tourdesk.services.document_service import DocumentService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import receipt_dict, columns_dict, attachment

router = APIRouter(prefix="/receipts", tags=["Receipts"])


@router.get("")
async def list_receipts(
    tour_package_query_id: int = None,
    customer_id: int = None,
    start_date: date = None,
    end_date: date = None,
    bank_account_id: int = None,
    cash_account_id: int = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    receipts = ReceiptService(db).get_all(
        tour_package_query_id, customer_id, start_date, end_date, bank_account_id, cash_account_id
    )
    return [receipt_dict(r) for r in receipts]


@router.get("/{receipt_id}")
async def get_receipt(
    receipt_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    receipt = ReceiptService(db).get_by_id(receipt_id)
    if not receipt:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return receipt_dict(receipt)


@router.post("", dependencies=[Depends(PermissionChecker(["receipts:create"]))])
async def create_receipt(
    receipt_data: ReceiptCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Record a receipt and credit the selected bank or cash account"""
    try:
        receipt = ReceiptService(db).create(receipt_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.PAYMENT_RECEIVED, "ReceiptDetail", receipt.id,
        f"Received {receipt.amount}", new_values=columns_dict(receipt)
    )
    db.commit()
    db.refresh(receipt)
    return receipt_dict(receipt)


@router.patch("/{receipt_id}", dependencies=[Depends(PermissionChecker(["receipts:edit"]))])
async def update_receipt(
    receipt_id: int,
    receipt_data: ReceiptUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = ReceiptService(db)
    receipt = service.get_by_id(receipt_id)
    if not receipt:
        raise HTTPException(status_code=404, detail="Receipt not found")
    old_values = columns_dict(receipt)
    try:
        receipt = service.update(receipt_id, receipt_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "ReceiptDetail", receipt_id,
        old_values=old_values, new_values=columns_dict(receipt)
    )
    db.commit()
    db.refresh(receipt)
    return receipt_dict(receipt)


@router.delete("/{receipt_id}", dependencies=[Depends(PermissionChecker(["receipts:delete"]))])
async def delete_receipt(
    receipt_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Delete a receipt and reverse its account posting"""
    service = ReceiptService(db)
    receipt = service.get_by_id(receipt_id)
    if not receipt:
        raise HTTPException(status_code=404, detail="Receipt not found")
    old_values = columns_dict(receipt)
    service.delete(receipt_id)
    AuditService(db).log_request(
        request, current_user, AuditAction.DELETE, "ReceiptDetail", receipt_id, old_values=old_values
    )
    db.commit()
    return {"message": "Receipt deleted successfully"}


@router.get("/{receipt_id}/voucher")
async def download_receipt_voucher(
    receipt_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    receipt = ReceiptService(db).get_by_id(receipt_id)
    if not receipt:
        raise HTTPException(status_code=404, detail="Receipt not found")
    documents = DocumentService()
    content = documents.render_voucher(documents.receipt_voucher(receipt))
    return attachment(content, f"receipt_voucher_{receipt.id}.pdf", "application/pdf")
