"""
Payments API Routes - money paid to suppliers
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import PaymentCreate, PaymentUpdate
from tourdesk.services.receipt_service import PaymentService
from tourdesk.services.document_service import DocumentService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import payment_dict, columns_dict, attachment

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("")
async def list_payments(
    tour_package_query_id: int = None,
    supplier_id: int = None,
    start_date: date = None,
    end_date: date = None,
    bank_account_id: int = None,
    cash_account_id: int = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    payments = PaymentService(db).get_all(
        tour_package_query_id, supplier_id, start_date, end_date, bank_account_id, cash_account_id
    )
    return [payment_dict(p) for p in payments]


@router.get("/{payment_id}")
async def get_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    payment = PaymentService(db).get_by_id(payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment_dict(payment)


@router.post("", dependencies=[Depends(PermissionChecker(["payments:create"]))])
async def create_payment(
    payment_data: PaymentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Record a supplier payment and debit the selected account"""
    try:
        payment = PaymentService(db).create(payment_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.PAYMENT_MADE, "PaymentDetail", payment.id,
        f"Paid {payment.amount}", new_values=columns_dict(payment)
    )
    db.commit()
    db.refresh(payment)
    return payment_dict(payment)


@router.patch("/{payment_id}", dependencies=[Depends(PermissionChecker(["payments:edit"]))])
async def update_payment(
    payment_id: int,
    payment_data: PaymentUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = PaymentService(db)
    payment = service.get_by_id(payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    old_values = columns_dict(payment)
    try:
        payment = service.update(payment_id, payment_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "PaymentDetail", payment_id,
        old_values=old_values, new_values=columns_dict(payment)
    )
    db.commit()
    db.refresh(payment)
    return payment_dict(payment)


@router.delete("/{payment_id}", dependencies=[Depends(PermissionChecker(["payments:delete"]))])
async def delete_payment(
    payment_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = PaymentService(db)
    payment = service.get_by_id(payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    old_values = columns_dict(payment)
    try:
        service.delete(payment_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.DELETE, "PaymentDetail", payment_id, old_values=old_values
    )
    db.commit()
    return {"message": "Payment deleted successfully"}


@router.get("/{payment_id}/voucher")
async def download_payment_voucher(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    payment = PaymentService(db).get_by_id(payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    documents = DocumentService()
    content = documents.render_voucher(documents.payment_voucher(payment))
    return attachment(content, f"payment_voucher_{payment.id}.pdf", "application/pdf")
