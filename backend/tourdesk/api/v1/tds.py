"""
TDS API Routes - tax withheld from supplier payments and deposit challans
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.models import TdsStatus
from tourdesk.schemas import (
    TdsTransactionCreate, TdsChallanCreate, TdsChallanAttach, TdsChallanDeposit
)
from tourdesk.services.tds_service import TdsService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import tds_transaction_dict, tds_challan_dict, columns_dict

router = APIRouter(
    prefix="/tds",
    tags=["TDS"],
    dependencies=[Depends(PermissionChecker(["tds:view"]))]
)


def get_challan_or_404(service: TdsService, challan_id: int):
    challan = service.get_challan(challan_id)
    if not challan:
        raise HTTPException(status_code=404, detail="Challan not found")
    return challan


# ==================== TRANSACTIONS ====================

@router.get("/transactions")
async def list_tds_transactions(
    status: TdsStatus = None,
    challan_id: int = None,
    payment_detail_id: int = None,
    supplier_id: int = None,
    financial_year: str = None,
    quarter: str = None,
    db: Session = Depends(get_db)
):
    transactions = TdsService(db).get_transactions(
        status.value if status else None, challan_id, payment_detail_id, supplier_id, financial_year, quarter
    )
    return [tds_transaction_dict(t) for t in transactions]


@router.post("/transactions", dependencies=[Depends(PermissionChecker(["tds:create"]))])
async def create_tds_transaction(
    transaction_data: TdsTransactionCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Record tax withheld from a supplier payment"""
    try:
        transaction = TdsService(db).create_transaction(transaction_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "TdsTransaction", transaction.id,
        f"Recorded TDS {transaction.tds_amount} under {transaction.section_code} on payment {transaction.payment_detail_id}",
        new_values=columns_dict(transaction)
    )
    db.commit()
    db.refresh(transaction)
    return tds_transaction_dict(transaction)


@router.delete("/transactions/{transaction_id}", dependencies=[Depends(PermissionChecker(["tds:delete"]))])
async def delete_tds_transaction(
    transaction_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        deleted = TdsService(db).delete_transaction(transaction_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="TDS transaction not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "TdsTransaction", transaction_id)
    db.commit()
    return {"message": "TDS transaction deleted successfully"}


# ==================== CHALLANS ====================

@router.get("/challans")
async def list_challans(db: Session = Depends(get_db)):
    """Challans with their transaction count and total TDS"""
    return [tds_challan_dict(c) for c in TdsService(db).get_challans()]


@router.get("/challans/{challan_id}")
async def get_challan(challan_id: int, db: Session = Depends(get_db)):
    return tds_challan_dict(get_challan_or_404(TdsService(db), challan_id), with_transactions=True)


@router.post("/challans", dependencies=[Depends(PermissionChecker(["tds:create"]))])
async def create_challan(
    challan_data: TdsChallanCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Create a challan, optionally attaching pending transactions to it"""
    service = TdsService(db)
    try:
        challan = service.create_challan(challan_data, current_user.username)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "TdsChallan", challan.id,
        f"Created TDS challan with {len(challan_data.transaction_ids)} transactions"
    )
    db.commit()
    return tds_challan_dict(get_challan_or_404(service, challan.id), with_transactions=True)


@router.post("/challans/{challan_id}/transactions", dependencies=[Depends(PermissionChecker(["tds:edit"]))])
async def attach_challan_transactions(
    challan_id: int,
    attach_data: TdsChallanAttach,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TdsService(db)
    try:
        challan = service.attach_transactions(challan_id, attach_data.transaction_ids, current_user.username)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not challan:
        raise HTTPException(status_code=404, detail="Challan not found")
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "TdsChallan", challan_id,
        f"Attached TDS transactions {attach_data.transaction_ids}"
    )
    db.commit()
    return tds_challan_dict(get_challan_or_404(service, challan_id), with_transactions=True)


@router.post("/challans/{challan_id}/deposit", dependencies=[Depends(PermissionChecker(["tds:edit"]))])
async def mark_challan_deposited(
    challan_id: int,
    deposit_data: TdsChallanDeposit,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Stamp the deposit date (today by default) and mark its transactions deposited"""
    service = TdsService(db)
    challan = service.mark_deposited(challan_id, deposit_data.deposit_date, current_user.username)
    if not challan:
        raise HTTPException(status_code=404, detail="Challan not found")
    AuditService(db).log_request(
        request, current_user, AuditAction.PAYMENT_MADE, "TdsChallan", challan_id,
        f"Deposited TDS challan on {challan.deposit_date}"
    )
    db.commit()
    return tds_challan_dict(get_challan_or_404(service, challan_id), with_transactions=True)


@router.delete("/challans/{challan_id}", dependencies=[Depends(PermissionChecker(["tds:delete"]))])
async def delete_challan(
    challan_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        deleted = TdsService(db).delete_challan(challan_id, current_user.username)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Challan not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "TdsChallan", challan_id)
    db.commit()
    return {"message": "Challan deleted successfully"}
