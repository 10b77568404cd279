"""
Banking API Routes - Bank Accounts, Cash Accounts, Transfers
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import (
    BankAccountCreate, BankAccountUpdate, CashAccountCreate, CashAccountUpdate,
    TransferCreate, TransferUpdate
)
from tourdesk.services.banking_service import BankingService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import columns_dict, transfer_dict

router = APIRouter(prefix="/banking", tags=["Banking"])


# ==================== BANK ACCOUNTS ====================

@router.get("/bank-accounts")
async def list_bank_accounts(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List bank accounts with their current balances"""
    return [columns_dict(a) for a in BankingService(db).get_bank_accounts(include_inactive)]


@router.get("/bank-accounts/{account_id}")
async def get_bank_account(
    account_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    account = BankingService(db).get_bank_account(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Bank account not found")
    return columns_dict(account)


@router.post("/bank-accounts", dependencies=[Depends(PermissionChecker(["banking:create"]))])
async def create_bank_account(
    account_data: BankAccountCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    account = BankingService(db).create_bank_account(account_data)
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "BankAccount", account.id,
        f"Created bank account '{account.account_name}'"
    )
    db.commit()
    db.refresh(account)
    return columns_dict(account)


@router.patch("/bank-accounts/{account_id}", dependencies=[Depends(PermissionChecker(["banking:edit"]))])
async def update_bank_account(
    account_id: int,
    account_data: BankAccountUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = BankingService(db)
    account = service.get_bank_account(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Bank account not found")
    old_values = columns_dict(account)
    account = service.update_bank_account(account_id, account_data)
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "BankAccount", account_id,
        old_values=old_values, new_values=columns_dict(account)
    )
    db.commit()
    db.refresh(account)
    return columns_dict(account)


@router.delete("/bank-accounts/{account_id}", dependencies=[Depends(PermissionChecker(["banking:delete"]))])
async def delete_bank_account(
    account_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        deleted = BankingService(db).delete_bank_account(account_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Bank account not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "BankAccount", account_id)
    db.commit()
    return {"message": "Bank account deleted successfully"}


@router.post("/bank-accounts/{account_id}/recalculate", dependencies=[Depends(PermissionChecker(["banking:edit"]))])
async def recalculate_bank_balance(
    account_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Rebuild the current balance from the opening balance and every posted transaction"""
    result = BankingService(db).recalculate_bank_balance(account_id)
    if not result:
        raise HTTPException(status_code=404, detail="Bank account not found")
    AuditService(db).log_request(
        request, current_user, AuditAction.BALANCE_RECALCULATED, "BankAccount", account_id,
        old_values={"current_balance": result['previous_balance']},
        new_values={"current_balance": result['current_balance']}
    )
    db.commit()
    return result


# ==================== CASH ACCOUNTS ====================

@router.get("/cash-accounts")
async def list_cash_accounts(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    return [columns_dict(a) for a in BankingService(db).get_cash_accounts(include_inactive)]


@router.get("/cash-accounts/{account_id}")
async def get_cash_account(
    account_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    account = BankingService(db).get_cash_account(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Cash account not found")
    return columns_dict(account)


@router.post("/cash-accounts", dependencies=[Depends(PermissionChecker(["banking:create"]))])
async def create_cash_account(
    account_data: CashAccountCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    account = BankingService(db).create_cash_account(account_data)
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "CashAccount", account.id,
        f"Created cash account '{account.account_name}'"
    )
    db.commit()
    db.refresh(account)
    return columns_dict(account)


@router.patch("/cash-accounts/{account_id}", dependencies=[Depends(PermissionChecker(["banking:edit"]))])
async def update_cash_account(
    account_id: int,
    account_data: CashAccountUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = BankingService(db)
    account = service.get_cash_account(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Cash account not found")
    old_values = columns_dict(account)
    account = service.update_cash_account(account_id, account_data)
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "CashAccount", account_id,
        old_values=old_values, new_values=columns_dict(account)
    )
    db.commit()
    db.refresh(account)
    return columns_dict(account)


@router.delete("/cash-accounts/{account_id}", dependencies=[Depends(PermissionChecker(["banking:delete"]))])
async def delete_cash_account(
    account_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        deleted = BankingService(db).delete_cash_account(account_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Cash account not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "CashAccount", account_id)
    db.commit()
    return {"message": "Cash account deleted successfully"}


@router.post("/cash-accounts/{account_id}/recalculate", dependencies=[Depends(PermissionChecker(["banking:edit"]))])
async def recalculate_cash_balance(
    account_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    result = BankingService(db).recalculate_cash_balance(account_id)
    if not result:
        raise HTTPException(status_code=404, detail="Cash account not found")
    AuditService(db).log_request(
        request, current_user, AuditAction.BALANCE_RECALCULATED, "CashAccount", account_id,
        old_values={"current_balance": result['previous_balance']},
        new_values={"current_balance": result['current_balance']}
    )
    db.commit()
    return result


# ==================== TRANSFERS ====================

@router.get("/transfers")
async def list_transfers(
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    return [transfer_dict(t) for t in BankingService(db).get_transfers(start_date, end_date)]


@router.get("/transfers/{transfer_id}")
async def get_transfer(
    transfer_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    transfer = BankingService(db).get_transfer(transfer_id)
    if not transfer:
        raise HTTPException(status_code=404, detail="Transfer not found")
    return transfer_dict(transfer)


@router.post("/transfers", dependencies=[Depends(PermissionChecker(["banking:create"]))])
async def create_transfer(
    transfer_data: TransferCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Move money between two accounts"""
    try:
        transfer = BankingService(db).create_transfer(transfer_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.TRANSFER_COMPLETED, "Transfer", transfer.id,
        f"Transferred {transfer.amount}", new_values=columns_dict(transfer)
    )
    db.commit()
    db.refresh(transfer)
    return transfer_dict(transfer)


@router.patch("/transfers/{transfer_id}", dependencies=[Depends(PermissionChecker(["banking:edit"]))])
async def update_transfer(
    transfer_id: int,
    transfer_data: TransferUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = BankingService(db)
    transfer = service.get_transfer(transfer_id)
    if not transfer:
        raise HTTPException(status_code=404, detail="Transfer not found")
    old_values = columns_dict(transfer)
    try:
        transfer = service.update_transfer(transfer_id, transfer_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "Transfer", transfer_id,
        old_values=old_values, new_values=columns_dict(transfer)
    )
    db.commit()
    db.refresh(transfer)
    return transfer_dict(transfer)


@router.delete("/transfers/{transfer_id}", dependencies=[Depends(PermissionChecker(["banking:delete"]))])
async def delete_transfer(
    transfer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = BankingService(db)
    transfer = service.get_transfer(transfer_id)
    if not transfer:
        raise HTTPException(status_code=404, detail="Transfer not found")
    old_values = columns_dict(transfer)
    service.delete_transfer(transfer_id)
    AuditService(db).log_request(
        request, current_user, AuditAction.DELETE, "Transfer", transfer_id, old_values=old_values
    )
    db.commit()
    return {"message": "Transfer deleted successfully"}
