"""
Expenses API Routes - paid and accrued expenses
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import ExpenseCreate, ExpenseUpdate, ExpensePayRequest
from tourdesk.services.expense_service import ExpenseService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import expense_dict, columns_dict

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.get("")
async def list_expenses(
    tour_package_query_id: int = None,
    expense_category_id: int = None,
    start_date: date = None,
    end_date: date = None,
    accrued: bool = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List expenses; accrued=true gives the unpaid accruals"""
    expenses = ExpenseService(db).get_all(
        tour_package_query_id, expense_category_id, start_date, end_date, accrued
    )
    return [expense_dict(e) for e in expenses]


@router.get("/{expense_id}")
async def get_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    expense = ExpenseService(db).get_by_id(expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense_dict(expense)


@router.post("", dependencies=[Depends(PermissionChecker(["expenses:create"]))])
async def create_expense(
    expense_data: ExpenseCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        expense = ExpenseService(db).create(expense_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    kind = "accrued expense" if expense.is_accrued else "expense"
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "ExpenseDetail", expense.id,
        f"Recorded {kind} of {expense.amount}", new_values=columns_dict(expense)
    )
    db.commit()
    db.refresh(expense)
    return expense_dict(expense)


@router.patch("/{expense_id}", dependencies=[Depends(PermissionChecker(["expenses:edit"]))])
async def update_expense(
    expense_id: int,
    expense_data: ExpenseUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Update an expense; supplied images replace the existing ones"""
    service = ExpenseService(db)
    expense = service.get_by_id(expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    old_values = columns_dict(expense)
    try:
        expense = service.update(expense_id, expense_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "ExpenseDetail", expense_id,
        old_values=old_values, new_values=columns_dict(expense)
    )
    db.commit()
    db.refresh(expense)
    return expense_dict(expense)


@router.post("/{expense_id}/pay", dependencies=[Depends(PermissionChecker(["expenses:edit"]))])
async def pay_expense(
    expense_id: int,
    pay_data: ExpensePayRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Settle an accrued expense from a bank or cash account"""
    try:
        expense = ExpenseService(db).pay(expense_id, pay_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    AuditService(db).log_request(
        request, current_user, AuditAction.EXPENSE_PAID, "ExpenseDetail", expense_id,
        f"Paid accrued expense of {expense.amount} on {pay_data.paid_date}"
    )
    db.commit()
    db.refresh(expense)
    return expense_dict(expense)


@router.delete("/{expense_id}", dependencies=[Depends(PermissionChecker(["expenses:delete"]))])
async def delete_expense(
    expense_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = ExpenseService(db)
    expense = service.get_by_id(expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    old_values = columns_dict(expense)
    service.delete(expense_id)
    AuditService(db).log_request(
        request, current_user, AuditAction.DELETE, "ExpenseDetail", expense_id, old_values=old_values
    )
    db.commit()
    return {"message": "Expense deleted successfully"}
