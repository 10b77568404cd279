"""
Incomes API Routes - miscellaneous income
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import IncomeCreate, IncomeUpdate
from tourdesk.services.expense_service import IncomeService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import income_dict, columns_dict

router = APIRouter(prefix="/incomes", tags=["Incomes"])


@router.get("")
async def list_incomes(
    tour_package_query_id: int = None,
    income_category_id: int = None,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    incomes = IncomeService(db).get_all(tour_package_query_id, income_category_id, start_date, end_date)
    return [income_dict(i) for i in incomes]


@router.get("/{income_id}")
async def get_income(
    income_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    income = IncomeService(db).get_by_id(income_id)
    if not income:
        raise HTTPException(status_code=404, detail="Income not found")
    return income_dict(income)


@router.post("", dependencies=[Depends(PermissionChecker(["incomes:create"]))])
async def create_income(
    income_data: IncomeCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        income = IncomeService(db).create(income_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "IncomeDetail", income.id,
        f"Recorded income of {income.amount}", new_values=columns_dict(income)
    )
    db.commit()
    db.refresh(income)
    return income_dict(income)


@router.patch("/{income_id}", dependencies=[Depends(PermissionChecker(["incomes:edit"]))])
async def update_income(
    income_id: int,
    income_data: IncomeUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = IncomeService(db)
    income = service.get_by_id(income_id)
    if not income:
        raise HTTPException(status_code=404, detail="Income not found")
    old_values = columns_dict(income)
    try:
        income = service.update(income_id, income_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "IncomeDetail", income_id,
        old_values=old_values, new_values=columns_dict(income)
    )
    db.commit()
    db.refresh(income)
    return income_dict(income)


@router.delete("/{income_id}", dependencies=[Depends(PermissionChecker(["incomes:delete"]))])
async def delete_income(
    income_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = IncomeService(db)
    income = service.get_by_id(income_id)
    if not income:
        raise HTTPException(status_code=404, detail="Income not found")
    old_values = columns_dict(income)
    service.delete(income_id)
    AuditService(db).log_request(
        request, current_user, AuditAction.DELETE, "IncomeDetail", income_id, old_values=old_values
    )
    db.commit()
    return {"message": "Income deleted successfully"}
