"""
Sales API Routes - Sales and Sale Returns
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import SaleDetailCreate, SaleDetailUpdate, SaleReturnCreate, SaleReturnUpdate
from tourdesk.services.sales_service import SalesService
from tourdesk.services.document_service import DocumentService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import sale_dict, sale_return_dict, columns_dict, attachment

router = APIRouter(tags=["Sales"])


# ==================== SALES ====================

@router.get("/sales")
async def list_sales(
    tour_package_query_id: int = None,
    customer_id: int = None,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List sales, newest first"""
    sales = SalesService(db).get_all(tour_package_query_id, customer_id, start_date, end_date)
    return [sale_dict(s) for s in sales]


@router.get("/sales/{sale_id}")
async def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    sale = SalesService(db).get_by_id(sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    return sale_dict(sale)


@router.post("/sales", dependencies=[Depends(PermissionChecker(["sales:create"]))])
async def create_sale(
    sale_data: SaleDetailCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        sale = SalesService(db).create(sale_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "SaleDetail", sale.id,
        f"Created sale of {sale.sale_price}", new_values=columns_dict(sale)
    )
    db.commit()
    db.refresh(sale)
    return sale_dict(sale)


@router.patch("/sales/{sale_id}", dependencies=[Depends(PermissionChecker(["sales:edit"]))])
async def update_sale(
    sale_id: int,
    sale_data: SaleDetailUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Update a sale; supplied items replace the existing ones"""
    service = SalesService(db)
    sale = service.get_by_id(sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    old_values = columns_dict(sale)
    try:
        sale = service.update(sale_id, sale_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "SaleDetail", sale_id,
        old_values=old_values, new_values=columns_dict(sale)
    )
    db.commit()
    db.refresh(sale)
    return sale_dict(sale)


@router.delete("/sales/{sale_id}", dependencies=[Depends(PermissionChecker(["sales:delete"]))])
async def delete_sale(
    sale_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = SalesService(db)
    sale = service.get_by_id(sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    old_values = columns_dict(sale)
    service.delete(sale_id)
    AuditService(db).log_request(
        request, current_user, AuditAction.DELETE, "SaleDetail", sale_id, old_values=old_values
    )
    db.commit()
    return {"message": "Sale deleted successfully"}


@router.get("/sales/{sale_id}/voucher")
async def download_sale_voucher(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    sale = SalesService(db).get_by_id(sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    documents = DocumentService()
    content = documents.render_voucher(documents.sale_voucher(sale))
    return attachment(content, f"sale_voucher_{sale.invoice_number or sale.id}.pdf", "application/pdf")


# ==================== SALE RETURNS ====================

@router.get("/sale-returns")
async def list_sale_returns(
    sale_detail_id: int = None,
    tour_package_query_id: int = None,
    customer_id: int = None,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    returns = SalesService(db).get_returns(sale_detail_id, tour_package_query_id, customer_id, start_date, end_date)
    return [sale_return_dict(r) for r in returns]


@router.get("/sale-returns/{return_id}")
async def get_sale_return(
    return_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    sale_return = SalesService(db).get_return(return_id)
    if not sale_return:
        raise HTTPException(status_code=404, detail="Sale return not found")
    return sale_return_dict(sale_return)


@router.post("/sale-returns", dependencies=[Depends(PermissionChecker(["sales:create"]))])
async def create_sale_return(
    return_data: SaleReturnCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        sale_return = SalesService(db).create_return(return_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "SaleReturn", sale_return.id,
        f"Created return of {sale_return.amount} against sale {sale_return.sale_detail_id}",
        new_values=columns_dict(sale_return)
    )
    db.commit()
    db.refresh(sale_return)
    return sale_return_dict(sale_return)


@router.patch("/sale-returns/{return_id}", dependencies=[Depends(PermissionChecker(["sales:edit"]))])
async def update_sale_return(
    return_id: int,
    return_data: SaleReturnUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = SalesService(db)
    sale_return = service.get_return(return_id)
    if not sale_return:
        raise HTTPException(status_code=404, detail="Sale return not found")
    old_values = columns_dict(sale_return)
    sale_return = service.update_return(return_id, return_data)
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "SaleReturn", return_id,
        old_values=old_values, new_values=columns_dict(sale_return)
    )
    db.commit()
    db.refresh(sale_return)
    return sale_return_dict(sale_return)


@router.delete("/sale-returns/{return_id}", dependencies=[Depends(PermissionChecker(["sales:delete"]))])
async def delete_sale_return(
    return_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = SalesService(db)
    sale_return = service.get_return(return_id)
    if not sale_return:
        raise HTTPException(status_code=404, detail="Sale return not found")
    old_values = columns_dict(sale_return)
    service.delete_return(return_id)
    AuditService(db).log_request(
        request, current_user, AuditAction.DELETE, "SaleReturn", return_id, old_values=old_values
    )
    db.commit()
    return {"message": "Sale return deleted successfully"}


@router.get("/sale-returns/{return_id}/voucher")
async def download_sale_return_voucher(
    return_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    sale_return = SalesService(db).get_return(return_id)
    if not sale_return:
        raise HTTPException(status_code=404, detail="Sale return not found")
    documents = DocumentService()
    content = documents.render_voucher(documents.sale_return_voucher(sale_return))
    return attachment(content, f"sale_return_voucher_{sale_return.id}.pdf", "application/pdf")
